"""Services for field alignment, comparison, status decisions and batch processing."""

from .alignment import IndexedWord, build_indexed_words, find_matching_words
from .batch import BatchItem, BatchProcessor, BatchReport
from .comparison import ComparisonService
from .errors import CollaboratorError, LabelEngineError, PipelineTimeoutError
from .extraction import FieldLocator, classify_image_roles, detect_beverage_type
from .pipeline import LabelEvaluator, LabelPipeline, LabelProcessor
from .status import deadline_info, determine_overall_status, effective_status, resolve_effective_status

__all__ = [
    "IndexedWord",
    "build_indexed_words",
    "find_matching_words",
    "BatchItem",
    "BatchProcessor",
    "BatchReport",
    "ComparisonService",
    "CollaboratorError",
    "LabelEngineError",
    "PipelineTimeoutError",
    "FieldLocator",
    "classify_image_roles",
    "detect_beverage_type",
    "LabelEvaluator",
    "LabelPipeline",
    "LabelProcessor",
    "deadline_info",
    "determine_overall_status",
    "effective_status",
    "resolve_effective_status",
]
