"""Pydantic models for engine records and API schemas."""

from .schemas import (
    ApplicationData,
    BeverageType,
    BoundingBox,
    ClassificationResult,
    ClassifiedField,
    Comparison,
    ComparisonStatus,
    DeadlineInfo,
    EffectiveStatusRequest,
    EffectiveStatusResponse,
    ErrorResponse,
    EvaluateRequest,
    EvaluateResponse,
    ExtractedField,
    ExtractionResult,
    ExtractRequest,
    ExtractResponse,
    HealthResponse,
    ImageClassification,
    ImageRole,
    LabelEvaluation,
    LabelStatus,
    MatchType,
    OcrResult,
    OcrWord,
    PipelineMetrics,
    PipelineVariant,
    StatusDecision,
    TokenUsage,
    Urgency,
    ValidationItem,
)

__all__ = [
    "ApplicationData",
    "BeverageType",
    "BoundingBox",
    "ClassificationResult",
    "ClassifiedField",
    "Comparison",
    "ComparisonStatus",
    "DeadlineInfo",
    "EffectiveStatusRequest",
    "EffectiveStatusResponse",
    "ErrorResponse",
    "EvaluateRequest",
    "EvaluateResponse",
    "ExtractedField",
    "ExtractionResult",
    "ExtractRequest",
    "ExtractResponse",
    "HealthResponse",
    "ImageClassification",
    "ImageRole",
    "LabelEvaluation",
    "LabelStatus",
    "MatchType",
    "OcrResult",
    "OcrWord",
    "PipelineMetrics",
    "PipelineVariant",
    "StatusDecision",
    "TokenUsage",
    "Urgency",
    "ValidationItem",
]
