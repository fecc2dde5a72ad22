"""Batch processing of many labels with a bounded worker pool."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence
import logging
import time

from ..config import Settings, get_settings
from ..models.schemas import ApplicationData, LabelEvaluation, PipelineVariant
from .errors import PipelineTimeoutError
from .pipeline import LabelProcessor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchItem:
    """One label in a batch."""
    label_id: str
    images: Sequence[bytes]
    application: ApplicationData


@dataclass
class BatchItemResult:
    label_id: str
    evaluation: LabelEvaluation
    processing_time_ms: int


@dataclass
class BatchItemError:
    label_id: str
    error: str
    retryable: bool = False


@dataclass
class BatchReport:
    """Successes and failures, each in submission order."""
    results: List[BatchItemResult] = field(default_factory=list)
    errors: List[BatchItemError] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results) + len(self.errors)


class BatchProcessor:
    """Process multiple labels in parallel."""

    def __init__(self, processor: LabelProcessor, settings: Optional[Settings] = None):
        self.processor = processor
        self.settings = settings or get_settings()

    def process_batch(
        self,
        items: Sequence[BatchItem],
        variant: PipelineVariant = PipelineVariant.SUBMISSION,
        max_workers: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> BatchReport:
        """
        Process a batch of labels.

        A failing label never stops the others; its error is collected
        in the report instead.

        Args:
            items: Labels with their images and application data
            variant: Pipeline variant for every label
            max_workers: Max parallel labels (defaults to config)
            now: Reference time for correction deadlines

        Returns:
            BatchReport with per-label results and errors
        """
        report = BatchReport()
        if not items:
            return report

        if max_workers is None:
            max_workers = self.settings.batch_concurrency
        max_workers = max(1, min(max_workers, len(items)))

        start_time = time.time()
        logger.info(f"Processing batch of {len(items)} labels with {max_workers} workers")

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="batch") as executor:
            futures = {
                executor.submit(self._process_one, item, variant, now): item.label_id
                for item in items
            }

            for future in as_completed(futures):
                label_id = futures[future]
                try:
                    report.results.append(future.result())
                except PipelineTimeoutError as e:
                    logger.warning(f"Label {label_id} timed out: {e}")
                    report.errors.append(BatchItemError(label_id=label_id, error=str(e), retryable=True))
                except Exception as e:
                    logger.exception(f"Worker error for {label_id}: {e}")
                    report.errors.append(BatchItemError(label_id=label_id, error=str(e)))

        # Sort results by original order
        order = {item.label_id: i for i, item in enumerate(items)}
        report.results.sort(key=lambda r: order[r.label_id])
        report.errors.sort(key=lambda e: order[e.label_id])

        logger.info(
            f"Batch finished in {int((time.time() - start_time) * 1000)}ms: "
            f"{len(report.results)} succeeded, {len(report.errors)} failed"
        )
        return report

    def _process_one(
        self,
        item: BatchItem,
        variant: PipelineVariant,
        now: Optional[datetime],
    ) -> BatchItemResult:
        start_time = time.time()
        evaluation = self.processor.process(
            item.label_id, item.images, item.application, variant=variant, now=now
        )
        return BatchItemResult(
            label_id=item.label_id,
            evaluation=evaluation,
            processing_time_ms=int((time.time() - start_time) * 1000),
        )
