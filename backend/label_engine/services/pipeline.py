"""End-to-end label processing: OCR, classification, alignment, verdict."""

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence
import logging

from ..config import Settings, get_settings
from ..models.schemas import (
    ApplicationData,
    BeverageType,
    ClassificationResult,
    ExtractedField,
    ExtractionResult,
    LabelEvaluation,
    LabelStatus,
    OcrResult,
    PipelineMetrics,
    PipelineVariant,
    ValidationItem,
)
from .alignment import IndexedWord, build_indexed_words
from .background import fire_and_forget
from .collaborators import FieldClassifier, OcrProvider, StatusWriter, ValidationSink
from .comparison import ComparisonService
from .errors import CollaboratorError, LabelEngineError, PipelineTimeoutError
from .extraction import FieldLocator, classify_image_roles, detect_beverage_type
from .regulations import build_expected_fields
from .status import determine_overall_status

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


def combine_ocr_text(ocr_results: Sequence[OcrResult]) -> str:
    """Full text of every image, each under an "--- Image N ---" heading."""
    return "\n\n".join(
        f"--- Image {i + 1} ---\n{result.full_text}"
        for i, result in enumerate(ocr_results)
    )


@dataclass
class _CollaboratorOutput:
    ocr_results: List[OcrResult]
    indexed_words: List[IndexedWord]
    classification: ClassificationResult
    beverage_type: Optional[BeverageType]
    ocr_time_ms: int
    classification_time_ms: int


class LabelPipeline:
    """
    Runs the external OCR and classification calls for one label and
    aligns the classified fields to the OCR geometry.
    """

    def __init__(
        self,
        ocr: OcrProvider,
        classifier: FieldClassifier,
        settings: Optional[Settings] = None,
    ):
        self.ocr = ocr
        self.classifier = classifier
        self.settings = settings or get_settings()
        self.locator = FieldLocator(self.settings)

    def extract(
        self,
        images: Sequence[bytes],
        expected_values: dict,
        beverage_type: Optional[BeverageType] = None,
        variant: PipelineVariant = PipelineVariant.INDEXED,
        label_id: Optional[str] = None,
    ) -> ExtractionResult:
        """
        Extract located fields from a label's images.

        Args:
            images: Raw image bytes, one per label panel
            expected_values: Application values keyed by field name
            beverage_type: Declared type; detected from text when None
            variant: How the classifier grounds its fields
            label_id: Used for error and log context only

        Returns:
            ExtractionResult with located fields and pipeline metrics

        Raises:
            PipelineTimeoutError: OCR plus classification exceeded the timeout
            CollaboratorError: OCR or classifier call failed
        """
        if not images:
            raise LabelEngineError("At least one label image is required")

        start_time = time.time()
        timeout = self.settings.pipeline_timeout_seconds

        # The external chain runs on its own thread so the caller can stop
        # waiting; the calls themselves are not cancelled.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="label-pipeline")
        try:
            future = executor.submit(
                self._call_collaborators, images, expected_values, beverage_type, variant, label_id
            )
            output = future.result(timeout=timeout)
        except FuturesTimeoutError:
            logger.warning(f"Pipeline timed out after {timeout:g}s (label={label_id})")
            raise PipelineTimeoutError(timeout, label_id) from None
        finally:
            executor.shutdown(wait=False)

        merge_start = time.time()
        fields = self.locator.locate_fields(
            output.ocr_results, output.classification, output.indexed_words
        )
        image_classifications = (
            list(output.classification.image_classifications)
            or classify_image_roles(output.ocr_results)
        )
        merge_time_ms = _elapsed_ms(merge_start)
        total_time_ms = _elapsed_ms(start_time)

        logger.info(
            f"Extraction complete ({variant.value}): {len(fields)} fields, "
            f"ocr={output.ocr_time_ms}ms classify={output.classification_time_ms}ms "
            f"merge={merge_time_ms}ms total={total_time_ms}ms"
        )

        return ExtractionResult(
            fields=fields,
            image_classifications=image_classifications,
            detected_beverage_type=output.beverage_type,
            processing_time_ms=total_time_ms,
            metrics=PipelineMetrics(
                ocr_time_ms=output.ocr_time_ms,
                classification_time_ms=output.classification_time_ms,
                merge_time_ms=merge_time_ms,
                total_time_ms=total_time_ms,
                word_count=len(output.indexed_words),
                image_count=len(output.ocr_results),
                usage=output.classification.usage,
            ),
        )

    def _call_collaborators(
        self,
        images: Sequence[bytes],
        expected_values: dict,
        beverage_type: Optional[BeverageType],
        variant: PipelineVariant,
        label_id: Optional[str],
    ) -> _CollaboratorOutput:
        ocr_start = time.time()
        ocr_results = self._run_ocr(images, label_id)
        ocr_time_ms = _elapsed_ms(ocr_start)

        indexed_words = build_indexed_words(ocr_results)
        full_text = combine_ocr_text(ocr_results)

        if variant == PipelineVariant.AUTO_DETECT or beverage_type is None:
            beverage_type = detect_beverage_type(full_text)
            logger.info(f"Keyword beverage type detection: {beverage_type}")

        word_list = None
        if variant == PipelineVariant.INDEXED:
            word_list = [(w.global_index, w.text) for w in indexed_words]

        classify_start = time.time()
        try:
            raw = self.classifier.classify(
                full_text,
                beverage_type,
                expected_values,
                word_list=word_list,
                images=images,
            )
            classification = (
                raw if isinstance(raw, ClassificationResult)
                else ClassificationResult.model_validate(raw)
            )
        except Exception as e:
            raise CollaboratorError("Field classification", e, label_id) from e
        classification_time_ms = _elapsed_ms(classify_start)

        if beverage_type is None:
            beverage_type = classification.detected_beverage_type

        return _CollaboratorOutput(
            ocr_results=ocr_results,
            indexed_words=indexed_words,
            classification=classification,
            beverage_type=beverage_type,
            ocr_time_ms=ocr_time_ms,
            classification_time_ms=classification_time_ms,
        )

    def _run_ocr(self, images: Sequence[bytes], label_id: Optional[str]) -> List[OcrResult]:
        """OCR every image concurrently, preserving image order."""
        def run(image: bytes) -> OcrResult:
            result = self.ocr.extract_text(image)
            if isinstance(result, OcrResult):
                return result
            return OcrResult.model_validate(result)

        try:
            with ThreadPoolExecutor(max_workers=len(images), thread_name_prefix="ocr") as pool:
                return list(pool.map(run, images))
        except Exception as e:
            raise CollaboratorError("OCR", e, label_id) from e


class LabelEvaluator:
    """Compares located fields with the application and decides the label status."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        comparison: Optional[ComparisonService] = None,
    ):
        self.settings = settings or get_settings()
        self.comparison = comparison or ComparisonService(self.settings)

    def evaluate(
        self,
        fields: Sequence[ExtractedField],
        application: ApplicationData,
        beverage_type: BeverageType,
        now: Optional[datetime] = None,
    ) -> LabelEvaluation:
        extracted_by_name = {}
        for field in fields:
            extracted_by_name.setdefault(field.field_name, field)

        items = []
        for field_name, expected in build_expected_fields(application).items():
            extracted = extracted_by_name.get(field_name)
            comparison = self.comparison.compare(
                field_name, expected, extracted.value if extracted else None
            )
            items.append(ValidationItem(
                field_name=field_name,
                expected_value=expected,
                extracted_value=extracted.value if extracted else None,
                status=comparison.status,
                confidence=comparison.confidence,
                reasoning=comparison.reasoning,
                bounding_box=extracted.bounding_box if extracted else None,
                image_index=extracted.image_index if extracted else 0,
            ))

        decision = determine_overall_status(
            {item.field_name: item.status for item in items},
            beverage_type,
            container_size_ml=application.container_size_ml,
            now=now,
            settings=self.settings,
        )

        overall_confidence = (
            round(sum(item.confidence for item in items) / len(items)) if items else 0
        )

        auto_approved = (
            self.settings.auto_approval_enabled
            and decision.status == LabelStatus.APPROVED
            and overall_confidence >= self.settings.confidence_threshold
        )
        label_status = LabelStatus.APPROVED if auto_approved else LabelStatus.PENDING_REVIEW

        logger.info(
            f"Evaluated {len(items)} fields: proposed={decision.status.value} "
            f"confidence={overall_confidence} label_status={label_status.value}"
        )

        return LabelEvaluation(
            items=items,
            decision=decision,
            overall_confidence=overall_confidence,
            auto_approved=auto_approved,
            label_status=label_status,
        )


class LabelProcessor:
    """
    Processes a stored label: marks it processing, runs the pipeline,
    evaluates and hands the outcome to the sink.
    """

    def __init__(
        self,
        pipeline: LabelPipeline,
        status_writer: StatusWriter,
        sink: ValidationSink,
        evaluator: Optional[LabelEvaluator] = None,
    ):
        self.pipeline = pipeline
        self.status_writer = status_writer
        self.sink = sink
        self.evaluator = evaluator or LabelEvaluator(pipeline.settings)

    def process(
        self,
        label_id: str,
        images: Sequence[bytes],
        application: ApplicationData,
        variant: PipelineVariant = PipelineVariant.INDEXED,
        now: Optional[datetime] = None,
    ) -> LabelEvaluation:
        """
        Raises:
            PipelineTimeoutError, CollaboratorError: the label is reset to
            pending in the background so it can be retried
        """
        self.status_writer.write_status(label_id, LabelStatus.PROCESSING, None)
        try:
            extraction = self.pipeline.extract(
                images,
                build_expected_fields(application),
                beverage_type=application.beverage_type,
                variant=variant,
                label_id=label_id,
            )
            beverage_type = application.beverage_type or extraction.detected_beverage_type
            if beverage_type is None:
                raise LabelEngineError(f"Could not determine beverage type for label {label_id}")

            evaluation = self.evaluator.evaluate(
                extraction.fields, application, beverage_type, now=now
            )
            self.sink.record(label_id, evaluation)
            # Deadlines start once a reviewer confirms the proposed status
            self.status_writer.write_status(label_id, evaluation.label_status, None)
            return evaluation
        except Exception:
            logger.exception(f"Processing failed for label {label_id}")
            fire_and_forget(
                self.status_writer.write_status,
                label_id,
                LabelStatus.PENDING,
                None,
                description=f"reset label {label_id} to pending",
            )
            raise
