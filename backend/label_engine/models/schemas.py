"""Pydantic schemas for engine boundaries and API requests/responses."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LabelStatus(str, Enum):
    """Lifecycle status of a label application."""
    PENDING = "pending"
    PROCESSING = "processing"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    CONDITIONALLY_APPROVED = "conditionally_approved"
    NEEDS_CORRECTION = "needs_correction"
    REJECTED = "rejected"


class ComparisonStatus(str, Enum):
    """Outcome of comparing one field."""
    MATCH = "match"
    MISMATCH = "mismatch"
    NOT_FOUND = "not_found"
    NEEDS_CORRECTION = "needs_correction"


class BeverageType(str, Enum):
    DISTILLED_SPIRITS = "distilled_spirits"
    WINE = "wine"
    MALT_BEVERAGE = "malt_beverage"


class ImageRole(str, Enum):
    FRONT = "front"
    BACK = "back"
    NECK = "neck"
    STRIP = "strip"
    OTHER = "other"


class MatchType(str, Enum):
    """Comparison strategy applied to a field."""
    EXACT = "exact"
    FUZZY = "fuzzy"
    NORMALIZED = "normalized"
    ENUM = "enum"
    CONTAINS = "contains"


class Urgency(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"
    EXPIRED = "expired"


class PipelineVariant(str, Enum):
    """How the classifier is asked to ground its fields."""
    INDEXED = "indexed"
    SUBMISSION = "submission"
    AUTO_DETECT = "auto_detect"


class EngineModel(BaseModel):
    """Base for immutable engine records."""
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# OCR collaborator output
# ---------------------------------------------------------------------------

class OcrWord(EngineModel):
    """A single recognized word with its pixel-space polygon."""
    text: str
    polygon: tuple[tuple[float, float], ...] = ()
    confidence: float = 1.0


class OcrResult(EngineModel):
    """OCR output for one source image."""
    words: tuple[OcrWord, ...] = ()
    full_text: str = ""
    image_width: int = Field(ge=0)
    image_height: int = Field(ge=0)

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "words": [
                    {
                        "text": "OLD",
                        "polygon": [[100, 40], [160, 40], [160, 70], [100, 70]],
                        "confidence": 0.97,
                    }
                ],
                "full_text": "OLD TOM DISTILLERY",
                "image_width": 800,
                "image_height": 1200,
            }
        },
    )


# ---------------------------------------------------------------------------
# Classification collaborator output
# ---------------------------------------------------------------------------

class ClassifiedField(EngineModel):
    """A field value proposed by the classifier."""
    field_name: str = Field(..., min_length=1)
    value: Optional[str] = None
    confidence: float = 0.0
    reasoning: Optional[str] = None
    word_indices: tuple[int, ...] = ()

    @field_validator("value", mode="before")
    @classmethod
    def _blank_value_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v):
        if v is None:
            return 0.0
        return min(100.0, max(0.0, float(v)))

    @field_validator("word_indices", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return () if v is None else v

    @field_validator("word_indices")
    @classmethod
    def _dedupe_indices(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        return tuple(dict.fromkeys(v))


class ImageClassification(EngineModel):
    image_index: int = Field(ge=0)
    image_type: ImageRole
    confidence: float = Field(0.0, ge=0, le=100)


class TokenUsage(EngineModel):
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class ClassificationResult(EngineModel):
    """Validated output of the field classifier."""
    fields: tuple[ClassifiedField, ...] = ()
    image_classifications: tuple[ImageClassification, ...] = ()
    detected_beverage_type: Optional[BeverageType] = None
    usage: TokenUsage = TokenUsage()

    @field_validator("detected_beverage_type", mode="before")
    @classmethod
    def _unknown_type_is_missing(cls, v):
        if isinstance(v, str) and v not in {t.value for t in BeverageType}:
            return None
        return v


# ---------------------------------------------------------------------------
# Engine output
# ---------------------------------------------------------------------------

class BoundingBox(EngineModel):
    """Axis-aligned box normalized to the source image, plus reading angle."""
    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)
    width: float = Field(ge=0, le=1)
    height: float = Field(ge=0, le=1)
    angle: Literal[0, 90, -90, 180] = 0


class ExtractedField(EngineModel):
    """A classified field aligned to its location on a source image."""
    field_name: str
    value: Optional[str] = None
    confidence: float = 0.0
    reasoning: Optional[str] = None
    bounding_box: Optional[BoundingBox] = None
    image_index: int = 0


class PipelineMetrics(EngineModel):
    ocr_time_ms: int = 0
    classification_time_ms: int = 0
    merge_time_ms: int = 0
    total_time_ms: int = 0
    word_count: int = 0
    image_count: int = 0
    usage: TokenUsage = TokenUsage()


class ExtractionResult(EngineModel):
    fields: tuple[ExtractedField, ...] = ()
    image_classifications: tuple[ImageClassification, ...] = ()
    detected_beverage_type: Optional[BeverageType] = None
    processing_time_ms: int = 0
    metrics: PipelineMetrics = PipelineMetrics()


class Comparison(EngineModel):
    status: ComparisonStatus
    confidence: float = Field(ge=0, le=100)
    reasoning: str


class ValidationItem(EngineModel):
    """One compared field, as handed to the persistence sink."""
    field_name: str
    expected_value: str
    extracted_value: Optional[str] = None
    status: ComparisonStatus
    confidence: float = Field(ge=0, le=100)
    reasoning: str
    bounding_box: Optional[BoundingBox] = None
    image_index: int = 0


class StatusDecision(EngineModel):
    status: LabelStatus
    deadline_days: Optional[int] = None
    correction_deadline: Optional[datetime] = None
    reasoning: str


class LabelEvaluation(EngineModel):
    """Everything the engine concluded for one label evaluation."""
    items: tuple[ValidationItem, ...] = ()
    decision: StatusDecision
    overall_confidence: int = Field(ge=0, le=100)
    auto_approved: bool = False
    label_status: LabelStatus


class DeadlineInfo(EngineModel):
    days_remaining: int
    urgency: Urgency


class ApplicationData(BaseModel):
    """Application values the label is checked against."""
    beverage_type: Optional[BeverageType] = None
    brand_name: Optional[str] = None
    fanciful_name: Optional[str] = None
    class_type: Optional[str] = None
    alcohol_content: Optional[str] = None
    net_contents: Optional[str] = None
    name_and_address: Optional[str] = None
    qualifying_phrase: Optional[str] = None
    country_of_origin: Optional[str] = None
    grape_varietal: Optional[str] = None
    appellation_of_origin: Optional[str] = None
    vintage_year: Optional[str] = None
    sulfite_declaration: Optional[bool] = None
    age_statement: Optional[str] = None
    state_of_distillation: Optional[str] = None
    health_warning: Optional[str] = None
    container_size_ml: Optional[float] = Field(None, gt=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "beverage_type": "distilled_spirits",
                "brand_name": "OLD TOM DISTILLERY",
                "class_type": "Kentucky Straight Bourbon Whiskey",
                "alcohol_content": "45% Alc./Vol. (90 Proof)",
                "net_contents": "750 mL",
                "name_and_address": "Old Tom Distillery, Bardstown, KY",
                "qualifying_phrase": "Distilled and Bottled by",
                "container_size_ml": 750,
            }
        }
    )


# ---------------------------------------------------------------------------
# API requests/responses
# ---------------------------------------------------------------------------

class ExtractRequest(BaseModel):
    ocr_results: list[OcrResult] = Field(..., min_length=1)
    classification: ClassificationResult


class ExtractResponse(BaseModel):
    success: bool
    fields: list[ExtractedField] = []
    image_classifications: list[ImageClassification] = []
    detected_beverage_type: Optional[BeverageType] = None
    error: Optional[str] = None


class EvaluateRequest(BaseModel):
    ocr_results: list[OcrResult] = Field(..., min_length=1)
    classification: ClassificationResult
    application: ApplicationData
    now: Optional[datetime] = None


class EvaluateResponse(BaseModel):
    success: bool
    evaluation: Optional[LabelEvaluation] = None
    fields: list[ExtractedField] = []
    beverage_type: Optional[BeverageType] = None
    processing_time_ms: int = 0
    error: Optional[str] = None


class EffectiveStatusRequest(BaseModel):
    status: LabelStatus
    correction_deadline: Optional[datetime] = None
    now: Optional[datetime] = None


class EffectiveStatusResponse(BaseModel):
    stored_status: LabelStatus
    effective_status: LabelStatus
    expired: bool
    deadline: Optional[DeadlineInfo] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
