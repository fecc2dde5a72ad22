"""Interfaces of the systems the engine calls out to."""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from ..models.schemas import BeverageType, ClassificationResult, LabelEvaluation, LabelStatus, OcrResult


class OcrProvider(Protocol):
    """Turns one image into positioned words."""

    def extract_text(self, image: bytes) -> OcrResult:
        ...


class FieldClassifier(Protocol):
    """
    Assigns label text to regulatory fields.

    ``word_list`` holds (global index, text) pairs when the caller wants
    fields grounded by word index; it is None for text-only classification.
    ``images`` carries the raw images for multimodal classifiers.
    May return a ClassificationResult or its plain-dict form.
    """

    def classify(
        self,
        full_text: str,
        beverage_type: Optional[BeverageType],
        expected_values: Mapping[str, str],
        word_list: Optional[List[Tuple[int, str]]] = None,
        images: Optional[Sequence[bytes]] = None,
    ) -> Union[ClassificationResult, Dict[str, Any]]:
        ...


class StatusWriter(Protocol):
    """Persists a label's status."""

    def write_status(
        self,
        label_id: str,
        status: LabelStatus,
        correction_deadline: Optional[datetime],
    ) -> None:
        ...


class ValidationSink(Protocol):
    """Receives the outcome of one label evaluation."""

    def record(self, label_id: str, evaluation: LabelEvaluation) -> None:
        ...
