"""Field location and label heuristics over OCR results.

Merges classifier output with OCR geometry:
1. Fields carrying word indices are boxed from those words directly
2. Fields with only a value are found by fuzzy text matching
3. Image roles and beverage type are inferred from keyword tables
"""

from typing import List, Optional, Sequence
import logging

from ..config import Settings, get_settings
from ..models.schemas import (
    BeverageType,
    ClassificationResult,
    ClassifiedField,
    ExtractedField,
    ImageClassification,
    ImageRole,
    OcrResult,
)
from .alignment import (
    IndexedWord,
    align_by_text,
    align_by_word_indices,
    build_indexed_words,
)
from .keywords import BACK_LABEL_KEYWORDS, BEVERAGE_TYPE_KEYWORDS, FRONT_LABEL_KEYWORDS

logger = logging.getLogger(__name__)

# An image needs this many regulatory keywords to count as a back label
BACK_LABEL_MIN_SCORE = 2


class FieldLocator:
    """Aligns classified fields to their source image and position."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def locate_fields(
        self,
        ocr_results: Sequence[OcrResult],
        classification: ClassificationResult,
        indexed_words: Optional[List[IndexedWord]] = None,
    ) -> List[ExtractedField]:
        """
        Produce one ExtractedField per classified field, in classifier order.

        Args:
            ocr_results: OCR output, one per image, in upload order
            classification: Validated classifier output
            indexed_words: Prebuilt word list (built here when omitted)

        Returns:
            List of ExtractedField with bounding boxes where resolvable
        """
        if indexed_words is None:
            indexed_words = build_indexed_words(ocr_results)

        located = [
            self._locate(field, indexed_words, ocr_results)
            for field in classification.fields
        ]
        boxed = sum(1 for f in located if f.bounding_box is not None)
        logger.info(
            f"Located {boxed}/{len(located)} fields across "
            f"{len(ocr_results)} image(s), {len(indexed_words)} words"
        )
        return located

    def _locate(
        self,
        field: ClassifiedField,
        indexed_words: List[IndexedWord],
        ocr_results: Sequence[OcrResult],
    ) -> ExtractedField:
        if field.word_indices:
            box, image_index = align_by_word_indices(
                field.word_indices, indexed_words, ocr_results
            )
        else:
            box, image_index = align_by_text(
                field.value,
                indexed_words,
                ocr_results,
                min_coverage=self.settings.matcher_min_coverage,
                max_window=self.settings.matcher_max_window,
            )

        return ExtractedField(
            field_name=field.field_name,
            value=field.value,
            confidence=field.confidence,
            reasoning=field.reasoning,
            bounding_box=box,
            image_index=image_index,
        )


def _count_keywords(text: str, keywords: Sequence[str]) -> int:
    return sum(1 for keyword in keywords if keyword in text)


def classify_image_roles(ocr_results: Sequence[OcrResult]) -> List[ImageClassification]:
    """
    Guess which image is the front label from its OCR text.

    The front is the image with the best front-minus-back keyword score;
    fewer words wins a tie since brand panels carry less fine print.
    Every other image is "back" if it shows enough regulatory text.
    """
    if not ocr_results:
        return []
    if len(ocr_results) == 1:
        return [ImageClassification(image_index=0, image_type=ImageRole.FRONT, confidence=90)]

    scores = []
    for index, result in enumerate(ocr_results):
        text = result.full_text.lower()
        scores.append((
            index,
            _count_keywords(text, FRONT_LABEL_KEYWORDS),
            _count_keywords(text, BACK_LABEL_KEYWORDS),
            len(result.words),
        ))

    front_index = max(scores, key=lambda s: (s[1] - s[2], -s[3], -s[0]))[0]

    classifications = []
    for index, _front, back, _words in scores:
        if index == front_index:
            role, confidence = ImageRole.FRONT, 80
        elif back >= BACK_LABEL_MIN_SCORE:
            role, confidence = ImageRole.BACK, 80
        else:
            role, confidence = ImageRole.OTHER, 60
        classifications.append(
            ImageClassification(image_index=index, image_type=role, confidence=confidence)
        )
    return classifications


def detect_beverage_type(text: str) -> Optional[BeverageType]:
    """
    Beverage category with a clear keyword lead, or None if undetermined.

    The winner needs at least one hit and one more hit than the runner-up.
    """
    lower = text.lower()
    scores = sorted(
        (
            (_count_keywords(lower, keywords), beverage_type)
            for beverage_type, keywords in BEVERAGE_TYPE_KEYWORDS.items()
        ),
        key=lambda s: s[0],
        reverse=True,
    )
    (winner_score, winner), (runner_up_score, _) = scores[0], scores[1]

    if winner_score == 0 or winner_score - runner_up_score < 1:
        logger.debug(f"Beverage type undetermined (scores: {scores})")
        return None
    return winner
