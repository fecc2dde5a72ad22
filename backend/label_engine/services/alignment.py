"""Locate classified field values among OCR words."""

from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging
import re

from ..models.schemas import BoundingBox, OcrResult, OcrWord
from .geometry import normalized_bounding_box
from .text import normalize

logger = logging.getLogger(__name__)

# Accumulated text ending in a digit (optionally a bare period) glues onto
# a following token that starts with a digit, period or percent sign.
_NUMERIC_TAIL = re.compile(r"\d\.?$")
_NUMERIC_HEAD = re.compile(r"^[\d.%]")

MIN_COVERAGE = 0.6
MAX_WINDOW = 60


@dataclass(frozen=True)
class IndexedWord:
    """An OCR word addressed by its position across all images of a label."""
    global_index: int
    image_index: int
    local_index: int
    word: OcrWord

    @property
    def text(self) -> str:
        return self.word.text


def build_indexed_words(ocr_results: Sequence[OcrResult]) -> List[IndexedWord]:
    """Flatten per-image word lists; list position equals global index."""
    indexed = []
    for image_index, result in enumerate(ocr_results):
        for local_index, word in enumerate(result.words):
            indexed.append(IndexedWord(
                global_index=len(indexed),
                image_index=image_index,
                local_index=local_index,
                word=word,
            ))
    return indexed


def find_matching_words(
    value: str,
    words: Sequence[IndexedWord],
    min_coverage: float = MIN_COVERAGE,
    max_window: int = MAX_WINDOW,
) -> List[IndexedWord]:
    """
    Find the consecutive run of words whose text best spells ``value``.

    Windows start at every word with non-empty normalized text and grow
    one word at a time up to ``max_window`` words. Split numbers such as
    "12." + "5%" are re-joined without a space. An exact normalized match
    returns immediately; otherwise the window covering the largest share
    of the target wins, provided it covers at least ``min_coverage``.
    """
    target = normalize(value)
    if not target:
        return []

    best_match: List[IndexedWord] = []
    best_score = 0.0
    length_limit = len(target) * 1.5 + 20

    for start in range(len(words)):
        if not normalize(words[start].text):
            continue

        accumulated = ""
        candidates: List[IndexedWord] = []

        for current in words[start:start + max_window]:
            if candidates:
                joins_number = (
                    _NUMERIC_TAIL.search(accumulated)
                    and _NUMERIC_HEAD.match(current.text)
                )
                if not joins_number:
                    accumulated += " "
            accumulated += current.text
            candidates.append(current)

            acc_norm = normalize(accumulated)

            if acc_norm == target:
                return list(candidates)

            if acc_norm in target:
                score = len(acc_norm) / len(target)
                if score > best_score:
                    best_score = score
                    best_match = list(candidates)
            elif target in acc_norm:
                # Window overshot the target but fully contains it
                if best_score < 1:
                    best_score = 1.0
                    best_match = list(candidates)
                break

            if len(acc_norm) > length_limit:
                break

    return best_match if best_score >= min_coverage else []


def primary_image(words: Sequence[IndexedWord]) -> int:
    """Image holding the most words; ties go to the lowest image index."""
    if not words:
        return 0
    counts = Counter(word.image_index for word in words)
    return min(counts, key=lambda index: (-counts[index], index))


def locate_words(
    words: Sequence[IndexedWord],
    ocr_results: Sequence[OcrResult],
) -> Tuple[Optional[BoundingBox], int]:
    """
    Bounding box and image index for a set of referenced words.

    Only words on the primary image count, and punctuation-only tokens
    are ignored since their polygons tend to sit on a neighbouring line.
    If every word is filtered out the box is None but the primary image
    is still reported.
    """
    if not words:
        return None, 0

    image_index = primary_image(words)
    on_image = [
        w.word for w in words
        if w.image_index == image_index and normalize(w.text)
    ]
    if not on_image or image_index >= len(ocr_results):
        return None, image_index

    result = ocr_results[image_index]
    box = normalized_bounding_box(on_image, result.image_width, result.image_height)
    return box, image_index


def align_by_word_indices(
    indices: Sequence[int],
    indexed_words: Sequence[IndexedWord],
    ocr_results: Sequence[OcrResult],
) -> Tuple[Optional[BoundingBox], int]:
    """Resolve classifier word indices to a box on their primary image."""
    resolved = [indexed_words[i] for i in indices if 0 <= i < len(indexed_words)]
    dropped = len(indices) - len(resolved)
    if dropped:
        logger.warning(
            f"Dropped {dropped} of {len(indices)} word indices outside "
            f"the {len(indexed_words)}-word list"
        )
    return locate_words(resolved, ocr_results)


def align_by_text(
    value: Optional[str],
    indexed_words: Sequence[IndexedWord],
    ocr_results: Sequence[OcrResult],
    min_coverage: float = MIN_COVERAGE,
    max_window: int = MAX_WINDOW,
) -> Tuple[Optional[BoundingBox], int]:
    """Recover geometry for a value the classifier returned without indices."""
    if not value:
        return None, 0
    matched = find_matching_words(value, indexed_words, min_coverage, max_window)
    if not matched:
        logger.debug(f"No OCR words matched '{value[:40]}'")
    return locate_words(matched, ocr_results)
