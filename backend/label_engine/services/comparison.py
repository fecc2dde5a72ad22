"""Comparison of extracted label values against application data."""

import re
from typing import Dict, Optional
import logging

from rapidfuzz import fuzz

from ..config import Settings, get_settings
from ..models.schemas import Comparison, ComparisonStatus, MatchType
from .keywords import ACCEPTED_VARIANTS
from .regulations import HEALTH_WARNING_FIELD, HEALTH_WARNING_HEADER, QUALIFYING_PHRASES
from .text import fold, normalize_whitespace

logger = logging.getLogger(__name__)

FIELD_MATCH_STRATEGY: Dict[str, MatchType] = {
    "health_warning": MatchType.EXACT,
    "brand_name": MatchType.FUZZY,
    "fanciful_name": MatchType.FUZZY,
    "alcohol_content": MatchType.NORMALIZED,
    "net_contents": MatchType.NORMALIZED,
    "class_type": MatchType.FUZZY,
    "name_and_address": MatchType.FUZZY,
    "qualifying_phrase": MatchType.ENUM,
    "country_of_origin": MatchType.CONTAINS,
    "grape_varietal": MatchType.FUZZY,
    "appellation_of_origin": MatchType.FUZZY,
    "vintage_year": MatchType.EXACT,
    "sulfite_declaration": MatchType.FUZZY,
    "age_statement": MatchType.NORMALIZED,
    "state_of_distillation": MatchType.FUZZY,
}

UNIT_TO_ML = {
    "ml": 1.0,
    "milliliter": 1.0,
    "milliliters": 1.0,
    "millilitre": 1.0,
    "millilitres": 1.0,
    "cl": 10.0,
    "centiliter": 10.0,
    "centiliters": 10.0,
    "centilitre": 10.0,
    "centilitres": 10.0,
    "l": 1000.0,
    "liter": 1000.0,
    "liters": 1000.0,
    "litre": 1000.0,
    "litres": 1000.0,
    "oz": 29.5735,
    "fl oz": 29.5735,
    "fluid ounce": 29.5735,
    "fluid ounces": 29.5735,
    "pt": 473.176,
    "pint": 473.176,
    "pints": 473.176,
    "qt": 946.353,
    "quart": 946.353,
    "quarts": 946.353,
    "gal": 3785.41,
    "gallon": 3785.41,
    "gallons": 3785.41,
}
_UNITS_LONGEST_FIRST = sorted(UNIT_TO_ML, key=len, reverse=True)

_PROOF_ANNOTATION = re.compile(r"\(?\s*(\d+(?:\.\d+)?)\s*proof\s*\)?", re.IGNORECASE)
# "1,000" groups thousands; "13,5" is a decimal comma
_NUMBER = r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+|,\d{1,2})?"
_THOUSANDS = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?")
_PERCENTAGE = re.compile(rf"({_NUMBER})\s*%")
_NET_CONTENTS = re.compile(rf"({_NUMBER})\s*([a-z][a-z. ]*)", re.IGNORECASE)
_AGE_YEARS = re.compile(r"(\d+)\s*(?:years?|yrs?)\b", re.IGNORECASE)
_AGED = re.compile(r"aged\s+(\d+)", re.IGNORECASE)

# Boilerplate around origin and address wording
_FILLER_WORDS = frozenset({"product", "of", "made", "in", "the", "by", "and"})


def _to_number(text: str) -> float:
    if _THOUSANDS.fullmatch(text):
        return float(text.replace(",", ""))
    return float(text.replace(",", "."))


def parse_alcohol_content(value: str) -> Optional[float]:
    """
    ABV percentage from label wording.

    "45% Alc./Vol. (90 Proof)" -> 45.0, "12.5% ABV" -> 12.5,
    "90 Proof" -> 45.0. Proof is only used when no percentage is printed.
    """
    cleaned = normalize_whitespace(value)
    without_proof = _PROOF_ANNOTATION.sub(" ", cleaned)

    match = _PERCENTAGE.search(without_proof)
    if match:
        return _to_number(match.group(1))

    proof = _PROOF_ANNOTATION.search(cleaned)
    if proof:
        return float(proof.group(1)) / 2
    return None


def parse_net_contents(value: str) -> Optional[float]:
    """Volume in mL: "750 mL", "0.75L", "75 cL", "25.4 FL. OZ.", "1,000 mL"."""
    match = _NET_CONTENTS.search(normalize_whitespace(value))
    if not match:
        return None

    amount = _to_number(match.group(1))
    unit = normalize_whitespace(match.group(2).lower().replace(".", " "))

    multiplier = UNIT_TO_ML.get(unit)
    if multiplier is None:
        # Trailing words after the unit ("ml bottle", "l e")
        for candidate in _UNITS_LONGEST_FIRST:
            if unit == candidate or unit.startswith(candidate + " "):
                multiplier = UNIT_TO_ML[candidate]
                break
    if multiplier is None:
        return None
    return round(amount * multiplier, 2)


def parse_age_statement(value: str) -> Optional[int]:
    """Age in years from "12 Years Old", "Aged 8 yrs", "Aged 10"."""
    cleaned = normalize_whitespace(value)
    match = _AGE_YEARS.search(cleaned) or _AGED.search(cleaned)
    return int(match.group(1)) if match else None


def find_qualifying_phrase(value: str) -> Optional[str]:
    """Longest known qualifying phrase mentioned in ``value``."""
    text = fold(value)
    if not text:
        return None
    padded = f" {text} "
    contained = [p for p in QUALIFYING_PHRASES if f" {p} " in padded]
    if contained:
        return max(contained, key=len)
    # Truncated reads such as "Distilled and Bottled"
    if len(text) < 4:
        return None
    for phrase in sorted(QUALIFYING_PHRASES, key=len):
        if phrase.startswith(text):
            return phrase
    return None


class ComparisonService:
    """Compares extracted field values against expected application values."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._variant_to_canonical = self._build_variant_lookup()

    def _build_variant_lookup(self) -> Dict[str, Dict[str, str]]:
        """field -> folded variant -> canonical, settings entries override built-ins."""
        lookup: Dict[str, Dict[str, str]] = {}
        tables = [ACCEPTED_VARIANTS, self.settings.accepted_variants]
        for table in tables:
            for field_name, groups in table.items():
                field_lookup = lookup.setdefault(field_name, {})
                for canonical, variants in groups.items():
                    field_lookup[fold(canonical)] = canonical
                    for variant in variants:
                        field_lookup[fold(variant)] = canonical
        return lookup

    def compare(
        self,
        field_name: str,
        expected: str,
        extracted: Optional[str],
        match_type: Optional[MatchType] = None,
    ) -> Comparison:
        """
        Compare one field using the strategy registered for it.

        A mismatch on a minor-discrepancy field is reported as
        needs_correction instead.
        """
        if extracted is None or not extracted.strip():
            return Comparison(
                status=ComparisonStatus.NOT_FOUND,
                confidence=0,
                reasoning=f'Field "{field_name}" was not found on the label.',
            )

        strategy = match_type or FIELD_MATCH_STRATEGY.get(field_name, MatchType.FUZZY)
        if strategy == MatchType.EXACT:
            result = self._compare_exact(field_name, expected, extracted)
        elif strategy == MatchType.NORMALIZED:
            result = self._compare_normalized(field_name, expected, extracted)
        elif strategy == MatchType.ENUM:
            result = self._compare_enum(field_name, expected, extracted)
        elif strategy == MatchType.CONTAINS:
            result = self._compare_contains(field_name, expected, extracted)
        else:
            result = self._compare_fuzzy(field_name, expected, extracted)

        if (
            result.status == ComparisonStatus.MISMATCH
            and field_name in self.settings.minor_discrepancy_fields
        ):
            result = Comparison(
                status=ComparisonStatus.NEEDS_CORRECTION,
                confidence=result.confidence,
                reasoning=f"{result.reasoning} Treated as a minor discrepancy.",
            )

        logger.debug(
            f"{field_name}: {strategy.value} -> {result.status.value} "
            f"({result.confidence:.0f})"
        )
        return result

    # ------------------------------------------------------------------
    # Exact
    # ------------------------------------------------------------------

    def _compare_exact(self, field_name: str, expected: str, extracted: str) -> Comparison:
        norm_expected = normalize_whitespace(expected)
        norm_extracted = normalize_whitespace(extracted)

        if field_name == HEALTH_WARNING_FIELD:
            return self._compare_health_warning(norm_expected, norm_extracted)

        if norm_expected == norm_extracted:
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=100,
                reasoning=f"{field_name} matches exactly.",
            )

        if field_name == "vintage_year":
            expected_year = re.sub(r"\D", "", norm_expected)
            extracted_year = re.sub(r"\D", "", norm_extracted)
            if expected_year and expected_year == extracted_year:
                return Comparison(
                    status=ComparisonStatus.MATCH,
                    confidence=95,
                    reasoning=f"{field_name} year values match: {expected_year}.",
                )

        if norm_expected.casefold() == norm_extracted.casefold():
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=95,
                reasoning=f"{field_name} matches ignoring case.",
            )

        return Comparison(
            status=ComparisonStatus.MISMATCH,
            confidence=90,
            reasoning=(
                f'{field_name} does not match. Expected: "{norm_expected[:100]}" '
                f'Found: "{norm_extracted[:100]}"'
            ),
        )

    def _compare_health_warning(self, expected: str, extracted: str) -> Comparison:
        """
        Statutory warning: header must be printed in capitals, body near-verbatim.
        """
        if HEALTH_WARNING_HEADER not in extracted:
            if HEALTH_WARNING_HEADER.lower() in extracted.lower():
                reason = f'"{HEALTH_WARNING_HEADER}" header must appear in all capital letters.'
            else:
                reason = f'"{HEALTH_WARNING_HEADER}" header is missing from the warning text.'
            return Comparison(status=ComparisonStatus.MISMATCH, confidence=95, reasoning=reason)

        if expected == extracted:
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=100,
                reasoning="health_warning matches the required statement exactly.",
            )

        if expected.lower() == extracted.lower():
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=85,
                reasoning="health_warning matches ignoring case in the body text.",
            )

        similarity = fuzz.ratio(expected.lower(), extracted.lower())
        if similarity >= self.settings.warning_similarity_threshold:
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=round(similarity * 0.8),
                reasoning=(
                    f"health_warning is very similar ({similarity:.0f}%). "
                    "Minor OCR discrepancies detected."
                ),
            )

        return Comparison(
            status=ComparisonStatus.MISMATCH,
            confidence=90,
            reasoning=(
                f"health_warning text differs from the required statement "
                f"({similarity:.0f}% similar)."
            ),
        )

    # ------------------------------------------------------------------
    # Fuzzy
    # ------------------------------------------------------------------

    def _canonical(self, field_name: str, value: str) -> Optional[str]:
        """
        Canonical variant name for a value, if it is a known wording.

        Examples (class_type):
        - "India Pale Ale" -> "IPA"
        - "Kentucky Straight Bourbon Whiskey" -> "BOURBON"
        """
        lookup = self._variant_to_canonical.get(field_name)
        if not lookup:
            return None
        key = fold(value)
        if key in lookup:
            return lookup[key]
        # Longest variant appearing as whole words in a longer string
        padded = f" {key} "
        for variant in sorted(lookup, key=len, reverse=True):
            if f" {variant} " in padded:
                return lookup[variant]
        return None

    def similarity(self, a: str, b: str) -> float:
        """Edit-distance similarity in [0, 1], order-insensitive for tokens."""
        fa, fb = fold(a), fold(b)
        if not fa or not fb:
            return 1.0 if fa == fb else 0.0
        return max(fuzz.ratio(fa, fb), fuzz.token_sort_ratio(fa, fb)) / 100

    def _threshold(self, field_name: str) -> float:
        strictness = self.settings.field_strictness.get(field_name, "moderate")
        return self.settings.strictness_thresholds.get(strictness, 0.75)

    def _compare_fuzzy(self, field_name: str, expected: str, extracted: str) -> Comparison:
        folded_expected, folded_extracted = fold(expected), fold(extracted)
        if folded_expected == folded_extracted:
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=100,
                reasoning=f"{field_name} matches ignoring case and punctuation.",
            )

        expected_canonical = self._canonical(field_name, expected)
        if expected_canonical is not None:
            if expected_canonical == self._canonical(field_name, extracted):
                return Comparison(
                    status=ComparisonStatus.MATCH,
                    confidence=95,
                    reasoning=(
                        f'{field_name} "{extracted}" is an accepted variant of '
                        f'"{expected}" ({expected_canonical}).'
                    ),
                )

        similarity = self.similarity(expected, extracted)
        if similarity >= self._threshold(field_name):
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=round(similarity * 100),
                reasoning=f"{field_name} matches with {similarity:.0%} similarity.",
            )

        # Partial OCR read of a longer value, or extra text around it
        shorter, longer = sorted((folded_expected, folded_extracted), key=len)
        if shorter and f" {shorter} " in f" {longer} ":
            ratio = len(shorter) / len(longer)
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=round(ratio * 85),
                reasoning=f"{field_name} partially matches (containment, {ratio:.0%}).",
            )

        return Comparison(
            status=ComparisonStatus.MISMATCH,
            confidence=round((1 - similarity) * 90),
            reasoning=(
                f"{field_name} does not match ({similarity:.0%} similar). "
                f'Expected: "{expected}" Found: "{extracted}"'
            ),
        )

    # ------------------------------------------------------------------
    # Normalized
    # ------------------------------------------------------------------

    def _compare_normalized(self, field_name: str, expected: str, extracted: str) -> Comparison:
        if field_name == "alcohol_content":
            expected_abv = parse_alcohol_content(expected)
            extracted_abv = parse_alcohol_content(extracted)
            if expected_abv is None or extracted_abv is None:
                return self._compare_fuzzy(field_name, expected, extracted)

            diff = abs(expected_abv - extracted_abv)
            if diff <= self.settings.abv_tolerance:
                return Comparison(
                    status=ComparisonStatus.MATCH,
                    confidence=100 if diff == 0 else 90,
                    reasoning=f"Alcohol content matches: expected {expected_abv:g}%, found {extracted_abv:g}%.",
                )
            return Comparison(
                status=ComparisonStatus.MISMATCH,
                confidence=95,
                reasoning=f"Alcohol content mismatch: expected {expected_abv:g}%, found {extracted_abv:g}%.",
            )

        if field_name == "net_contents":
            expected_ml = parse_net_contents(expected)
            extracted_ml = parse_net_contents(extracted)
            if expected_ml is None or extracted_ml is None:
                return self._compare_fuzzy(field_name, expected, extracted)

            diff = abs(expected_ml - extracted_ml)
            if diff <= expected_ml * self.settings.net_contents_tolerance:
                return Comparison(
                    status=ComparisonStatus.MATCH,
                    confidence=100 if diff == 0 else 90,
                    reasoning=f"Net contents matches: expected {expected_ml:g} mL, found {extracted_ml:g} mL.",
                )
            return Comparison(
                status=ComparisonStatus.MISMATCH,
                confidence=95,
                reasoning=f"Net contents mismatch: expected {expected_ml:g} mL, found {extracted_ml:g} mL.",
            )

        if field_name == "age_statement":
            expected_age = parse_age_statement(expected)
            extracted_age = parse_age_statement(extracted)
            if expected_age is None or extracted_age is None:
                return self._compare_fuzzy(field_name, expected, extracted)

            if expected_age == extracted_age:
                return Comparison(
                    status=ComparisonStatus.MATCH,
                    confidence=100,
                    reasoning=f"Age statement matches: {expected_age} years.",
                )
            return Comparison(
                status=ComparisonStatus.MISMATCH,
                confidence=95,
                reasoning=f"Age statement mismatch: expected {expected_age} years, found {extracted_age} years.",
            )

        return self._compare_fuzzy(field_name, expected, extracted)

    # ------------------------------------------------------------------
    # Enum and contains
    # ------------------------------------------------------------------

    def _compare_enum(self, field_name: str, expected: str, extracted: str) -> Comparison:
        expected_phrase = find_qualifying_phrase(expected)
        extracted_phrase = find_qualifying_phrase(extracted)

        if expected_phrase and extracted_phrase:
            if expected_phrase == extracted_phrase:
                return Comparison(
                    status=ComparisonStatus.MATCH,
                    confidence=95,
                    reasoning=f'Qualifying phrase matches: "{expected_phrase}".',
                )
            return Comparison(
                status=ComparisonStatus.MISMATCH,
                confidence=90,
                reasoning=(
                    f'Qualifying phrase mismatch: expected "{expected_phrase}", '
                    f'found "{extracted_phrase}".'
                ),
            )

        return self._compare_fuzzy(field_name, expected, extracted)

    def _compare_contains(self, field_name: str, expected: str, extracted: str) -> Comparison:
        folded_expected, folded_extracted = fold(expected), fold(extracted)

        if folded_expected and folded_extracted and (
            folded_expected in folded_extracted or folded_extracted in folded_expected
        ):
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=90,
                reasoning=f"{field_name} found within extracted text.",
            )

        expected_words = [w for w in folded_expected.split() if w not in _FILLER_WORDS]
        extracted_words = set(folded_extracted.split())
        matching = [w for w in expected_words if w in extracted_words]
        overlap = len(matching) / len(expected_words) if expected_words else 0.0

        if overlap >= 0.5:
            return Comparison(
                status=ComparisonStatus.MATCH,
                confidence=round(overlap * 80),
                reasoning=f"{field_name} partially matches ({', '.join(matching)} found).",
            )

        return Comparison(
            status=ComparisonStatus.MISMATCH,
            confidence=85,
            reasoning=f'{field_name} not found in extracted text. Expected: "{expected}" Found: "{extracted}"',
        )
