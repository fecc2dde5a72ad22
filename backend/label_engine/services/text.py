"""Text canonicalization shared by the word matcher and field comparison."""

import re
import unicodedata

# A period survives only when both neighbours are digits ("12.5%")
_NON_DECIMAL_PERIOD = re.compile(r"(?<!\d)\.|\.(?!\d)")
_SEPARATORS = re.compile(r"[,;:!?'\"()\-/]")
_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def normalize(text: str) -> str:
    """
    Canonical form used for word-level matching.

    Lowercases, drops non-decimal periods, turns separator punctuation
    into spaces and collapses whitespace. "ALC/VOL" and "ALC / VOL"
    both become "alc vol"; "12.5%" stays "12.5%".
    """
    text = text.lower()
    text = _NON_DECIMAL_PERIOD.sub("", text)
    text = _SEPARATORS.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def fold(text: str) -> str:
    """Case, punctuation and diacritic insensitive form ("Rosé" == "ROSE")."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    stripped = stripped.casefold().replace("&", " and ")
    return _NON_ALNUM.sub(" ", stripped).strip()
