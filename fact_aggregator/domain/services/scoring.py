"""Rating, score and similarity helpers shared by adapters and the integrator."""

import re
from typing import Set, Tuple

from ..models.verification import VerificationStatus

SIMILARITY_THRESHOLD = 0.5

TRUE_TOKENS = ("true", "correct", "accurate", "사실", "팩트")
FALSE_TOKENS = ("false", "incorrect", "fake", "거짓", "오류")
PARTIAL_TOKENS = ("partly", "half", "partially", "일부", "부분")
PARTIAL_TRUE_TOKENS = ("true", "사실")
PARTIAL_FALSE_TOKENS = ("false", "거짓")

_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")


def _contains_any(text: str, tokens: Tuple[str, ...]) -> bool:
    return any(token in text for token in tokens)


def map_rating(rating: str) -> Tuple[float, VerificationStatus]:
    """Map a textual fact-check rating to a trust score and status.

    Matching is a case-insensitive substring test. Partial ratings are
    checked before the plain true/false vocabularies, so "Partly False"
    maps to PARTIALLY_FALSE rather than VERIFIED_FALSE.

    Args:
        rating: Textual rating such as "True", "Partly False" or "거짓"

    Returns:
        Tuple of (trust score, status)
    """
    if not rating:
        return 0.5, VerificationStatus.INCONCLUSIVE

    lowered = rating.lower()

    if _contains_any(lowered, PARTIAL_TOKENS):
        if _contains_any(lowered, PARTIAL_TRUE_TOKENS):
            return 0.6, VerificationStatus.PARTIALLY_TRUE
        if _contains_any(lowered, PARTIAL_FALSE_TOKENS):
            return 0.4, VerificationStatus.PARTIALLY_FALSE
        return 0.5, VerificationStatus.MIXED

    if _contains_any(lowered, TRUE_TOKENS):
        return 0.9, VerificationStatus.VERIFIED_TRUE

    if _contains_any(lowered, FALSE_TOKENS):
        return 0.1, VerificationStatus.VERIFIED_FALSE

    return 0.5, VerificationStatus.INCONCLUSIVE


def map_rating_to_trust_score(rating: str) -> float:
    """Trust score component of ``map_rating``."""
    return map_rating(rating)[0]


def map_rating_to_status(rating: str) -> VerificationStatus:
    """Status component of ``map_rating``."""
    return map_rating(rating)[1]


def map_score_to_status(score: float, scale: float = 1.0) -> VerificationStatus:
    """Map a numeric score to a status.

    Thresholds are expressed on a 0-1 scale and multiplied by ``scale``,
    so ``scale=100`` handles providers that report 0-100 scores.
    """
    if score >= 0.8 * scale:
        return VerificationStatus.VERIFIED_TRUE
    elif score <= 0.2 * scale:
        return VerificationStatus.VERIFIED_FALSE
    elif score > 0.5 * scale:
        return VerificationStatus.PARTIALLY_TRUE
    elif score < 0.5 * scale:
        return VerificationStatus.PARTIALLY_FALSE
    else:
        return VerificationStatus.INCONCLUSIVE


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a value to the closed interval [low, high]."""
    return max(low, min(high, value))


def normalize_words(text: str) -> Set[str]:
    """Lower-case, strip punctuation and split text into a word set."""
    normalized = _PUNCTUATION.sub("", text.lower())
    return set(normalized.split())


def calculate_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity over the normalized word sets of two texts."""
    if not text1 or not text2:
        return 0.0

    words1 = normalize_words(text1)
    words2 = normalize_words(text2)
    if not words1 or not words2:
        return 0.0

    return len(words1 & words2) / len(words1 | words2)


def format_time_interval(ms: float) -> str:
    """Format a duration in milliseconds for humans (e.g. "850ms", "1.2s", "2m 5s")."""
    if not ms or ms < 0:
        return "0ms"

    if ms < 1000:
        return f"{int(ms)}ms"

    seconds = ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining_seconds = int(seconds % 60)
    if minutes < 60:
        return f"{minutes}m {remaining_seconds}s" if remaining_seconds else f"{minutes}m"

    hours = minutes // 60
    remaining_minutes = minutes % 60
    if remaining_seconds:
        return f"{hours}h {remaining_minutes}m {remaining_seconds}s"
    if remaining_minutes:
        return f"{hours}h {remaining_minutes}m"
    return f"{hours}h"
