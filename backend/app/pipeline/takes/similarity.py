"""Similarity signals between flagged segments."""
from typing import Optional

from .segments import Segment, SegmentCategory

CATEGORY_MATCH_SCORE = 0.5
DURATION_MATCH_SCORE = 0.3
DURATION_MAX_RELATIVE_DIFF = 0.5


def text_similarity(a: Optional[str], b: Optional[str]) -> float:
    """Jaccard index of the lower-cased whitespace tokens. Empty vs empty is 0."""
    tokens_a = set((a or "").lower().split())
    tokens_b = set((b or "").lower().split())
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def category_similarity(a: Optional[str], b: Optional[str]) -> float:
    """0.5 for identical known categories, otherwise 0."""
    category_a = SegmentCategory.normalize(a)
    if category_a is None:
        return 0.0
    return CATEGORY_MATCH_SCORE if category_a == SegmentCategory.normalize(b) else 0.0


def duration_similarity(d1: float, d2: float) -> float:
    """0.3 when the durations differ by less than half of the longer one."""
    longest = max(d1, d2)
    if not longest > 0:
        return 0.0
    if abs(d1 - d2) / longest < DURATION_MAX_RELATIVE_DIFF:
        return DURATION_MATCH_SCORE
    return 0.0


def combined_similarity(a: Segment, b: Segment) -> float:
    """Unweighted sum of reason, category and duration similarity (0-1.8)."""
    return (
        text_similarity(a.reason, b.reason)
        + category_similarity(a.category, b.category)
        + duration_similarity(a.duration, b.duration)
    )
