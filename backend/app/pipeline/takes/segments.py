"""Segment model for flagged cut candidates.

Segments arrive from the video analyzer as JSON with camelCase keys and
time-code strings. They are converted once into typed ``Segment`` objects
holding float seconds and are never mutated afterwards.
"""
import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.config import settings
from .timecode import parse_time, format_time

logger = logging.getLogger(__name__)


class SegmentCategory(str, enum.Enum):
    """Known segment categories."""
    # Primary categories (reviewed by default)
    BAD_TAKE = "bad_take"
    PAUSE = "pause"
    FALSE_START = "false_start"
    FILLER_WORDS = "filler_words"
    TECHNICAL = "technical"

    # Secondary categories
    REDUNDANT = "redundant"
    TANGENT = "tangent"
    LOW_ENERGY = "low_energy"
    LONG_EXPLANATION = "long_explanation"
    WEAK_TRANSITION = "weak_transition"

    @classmethod
    def normalize(cls, value: Optional[str]) -> Optional["SegmentCategory"]:
        """Map a raw category string (including legacy names) to the vocabulary."""
        if not value:
            return None
        value = LEGACY_CATEGORY_ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            return None


# Older analyzer versions used these names
LEGACY_CATEGORY_ALIASES: Dict[str, str] = {
    "filler": "filler_words",
    "off-topic": "tangent",
    "off_topic": "tangent",
}

PRIMARY_CATEGORIES = (
    SegmentCategory.BAD_TAKE,
    SegmentCategory.PAUSE,
    SegmentCategory.FALSE_START,
    SegmentCategory.FILLER_WORDS,
    SegmentCategory.TECHNICAL,
)


@dataclass(frozen=True)
class Interval:
    """A time range in seconds."""
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def overlaps(self, other: "Interval") -> bool:
        """Strict overlap: touching ranges do not overlap. NaN never overlaps."""
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict:
        return {"start": format_time(self.start), "end": format_time(self.end)}


@dataclass(frozen=True)
class Segment:
    """A flagged segment to remove from the video."""
    id: str
    start: float
    end: float
    duration: float
    category: str
    confidence: float
    reason: str = ""
    transcript: Optional[str] = None
    severity: Optional[str] = None
    selected: bool = True

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)

    @property
    def span(self) -> float:
        """Length of the time range (independent of the reported duration)."""
        return self.end - self.start

    @property
    def normalized_category(self) -> Optional[SegmentCategory]:
        return SegmentCategory.normalize(self.category)

    def overlaps(self, other: "Segment") -> bool:
        return self.interval.overlaps(other.interval)

    @classmethod
    def from_dict(cls, data: dict) -> "Segment":
        """Build a segment from analyzer JSON (camelCase keys)."""
        start = parse_time(data.get("startTime"))
        end = parse_time(data.get("endTime"))
        duration = data.get("duration")
        if duration is None:
            duration = end - start

        if not (math.isfinite(start) and math.isfinite(end)):
            logger.debug(f"Segment {data.get('id')} has unparseable times: "
                         f"{data.get('startTime')!r} - {data.get('endTime')!r}")

        return cls(
            id=str(data["id"]),
            start=start,
            end=end,
            duration=float(duration),
            category=data.get("category") or "",
            confidence=float(data.get("confidence", 0.0)),
            reason=data.get("reason") or "",
            transcript=data.get("transcript"),
            severity=data.get("severity"),
            selected=data.get("selected", True),
        )

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "startTime": format_time(self.start),
            "endTime": format_time(self.end),
            "duration": self.duration,
            "category": self.category,
            "confidence": self.confidence,
            "reason": self.reason,
            "selected": self.selected,
        }
        if self.transcript is not None:
            result["transcript"] = self.transcript
        if self.severity is not None:
            result["severity"] = self.severity
        return result

    def __repr__(self):
        return f"Segment({self.id}, {self.start:.2f}-{self.end:.2f}, {self.category})"


def segments_from_dicts(items: List[dict]) -> List[Segment]:
    return [Segment.from_dict(item) for item in items]


# =============================================================================
# Review filters
# =============================================================================

def _default_category_toggles() -> Dict[str, bool]:
    return {category.value: category in PRIMARY_CATEGORIES for category in SegmentCategory}


@dataclass
class FilterState:
    """Which flagged segments the user wants to review and cut."""
    categories: Dict[str, bool] = field(default_factory=_default_category_toggles)
    show_only_high_severity: bool = field(default_factory=lambda: settings.filter_high_severity_only)
    min_confidence: float = field(default_factory=lambda: settings.filter_min_confidence)

    def allows(self, segment: Segment) -> bool:
        category = segment.normalized_category
        if category is None or not self.categories.get(category.value, False):
            return False
        if self.show_only_high_severity and segment.severity != "high":
            return False
        if segment.confidence < self.min_confidence:
            return False
        return True

    def to_dict(self) -> dict:
        return {
            "categories": dict(self.categories),
            "showOnlyHighSeverity": self.show_only_high_severity,
            "minConfidence": self.min_confidence,
        }


def apply_filters(segments: List[Segment], state: FilterState) -> List[Segment]:
    """Keep segments allowed by the filter state, preserving order."""
    kept = [s for s in segments if state.allows(s)]
    logger.info(f"Review filters: {len(segments)} -> {len(kept)} segments")
    return kept
