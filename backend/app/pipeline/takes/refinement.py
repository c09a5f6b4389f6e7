"""Cut list refinement.

Runs after overlap resolution, on cuts that are sorted and pairwise
non-overlapping:
1. Merge cuts separated by tiny gaps
2. Pad cuts with transition buffers
3. Validate the result (boundaries, overlaps, very short cuts)
"""
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from .clusters import sort_by_start
from .config import RefinementConfig
from .segments import Segment
from .timecode import format_time

logger = logging.getLogger(__name__)


@dataclass
class CutValidation:
    """Problems found in a cut list."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def _is_finite(segment: Segment) -> bool:
    return math.isfinite(segment.start) and math.isfinite(segment.end)


def merge_adjacent_cuts(
    cuts: List[Segment],
    threshold_sec: float = 0.5,
) -> Tuple[List[Segment], Dict[str, List[str]]]:
    """
    Join cuts whose gap is at most ``threshold_sec``.

    A merged cut keeps the id and category of its first cut, spans to the
    furthest end and joins the reasons with "; ".

    Returns (cuts, merges) where merges maps a merged cut id to the ids it
    absorbed.
    """
    if len(cuts) <= 1:
        return list(cuts), {}

    ordered = sort_by_start(cuts)
    merged: List[Segment] = []
    merges: Dict[str, List[str]] = {}
    current = ordered[0]

    for following in ordered[1:]:
        gap = following.start - current.end
        if _is_finite(current) and _is_finite(following) and gap <= threshold_sec:
            end = max(current.end, following.end)
            current = replace(
                current,
                end=end,
                duration=end - current.start,
                reason=f"{current.reason}; {following.reason}",
            )
            merges.setdefault(current.id, []).append(following.id)
        else:
            merged.append(current)
            current = following

    merged.append(current)

    if merges:
        logger.info(f"Merged adjacent cuts: {len(cuts)} -> {len(merged)}")
    return merged, merges


def add_transition_buffers(
    cuts: List[Segment],
    buffer_sec: float = 0.15,
    video_duration: Optional[float] = None,
) -> List[Segment]:
    """
    Widen every cut by ``buffer_sec`` on both sides.

    Starts are clamped at 0 and ends at the video duration when known. A
    buffered start never reaches back into the previous cut, so the list
    stays non-overlapping.
    """
    buffered = []
    previous_end = 0.0

    for cut in sort_by_start(cuts):
        if not _is_finite(cut):
            buffered.append(cut)
            continue

        start = max(0.0, cut.start - buffer_sec, previous_end)
        end = cut.end + buffer_sec
        if video_duration is not None:
            end = min(end, video_duration)
        end = max(end, start)

        buffered.append(replace(cut, start=start, end=end, duration=end - start))
        previous_end = end

    return buffered


def validate_cuts(cuts: List[Segment], min_cut_sec: float = 0.1) -> CutValidation:
    """Check a cut list for inverted boundaries, overlaps and very short cuts."""
    result = CutValidation()
    ordered = sort_by_start(cuts)

    for i, cut in enumerate(ordered):
        label = f"{format_time(cut.start)} - {format_time(cut.end)}"

        if not cut.start < cut.end:
            result.errors.append(f"Cut {i} ({cut.id}): Invalid boundaries (start >= end): {label}")
        elif cut.end - cut.start < min_cut_sec:
            result.warnings.append(f"Cut {i} ({cut.id}): Very short duration (< {min_cut_sec}s): {label}")

        if i + 1 < len(ordered):
            following = ordered[i + 1]
            if cut.end > following.start:
                result.errors.append(
                    f"Cuts {i} and {i + 1} overlap: "
                    f"{format_time(cut.end)} > {format_time(following.start)}"
                )

    return result


def refine_cuts(
    cuts: List[Segment],
    config: RefinementConfig,
    video_duration: Optional[float] = None,
) -> Tuple[List[Segment], Dict[str, List[str]]]:
    """Apply the enabled refinement steps. Returns (cuts, merges)."""
    merges: Dict[str, List[str]] = {}

    if config.merge_adjacent:
        cuts, merges = merge_adjacent_cuts(cuts, config.merge_threshold_sec)

    if config.add_buffers:
        cuts = add_transition_buffers(cuts, config.buffer_sec, video_duration)

    return cuts, merges
