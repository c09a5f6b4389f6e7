"""Take pipeline runner.

Turns flagged segments plus cluster decisions into the final cut list handed
to the renderer.
"""
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from .clusters import TakeCluster, detect_clusters, sort_by_start
from .config import (
    ClusteringConfig,
    DEFAULT_CLUSTERING_CONFIG,
    DEFAULT_REFINEMENT_CONFIG,
    RefinementConfig,
)
from .overlaps import OverlapInfo, find_overlapping_segments, resolve_segment_overlaps
from .refinement import CutValidation, refine_cuts, validate_cuts
from .segments import FilterState, Interval, Segment, apply_filters
from .selections import ClusterSelection, apply_cluster_selections, default_selections

logger = logging.getLogger(__name__)


@dataclass
class EditPlan:
    """Result of planning an edit."""
    clusters: List[TakeCluster]
    selections: List[ClusterSelection]
    cuts: List[Segment]
    hidden: List[OverlapInfo]
    kept: List[Segment]
    keep_ranges: List[Interval]
    original_duration: Optional[float]
    time_removed: float
    merged: Dict[str, List[str]] = field(default_factory=dict)
    validation: Optional[CutValidation] = None

    @property
    def final_duration(self) -> Optional[float]:
        if self.original_duration is None:
            return None
        return max(0.0, self.original_duration - self.time_removed)

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dictionary for API responses."""
        return {
            "clusters": [c.to_dict() for c in self.clusters],
            "selections": [s.to_dict() for s in self.selections],
            "cuts": [s.to_dict() for s in self.cuts],
            "hidden": [h.to_dict() for h in self.hidden],
            "kept": [s.to_dict() for s in self.kept],
            "keepRanges": [r.to_dict() for r in self.keep_ranges],
            "merged": {k: list(v) for k, v in self.merged.items()},
            "validation": self.validation.to_dict() if self.validation else None,
            "summary": {
                "originalDuration": self.original_duration,
                "timeRemoved": self.time_removed,
                "finalDuration": self.final_duration,
                "segmentCount": len(self.cuts),
                "clusterCount": len(self.clusters),
            },
        }


def compute_keep_ranges(cuts: List[Segment], video_duration: float) -> List[Interval]:
    """
    Complement of the cut list over ``[0, video_duration]``.

    Expects cuts sorted by start and non-overlapping. Cuts with unparseable
    times are ignored.
    """
    ranges = []
    cursor = 0.0

    for cut in cuts:
        if not (math.isfinite(cut.start) and math.isfinite(cut.end)):
            continue
        start = max(0.0, min(cut.start, video_duration))
        end = max(0.0, min(cut.end, video_duration))
        if start > cursor:
            ranges.append(Interval(cursor, start))
        cursor = max(cursor, end)

    if cursor < video_duration:
        ranges.append(Interval(cursor, video_duration))

    return ranges


def _without_kept(selections: List[ClusterSelection]) -> List[ClusterSelection]:
    """Drop ids the user kept in any cluster from every removal list."""
    kept_ids = {segment_id for s in selections for segment_id in s.kept_segments}
    if not kept_ids:
        return selections
    return [
        replace(s, removed_segments=[i for i in s.removed_segments if i not in kept_ids])
        for s in selections
    ]


def plan_edit(
    segments: List[Segment],
    selections: Optional[List[ClusterSelection]] = None,
    clusters: Optional[List[TakeCluster]] = None,
    filter_state: Optional[FilterState] = None,
    video_duration: Optional[float] = None,
    config: Optional[ClusteringConfig] = None,
    refinement: Optional[RefinementConfig] = None,
) -> EditPlan:
    """
    Plan the final cut list for a video.

    Args:
        segments: Flagged segments from the analyzer
        selections: User cluster decisions (defaults cut every attempt)
        clusters: Previously detected clusters (detected here if not given)
        filter_state: Review filters for segments outside clusters
        video_duration: Video length, enables keep ranges and final duration
        config: Clustering thresholds
        refinement: Merge and buffer settings for the cut list (no refinement if not given)

    Returns:
        EditPlan with a sorted, pairwise non-overlapping cut list
    """
    config = config or DEFAULT_CLUSTERING_CONFIG

    if clusters is None:
        clusters = detect_clusters(segments, config)
    if selections is None:
        selections = default_selections(clusters)

    effective = _without_kept(selections)

    # 1. Apply cluster decisions
    mapping = apply_cluster_selections(segments, effective)

    # 2. Hide segments covered by removed attempts
    visible, hidden = find_overlapping_segments(mapping.visible, effective, clusters)

    # 3. Review filters
    if filter_state is not None:
        visible = apply_filters(visible, filter_state)

    # 4. Resolve overlaps across everything that will be cut
    primary, secondary = resolve_segment_overlaps(mapping.removed + visible)
    cuts = sort_by_start(primary)

    # 5. Refine and validate the cut list
    merged = {}
    if refinement is not None:
        cuts, merged = refine_cuts(cuts, refinement, video_duration)

    validation = validate_cuts(cuts, (refinement or DEFAULT_REFINEMENT_CONFIG).min_cut_sec)
    for error in validation.errors:
        logger.error(f"Cut list: {error}")
    for warning in validation.warnings:
        logger.warning(f"Cut list: {warning}")

    time_removed = sum(cut.span for cut in cuts if math.isfinite(cut.span))
    keep_ranges = compute_keep_ranges(cuts, video_duration) if video_duration is not None else []

    logger.info(
        f"Edit plan: {len(cuts)} cuts, {time_removed:.1f}s removed, "
        f"{len(hidden) + len(secondary)} segments hidden"
    )

    return EditPlan(
        clusters=clusters,
        selections=selections,
        cuts=cuts,
        hidden=hidden + secondary,
        kept=mapping.kept,
        keep_ranges=keep_ranges,
        original_duration=video_duration,
        time_removed=time_removed,
        merged=merged,
        validation=validation,
    )
