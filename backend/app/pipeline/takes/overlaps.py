"""Overlap resolution between flagged segments and cluster decisions.

Two passes:
- Hide segments that overlap attempts the user already removed via a cluster
- Among the remaining segments, keep the longest ones and suppress anything
  they cover, so the cut list is pairwise non-overlapping
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .clusters import TakeCluster
from .segments import Interval, Segment
from .selections import ClusterSelection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverRef:
    """What covers a suppressed segment."""
    type: str  # "cluster", "silence", "segment"
    id: str
    time_range: Interval
    name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "id": self.id,
            "name": self.name,
            "timeRange": self.time_range.to_dict(),
        }


@dataclass(frozen=True)
class OverlapInfo:
    """Records why a segment was hidden."""
    segment_id: str
    covered_by: CoverRef
    reason: str
    resolution: Optional[str] = None  # "keep_cluster", "remove_silence", "user_decision"

    def to_dict(self) -> dict:
        result = {
            "segmentId": self.segment_id,
            "coveredBy": self.covered_by.to_dict(),
            "reason": self.reason,
        }
        if self.resolution is not None:
            result["resolution"] = self.resolution
        return result


def find_overlapping_segments(
    segments: List[Segment],
    cluster_selections: List[ClusterSelection],
    clusters: List[TakeCluster],
) -> Tuple[List[Segment], List[OverlapInfo]]:
    """
    Split segments into visible ones and ones already covered by a cluster.

    A segment is hidden when it overlaps any attempt removed by a selection.
    The first matching cluster and attempt is reported.

    Returns (visible, hidden).
    """
    clusters_by_id: Dict[str, TakeCluster] = {}
    for cluster in clusters:
        clusters_by_id.setdefault(cluster.id, cluster)

    removed: List[Tuple[TakeCluster, Segment]] = []
    for selection in cluster_selections:
        cluster = clusters_by_id.get(selection.cluster_id)
        if cluster is None:
            continue
        for removed_id in selection.removed_segments:
            attempt = cluster.find_attempt(removed_id)
            if attempt is not None:
                removed.append((cluster, attempt))

    visible = []
    hidden = []

    for segment in segments:
        cover = next(
            ((cluster, attempt) for cluster, attempt in removed if segment.overlaps(attempt)),
            None,
        )
        if cover is None:
            visible.append(segment)
            continue

        cluster, attempt = cover
        hidden.append(OverlapInfo(
            segment_id=segment.id,
            covered_by=CoverRef(
                type="cluster",
                id=cluster.id,
                name=cluster.name,
                time_range=attempt.interval,
            ),
            reason=f'Covered by cluster "{cluster.name}" - {attempt.reason}',
        ))

    logger.info(f"Cluster overlap check: {len(segments)} -> {len(visible)} visible segments")
    return visible, hidden


def _longest_first(segment: Segment):
    # NaN never compares, so unparseable segments are ranked after all others
    if not (math.isfinite(segment.span) and math.isfinite(segment.start)):
        return (1, 0.0, 0.0)
    return (0, -segment.span, segment.start)


def resolve_segment_overlaps(
    segments: List[Segment],
) -> Tuple[List[Segment], List[OverlapInfo]]:
    """
    Keep the longest segments and suppress the ones they overlap.

    Uses greedy selection: sort by length descending (ties by earlier start),
    keep a segment if it does not overlap any kept segment. Every input ends
    up in exactly one of the two lists.

    Returns (primary, secondary).
    """
    if not segments:
        return [], []

    ordered = sorted(segments, key=_longest_first)

    primary: List[Segment] = []
    secondary: List[OverlapInfo] = []

    for segment in ordered:
        covering = next((kept for kept in primary if segment.overlaps(kept)), None)

        if covering is None:
            primary.append(segment)
            continue

        secondary.append(OverlapInfo(
            segment_id=segment.id,
            covered_by=CoverRef(
                type="segment",
                id=covering.id,
                name=covering.category,
                time_range=covering.interval,
            ),
            reason=f"Overlapped by longer segment: {covering.reason}",
        ))

    logger.info(f"Segment overlap resolution: {len(segments)} -> {len(primary)} primary segments")
    return primary, secondary
