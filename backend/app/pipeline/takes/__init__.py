# Take pipeline - retake clustering and cut-list overlap resolution
"""
Take Pipeline: Retake Clustering and Overlap Resolution

Takes the segments an external analyzer flagged for removal (pauses, filler
words, false starts, bad takes, ...) and prepares a conflict-free cut list.

Pipeline stages:
1. Cluster Detection: Group repeated attempts at the same content
2. Cluster Selection: Apply the user's winner choice per cluster
3. Overlap Hiding: Hide segments covered by removed attempts
4. Review Filters: Category, severity and confidence filters
5. Overlap Resolution: Keep longest segments, drop the ones they cover
6. Refinement (optional): Merge adjacent cuts, add transition buffers, validate

All stages are pure functions over in-memory segments (no I/O).
"""

__version__ = "1.0.0"

from .clusters import TakeCluster, Winner, detect_clusters
from .overlaps import OverlapInfo, find_overlapping_segments, resolve_segment_overlaps
from .refinement import CutValidation, refine_cuts, validate_cuts
from .runner import EditPlan, plan_edit
from .segments import FilterState, Interval, Segment, SegmentCategory, apply_filters
from .selections import (
    ClusterSelection,
    apply_cluster_selections,
    default_selections,
    select_winner,
    update_selection,
)
from .timecode import format_time, parse_time

__all__ = [
    "TakeCluster",
    "Winner",
    "detect_clusters",
    "OverlapInfo",
    "find_overlapping_segments",
    "resolve_segment_overlaps",
    "CutValidation",
    "refine_cuts",
    "validate_cuts",
    "EditPlan",
    "plan_edit",
    "FilterState",
    "Interval",
    "Segment",
    "SegmentCategory",
    "apply_filters",
    "ClusterSelection",
    "apply_cluster_selections",
    "default_selections",
    "select_winner",
    "update_selection",
    "format_time",
    "parse_time",
    "__version__",
]
