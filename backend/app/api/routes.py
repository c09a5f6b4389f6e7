"""API routes."""
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException

from app.config import settings
from app.pipeline.takes import (
    Segment,
    __version__ as pipeline_version,
    default_selections,
    detect_clusters,
    find_overlapping_segments,
    plan_edit,
    resolve_segment_overlaps,
    select_winner,
)
from app.pipeline.takes.config import ClusteringConfig, RefinementConfig
from app.api.schemas import (
    ClusterSelectionSchema,
    DetectClustersResponse,
    EditPlanRequest,
    EditPlanResponse,
    FindOverlapsResponse,
    HealthResponse,
    OverlapsRequest,
    ResolveOverlapsResponse,
    SegmentSchema,
    SegmentsRequest,
    SelectWinnerRequest,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_clustering_config() -> ClusteringConfig:
    """Clustering thresholds with settings overrides applied."""
    return ClusteringConfig(aggressive_enabled=settings.aggressive_fallback_enabled)


def get_refinement_config(refine: Optional[bool] = None) -> Optional[RefinementConfig]:
    """Refinement settings, or None when refinement is off."""
    if refine is None:
        refine = settings.refine_cuts
    if not refine:
        return None
    return RefinementConfig(
        merge_threshold_sec=settings.merge_threshold_sec,
        buffer_sec=settings.transition_buffer_sec,
    )


def _to_segments(items: List[SegmentSchema]) -> List[Segment]:
    return [item.to_segment() for item in items]


# =============================================================================
# Health & System
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health."""
    return HealthResponse(status="healthy", version=pipeline_version)


# =============================================================================
# Clusters
# =============================================================================

@router.post("/clusters/detect", response_model=DetectClustersResponse)
async def detect_take_clusters(request: SegmentsRequest):
    """Detect take clusters and return default selections for them."""
    segments = _to_segments(request.segments)
    clusters = detect_clusters(segments, get_clustering_config())

    return {
        "clusters": [c.to_dict() for c in clusters],
        "selections": [s.to_dict() for s in default_selections(clusters)],
    }


@router.post("/clusters/{cluster_id}/select", response_model=ClusterSelectionSchema)
async def select_cluster_winner(cluster_id: str, request: SelectWinnerRequest):
    """
    Build the selection for a winner choice.

    Clusters are re-detected from the segments; detection is deterministic so
    ids match the ones returned by /clusters/detect.
    """
    segments = _to_segments(request.segments)
    clusters = detect_clusters(segments, get_clustering_config())

    cluster = next((c for c in clusters if c.id == cluster_id), None)
    if cluster is None:
        raise HTTPException(status_code=404, detail=f"Cluster not found: {cluster_id}")

    try:
        selection = select_winner(cluster, request.winner)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return selection.to_dict()


# =============================================================================
# Overlaps
# =============================================================================

@router.post("/segments/resolve", response_model=ResolveOverlapsResponse)
async def resolve_overlaps(request: SegmentsRequest):
    """Split segments into non-overlapping primary ones and covered secondary ones."""
    primary, secondary = resolve_segment_overlaps(_to_segments(request.segments))

    return {
        "primary": [s.to_dict() for s in primary],
        "secondary": [o.to_dict() for o in secondary],
    }


@router.post("/segments/overlaps", response_model=FindOverlapsResponse)
async def find_overlaps(request: OverlapsRequest):
    """Hide segments covered by attempts removed through cluster selections."""
    segments = _to_segments(request.segments)
    clusters = detect_clusters(segments, get_clustering_config())
    selections = [s.to_selection() for s in request.selections]

    visible, hidden = find_overlapping_segments(segments, selections, clusters)

    return {
        "visible": [s.to_dict() for s in visible],
        "hidden": [o.to_dict() for o in hidden],
    }


# =============================================================================
# Edit Plan
# =============================================================================

@router.post("/edit/plan", response_model=EditPlanResponse)
async def create_edit_plan(request: EditPlanRequest):
    """Plan the final, non-overlapping cut list for rendering."""
    segments = _to_segments(request.segments)
    selections = None
    if request.selections is not None:
        selections = [s.to_selection() for s in request.selections]
    filter_state = request.filters.to_filter_state() if request.filters else None

    plan = plan_edit(
        segments,
        selections=selections,
        filter_state=filter_state,
        video_duration=request.video_duration,
        config=get_clustering_config(),
        refinement=get_refinement_config(request.refine),
    )

    logger.info(f"Planned edit: {len(plan.cuts)} cuts from {len(segments)} segments")
    return plan.to_dict()
