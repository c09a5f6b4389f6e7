"""Pydantic schemas for API requests and responses.

Field names are snake_case in Python and camelCase on the wire, matching the
analyzer output and the frontend.
"""
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.pipeline.takes import ClusterSelection, FilterState, Segment


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Segment Schemas
# =============================================================================

class SegmentSchema(CamelModel):
    """A flagged segment as produced by the video analyzer."""
    id: str
    start_time: Union[str, float] = Field(..., description="MM:SS.mmm, HH:MM:SS.mmm or seconds")
    end_time: Union[str, float] = Field(..., description="MM:SS.mmm, HH:MM:SS.mmm or seconds")
    duration: Optional[float] = Field(None, description="Seconds (derived from the times if missing)")
    category: str = ""
    confidence: float = 0.0
    reason: str = ""
    transcript: Optional[str] = None
    severity: Optional[str] = None
    selected: bool = True

    def to_segment(self) -> Segment:
        return Segment.from_dict(self.model_dump(by_alias=True))


class TimeRangeSchema(BaseModel):
    """Time range in MM:SS.ss form."""
    start: str
    end: str


class WinnerSchema(CamelModel):
    start_time: str
    end_time: str
    is_gap: bool
    confidence: float


class ClusterSchema(CamelModel):
    """Take cluster response."""
    id: str
    name: str
    attempts: List[SegmentSchema]
    winner: Optional[WinnerSchema] = None
    pattern: Literal["repeated_intro", "multiple_takes", "practice_run", "retake"]
    confidence: float
    time_range: TimeRangeSchema


class ClusterSelectionSchema(CamelModel):
    """User decision for one cluster."""
    cluster_id: str
    selected_winner: Union[Literal["gap"], int] = "gap"
    removed_segments: List[str] = Field(default_factory=list)
    kept_segments: List[str] = Field(default_factory=list)

    def to_selection(self) -> ClusterSelection:
        return ClusterSelection(
            cluster_id=self.cluster_id,
            selected_winner=self.selected_winner,
            removed_segments=list(self.removed_segments),
            kept_segments=list(self.kept_segments),
        )


class CoverRefSchema(CamelModel):
    type: Literal["cluster", "silence", "segment"]
    id: str
    name: Optional[str] = None
    time_range: TimeRangeSchema


class OverlapInfoSchema(CamelModel):
    """Why a segment was hidden."""
    segment_id: str
    covered_by: CoverRefSchema
    reason: str
    resolution: Optional[Literal["keep_cluster", "remove_silence", "user_decision"]] = None


class FilterStateSchema(CamelModel):
    """Review filters for segments outside clusters."""
    categories: Optional[Dict[str, bool]] = None
    show_only_high_severity: Optional[bool] = None
    min_confidence: Optional[float] = Field(None, ge=0, le=1)

    def to_filter_state(self) -> FilterState:
        state = FilterState()
        if self.categories is not None:
            state.categories.update(self.categories)
        if self.show_only_high_severity is not None:
            state.show_only_high_severity = self.show_only_high_severity
        if self.min_confidence is not None:
            state.min_confidence = self.min_confidence
        return state


# =============================================================================
# Requests
# =============================================================================

class SegmentsRequest(CamelModel):
    """Request carrying flagged segments."""
    segments: List[SegmentSchema]


class SelectWinnerRequest(CamelModel):
    """Request to choose a cluster's winner."""
    segments: List[SegmentSchema]
    winner: Union[Literal["gap"], int] = Field(..., description="'gap' or attempt index")


class OverlapsRequest(CamelModel):
    """Request to hide segments covered by cluster selections."""
    segments: List[SegmentSchema]
    selections: List[ClusterSelectionSchema] = Field(default_factory=list)


class EditPlanRequest(CamelModel):
    """Request to plan the final cut list."""
    segments: List[SegmentSchema]
    selections: Optional[List[ClusterSelectionSchema]] = None
    filters: Optional[FilterStateSchema] = None
    video_duration: Optional[float] = Field(None, gt=0)
    refine: Optional[bool] = Field(None, description="Merge adjacent cuts and add transition buffers")


# =============================================================================
# Responses
# =============================================================================

class DetectClustersResponse(CamelModel):
    clusters: List[ClusterSchema]
    selections: List[ClusterSelectionSchema]


class ResolveOverlapsResponse(CamelModel):
    primary: List[SegmentSchema]
    secondary: List[OverlapInfoSchema]


class FindOverlapsResponse(CamelModel):
    visible: List[SegmentSchema]
    hidden: List[OverlapInfoSchema]


class EditSummarySchema(CamelModel):
    original_duration: Optional[float] = None
    time_removed: float
    final_duration: Optional[float] = None
    segment_count: int
    cluster_count: int


class CutValidationSchema(CamelModel):
    valid: bool
    errors: List[str]
    warnings: List[str]


class EditPlanResponse(CamelModel):
    clusters: List[ClusterSchema]
    selections: List[ClusterSelectionSchema]
    cuts: List[SegmentSchema]
    hidden: List[OverlapInfoSchema]
    kept: List[SegmentSchema]
    keep_ranges: List[TimeRangeSchema]
    merged: Dict[str, List[str]] = Field(default_factory=dict)
    validation: Optional[CutValidationSchema] = None
    summary: EditSummarySchema


# =============================================================================
# Health Check
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
