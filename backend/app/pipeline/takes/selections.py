"""User decisions on take clusters.

A selection says which interval of a cluster survives: the synthesized gap
after the attempts (``"gap"``) or one specific attempt by index.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Union

from .clusters import TakeCluster
from .segments import Segment

logger = logging.getLogger(__name__)

GAP_WINNER = "gap"

WinnerChoice = Union[str, int]


@dataclass
class ClusterSelection:
    """Which attempts of a cluster to cut and which to keep."""
    cluster_id: str
    selected_winner: WinnerChoice
    removed_segments: List[str] = field(default_factory=list)
    kept_segments: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ClusterSelection":
        return cls(
            cluster_id=data["clusterId"],
            selected_winner=data.get("selectedWinner", GAP_WINNER),
            removed_segments=list(data.get("removedSegments", [])),
            kept_segments=list(data.get("keptSegments", [])),
        )

    def to_dict(self) -> dict:
        return {
            "clusterId": self.cluster_id,
            "selectedWinner": self.selected_winner,
            "removedSegments": list(self.removed_segments),
            "keptSegments": list(self.kept_segments),
        }


@dataclass
class SelectionResult:
    """Partition of segments after applying cluster selections."""
    visible: List[Segment]
    removed: List[Segment]
    kept: List[Segment]


def default_selections(clusters: List[TakeCluster]) -> List[ClusterSelection]:
    """Initial selections: prefer the gap winner and cut every attempt."""
    return [
        ClusterSelection(
            cluster_id=cluster.id,
            selected_winner=GAP_WINNER if cluster.winner else 0,
            removed_segments=cluster.attempt_ids(),
            kept_segments=[],
        )
        for cluster in clusters
    ]


def select_winner(cluster: TakeCluster, winner: WinnerChoice) -> ClusterSelection:
    """
    Build the selection for a user's winner choice.

    ``"gap"`` cuts every attempt; an attempt index keeps that attempt and cuts
    the rest.

    Raises:
        ValueError: If the choice is neither "gap" nor a valid attempt index
    """
    if winner == GAP_WINNER:
        return ClusterSelection(
            cluster_id=cluster.id,
            selected_winner=GAP_WINNER,
            removed_segments=cluster.attempt_ids(),
            kept_segments=[],
        )

    if isinstance(winner, bool) or not isinstance(winner, int):
        raise ValueError(f"Invalid winner {winner!r}: expected 'gap' or an attempt index")
    if not 0 <= winner < len(cluster.attempts):
        raise ValueError(
            f"Attempt index {winner} out of range for cluster {cluster.id} "
            f"({len(cluster.attempts)} attempts)"
        )

    kept = cluster.attempts[winner]
    return ClusterSelection(
        cluster_id=cluster.id,
        selected_winner=winner,
        removed_segments=[a.id for a in cluster.attempts if a.id != kept.id],
        kept_segments=[kept.id],
    )


def update_selection(
    selections: List[ClusterSelection],
    selection: ClusterSelection,
) -> List[ClusterSelection]:
    """Return a new list with the selection for the same cluster replaced."""
    updated = [s for s in selections if s.cluster_id != selection.cluster_id]
    updated.append(selection)
    return updated


def apply_cluster_selections(
    segments: List[Segment],
    selections: List[ClusterSelection],
) -> SelectionResult:
    """
    Partition segments by the user's cluster decisions.

    Kept ids win over removed ids, so a segment that is both an attempt the
    user chose in one cluster and a removed attempt in another is preserved.
    """
    kept_ids = set()
    removed_ids = set()
    for selection in selections:
        kept_ids.update(selection.kept_segments)
        removed_ids.update(selection.removed_segments)

    visible, removed, kept = [], [], []
    for segment in segments:
        if segment.id in kept_ids:
            kept.append(segment)
        elif segment.id in removed_ids:
            removed.append(segment)
        else:
            visible.append(segment)

    logger.info(
        f"Cluster selections: {len(removed)} removed, {len(kept)} kept, "
        f"{len(visible)} left for review"
    )
    return SelectionResult(visible=visible, removed=removed, kept=kept)
