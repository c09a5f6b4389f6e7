"""Debug artifact generation for the take pipeline.

Writes a JSON file explaining every clustering and overlap decision.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from .config import ClusteringConfig
from .runner import EditPlan
from .segments import Segment

logger = logging.getLogger(__name__)


def build_debug_data(
    segments: List[Segment],
    plan: EditPlan,
    config: ClusteringConfig,
) -> dict:
    cut_ids = {cut.id for cut in plan.cuts}
    merged_into = {absorbed: cut_id for cut_id, ids in plan.merged.items() for absorbed in ids}
    strategies = {}
    for cluster in plan.clusters:
        strategy = cluster.id.rsplit("-", 1)[0]
        strategies[strategy] = strategies.get(strategy, 0) + 1

    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "pipeline_version": "takes",

        # Configuration
        "config": config.to_dict(),

        # Input summary
        "input_summary": {
            "segment_count": len(segments),
            "categories": sorted({s.category for s in segments}),
        },

        # Clusters per strategy
        "clusters_by_strategy": strategies,

        # Per-segment outcome
        "segment_outcomes": [
            {
                "id": s.id,
                "start": s.start,
                "end": s.end,
                "category": s.category,
                "cut": s.id in cut_ids or s.id in merged_into,
                "merged_into": merged_into.get(s.id),
                "cluster_ids": [c.id for c in plan.clusters if c.find_attempt(s.id) is not None],
            }
            for s in segments
        ],

        "plan": plan.to_dict(),
    }


def write_debug_json(
    output_path: Path,
    segments: List[Segment],
    plan: EditPlan,
    config: ClusteringConfig,
):
    """Write comprehensive debug JSON file."""
    debug_data = build_debug_data(segments, plan, config)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(debug_data, f, indent=2, default=str)

    logger.info(f"Debug JSON written to {output_path}")
