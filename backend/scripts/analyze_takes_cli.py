#!/usr/bin/env python3
"""
CLI tool to run the take pipeline on a JSON file of flagged segments.

Usage:
    python scripts/analyze_takes_cli.py <segments.json> [--output-dir <dir>] [--duration <sec>]

The input is either a JSON list of segments or an object with a "segments"
key (the analyzer's response format).

Example:
    python scripts/analyze_takes_cli.py ./analysis.json --duration 612.4 --debug
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.pipeline.takes import FilterState, plan_edit
from app.pipeline.takes.config import ClusteringConfig, RefinementConfig
from app.pipeline.takes.debug_artifacts import write_debug_json
from app.pipeline.takes.segments import segments_from_dicts
from app.pipeline.takes.timecode import format_time


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


def load_segments(input_path: Path):
    """Read segments from an analyzer JSON file."""
    if not input_path.exists():
        raise FileNotFoundError(f"Segments file not found: {input_path}")

    with open(input_path) as f:
        data = json.load(f)

    items = data.get("segments", []) if isinstance(data, dict) else data
    return segments_from_dicts(items)


def analyze_segments(
    input_path: Path,
    output_dir: Path,
    video_duration: float = None,
    min_confidence: float = None,
    no_aggressive: bool = False,
    refine: bool = False,
    debug: bool = False,
) -> Path:
    """
    Plan an edit for a segments file and write the result.

    Returns the path of the written plan.
    """
    segments = load_segments(input_path)
    logger.info(f"Loaded {len(segments)} segments from {input_path}")

    output_dir.mkdir(parents=True, exist_ok=True)

    config = ClusteringConfig(aggressive_enabled=not no_aggressive)
    filter_state = None
    if min_confidence is not None:
        filter_state = FilterState(min_confidence=min_confidence)

    plan = plan_edit(
        segments,
        filter_state=filter_state,
        video_duration=video_duration,
        config=config,
        refinement=RefinementConfig() if refine else None,
    )

    output_file = output_dir / "takes_plan.json"
    with open(output_file, 'w') as f:
        json.dump({
            "input_path": str(input_path),
            **plan.to_dict(),
        }, f, indent=2)

    logger.info(f"Plan written to: {output_file}")

    if debug:
        write_debug_json(output_dir / "debug" / "takes_debug.json", segments, plan, config)

    logger.info(f"Found {len(plan.clusters)} clusters:")
    for cluster in plan.clusters:
        logger.info(
            f"  {cluster.id}: {cluster.name} "
            f"({len(cluster.attempts)} attempts, {cluster.pattern}, "
            f"confidence {cluster.confidence:.2f})"
        )

    logger.info(f"{len(plan.cuts)} cuts, {plan.time_removed:.1f}s removed")
    for cut in plan.cuts:
        logger.info(f"  {format_time(cut.start)} - {format_time(cut.end)} [{cut.category}] {cut.reason}")

    return output_file


def main():
    parser = argparse.ArgumentParser(
        description="Cluster retakes and plan the cut list for flagged segments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Plan with default cluster selections
    python scripts/analyze_takes_cli.py analysis.json

    # Include keep ranges and only cut confident segments
    python scripts/analyze_takes_cli.py analysis.json --duration 612.4 --min-confidence 0.8

    # Smooth the cut list before rendering
    python scripts/analyze_takes_cli.py analysis.json --refine

    # Write debug JSON next to the plan
    python scripts/analyze_takes_cli.py analysis.json --output-dir ./out --debug
        """
    )

    parser.add_argument(
        "input_path",
        type=Path,
        help="Path to JSON file with flagged segments"
    )

    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Output directory (default: ./takecut_output)"
    )

    parser.add_argument(
        "--duration", "-d",
        type=float,
        default=None,
        help="Video duration in seconds (enables keep ranges)"
    )

    parser.add_argument(
        "--min-confidence",
        type=float,
        default=None,
        help="Apply review filters with this minimum confidence"
    )

    parser.add_argument(
        "--no-aggressive",
        action="store_true",
        help="Disable the aggressive fallback clustering"
    )

    parser.add_argument(
        "--refine",
        action="store_true",
        help="Merge cuts less than 0.5s apart and pad cuts with 0.15s buffers"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write debug JSON with per-segment decisions"
    )

    args = parser.parse_args()

    # Default output directory
    if args.output_dir is None:
        args.output_dir = Path("./takecut_output")

    # Run
    try:
        analyze_segments(
            input_path=args.input_path,
            output_dir=args.output_dir,
            video_duration=args.duration,
            min_confidence=args.min_confidence,
            no_aggressive=args.no_aggressive,
            refine=args.refine,
            debug=args.debug,
        )
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {args.input_path}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
