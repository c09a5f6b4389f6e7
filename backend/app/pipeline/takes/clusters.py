"""Take cluster detection.

Finds groups of flagged segments that look like repeated attempts at the
same content. Four independent strategies run over the time-sorted segments:

1. Consecutive proximity: segments separated by short gaps
2. Retake patterns: false starts, bad takes, retake keywords, short pauses
3. Content similarity: similar reason text, category and duration
4. Aggressive fallback: only when 1-3 found nothing

A segment may end up in clusters from several strategies; overlap is
resolved later, not here.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import ClusteringConfig, DEFAULT_CLUSTERING_CONFIG
from .segments import Interval, Segment, SegmentCategory
from .similarity import combined_similarity
from .timecode import format_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Winner:
    """The interval believed to hold the good take."""
    start: float
    end: float
    is_gap: bool
    confidence: float

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)

    def to_dict(self) -> dict:
        return {
            "startTime": format_time(self.start),
            "endTime": format_time(self.end),
            "isGap": self.is_gap,
            "confidence": self.confidence,
        }


@dataclass
class TakeCluster:
    """A group of failed or redundant attempts at the same content."""
    id: str
    name: str
    attempts: List[Segment]
    pattern: str
    confidence: float
    time_range: Interval
    winner: Optional[Winner] = None

    def attempt_ids(self) -> List[str]:
        return [a.id for a in self.attempts]

    def find_attempt(self, segment_id: str) -> Optional[Segment]:
        for attempt in self.attempts:
            if attempt.id == segment_id:
                return attempt
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "attempts": [a.to_dict() for a in self.attempts],
            "winner": self.winner.to_dict() if self.winner else None,
            "pattern": self.pattern,
            "confidence": self.confidence,
            "timeRange": self.time_range.to_dict(),
        }


# =============================================================================
# Naming and scoring
# =============================================================================

def _any_reason_contains(segments: List[Segment], keyword: str) -> bool:
    return any(keyword in s.reason.lower() for s in segments)


def infer_cluster_name(
    segments: List[Segment],
    config: ClusteringConfig = DEFAULT_CLUSTERING_CONFIG,
) -> str:
    """Guess a human label from the cluster position and reason text."""
    time_start = segments[0].start

    if time_start < config.opening_window_sec:
        return "Opening Statement"
    if _any_reason_contains(segments, "introduction"):
        return "Introduction"
    if _any_reason_contains(segments, "conclusion"):
        return "Closing Remarks"
    if _any_reason_contains(segments, "product"):
        return "Product Description"
    if _any_reason_contains(segments, "feature"):
        return "Feature Explanation"
    return f"Content Block ({format_time(time_start)})"


def determine_pattern(
    segments: List[Segment],
    config: ClusteringConfig = DEFAULT_CLUSTERING_CONFIG,
) -> str:
    if _any_reason_contains(segments, "introduction"):
        return "repeated_intro"
    if _any_reason_contains(segments, "practice"):
        return "practice_run"
    if len(segments) >= config.multiple_takes_min_attempts:
        return "multiple_takes"
    return "retake"


def calculate_cluster_confidence(
    segments: List[Segment],
    config: ClusteringConfig = DEFAULT_CLUSTERING_CONFIG,
) -> float:
    """Mean attempt confidence plus a small bonus for larger clusters, capped at 1."""
    if not segments:
        return 0.0
    avg_confidence = float(np.mean([s.confidence for s in segments]))
    bonus = config.consistency_bonus if len(segments) >= config.consistency_min_attempts else 0.0
    return min(avg_confidence + bonus, 1.0)


def is_retake(segment: Segment, config: ClusteringConfig = DEFAULT_CLUSTERING_CONFIG) -> bool:
    """Whether a single segment looks like part of a retake."""
    category = segment.normalized_category
    if category in (SegmentCategory.FALSE_START, SegmentCategory.BAD_TAKE):
        return True

    reason = segment.reason.lower()
    if any(keyword in reason for keyword in config.retake_keywords):
        return True

    # Short pauses often sit between attempts
    return category == SegmentCategory.PAUSE and segment.duration < config.retake_short_pause_sec


def _gap(previous: Segment, following: Segment) -> float:
    return following.start - previous.end


# =============================================================================
# Strategy 1: consecutive proximity
# =============================================================================

def detect_consecutive_takes(
    segments: List[Segment],
    config: ClusteringConfig = DEFAULT_CLUSTERING_CONFIG,
) -> List[TakeCluster]:
    """
    Chain directly-adjacent segments separated by short positive gaps.

    Expects segments sorted by start time. Groups of two or more become
    clusters whose winner is the stretch after the last attempt.
    """
    clusters = []
    group: List[Segment] = []

    def close_group(next_index: int):
        cluster_end = group[-1].end

        # The good take runs until the next flagged segment well past the cluster
        winner_end = cluster_end + config.consecutive_winner_search_sec
        for future in segments[next_index:]:
            if future.start - cluster_end > config.consecutive_winner_search_sec:
                winner_end = future.start
                break

        clusters.append(TakeCluster(
            id=f"cluster-consecutive-{len(clusters) + 1}",
            name=f"Multiple Takes ({format_time(group[0].start)})",
            attempts=list(group),
            pattern="multiple_takes",
            confidence=config.consecutive_confidence,
            time_range=Interval(group[0].start, winner_end),
            winner=Winner(
                start=cluster_end,
                end=winner_end,
                is_gap=True,
                confidence=config.consecutive_confidence,
            ),
        ))

    for i, segment in enumerate(segments):
        if i + 1 < len(segments):
            next_segment = segments[i + 1]
            gap = _gap(segment, next_segment)
            if 0 < gap < config.consecutive_max_gap_sec:
                if not group:
                    group.append(segment)
                group.append(next_segment)
                continue

        if len(group) >= 2:
            close_group(i + 1)
        group = []

    logger.debug(f"Consecutive strategy: {len(clusters)} clusters")
    return clusters


# =============================================================================
# Strategy 2: retake patterns
# =============================================================================

def detect_retake_patterns(
    segments: List[Segment],
    config: ClusteringConfig = DEFAULT_CLUSTERING_CONFIG,
) -> List[TakeCluster]:
    """
    Accumulate retake-like segments until a long gap, then emit a cluster.

    Segments that are not retakes are skipped without breaking the running
    cluster. Even a single retake is reported.
    """
    clusters = []
    current: List[Segment] = []

    def flush(winner_end: float):
        winner_start = current[-1].end
        clusters.append(TakeCluster(
            id=f"cluster-retake-{len(clusters) + 1}",
            name=infer_cluster_name(current, config),
            attempts=list(current),
            pattern=determine_pattern(current, config),
            confidence=calculate_cluster_confidence(current, config),
            time_range=Interval(current[0].start, winner_end),
            winner=Winner(
                start=winner_start,
                end=winner_end,
                is_gap=True,
                confidence=config.retake_winner_confidence,
            ),
        ))

    for i, segment in enumerate(segments):
        retake = is_retake(segment, config)
        logger.debug(
            f"Retake check {i}: category={segment.category!r}, "
            f"is_retake={retake}, reason={segment.reason[:30]!r}"
        )
        if not retake:
            continue

        current.append(segment)

        if i + 1 < len(segments):
            next_segment = segments[i + 1]
            if _gap(segment, next_segment) > config.retake_max_gap_sec:
                flush(next_segment.start)
                current = []

    if current:
        flush(current[-1].end + config.retake_winner_fallback_sec)

    logger.debug(f"Retake strategy: {len(clusters)} clusters")
    return clusters


# =============================================================================
# Strategy 3: content similarity
# =============================================================================

def detect_similarity_groups(
    segments: List[Segment],
    config: ClusteringConfig = DEFAULT_CLUSTERING_CONFIG,
) -> List[TakeCluster]:
    """
    Group segments whose reason, category and duration look alike.

    Each unused segment greedily absorbs later unused segments that start
    within the window after it ends and score above the threshold. First
    match wins; this is not a mutual-best-match grouping.
    """
    clusters = []
    used = [False] * len(segments)

    for i, anchor in enumerate(segments):
        if used[i]:
            continue
        used[i] = True
        similar = [anchor]

        for j in range(i + 1, len(segments)):
            if used[j]:
                continue
            candidate = segments[j]

            time_diff = abs(candidate.start - anchor.end)
            if not time_diff < config.similarity_window_sec:
                continue

            total = combined_similarity(anchor, candidate)
            logger.debug(f"Similarity check {i}-{j}: total={total:.2f}")

            if total > config.similarity_threshold:
                similar.append(candidate)
                used[j] = True

        if len(similar) >= 2:
            winner_start = similar[-1].end
            winner_end = winner_start + config.similarity_winner_sec
            clusters.append(TakeCluster(
                id=f"cluster-similar-{len(clusters) + 1}",
                name=f"Similar Content ({len(similar)} attempts)",
                attempts=similar,
                pattern="retake",
                confidence=config.similarity_confidence,
                time_range=Interval(similar[0].start, winner_end),
                winner=Winner(
                    start=winner_start,
                    end=winner_end,
                    is_gap=True,
                    confidence=config.similarity_winner_confidence,
                ),
            ))

    logger.debug(f"Similarity strategy: {len(clusters)} clusters")
    return clusters


# =============================================================================
# Strategy 4: aggressive fallback
# =============================================================================

def detect_aggressive_clusters(
    segments: List[Segment],
    config: ClusteringConfig = DEFAULT_CLUSTERING_CONFIG,
) -> List[TakeCluster]:
    """Pair up adjacent segments that nearly touch. Each segment is used once."""
    clusters = []
    i = 0

    while i < len(segments) - 1:
        first, second = segments[i], segments[i + 1]
        gap = _gap(first, second)

        if 0 <= gap < config.aggressive_max_gap_sec:
            winner_start = second.end
            winner_end = winner_start + config.aggressive_winner_sec
            clusters.append(TakeCluster(
                id=f"cluster-aggressive-{len(clusters) + 1}",
                name=f"Detected Takes ({format_time(first.start)})",
                attempts=[first, second],
                pattern="multiple_takes",
                confidence=config.aggressive_confidence,
                time_range=Interval(first.start, winner_end),
                winner=Winner(
                    start=winner_start,
                    end=winner_end,
                    is_gap=True,
                    confidence=config.aggressive_confidence,
                ),
            ))
            i += 2
            continue

        i += 1

    logger.debug(f"Aggressive strategy: {len(clusters)} clusters")
    return clusters


# =============================================================================
# Entry point
# =============================================================================

def _start_key(segment: Segment):
    if math.isnan(segment.start):
        return (1, 0.0)
    return (0, segment.start)


def sort_by_start(segments: List[Segment]) -> List[Segment]:
    """
    Stable sort by start time; equal starts keep their input order.

    Segments with an unparseable start go last, in input order.
    """
    return sorted(segments, key=_start_key)


def detect_clusters(
    segments: List[Segment],
    config: Optional[ClusteringConfig] = None,
) -> List[TakeCluster]:
    """
    Detect take clusters in a list of flagged segments (any order).

    Clusters are returned in strategy order: consecutive, retake, similarity,
    then aggressive only when the others found nothing.
    """
    config = config or DEFAULT_CLUSTERING_CONFIG
    ordered = sort_by_start(segments)

    logger.info(f"Detecting clusters in {len(ordered)} segments...")

    clusters: List[TakeCluster] = []
    clusters.extend(detect_consecutive_takes(ordered, config))
    clusters.extend(detect_retake_patterns(ordered, config))
    clusters.extend(detect_similarity_groups(ordered, config))

    if not clusters and len(ordered) >= 2 and config.aggressive_enabled:
        logger.info("No clusters found with standard strategies, trying aggressive detection...")
        clusters.extend(detect_aggressive_clusters(ordered, config))

    logger.info(f"Detected {len(clusters)} clusters")
    for cluster in clusters:
        logger.debug(
            f"  {cluster.id}: {cluster.name}, {len(cluster.attempts)} attempts, "
            f"pattern: {cluster.pattern}"
        )

    return clusters
