"""Take clustering configuration."""
from dataclasses import dataclass, field
from typing import Tuple


RETAKE_KEYWORDS: Tuple[str, ...] = (
    "restart",
    "try again",
    "false start",
    "multiple attempts",
    "retake",
    "start over",
    "take",
)


@dataclass
class ClusteringConfig:
    """Thresholds for take-cluster detection."""

    # Strategy 1: consecutive proximity
    consecutive_max_gap_sec: float = 10.0  # Exclusive upper bound, gap must also be > 0
    consecutive_winner_search_sec: float = 30.0  # Next segment must be this far past the cluster
    consecutive_confidence: float = 0.8

    # Strategy 2: retake patterns
    retake_max_gap_sec: float = 20.0  # Larger gap flushes the running cluster
    retake_short_pause_sec: float = 10.0  # Pauses shorter than this count as retakes
    retake_winner_fallback_sec: float = 15.0
    retake_winner_confidence: float = 0.9
    retake_keywords: Tuple[str, ...] = field(default_factory=lambda: RETAKE_KEYWORDS)

    # Strategy 3: content similarity
    similarity_window_sec: float = 60.0
    similarity_threshold: float = 0.4  # Combined score range is 0-1.8
    similarity_winner_sec: float = 20.0
    similarity_confidence: float = 0.85
    similarity_winner_confidence: float = 0.8

    # Strategy 4: aggressive fallback
    aggressive_enabled: bool = True
    aggressive_max_gap_sec: float = 5.0
    aggressive_winner_sec: float = 10.0
    aggressive_confidence: float = 0.7

    # Cluster scoring / naming
    consistency_bonus: float = 0.05
    consistency_min_attempts: int = 3
    multiple_takes_min_attempts: int = 4
    opening_window_sec: float = 60.0

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        return {
            "consecutive_max_gap_sec": self.consecutive_max_gap_sec,
            "consecutive_winner_search_sec": self.consecutive_winner_search_sec,
            "consecutive_confidence": self.consecutive_confidence,
            "retake_max_gap_sec": self.retake_max_gap_sec,
            "retake_short_pause_sec": self.retake_short_pause_sec,
            "retake_winner_fallback_sec": self.retake_winner_fallback_sec,
            "retake_winner_confidence": self.retake_winner_confidence,
            "retake_keywords": list(self.retake_keywords),
            "similarity_window_sec": self.similarity_window_sec,
            "similarity_threshold": self.similarity_threshold,
            "similarity_winner_sec": self.similarity_winner_sec,
            "similarity_confidence": self.similarity_confidence,
            "similarity_winner_confidence": self.similarity_winner_confidence,
            "aggressive_enabled": self.aggressive_enabled,
            "aggressive_max_gap_sec": self.aggressive_max_gap_sec,
            "aggressive_winner_sec": self.aggressive_winner_sec,
            "aggressive_confidence": self.aggressive_confidence,
            "consistency_bonus": self.consistency_bonus,
            "consistency_min_attempts": self.consistency_min_attempts,
            "multiple_takes_min_attempts": self.multiple_takes_min_attempts,
            "opening_window_sec": self.opening_window_sec,
        }


# Default configuration instance
DEFAULT_CLUSTERING_CONFIG = ClusteringConfig()


@dataclass
class RefinementConfig:
    """Post-processing of the final cut list."""

    # Join cuts separated by tiny gaps to avoid choppy edits
    merge_adjacent: bool = True
    merge_threshold_sec: float = 0.5  # Inclusive

    # Pad each cut so speech is not clipped (start clamped at 0)
    add_buffers: bool = True
    buffer_sec: float = 0.15

    # Validation
    min_cut_sec: float = 0.1  # Shorter cuts raise a warning

    def to_dict(self) -> dict:
        return {
            "merge_adjacent": self.merge_adjacent,
            "merge_threshold_sec": self.merge_threshold_sec,
            "add_buffers": self.add_buffers,
            "buffer_sec": self.buffer_sec,
            "min_cut_sec": self.min_cut_sec,
        }


DEFAULT_REFINEMENT_CONFIG = RefinementConfig()
