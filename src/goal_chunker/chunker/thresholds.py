"""Token-count thresholds derived from a goal length and overlap percentage.

All bounds are integer token counts and are recomputed whenever the goal
length changes (every decay step builds a new ChunkThresholds).
"""

from __future__ import annotations

from dataclasses import dataclass

# Width of the tolerance band around the goal and overlap lengths
THRESHOLD_MODIFIER = 0.10
# Hard cap relative to the goal length
MAX_LENGTH_FACTOR = 1.25
# Fraction removed from the goal length per retry
DECAY_STEP = 0.02
# Retries stop once goal/original drops to this ratio
MIN_GOAL_RATIO = 0.70

DEFAULT_OVERLAP_PERCENT = 10
MIN_OVERLAP_PERCENT = 10
MAX_OVERLAP_PERCENT = 100


def normalize_overlap_percent(overlap_percent: int | None) -> int:
    """Return the overlap percentage to use.

    Unset or out-of-range values (outside 10..100) fall back to the default
    of 10 percent.

    Examples:
        >>> normalize_overlap_percent(None)
        10
        >>> normalize_overlap_percent(35)
        35
        >>> normalize_overlap_percent(200)
        10
    """
    if overlap_percent is None:
        return DEFAULT_OVERLAP_PERCENT
    if not MIN_OVERLAP_PERCENT <= overlap_percent <= MAX_OVERLAP_PERCENT:
        return DEFAULT_OVERLAP_PERCENT
    return overlap_percent


def decay_goal_length(goal_length: int) -> int:
    """Shrink the goal length by one decay step (always by at least 1 token)."""
    return goal_length - max(1, int(DECAY_STEP * goal_length))


@dataclass(frozen=True)
class ChunkThresholds:
    """Interval bounds for one goal-length attempt.

    Attributes:
        goal_length: Target tokens per chunk for this attempt
        max_length: Hard maximum tokens per chunk
        goal_min: Lower edge of the goal band
        goal_max: Upper edge of the goal band
        overlap_percent: Overlap as a percentage of the goal (None disables overlap)
        overlap: Target overlap tokens (0 when disabled)
        overlap_min: Lower edge of the overlap band
        overlap_max: Upper edge of the overlap band
    """

    goal_length: int
    max_length: int
    goal_min: int
    goal_max: int
    overlap_percent: int | None = None
    overlap: int = 0
    overlap_min: int = 0
    overlap_max: int = 0

    @property
    def overlap_enabled(self) -> bool:
        return self.overlap_percent is not None

    @classmethod
    def for_goal(cls, goal_length: int, overlap_percent: int | None) -> ChunkThresholds:
        """Compute thresholds for a goal length.

        Args:
            goal_length: Target tokens per chunk (positive)
            overlap_percent: Already-normalised overlap percentage, or None
                to disable overlap

        Returns:
            ChunkThresholds for this attempt
        """
        band = int(THRESHOLD_MODIFIER * goal_length)
        if overlap_percent is None:
            return cls(
                goal_length=goal_length,
                max_length=int(goal_length * MAX_LENGTH_FACTOR),
                goal_min=goal_length - band,
                goal_max=goal_length + band,
            )

        overlap = goal_length * overlap_percent // 100
        overlap_band = int(THRESHOLD_MODIFIER * overlap)
        return cls(
            goal_length=goal_length,
            max_length=int(goal_length * MAX_LENGTH_FACTOR),
            goal_min=goal_length - band,
            goal_max=goal_length + band,
            overlap_percent=overlap_percent,
            overlap=overlap,
            overlap_min=overlap - overlap_band,
            overlap_max=overlap + overlap_band,
        )
