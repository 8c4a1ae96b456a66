"""Exceptions raised by the chunker."""

from __future__ import annotations


class NoValidChunkingError(ValueError):
    """Raised when no separator tier and goal-length decay step produced a chunking.

    Callers should relax the goal length or overlap percentage, or reject
    the input. No partial result is returned.
    """

    def __init__(self, goal_length: int, overlap_percent: int | None) -> None:
        self.goal_length = goal_length
        self.overlap_percent = overlap_percent
        overlap = f"{overlap_percent}%" if overlap_percent is not None else "disabled"
        super().__init__(
            f"No valid chunking found for goal length {goal_length} (overlap {overlap})"
        )


class OverlapUnattainableError(Exception):
    """Raised when an overlap span cannot be built within its token band.

    Only used inside the chunker: the driver loop catches it and retries
    with a smaller goal length.
    """

    pass
