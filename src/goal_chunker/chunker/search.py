"""Search for chunk boundaries over a sequence of splits.

Three pieces cooperate here:

- estimate_average_range_min: a cheap prefilter that rejects a tier whose
  splits cannot fit under the hard maximum and estimates how far ahead the
  endpoint scan may skip
- EndpointSearch: for a start offset, the memoised list of end offsets whose
  token length falls in the goal band
- ChunkPathFinder: depth-first search over those offsets for a path from
  offset 0 to the last split

The first complete path found wins. Candidates are visited in ascending
order, so results are deterministic but not globally optimal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from goal_chunker.chunker.thresholds import ChunkThresholds
from goal_chunker.chunker.token_counting import Tokenizer

logger = logging.getLogger(__name__)


def estimate_average_range_min(
    split_token_counts: Sequence[int],
    total_tokens: int,
    thresholds: ChunkThresholds,
) -> int | None:
    """Prefilter a tier and estimate the endpoint scan's skip-ahead distance.

    Args:
        split_token_counts: Token count of every split in the tier
        total_tokens: Token count of the whole text
        thresholds: Thresholds for the current attempt

    Returns:
        Number of splits the endpoint scan may skip, or None if the tier
        cannot produce a valid chunking at this goal length
    """
    for split_tokens in split_token_counts:
        if split_tokens > thresholds.max_length:
            return None

    num_splits = len(split_token_counts)
    estimated_chunks = max(2, total_tokens // thresholds.goal_length)
    estimated_splits_per_chunk = num_splits // estimated_chunks

    if num_splits < estimated_splits_per_chunk:
        return None

    return estimated_splits_per_chunk // 2


class EndpointSearch:
    """Memoised search for valid chunk end offsets.

    The memo is only valid for the thresholds the search was built with;
    build a new EndpointSearch whenever the goal length changes.

    Attributes:
        splits: Split sequence being chunked
        thresholds: Thresholds for this attempt
        tokenizer: Token counter
        average_range_min: Splits skipped before the scan starts measuring
        memo: start offset -> valid end offsets (possibly empty)
    """

    def __init__(
        self,
        splits: Sequence[str],
        thresholds: ChunkThresholds,
        tokenizer: Tokenizer,
        average_range_min: int = 0,
    ) -> None:
        self.splits = splits
        self.thresholds = thresholds
        self.tokenizer = tokenizer
        self.average_range_min = average_range_min
        self.memo: dict[int, list[int]] = {}

    def valid_ends(self, start: int) -> list[int] | None:
        """Return the end offsets that make a valid chunk starting at `start`.

        The chunk measured for end offset j is ``splits[start:j]``. Token
        length grows with j, so the scan stops at the first end that exceeds
        the upper bound. With overlap enabled, the overlap budget is
        reserved from both edges of the band.

        Args:
            start: Start offset into the split sequence

        Returns:
            Ascending end offsets, or None if there are none
        """
        if start in self.memo:
            cached = self.memo[start]
            return list(cached) if cached else None

        thresholds = self.thresholds
        if thresholds.overlap_enabled:
            lower = thresholds.goal_min - thresholds.overlap_max
            upper = thresholds.max_length - thresholds.overlap_max
        else:
            lower = 0
            upper = thresholds.max_length

        valid_ends: list[int] = []
        for end in range(start + 1 + self.average_range_min, len(self.splits)):
            current_length = self.tokenizer.count_tokens("".join(self.splits[start:end]))
            if current_length > upper:
                break
            if current_length >= lower:
                valid_ends.append(end)

        self.memo[start] = valid_ends
        return list(valid_ends) if valid_ends else None


class ChunkPathFinder:
    """Depth-first search for a chain of chunk boundaries covering every split.

    Equivalent to the recursive formulation

        find(start):
            ends = valid_ends(start) or fail
            if last in ends: return [last]
            for end in ends (ascending, end != start):
                if (rest := find(end)): return [end, *rest]
            fail

    but driven by an explicit stack so long documents cannot hit the
    interpreter's recursion limit. Starts that failed once are remembered
    and not searched again.
    """

    def __init__(self, search: EndpointSearch) -> None:
        self.search = search
        self._dead_ends: set[int] = set()

    @property
    def last_index(self) -> int:
        return len(self.search.splits) - 1

    def _candidates(self, start: int) -> list[int] | None:
        if start in self._dead_ends:
            return None
        return self.search.valid_ends(start)

    def find(self, start: int = 0) -> list[int] | None:
        """Find the first path of boundary offsets from `start` to the last split.

        Args:
            start: Offset the first chunk starts at

        Returns:
            Boundary offsets (excluding `start`) ending with the last split
            index, or None if no path exists
        """
        last = self.last_index
        trail: list[int] = []
        frames: list[tuple[int, Iterator[int]]] = []
        node = start

        while True:
            ends = self._candidates(node)
            if ends is not None:
                if ends[-1] == last:
                    return [*trail, last]
                # `end == node` cannot be a boundary; skipping it keeps the search moving
                frames.append((node, iter([end for end in ends if end != node])))
            else:
                self._dead_ends.add(node)
                if trail:
                    trail.pop()

            child: int | None = None
            while frames:
                frame_node, candidates = frames[-1]
                child = next(candidates, None)
                if child is not None:
                    break
                frames.pop()
                self._dead_ends.add(frame_node)
                if trail:
                    trail.pop()

            if child is None:
                return None
            trail.append(child)
            node = child


def find_valid_chunk_combinations(search: EndpointSearch) -> list[int] | None:
    """Run the path finder from offset 0 and require at least two chunks.

    Args:
        search: Endpoint search for the current attempt

    Returns:
        Boundary offsets with at least two entries, or None
    """
    path = ChunkPathFinder(search).find(0)
    if path is None or len(path) < 2:
        logger.debug(f"No multi-chunk path at goal length {search.thresholds.goal_length}")
        return None
    return path
