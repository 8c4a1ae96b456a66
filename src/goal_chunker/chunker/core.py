"""Goal-length text chunking.

This module contains the driver loop and chunk assembly. Boundary search
lives in search.py and overlap construction in overlap.py.

Design rationale:
- Token counts are the only length measure; characters are never counted
- Separator tiers are tried coarse to fine (paragraphs before lines before
  sentences, words, spaces and graphemes) because coarser cuts read better
- Within a tier the goal length decays 2% per retry until it reaches 70%
  of the requested goal, then the next finer tier is tried
- Adjacent chunks share overlap spans grown from real content on both
  sides of each cut
- Every retry signal (prefilter rejection, missing overlap, oversized
  chunk) is internal; only total exhaustion reaches the caller
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from goal_chunker.chunker.errors import NoValidChunkingError, OverlapUnattainableError
from goal_chunker.chunker.models import ChunkingResult
from goal_chunker.chunker.overlap import create_backward_overlap, create_forward_overlap
from goal_chunker.chunker.search import (
    EndpointSearch,
    estimate_average_range_min,
    find_valid_chunk_combinations,
)
from goal_chunker.chunker.separators import Separator
from goal_chunker.chunker.text_cleaning import TextCleaner, reduce_to_single_whitespace
from goal_chunker.chunker.thresholds import (
    MIN_GOAL_RATIO,
    ChunkThresholds,
    decay_goal_length,
    normalize_overlap_percent,
)
from goal_chunker.chunker.token_counting import Tokenizer, get_default_tokenizer

logger = logging.getLogger(__name__)


class DFSTextSplitter:
    """Split text into overlapping chunks close to a goal token length.

    Splits by paragraph, line, sentence, word, whitespace and finally
    grapheme. Boundaries are found by a depth-first search with memoised
    endpoint lookups and a prefilter that bounds the search breadth.

    The splitter keeps no per-call state, so one instance can be shared
    between threads as long as its tokenizer is thread-safe.

    Attributes:
        original_goal_length: Requested tokens per chunk
        overlap_percent: Normalised overlap percentage (None when disabled)
        tokenizer: Token counter
        separators: Tiers in the order they are tried
    """

    def __init__(
        self,
        goal_length: int,
        overlap_percent: int | None = None,
        tokenizer: Tokenizer | None = None,
        *,
        overlap: bool = True,
    ) -> None:
        if goal_length <= 0:
            raise ValueError("goal_length must be positive")
        self.original_goal_length = goal_length
        self.overlap_percent = normalize_overlap_percent(overlap_percent) if overlap else None
        self.tokenizer = tokenizer if tokenizer is not None else get_default_tokenizer()
        self.separators = Separator.all()

    def thresholds(self, goal_length: int | None = None) -> ChunkThresholds:
        """Thresholds for a goal length (the requested goal by default)."""
        if goal_length is None:
            goal_length = self.original_goal_length
        return ChunkThresholds.for_goal(goal_length, self.overlap_percent)

    def run(self, text: str) -> ChunkingResult:
        """Chunk text.

        Args:
            text: Raw text; it is whitespace-normalised before chunking

        Returns:
            ChunkingResult with the chunks and the tier/goal that produced them

        Raises:
            NoValidChunkingError: If no tier and decay step yields a chunking
        """
        text = TextCleaner().reduce_newlines_to_double_newline().run(text)
        total_tokens = self.tokenizer.count_tokens(text)

        # Skip if too small
        if total_tokens < self.thresholds().max_length:
            return ChunkingResult(
                chunks=[text],
                separator=None,
                goal_length=self.original_goal_length,
            )

        attempts = 0
        for separator in self.separators:
            splits = separator.split(text)
            if not splits:
                logger.debug(f"Separator {separator.value} produced no splits, skipping")
                continue

            split_token_counts = [self.tokenizer.count_tokens(split) for split in splits]
            goal_length = self.original_goal_length

            while goal_length / self.original_goal_length > MIN_GOAL_RATIO:
                attempts += 1
                thresholds = self.thresholds(goal_length)
                chunks = self._attempt(splits, split_token_counts, total_tokens, thresholds)
                if chunks is not None:
                    logger.debug(
                        f"Chunked {total_tokens} tokens into {len(chunks)} chunks "
                        f"(separator={separator.value}, goal={goal_length}, attempts={attempts})"
                    )
                    return ChunkingResult(
                        chunks=chunks,
                        separator=separator,
                        goal_length=goal_length,
                        attempts=attempts,
                    )
                goal_length = decay_goal_length(goal_length)

            logger.debug(f"Separator {separator.value} exhausted its goal-length decay")

        raise NoValidChunkingError(self.original_goal_length, self.overlap_percent)

    def _attempt(
        self,
        splits: Sequence[str],
        split_token_counts: Sequence[int],
        total_tokens: int,
        thresholds: ChunkThresholds,
    ) -> list[str] | None:
        """Try one goal length on one tier's splits."""
        average_range_min = estimate_average_range_min(
            split_token_counts, total_tokens, thresholds
        )
        if average_range_min is None:
            logger.debug(f"Prefilter rejected {len(splits)} splits at goal {thresholds.goal_length}")
            return None

        # A fresh search means a fresh memo for these thresholds
        search = EndpointSearch(splits, thresholds, self.tokenizer, average_range_min)
        chunk_end_splits = find_valid_chunk_combinations(search)
        if chunk_end_splits is None:
            return None

        try:
            return self._create_chunks(chunk_end_splits, splits, thresholds)
        except OverlapUnattainableError as e:
            logger.debug(f"Overlap unattainable at goal {thresholds.goal_length}: {e}")
            return None

    def _create_chunks(
        self,
        chunk_end_splits: Sequence[int],
        splits: Sequence[str],
        thresholds: ChunkThresholds,
    ) -> list[str] | None:
        """Join each path segment's splits and stitch in overlap text.

        Chunk i covers ``splits[boundaries[i]:boundaries[i + 1] + 1]``.

        Returns:
            Chunk texts, or None if a chunk is empty or exceeds max_length

        Raises:
            OverlapUnattainableError: If a required overlap side cannot be built
        """
        boundaries = list(chunk_end_splits)
        # So we start at the first split
        if boundaries[0] != 0:
            boundaries.insert(0, 0)

        chunks: list[str] = []
        for i in range(len(boundaries) - 1):
            core = " ".join(splits[boundaries[i] : boundaries[i + 1] + 1])
            if not core:
                return None

            if thresholds.overlap_enabled:
                core = self._stitch_overlap(core, i, boundaries, splits, thresholds)

            text_chunk = reduce_to_single_whitespace(core)
            token_count = self.tokenizer.count_tokens(text_chunk)
            if token_count > thresholds.max_length:
                logger.debug(
                    f"Chunk {i} has {token_count} tokens, above max {thresholds.max_length}"
                )
                return None

            chunks.append(text_chunk)

        return chunks

    def _stitch_overlap(
        self,
        core: str,
        index: int,
        boundaries: Sequence[int],
        splits: Sequence[str],
        thresholds: ChunkThresholds,
    ) -> str:
        start_split = boundaries[index]
        end_split = boundaries[index + 1]
        overlap_min = thresholds.overlap_min
        overlap_max = thresholds.overlap_max

        # First chunk: nothing precedes it
        if start_split == 0:
            forward = create_forward_overlap(
                splits, end_split, boundaries[index + 2], overlap_min, overlap_max, self.tokenizer
            )
            if forward is None:
                raise OverlapUnattainableError(f"no forward overlap after split {end_split}")
            return f"{core} {forward}"

        # Last chunk: nothing follows it
        if end_split + 1 == len(splits):
            backward = create_backward_overlap(
                splits, start_split, boundaries[index - 1], overlap_min, overlap_max, self.tokenizer
            )
            if backward is None:
                raise OverlapUnattainableError(f"no backward overlap before split {start_split}")
            return f"{backward} {core}"

        # Interior chunks split the overlap budget between both sides
        forward = create_forward_overlap(
            splits,
            end_split,
            boundaries[index + 2],
            overlap_min // 2,
            overlap_max // 2,
            self.tokenizer,
        )
        backward = create_backward_overlap(
            splits,
            start_split,
            boundaries[index - 1],
            overlap_min // 2,
            overlap_max // 2,
            self.tokenizer,
        )
        if forward is None or backward is None:
            raise OverlapUnattainableError(
                f"no two-sided overlap for chunk spanning splits {start_split}-{end_split}"
            )
        return f"{backward} {core} {forward}"


def chunk_text(
    text: str,
    goal_length_tokens: int,
    overlap_percent: int | None = None,
    *,
    tokenizer: Tokenizer | None = None,
    overlap: bool = True,
) -> list[str]:
    """Chunk text into overlapping pieces close to a goal token length.

    Args:
        text: Text to chunk
        goal_length_tokens: Target tokens per chunk (must be positive)
        overlap_percent: Overlap as a percentage of the goal; unset or
            outside 10..100 means 10
        tokenizer: Token counter (default: tiktoken cl100k_base)
        overlap: Set to False to chunk without overlap

    Returns:
        Non-empty list of chunk strings; ``[cleaned text]`` when the text
        already fits under the hard maximum

    Raises:
        NoValidChunkingError: If the text cannot be chunked under these limits
    """
    splitter = DFSTextSplitter(goal_length_tokens, overlap_percent, tokenizer, overlap=overlap)
    return splitter.run(text).chunks
