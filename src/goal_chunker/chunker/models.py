"""Core data models for the chunking pipeline.

This module contains the dataclasses used throughout the chunking process:
- ChunkConfig: Configuration parameters for chunking
- ChunkingResult: Chunk strings plus the tier and goal length that produced them
- Chunk: A single text chunk with metadata
- ChunkedDocument: A document split into chunks
- FilterStats: Statistics from chunk filtering during JSONL writing
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from goal_chunker.chunker.separators import Separator


@dataclass(frozen=True)
class ChunkConfig:
    """Configuration for text chunking.

    Attributes:
        goal_tokens: Target chunk size in tokens (default: 512)
        overlap_percent: Overlap between adjacent chunks as a percentage of
            the goal (default: 10). Values outside 10..100 fall back to 10.
        overlap: Set to False to disable overlap entirely (default: True)
        min_words: Minimum word count for a chunk to be written (default: 0).
            Chunks below this threshold are filtered out during JSONL writing.
            0 disables micro-chunk filtering.
        encoding_name: tiktoken encoding used for token counts
            (default: cl100k_base)
    """

    goal_tokens: int = 512
    overlap_percent: int | None = 10
    overlap: bool = True
    min_words: int = 0
    encoding_name: str = "cl100k_base"

    def __post_init__(self) -> None:
        if self.goal_tokens <= 0:
            raise ValueError("goal_tokens must be positive")
        if self.min_words < 0:
            raise ValueError("min_words must be non-negative")


@dataclass(frozen=True)
class ChunkingResult:
    """Outcome of one successful chunking call.

    Attributes:
        chunks: Chunk texts in document order
        separator: Tier that produced the chunks (None if the text was
            returned whole because it already fit)
        goal_length: Goal length of the successful attempt (after decay)
        attempts: Goal-length attempts made across all tiers
    """

    chunks: list[str]
    separator: Separator | None
    goal_length: int
    attempts: int = 0


@dataclass
class Chunk:
    """Single chunk of text with metadata.

    Attributes:
        text: Chunk text including overlap (what gets embedded)
        chunk_index: Order within the document (0-indexed)
        token_count: Token count of text
        word_count: Whitespace-separated word count of text
    """

    text: str
    chunk_index: int
    token_count: int
    word_count: int


@dataclass
class ChunkedDocument:
    """Document split into chunks.

    Attributes:
        title: Document title (from the file name)
        source: Path the text was read from
        chunks: Ordered list of chunks
        separator: Name of the separator tier used (None if unsplit)
        goal_tokens: Goal length of the successful attempt
    """

    title: str
    source: Path
    chunks: list[Chunk] = field(default_factory=list)
    separator: str | None = None
    goal_tokens: int = 0


@dataclass
class FilterStats:
    """Statistics from chunk filtering during JSONL writing.

    Attributes:
        total_chunks: Number of chunks before filtering
        micro_chunks_filtered: Chunks removed due to word_count < min_words
        consecutive_duplicates_removed: Consecutive identical chunks removed
        chunks_written: Final number of chunks written to JSONL
    """

    total_chunks: int
    micro_chunks_filtered: int
    consecutive_duplicates_removed: int
    chunks_written: int
