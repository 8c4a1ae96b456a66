"""Chunker package - goal-length text chunking with overlap.

This package splits text into chunks whose token length stays within a
band around a goal length, with adjacent chunks sharing overlap spans.

Public API:
- chunk_text: Main chunking function
- DFSTextSplitter: Reusable splitter (returns ChunkingResult)
- NoValidChunkingError: Raised when no chunking satisfies the limits
- ChunkConfig, ChunkingResult, Chunk, ChunkedDocument, FilterStats: Models
- ChunkThresholds: Threshold calculator
- Separator: The six-tier separator hierarchy
- TextCleaner, Newlines: Whitespace normalisation
- Tokenizer, TiktokenTokenizer, count_tokens: Token counting
- chunk_document, write_chunks_jsonl, generate_chunk_id: File output
"""

from goal_chunker.chunker.core import (
    DFSTextSplitter,
    chunk_text,
)
from goal_chunker.chunker.errors import NoValidChunkingError, OverlapUnattainableError
from goal_chunker.chunker.jsonl_writer import (
    build_splitter,
    chunk_document,
    generate_chunk_id,
    write_chunks_jsonl,
)
from goal_chunker.chunker.models import (
    Chunk,
    ChunkConfig,
    ChunkedDocument,
    ChunkingResult,
    FilterStats,
)
from goal_chunker.chunker.search import (
    ChunkPathFinder,
    EndpointSearch,
    estimate_average_range_min,
    find_valid_chunk_combinations,
)
from goal_chunker.chunker.separators import Separator
from goal_chunker.chunker.text_cleaning import (
    Newlines,
    TextCleaner,
    normalize_whitespace,
    reduce_to_single_whitespace,
    strip_unwanted_chars,
)
from goal_chunker.chunker.thresholds import (
    ChunkThresholds,
    decay_goal_length,
    normalize_overlap_percent,
)
from goal_chunker.chunker.token_counting import (
    TiktokenTokenizer,
    Tokenizer,
    count_tokens,
)

__all__ = [
    # Models
    "Chunk",
    "ChunkConfig",
    "ChunkThresholds",
    "ChunkedDocument",
    "ChunkingResult",
    "FilterStats",
    # Search
    "ChunkPathFinder",
    "EndpointSearch",
    # Public API - Chunking
    "DFSTextSplitter",
    "NoValidChunkingError",
    "OverlapUnattainableError",
    "Separator",
    "chunk_text",
    "decay_goal_length",
    "estimate_average_range_min",
    "find_valid_chunk_combinations",
    "normalize_overlap_percent",
    # Public API - Cleaning and tokens
    "Newlines",
    "TextCleaner",
    "TiktokenTokenizer",
    "Tokenizer",
    "count_tokens",
    "normalize_whitespace",
    "reduce_to_single_whitespace",
    "strip_unwanted_chars",
    # Public API - Files
    "build_splitter",
    "chunk_document",
    "generate_chunk_id",
    "write_chunks_jsonl",
]
