"""JSONL output for chunked documents.

This module provides functions for chunking text files and writing the
chunks to JSONL format with filtering (micro-chunk removal, deduplication).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from goal_chunker.chunker.core import DFSTextSplitter
from goal_chunker.chunker.models import (
    Chunk,
    ChunkConfig,
    ChunkedDocument,
    FilterStats,
)
from goal_chunker.chunker.token_counting import TiktokenTokenizer, Tokenizer

logger = logging.getLogger(__name__)


def generate_chunk_id(title: str, index: int) -> str:
    """Generate a unique, URL-safe chunk ID.

    Format: {title}#{index}
    Spaces in title are replaced with underscores.

    Args:
        title: The document title
        index: The chunk index (0-based)

    Returns:
        A URL-safe chunk identifier

    Example:
        >>> generate_chunk_id("Moby Dick", 3)
        'Moby_Dick#3'
    """
    safe_title = title.replace(" ", "_")
    return f"{safe_title}#{index}"


def build_splitter(config: ChunkConfig, tokenizer: Tokenizer | None = None) -> DFSTextSplitter:
    """Create a splitter for a ChunkConfig.

    Args:
        config: Chunking configuration
        tokenizer: Token counter (default: tiktoken with config.encoding_name)

    Returns:
        DFSTextSplitter ready to chunk documents
    """
    if tokenizer is None:
        tokenizer = TiktokenTokenizer(config.encoding_name)
    return DFSTextSplitter(
        config.goal_tokens,
        config.overlap_percent,
        tokenizer,
        overlap=config.overlap,
    )


def chunk_document(
    text_path: Path,
    config: ChunkConfig,
    splitter: DFSTextSplitter | None = None,
) -> ChunkedDocument:
    """Chunk a text file.

    Args:
        text_path: Path to a UTF-8 text file
        config: Chunking configuration
        splitter: Splitter to reuse across files (built from config if None)

    Returns:
        ChunkedDocument with token and word counts per chunk

    Raises:
        NoValidChunkingError: If the text cannot be chunked under config
    """
    if splitter is None:
        splitter = build_splitter(config)

    content = text_path.read_text(encoding="utf-8")
    result = splitter.run(content)

    chunks = [
        Chunk(
            text=text,
            chunk_index=index,
            token_count=splitter.tokenizer.count_tokens(text),
            word_count=len(text.split()),
        )
        for index, text in enumerate(result.chunks)
    ]

    return ChunkedDocument(
        title=text_path.stem.replace("_", " "),
        source=text_path,
        chunks=chunks,
        separator=result.separator.value if result.separator is not None else None,
        goal_tokens=result.goal_length,
    )


def write_chunks_jsonl(
    document: ChunkedDocument,
    output_path: Path,
    config: ChunkConfig,
) -> FilterStats:
    """Write chunked document to JSONL file with filtering.

    Filters out:
    1. Micro-chunks: Chunks with word_count < config.min_words
    2. Consecutive duplicates: Adjacent chunks with identical text

    Each remaining chunk is written as one JSON object per line.

    Args:
        document: ChunkedDocument to serialize
        output_path: Path for the output JSONL file
        config: ChunkConfig with filtering parameters

    Returns:
        FilterStats with counts of filtered/written chunks
    """
    # Ensure parent directory exists
    output_path.parent.mkdir(parents=True, exist_ok=True)

    total_chunks = len(document.chunks)
    micro_chunks_filtered = 0
    consecutive_duplicates_removed = 0

    filtered_chunks: list[Chunk] = []
    prev_text: str | None = None

    for chunk in document.chunks:
        if config.min_words > 0 and chunk.word_count < config.min_words:
            micro_chunks_filtered += 1
            continue

        if prev_text is not None and chunk.text == prev_text:
            consecutive_duplicates_removed += 1
            continue

        filtered_chunks.append(chunk)
        prev_text = chunk.text

    # Log warning if high filter rate (>10%)
    if total_chunks > 0:
        filter_rate = (micro_chunks_filtered + consecutive_duplicates_removed) / total_chunks
        if filter_rate > 0.10:
            logger.warning(
                f"High filter rate ({filter_rate:.1%}) for {document.title}: "
                f"{micro_chunks_filtered} micro-chunks, "
                f"{consecutive_duplicates_removed} duplicates removed from {total_chunks} total"
            )

    # Write filtered chunks with reassigned indices
    with output_path.open("w", encoding="utf-8") as f:
        for new_index, chunk in enumerate(filtered_chunks):
            record: dict[str, Any] = {
                "chunk_id": generate_chunk_id(document.title, new_index),
                "text": chunk.text,
                "title": document.title,
                "source": str(document.source),
                "chunk_index": new_index,
                "token_count": chunk.token_count,
                "word_count": chunk.word_count,
                "separator": document.separator,
                "goal_tokens": document.goal_tokens,
            }
            f.write(json.dumps(record, ensure_ascii=False) + "\n")

    return FilterStats(
        total_chunks=total_chunks,
        micro_chunks_filtered=micro_chunks_filtered,
        consecutive_duplicates_removed=consecutive_duplicates_removed,
        chunks_written=len(filtered_chunks),
    )
