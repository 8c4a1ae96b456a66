"""Unit tests for the goal-length chunker.

Chunk boundaries are worked out with the word-count tokenizer from
conftest.py, so the assertions below are exact.

Test strategy:
- Short texts come back whole
- Paragraph text is chunked at the paragraph tier with sentence overlaps
- Unbroken text falls through to the word tier
- Every chunk stays under the hard maximum
- Exhaustion raises NoValidChunkingError
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from goal_chunker.chunker import (
    DFSTextSplitter,
    NoValidChunkingError,
    Separator,
    Tokenizer,
    chunk_text,
)


def word_numbers(chunk: str) -> list[int]:
    """Indices of the 'wordN' tokens in a chunk."""
    return [int(n) for n in re.findall(r"word(\d+)", chunk)]


# =============================================================================
# SHORT TEXT
# =============================================================================


class TestShortText:
    """Tests for texts that already fit under the hard maximum."""

    @pytest.mark.unit
    def test_returned_whole(self, short_prose, word_tokenizer) -> None:
        """A 50-word text at goal 300 is a single chunk."""
        assert chunk_text(short_prose, 300, tokenizer=word_tokenizer) == [short_prose]

    @pytest.mark.unit
    def test_returned_cleaned(self, word_tokenizer) -> None:
        """The single chunk is the whitespace-normalised text."""
        chunks = chunk_text("  Hello\r\n\r\n\r\nworld  ", 300, tokenizer=word_tokenizer)
        assert chunks == ["Hello\n\nworld"]

    @pytest.mark.unit
    def test_result_has_no_separator(self, short_prose, word_tokenizer) -> None:
        """No tier is recorded when the text was not split."""
        result = DFSTextSplitter(300, tokenizer=word_tokenizer).run(short_prose)
        assert result.separator is None
        assert result.goal_length == 300
        assert result.attempts == 0


# =============================================================================
# PARAGRAPH TEXT
# =============================================================================


class TestParagraphChunking:
    """Tests for text that can be cut on paragraph boundaries."""

    @pytest.mark.unit
    def test_paragraph_tier_used(self, paragraph_prose, word_tokenizer) -> None:
        """Paragraph cuts succeed on the first attempt."""
        result = DFSTextSplitter(100, 10, word_tokenizer).run(paragraph_prose)
        assert result.separator is Separator.MULTI_PARAGRAPH
        assert result.goal_length == 100
        assert result.attempts == 1
        assert len(result.chunks) == 2

    @pytest.mark.unit
    def test_sentence_overlaps(self, paragraph_prose, word_tokenizer) -> None:
        """Overlaps are whole sentences from the neighbouring chunk."""
        chunks = chunk_text(paragraph_prose, 100, 10, tokenizer=word_tokenizer)

        # First chunk: paragraphs 0-4 plus the first two sentences of paragraph 5
        assert chunks[0].startswith("p0s0w0 ")
        assert chunks[0].endswith("p5s1w4.")
        # Last chunk: last two sentences of paragraph 3, then paragraphs 4-8
        assert chunks[1].startswith("p3s2w0 ")
        assert chunks[1].endswith("p8s3w4.")
        assert [word_tokenizer.count_tokens(chunk) for chunk in chunks] == [110, 110]

    @pytest.mark.unit
    def test_newline_runs_reduced(self, paragraph_prose, word_tokenizer) -> None:
        """Chunks contain single newlines only."""
        for chunk in chunk_text(paragraph_prose, 100, 10, tokenizer=word_tokenizer):
            assert "\n\n" not in chunk
            assert "  " not in chunk


# =============================================================================
# UNBROKEN TEXT
# =============================================================================


class TestUnbrokenText:
    """900 words with no sentence or paragraph breaks, goal 300."""

    @pytest.mark.unit
    def test_falls_through_to_word_tier(self, unbroken_prose, word_tokenizer) -> None:
        """Paragraph, line and sentence tiers cannot cut this text."""
        result = DFSTextSplitter(300, tokenizer=word_tokenizer).run(unbroken_prose)
        assert result.separator is Separator.WORD
        assert result.goal_length == 300
        assert len(result.chunks) == 3

    @pytest.mark.unit
    def test_exact_boundaries(self, unbroken_prose, word_tokenizer) -> None:
        """The first complete boundary path is [237, 557, 899].

        The endpoint band reserves overlap_max on both edges, but the first
        chunk only gets a forward overlap, so it lands at 265 tokens, below
        goal_min (270). Only max_length (375) is a hard bound.
        """
        chunks = chunk_text(unbroken_prose, 300, tokenizer=word_tokenizer)
        assert chunks[0] == " ".join(f"word{i}" for i in range(0, 265))
        assert chunks[1] == " ".join(f"word{i}" for i in range(224, 571))
        assert chunks[2] == " ".join(f"word{i}" for i in range(530, 900))

    @pytest.mark.unit
    def test_chunks_under_max_length(self, unbroken_prose, word_tokenizer) -> None:
        """No chunk exceeds int(goal * 1.25) tokens."""
        for chunk in chunk_text(unbroken_prose, 300, tokenizer=word_tokenizer):
            assert word_tokenizer.count_tokens(chunk) <= 375

    @pytest.mark.unit
    def test_coverage_in_order(self, unbroken_prose, word_tokenizer) -> None:
        """Chunks are contiguous runs that together cover every word in order."""
        chunks = chunk_text(unbroken_prose, 300, tokenizer=word_tokenizer)
        runs = [word_numbers(chunk) for chunk in chunks]

        for run in runs:
            assert run == list(range(run[0], run[-1] + 1))
        assert runs[0][0] == 0
        assert runs[-1][-1] == 899
        for previous, current in zip(runs, runs[1:]):
            assert previous[0] < current[0]
            # Adjacent chunks share text
            assert current[0] <= previous[-1]

    @pytest.mark.unit
    def test_without_overlap(self, unbroken_prose, word_tokenizer) -> None:
        """With overlap disabled, adjacent chunks only share the boundary word."""
        chunks = chunk_text(unbroken_prose, 300, tokenizer=word_tokenizer, overlap=False)
        runs = [word_numbers(chunk) for chunk in chunks]
        assert [(run[0], run[-1]) for run in runs] == [
            (0, 151),
            (151, 302),
            (302, 453),
            (453, 604),
            (604, 899),
        ]

    @pytest.mark.unit
    @pytest.mark.parametrize("goal", [300, 280, 260, 240, 200, 160, 120, 100, 80, 60, 40, 21, 20])
    def test_smaller_goals_still_chunk(self, goal: int, unbroken_prose, word_tokenizer) -> None:
        """Shrinking the goal on the same text never makes chunking fail.

        Holds while interior overlap sides have a non-zero band
        (overlap_max // 2 >= 1), i.e. for goals of 20 tokens and up.
        """
        max_length = int(goal * 1.25)
        chunks = chunk_text(unbroken_prose, goal, tokenizer=word_tokenizer)
        assert len(chunks) >= 2
        for chunk in chunks:
            assert word_tokenizer.count_tokens(chunk) <= max_length

    @pytest.mark.unit
    def test_deterministic(self, unbroken_prose, word_tokenizer) -> None:
        """Identical inputs give identical chunks."""
        first = chunk_text(unbroken_prose, 300, tokenizer=word_tokenizer)
        second = chunk_text(unbroken_prose, 300, tokenizer=word_tokenizer)
        assert first == second

    @pytest.mark.unit
    def test_logs_exhausted_tiers(self, unbroken_prose, word_tokenizer, caplog) -> None:
        """Each abandoned tier is logged at debug level."""
        with caplog.at_level(logging.DEBUG, logger="goal_chunker.chunker.core"):
            chunk_text(unbroken_prose, 300, tokenizer=word_tokenizer)
        assert "Separator multi_paragraph exhausted" in caplog.text
        assert "Separator sentence exhausted" in caplog.text
        assert "separator=word" in caplog.text


# =============================================================================
# ERRORS AND SHARING
# =============================================================================


class TestChunkerErrors:
    """Tests for invalid arguments and exhaustion."""

    @pytest.mark.unit
    @pytest.mark.parametrize("goal", [0, -5])
    def test_non_positive_goal(self, goal: int, word_tokenizer) -> None:
        """Goal lengths must be positive."""
        with pytest.raises(ValueError, match="goal_length must be positive"):
            DFSTextSplitter(goal, tokenizer=word_tokenizer)

    @pytest.mark.unit
    def test_no_valid_chunking(self, char_tokenizer) -> None:
        """Every grapheme above max_length leaves no tier usable."""
        with pytest.raises(NoValidChunkingError) as exc_info:
            chunk_text("abcdefghij", 5, tokenizer=char_tokenizer(10))
        assert exc_info.value.goal_length == 5
        assert exc_info.value.overlap_percent == 10
        assert "goal length 5" in str(exc_info.value)

    @pytest.mark.unit
    def test_no_valid_chunking_is_value_error(self, char_tokenizer) -> None:
        """Callers catching ValueError also catch exhaustion."""
        with pytest.raises(ValueError):
            chunk_text("abcdefghij", 5, tokenizer=char_tokenizer(10), overlap=False)


class TestSplitterSharing:
    """Tests for reusing one splitter."""

    @pytest.mark.unit
    def test_word_tokenizer_satisfies_protocol(self, word_tokenizer) -> None:
        """Any object with count_tokens is a Tokenizer."""
        assert isinstance(word_tokenizer, Tokenizer)

    @pytest.mark.unit
    def test_concurrent_runs(self, unbroken_prose, word_tokenizer) -> None:
        """One splitter gives the same result from several threads."""
        splitter = DFSTextSplitter(300, tokenizer=word_tokenizer)
        expected = splitter.run(unbroken_prose).chunks
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: splitter.run(unbroken_prose).chunks, range(4)))
        assert all(chunks == expected for chunks in results)
