"""Separator hierarchy: six splitting strategies from coarse to fine.

Tiers are tried in declaration order because coarser boundaries give more
coherent chunks. The finest tier (graphemes) always makes progress, even on
text with no spaces at all.
"""

from __future__ import annotations

import re
from enum import Enum

from goal_chunker.chunker.text_splitting import (
    split_text_into_graphemes,
    split_text_into_sentences,
    split_text_into_words,
    split_text_with_regex,
)

SINGLE_NEWLINE_SEPARATOR = re.compile(r"\n")
DOUBLE_NEWLINE_SEPARATOR = re.compile(r"\n\n")
WHITESPACE_SEPARATOR = re.compile(r" ")


class Separator(Enum):
    """One level of the separator hierarchy."""

    MULTI_PARAGRAPH = "multi_paragraph"
    SINGLE_LINE = "single_line"
    SENTENCE = "sentence"
    WORD = "word"
    WHITESPACE = "whitespace"
    GRAPHEME = "grapheme"

    @classmethod
    def all(cls) -> list[Separator]:
        """All tiers, coarse to fine."""
        return list(cls)

    def split(self, text: str) -> list[str]:
        """Split text into this tier's fragments.

        Joining the returned fragments with no separator reproduces the
        tier's transformed input (paragraph and line tiers re-append their
        newline markers, the sentence tier appends a space).

        Args:
            text: Text to split

        Returns:
            Ordered fragments; empty when the tier finds nothing to split
        """
        if self is Separator.MULTI_PARAGRAPH:
            pieces = split_text_with_regex(text, SINGLE_NEWLINE_SEPARATOR, keep_separator=False)
            return [f"{piece}\n\n" for piece in pieces]
        if self is Separator.SINGLE_LINE:
            pieces = split_text_with_regex(text, DOUBLE_NEWLINE_SEPARATOR, keep_separator=True)
            return [f"{piece}\n" for piece in pieces]
        if self is Separator.SENTENCE:
            return [f"{sentence} " for sentence in split_text_into_sentences(text)]
        if self is Separator.WORD:
            return split_text_into_words(text)
        if self is Separator.WHITESPACE:
            return split_text_with_regex(text, WHITESPACE_SEPARATOR, keep_separator=True)
        return split_text_into_graphemes(text)
