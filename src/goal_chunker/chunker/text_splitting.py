"""Unicode-aware text segmentation used by the separator hierarchy.

Each function returns fragments that concatenate back to its (possibly
whitespace-normalised) input, so no characters are lost when a separator
tier is applied.

- Sentences: spaCy rule-based sentencizer on a blank pipeline (no model
  download needed)
- Words: UAX #29 word boundaries via the ``regex`` module's WORD flag
- Graphemes: extended grapheme clusters via ``regex`` ``\\X``
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING

import regex

from goal_chunker.chunker.text_cleaning import TextCleaner

if TYPE_CHECKING:
    from spacy.language import Language

# Zero-width match at every position where a unicode word begins
WORD_START_PATTERN = regex.compile(r"\b(?=\w)", flags=regex.WORD | regex.V1)
GRAPHEME_PATTERN = regex.compile(r"\X")


@lru_cache(maxsize=1)
def _get_sentencizer() -> Language:
    """Build the blank English pipeline with a sentencizer (cached)."""
    import spacy

    nlp = spacy.blank("en")
    nlp.add_pipe("sentencizer")
    return nlp


def split_text_into_sentences(text: str) -> list[str]:
    """Split text into sentences, each keeping its trailing whitespace.

    Args:
        text: Text to segment

    Returns:
        Sentences in order; empty list for empty text
    """
    if not text:
        return []
    nlp = _get_sentencizer()
    if len(text) >= nlp.max_length:
        nlp.max_length = len(text) + 1
    doc = nlp(text)
    return [sent.text_with_ws for sent in doc.sents if sent.text_with_ws]


def split_text_into_words(text: str) -> list[str]:
    """Split text at unicode word starts.

    Newlines are first reduced to single spaces. Each fragment runs from the
    start of one word to the start of the next, so trailing spaces and
    punctuation stay with the preceding word. Anything before the first word
    is attached to it.

    Args:
        text: Text to segment

    Returns:
        Word fragments; empty list when the text contains no words
    """
    text = TextCleaner().reduce_newlines_to_single_space().run(text)
    starts = [match.start() for match in WORD_START_PATTERN.finditer(text)]
    if not starts:
        return []

    starts[0] = 0
    ends = [*starts[1:], len(text)]
    return [text[start:end] for start, end in zip(starts, ends)]


def split_text_into_graphemes(text: str) -> list[str]:
    """Split text into extended grapheme clusters."""
    return GRAPHEME_PATTERN.findall(text)


def split_text_with_regex(text: str, pattern: re.Pattern[str], keep_separator: bool) -> list[str]:
    """Split text on a regex, dropping empty fragments.

    Args:
        text: Text to split
        pattern: Separator pattern (must not contain capture groups)
        keep_separator: If True, each separator stays attached to the
            fragment before it

    Returns:
        Non-empty fragments in order
    """
    if not keep_separator:
        return [piece for piece in pattern.split(text) if piece]

    fragments: list[str] = []
    position = 0
    for match in pattern.finditer(text):
        if match.end() > position:
            fragments.append(text[position : match.end()])
            position = match.end()
    if position < len(text):
        fragments.append(text[position:])
    return fragments
