"""Whitespace and newline normalisation applied before and during chunking.

Text arrives with every flavour of line ending and horizontal whitespace.
TextCleaner folds them into canonical forms:

- Line endings (CRLF, CR, vertical tab, form feed, U+2028) become ``\\n``
- Paragraph separators (U+2029) become ``\\n\\n``
- Unicode horizontal whitespace becomes a plain space
- Newline runs are reduced according to the configured Newlines mode
- Runs of spaces collapse to one and the result is stripped
"""

from __future__ import annotations

import re
from enum import Enum

# =============================================================================
# PATTERNS
# =============================================================================

# CRLF must come first so the CR alternative does not split it
END_OF_LINE_PATTERN = re.compile(r"\r\n|\r|\v|\f|\u2028")
END_OF_PARAGRAPH_PATTERN = re.compile(r"\u2029")
WHITE_SPACE_PATTERN = re.compile(r"[\t\u00a0\u1680\u2000-\u200a\u202f\u205f\u3000]")

SINGLE_NEWLINE_PATTERN = re.compile(r" \n+|\n+ |\n+")
DOUBLE_NEWLINE_PATTERN = re.compile(r" \n{2,}|\n{2,} |\n{2,}")
SINGLE_SPACE_PATTERN = re.compile(r" +")

UNWANTED_CHARS_PATTERN = re.compile(r"[^a-zA-Z0-9.,?!:;'\"\-()\[\]{}$&@#%^*\s]+")


class Newlines(Enum):
    """How TextCleaner.run reduces runs of newlines."""

    SPACE = "space"
    SINGLE = "single"
    DOUBLE = "double"
    NONE = "none"


class TextCleaner:
    """Configurable text normaliser.

    Builder methods return the cleaner itself so calls can be chained:

        >>> TextCleaner().reduce_newlines_to_single_space().run("a\\n\\nb")
        'a b'
    """

    def __init__(
        self,
        newlines: Newlines = Newlines.DOUBLE,
        remove_non_basic_ascii: bool = False,
    ) -> None:
        self.newlines = newlines
        self.strip_non_basic_ascii = remove_non_basic_ascii

    def do_not_reduce_newlines(self) -> TextCleaner:
        self.newlines = Newlines.NONE
        return self

    def reduce_newlines_to_single_space(self) -> TextCleaner:
        self.newlines = Newlines.SPACE
        return self

    def reduce_newlines_to_single_newline(self) -> TextCleaner:
        self.newlines = Newlines.SINGLE
        return self

    def reduce_newlines_to_double_newline(self) -> TextCleaner:
        self.newlines = Newlines.DOUBLE
        return self

    def remove_non_basic_ascii(self) -> TextCleaner:
        self.strip_non_basic_ascii = True
        return self

    def run(self, text: str) -> str:
        """Clean text according to the configured options.

        Args:
            text: Raw input text

        Returns:
            Normalised, stripped text
        """
        text = normalize_whitespace(text)

        if self.newlines is Newlines.SPACE:
            text = SINGLE_NEWLINE_PATTERN.sub(" ", text)
        elif self.newlines is Newlines.SINGLE:
            text = SINGLE_NEWLINE_PATTERN.sub("\n", text)
        elif self.newlines is Newlines.DOUBLE:
            text = DOUBLE_NEWLINE_PATTERN.sub("\n\n", text)

        if self.strip_non_basic_ascii:
            text = UNWANTED_CHARS_PATTERN.sub("", text)

        return SINGLE_SPACE_PATTERN.sub(" ", text).strip()


def normalize_whitespace(text: str) -> str:
    """Map line endings, paragraph separators and unicode spaces to ASCII forms."""
    text = END_OF_LINE_PATTERN.sub("\n", text)
    text = END_OF_PARAGRAPH_PATTERN.sub("\n\n", text)
    return WHITE_SPACE_PATTERN.sub(" ", text)


def strip_unwanted_chars(text: str) -> str:
    """Remove everything outside basic ASCII letters, digits and punctuation."""
    return UNWANTED_CHARS_PATTERN.sub("", text).strip()


def reduce_to_single_whitespace(text: str) -> str:
    """Collapse space runs to one space and newline runs to one newline.

    Spaces directly before or after a newline run are absorbed into it.

    Args:
        text: Text to normalise

    Returns:
        Stripped text with no repeated spaces or newlines
    """
    text = SINGLE_SPACE_PATTERN.sub(" ", text)
    return SINGLE_NEWLINE_PATTERN.sub("\n", text).strip()
