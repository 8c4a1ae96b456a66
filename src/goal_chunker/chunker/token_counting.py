"""Token counting utilities using tiktoken.

Token counts are the only length measure the chunker uses. Anything with a
``count_tokens(text) -> int`` method satisfies the Tokenizer protocol; the
default implementation wraps a tiktoken encoding (cl100k_base, the encoding
used by GPT-4 era models).
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

import tiktoken

DEFAULT_ENCODING = "cl100k_base"


@runtime_checkable
class Tokenizer(Protocol):
    """Anything that can measure text length in tokens."""

    def count_tokens(self, text: str) -> int: ...


class TiktokenTokenizer:
    """Tokenizer backed by a tiktoken encoding.

    The encoding is loaded on first use and shared afterwards. Encoding is
    stateless, so one instance can be used from several threads.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING) -> None:
        self.encoding_name = encoding_name
        self._encoding: tiktoken.Encoding | None = None
        self._lock = threading.Lock()

    @property
    def encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            with self._lock:
                if self._encoding is None:
                    self._encoding = tiktoken.get_encoding(self.encoding_name)
        return self._encoding

    def count_tokens(self, text: str) -> int:
        """Count tokens in text.

        Args:
            text: Text to count tokens for

        Returns:
            Number of tokens (0 for empty string)
        """
        if not text:
            return 0
        # Special-token text is counted as ordinary text, never rejected
        return len(self.encoding.encode(text, disallowed_special=()))

    def __repr__(self) -> str:
        return f"TiktokenTokenizer(encoding_name={self.encoding_name!r})"


# Global default tokenizer (cached for performance)
_DEFAULT_TOKENIZER: TiktokenTokenizer | None = None


def get_default_tokenizer() -> TiktokenTokenizer:
    """Get or create the shared cl100k_base tokenizer."""
    global _DEFAULT_TOKENIZER
    if _DEFAULT_TOKENIZER is None:
        _DEFAULT_TOKENIZER = TiktokenTokenizer()
    return _DEFAULT_TOKENIZER


def count_tokens(text: str) -> int:
    """Count tokens in text with the default tokenizer.

    Args:
        text: Text to count tokens for

    Returns:
        Number of tokens (0 for empty string)
    """
    return get_default_tokenizer().count_tokens(text)
