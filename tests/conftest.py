"""Shared pytest fixtures for goal-chunker tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CHUNKING_FIXTURES_DIR = FIXTURES_DIR / "chunking"


# =============================================================================
# TOKENIZERS
# =============================================================================


class WordTokenizer:
    """Counts whitespace-separated words.

    Deterministic and offline, so chunk boundaries in tests can be worked
    out by hand.
    """

    def __init__(self) -> None:
        self.calls = 0

    def count_tokens(self, text: str) -> int:
        self.calls += 1
        return len(text.split())


class CharTokenizer:
    """Counts every non-whitespace character as `weight` tokens."""

    def __init__(self, weight: int = 1) -> None:
        self.weight = weight

    def count_tokens(self, text: str) -> int:
        return sum(self.weight for char in text if not char.isspace())


@pytest.fixture
def word_tokenizer() -> WordTokenizer:
    """Whitespace word-count tokenizer."""
    return WordTokenizer()


@pytest.fixture
def char_tokenizer() -> Callable[[int], CharTokenizer]:
    """Factory for character-count tokenizers with a per-character weight."""

    def _make(weight: int = 1) -> CharTokenizer:
        return CharTokenizer(weight)

    return _make


# =============================================================================
# TEXT FIXTURES
# =============================================================================


def make_words(count: int, prefix: str = "word") -> list[str]:
    return [f"{prefix}{i}" for i in range(count)]


@pytest.fixture
def unbroken_prose() -> str:
    """900 words with no paragraph or sentence breaks."""
    return " ".join(make_words(900))


@pytest.fixture
def short_prose() -> str:
    """50 words of prose."""
    return " ".join(make_words(50))


@pytest.fixture
def paragraph_prose() -> str:
    """9 paragraphs of 4 five-word sentences (20 words per paragraph).

    Words are named p{paragraph}s{sentence}w{word}, e.g. p3s2w4.
    """
    paragraphs = []
    for p in range(9):
        sentences = [
            " ".join(f"p{p}s{s}w{w}" for w in range(5)) + "." for s in range(4)
        ]
        paragraphs.append(" ".join(sentences))
    return "\n\n".join(paragraphs)


@pytest.fixture
def chunking_fixtures_dir() -> Path:
    """Return path to chunking fixtures directory."""
    return CHUNKING_FIXTURES_DIR


@pytest.fixture
def load_chunking_fixture() -> Callable[[str], str]:
    """Factory fixture to load chunking fixture files.

    Usage:
        def test_something(load_chunking_fixture):
            content = load_chunking_fixture("lighthouse.txt")
    """

    def _load(name: str) -> str:
        return (CHUNKING_FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load
