"""Project configuration loaded from pyproject.toml."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class GoalChunkerConfig(BaseModel):
    """Configuration for goal-chunker."""

    # Chunking parameters (tiktoken-based)
    chunk_goal_tokens: int = Field(default=512, gt=0)
    chunk_overlap_percent: int = 10
    chunk_min_words: int = Field(default=0, ge=0)

    # Tokenizer
    tiktoken_encoding: str = "cl100k_base"


@lru_cache(maxsize=1)
def load_config() -> GoalChunkerConfig:
    """Load configuration from pyproject.toml.

    Returns:
        GoalChunkerConfig with settings from [tool.goal-chunker] section,
        falling back to defaults if not found.
    """
    pyproject_path = _find_pyproject()
    if pyproject_path is None:
        return GoalChunkerConfig()

    return load_config_file(pyproject_path)


def load_config_file(pyproject_path: Path) -> GoalChunkerConfig:
    """Load configuration from a specific pyproject.toml file."""
    with pyproject_path.open("rb") as f:
        data = tomllib.load(f)

    tool_config: dict[str, Any] = data.get("tool", {}).get("goal-chunker", {})
    return GoalChunkerConfig(**tool_config)


def _find_pyproject() -> Path | None:
    """Find pyproject.toml by walking up from current file."""
    current = Path(__file__).resolve().parent
    for _ in range(10):  # Max 10 levels up
        candidate = current / "pyproject.toml"
        if candidate.exists():
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


# Convenience accessor
config = load_config()
