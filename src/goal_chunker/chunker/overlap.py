"""Overlap spans stitched onto chunk edges.

The gap between two chunk boundaries is re-split with the separator
hierarchy (coarse to fine) and fragments are accumulated until their token
length enters the overlap band. A tier whose accumulation overshoots the
band is abandoned in favour of the next, finer one.
"""

from __future__ import annotations

from collections.abc import Sequence

from goal_chunker.chunker.separators import Separator
from goal_chunker.chunker.text_cleaning import reduce_to_single_whitespace
from goal_chunker.chunker.token_counting import Tokenizer


def _grow_overlap(
    region: str,
    overlap_min: int,
    overlap_max: int,
    tokenizer: Tokenizer,
    backwards: bool,
) -> str | None:
    for separator in Separator.all():
        fragments = separator.split(region)
        if not fragments:
            continue
        if backwards:
            fragments.reverse()

        saved: list[str] = []
        for fragment in fragments:
            if backwards:
                saved.insert(0, fragment)
            else:
                saved.append(fragment)
            candidate = reduce_to_single_whitespace("".join(saved))
            current_length = tokenizer.count_tokens(candidate)

            if current_length > overlap_max:
                break
            if current_length >= overlap_min:
                return candidate

    return None


def create_forward_overlap(
    splits: Sequence[str],
    end_split: int,
    next_start: int,
    overlap_min: int,
    overlap_max: int,
    tokenizer: Tokenizer,
) -> str | None:
    """Build overlap text taken from the start of the following chunk.

    Args:
        splits: Split sequence of the current tier
        end_split: Boundary offset where the current chunk ends
        next_start: Boundary offset where the following chunk ends
        overlap_min: Lower edge of the overlap band
        overlap_max: Upper edge of the overlap band
        tokenizer: Token counter

    Returns:
        Overlap text, or None if no tier reaches the band
    """
    region = " ".join(splits[end_split + 1 : next_start])
    return _grow_overlap(region, overlap_min, overlap_max, tokenizer, backwards=False)


def create_backward_overlap(
    splits: Sequence[str],
    start_split: int,
    previous_end: int,
    overlap_min: int,
    overlap_max: int,
    tokenizer: Tokenizer,
) -> str | None:
    """Build overlap text taken from the end of the preceding chunk.

    Args:
        splits: Split sequence of the current tier
        start_split: Boundary offset where the current chunk starts
        previous_end: Boundary offset where the preceding chunk starts
        overlap_min: Lower edge of the overlap band
        overlap_max: Upper edge of the overlap band
        tokenizer: Token counter

    Returns:
        Overlap text, or None if no tier reaches the band
    """
    region = " ".join(splits[previous_end:start_split])
    return _grow_overlap(region, overlap_min, overlap_max, tokenizer, backwards=True)
