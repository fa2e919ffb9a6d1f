"""
Progressive Truncation
======================

Token estimation and the "shrink until it fits" machinery shared by file
selection, the architecture overview and oversized tool responses.

A payload is shrunk by applying an ordered list of ShrinkSteps. Each step
must never grow the payload and must be idempotent; steps are applied one at
a time until the measured size is within the limit.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .constants import (
    CHARS_PER_TOKEN,
    ELISION_MARKER,
    TRUNCATION_HEAD_RATIO,
    TRUNCATION_TAIL_RATIO,
)

T = TypeVar("T")


def estimate_tokens(text: str) -> int:
    """Approximate token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


@dataclass(frozen=True)
class ShrinkStep(Generic[T]):
    """A named, size-reducing transformation."""

    name: str
    apply: Callable[[T], T]


@dataclass
class ShrinkResult(Generic[T]):
    """Outcome of progressive_shrink."""

    value: T
    fits: bool
    applied: list[str] = field(default_factory=list)


def progressive_shrink(
    value: T,
    steps: Sequence[ShrinkStep[T]],
    measure: Callable[[T], int],
    limit: int,
) -> ShrinkResult[T]:
    """
    Apply shrink steps in order until measure(value) <= limit.

    Args:
        value: Payload to shrink
        steps: Ordered shrink steps
        measure: Size function (characters, tokens, ...)
        limit: Maximum accepted size

    Returns:
        ShrinkResult with the final value, whether it fits and the names of
        the steps that were applied
    """
    applied: list[str] = []
    if measure(value) <= limit:
        return ShrinkResult(value=value, fits=True, applied=applied)

    for step in steps:
        value = step.apply(value)
        applied.append(step.name)
        if measure(value) <= limit:
            return ShrinkResult(value=value, fits=True, applied=applied)

    return ShrinkResult(value=value, fits=False, applied=applied)


def head_tail_step(max_chars: int, marker: str = ELISION_MARKER) -> ShrinkStep[str]:
    """
    Keep the first 60% and last 20% of a character allowance, eliding the middle.

    Text already within the allowance is returned unchanged. If the allowance
    cannot hold the marker the text is returned unchanged as well, and the
    caller sees that it still does not fit.
    """
    head = int(max_chars * TRUNCATION_HEAD_RATIO)
    tail = int(max_chars * TRUNCATION_TAIL_RATIO)

    def apply(text: str) -> str:
        if len(text) <= max_chars or head + len(marker) + tail > max_chars:
            return text
        return text[:head] + marker + text[len(text) - tail:]

    return ShrinkStep(name="head-tail-elision", apply=apply)


def truncate_to_tokens(content: str, max_tokens: int) -> str | None:
    """
    Shrink content to at most max_tokens estimated tokens.

    Returns:
        The (possibly truncated) content, or None when the allowance is too
        small to hold even the elision marker
    """
    max_chars = max(0, max_tokens) * CHARS_PER_TOKEN
    result = progressive_shrink(content, [head_tail_step(max_chars)], len, max_chars)
    return result.value if result.fits else None
