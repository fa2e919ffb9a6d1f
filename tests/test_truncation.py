#!/usr/bin/env python3
"""
Tests for Progressive Truncation
================================

Tests token estimation, the shrink-step machinery and head/tail elision.
"""

import pytest
from context.constants import ELISION_MARKER
from context.truncation import (
    ShrinkStep,
    estimate_tokens,
    head_tail_step,
    progressive_shrink,
    truncate_to_tokens,
)


class TestEstimateTokens:
    """Tests for the character-based token estimate."""

    @pytest.mark.parametrize(
        "text,expected",
        [("", 0), ("a", 1), ("abcd", 1), ("abcde", 2), ("x" * 1600, 400)],
    )
    def test_rounds_up(self, text: str, expected: int):
        assert estimate_tokens(text) == expected


class TestProgressiveShrink:
    """Tests for applying shrink steps until a value fits."""

    @staticmethod
    def halve() -> ShrinkStep[str]:
        return ShrinkStep("halve", lambda s: s[: len(s) // 2])

    def test_fitting_value_untouched(self):
        result = progressive_shrink("abc", [self.halve()], len, 10)

        assert result.value == "abc"
        assert result.fits
        assert result.applied == []

    def test_stops_at_first_fitting_step(self):
        steps = [
            ShrinkStep("drop-tail", lambda s: s[:60]),
            ShrinkStep("drop-more", lambda s: s[:10]),
        ]

        result = progressive_shrink("x" * 100, steps, len, 80)

        assert result.value == "x" * 60
        assert result.applied == ["drop-tail"]
        assert result.fits

    def test_reports_when_nothing_fits(self):
        result = progressive_shrink("x" * 100, [self.halve()], len, 10)

        assert not result.fits
        assert result.applied == ["halve"]
        assert len(result.value) == 50

    def test_works_on_structured_values(self):
        payload = {"keep": "a", "drop": "b" * 50}
        step = ShrinkStep("drop", lambda p: {"keep": p["keep"]})

        result = progressive_shrink(payload, [step], lambda p: len(str(p)), 20)

        assert result.value == {"keep": "a"}
        assert payload["drop"] == "b" * 50


class TestHeadTailStep:
    """Tests for head/tail elision."""

    def test_short_text_unchanged(self):
        step = head_tail_step(100)

        assert step.apply("short") == "short"

    def test_keeps_head_and_tail(self):
        text = "H" * 5000 + "T" * 5000

        result = head_tail_step(1600).apply(text)

        assert result == "H" * 960 + ELISION_MARKER + "T" * 320

    def test_idempotent(self):
        step = head_tail_step(1600)
        once = step.apply("z" * 10_000)

        assert step.apply(once) == once

    def test_allowance_too_small_for_marker(self):
        text = "x" * 1000

        assert head_tail_step(40).apply(text) == text


class TestTruncateToTokens:
    """Tests for truncating content to a token allowance."""

    def test_ten_thousand_chars_into_four_hundred_tokens(self):
        content = "".join(chr(ord("a") + i % 26) for i in range(10_000))

        result = truncate_to_tokens(content, 400)

        assert result is not None
        assert len(result) <= 1600
        assert result.count(ELISION_MARKER) == 1
        assert result.startswith(content[:960])
        assert result.endswith(content[-320:])

    def test_fitting_content_returned_whole(self):
        assert truncate_to_tokens("abc", 5) == "abc"

    def test_returns_none_when_marker_cannot_fit(self):
        assert truncate_to_tokens("x" * 1000, 10) is None

    def test_zero_allowance(self):
        assert truncate_to_tokens("x" * 10, 0) is None
