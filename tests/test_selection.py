#!/usr/bin/env python3
"""
Tests for Selection & Truncation
================================

Tests SelectionEngine including:
- Whole-file selection and the 90% soft stop
- Truncation of the overflowing file (always last in its category)
- Skipping files when the allowance cannot hold the elision marker
- No duplicate paths across categories
- Budget law over mixed candidate sizes
- Candidate filters per category
"""

from context.constants import ELISION_MARKER
from context.models import BudgetBreakdown, FileCategory, ScoredFile, TokenBudget
from context.selection import (
    SelectionEngine,
    candidates_for_primary,
    candidates_for_tests,
    candidates_for_types,
)
from context.truncation import estimate_tokens


def make_file(path: str, chars: int, score: int = 10, **flags) -> ScoredFile:
    content = ("%s\n" % path) * (chars // (len(path) + 1)) + "x" * (chars % (len(path) + 1))
    return ScoredFile(
        path=path,
        score=score,
        reasons=(f"reason for {path}",),
        token_estimate=estimate_tokens(content),
        content=content,
        **flags,
    )


def budget(**breakdown) -> TokenBudget:
    parts = BudgetBreakdown(**breakdown)
    return TokenBudget(max=parts.total(), breakdown=parts)


class TestWholeFileSelection:
    """Tests for selecting files that fit."""

    def test_files_that_fit_are_added_whole(self):
        engine = SelectionEngine(budget(primary_files=1000))
        files = [make_file("a.ts", 400), make_file("b.ts", 400)]

        selected = engine.select_category(FileCategory.PRIMARY, files)

        assert [f.path for f in selected] == ["a.ts", "b.ts"]
        assert not any(f.truncated for f in selected)
        assert selected[0].content == files[0].content
        assert selected[0].reasons == files[0].reasons
        assert engine.tokens_used(FileCategory.PRIMARY) == 200

    def test_soft_stop_above_ninety_percent(self):
        """Once the category is over 90% full no more files are considered."""
        engine = SelectionEngine(budget(primary_files=100))
        files = [make_file("a.ts", 380), make_file("b.ts", 8)]

        selected = engine.select_category(FileCategory.PRIMARY, files)

        assert [f.path for f in selected] == ["a.ts"]

    def test_zero_budget_selects_nothing(self):
        engine = SelectionEngine(budget(primary_files=100))

        assert engine.select_category(FileCategory.TEST, [make_file("a.test.ts", 10)]) == []

    def test_token_count_matches_content(self):
        engine = SelectionEngine(budget(primary_files=1000))

        selected = engine.select_category(FileCategory.PRIMARY, [make_file("a.ts", 13)])

        assert selected[0].token_count == estimate_tokens(selected[0].content) == 4


class TestTruncation:
    """Tests for truncating the overflowing file."""

    def test_single_large_file(self):
        """A 10,000-char file under a 400-token allowance is cut to at most 1600 chars."""
        engine = SelectionEngine(budget(primary_files=400))

        selected = engine.select_category(FileCategory.PRIMARY, [make_file("big.ts", 10_000)])

        assert len(selected) == 1
        chosen = selected[0]
        assert chosen.truncated
        assert len(chosen.content) <= 1600
        assert chosen.content.count(ELISION_MARKER) == 1
        assert chosen.token_count == estimate_tokens(chosen.content)
        assert chosen.token_count <= 400

    def test_truncation_closes_category(self):
        engine = SelectionEngine(budget(primary_files=200))
        files = [make_file("a.ts", 200), make_file("b.ts", 4000), make_file("c.ts", 8)]

        selected = engine.select_category(FileCategory.PRIMARY, files)

        assert [f.path for f in selected] == ["a.ts", "b.ts"]
        assert selected[-1].truncated
        assert engine.tokens_used(FileCategory.PRIMARY) <= 200

    def test_skips_file_when_marker_does_not_fit(self):
        """Too little room left: the file is skipped and the category stops."""
        engine = SelectionEngine(budget(primary_files=100))
        files = [make_file("a.ts", 200), make_file("b.ts", 4000), make_file("c.ts", 8)]

        selected = engine.select_category(FileCategory.PRIMARY, files)

        assert [f.path for f in selected] == ["a.ts"]


class TestAcrossCategories:
    """Tests spanning several categories."""

    def test_no_duplicate_paths(self):
        engine = SelectionEngine(budget(primary_files=1000, dependencies=1000, tests=1000))
        shared = make_file("src/shared.ts", 40)
        other = make_file("src/other.ts", 40)

        engine.select_category(FileCategory.PRIMARY, [shared])
        deps = engine.select_category(FileCategory.DEPENDENCY, [shared, other])
        engine.select_category(FileCategory.TEST, [shared, other])

        paths = [f.path for f in engine.files]
        assert [f.path for f in deps] == ["src/other.ts"]
        assert len(paths) == len(set(paths)) == 2
        assert engine.chosen_paths == {"src/shared.ts", "src/other.ts"}

    def test_categories_charged_separately(self):
        engine = SelectionEngine(budget(primary_files=100, dependencies=100))

        engine.select_category(FileCategory.PRIMARY, [make_file("a.ts", 300)])
        engine.select_category(FileCategory.DEPENDENCY, [make_file("b.ts", 300)])

        assert engine.tokens_used(FileCategory.PRIMARY) == 75
        assert engine.tokens_used(FileCategory.DEPENDENCY) == 75
        assert engine.tokens_used() == 150

    def test_budget_law(self):
        """Selected tokens never exceed the sum of the sub-budgets."""
        limits = budget(primary_files=700, dependencies=150, tests=50, types=50)
        engine = SelectionEngine(limits)
        sizes = [120, 3000, 45, 999, 10_000, 7, 640, 2048]
        files = [make_file(f"src/f{i}.ts", size, score=100 - i) for i, size in enumerate(sizes)]

        engine.select_category(FileCategory.PRIMARY, files[:4])
        engine.select_category(FileCategory.DEPENDENCY, files[2:6])
        engine.select_category(FileCategory.TEST, files[4:])
        engine.select_category(FileCategory.TYPE, files)

        assert sum(f.token_count for f in engine.files) <= limits.breakdown.total()
        for category in (FileCategory.PRIMARY, FileCategory.DEPENDENCY, FileCategory.TEST, FileCategory.TYPE):
            assert engine.tokens_used(category) <= limits.for_category(category)


class TestCandidateFilters:
    """Tests for the per-category candidate filters."""

    def test_filters(self):
        scored = [
            make_file("src/login.ts", 10, score=30),
            make_file("src/login.test.ts", 10, score=20, is_test=True),
            make_file("src/types/user.ts", 10, score=5, is_type_definition=True),
            make_file("src/types/cart.ts", 10, score=0, is_type_definition=True),
            make_file("src/unrelated.ts", 10, score=0),
        ]

        assert [f.path for f in candidates_for_primary(scored)] == ["src/login.ts", "src/types/user.ts"]
        assert [f.path for f in candidates_for_tests(scored)] == ["src/login.test.ts"]
        assert [f.path for f in candidates_for_types(scored)] == ["src/types/user.ts"]

    def test_type_definitions_left_to_type_category(self):
        scored = [
            make_file("src/login.ts", 10, score=30),
            make_file("src/types/user.ts", 10, score=5, is_type_definition=True),
        ]

        primary = candidates_for_primary(scored, include_type_definitions=False)

        assert [f.path for f in primary] == ["src/login.ts"]
