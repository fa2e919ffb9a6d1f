"""
Selection & Truncation Engine
=============================

Greedily fills each category's sub-budget from the highest scored
candidate down.

Per category:
- stop once the running total passes 90% of the sub-budget;
- add a candidate whole when it fits;
- otherwise truncate it to the remaining allowance, add it and close the
  category (a truncation is always the last file of its category).

A path is selected at most once across all categories, and every
ContextFile.token_count is computed from the content actually emitted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .constants import SOFT_STOP_RATIO
from .models import ContextFile, FileCategory, ScoredFile, TokenBudget
from .truncation import estimate_tokens, truncate_to_tokens

logger = logging.getLogger(__name__)


class SelectionEngine:
    """Selects context files for one invocation under a token budget."""

    def __init__(self, budget: TokenBudget):
        self.budget = budget
        self.files: list[ContextFile] = []
        self._chosen: set[str] = set()
        self._used: dict[FileCategory, int] = {}

    @property
    def chosen_paths(self) -> set[str]:
        return set(self._chosen)

    def tokens_used(self, category: FileCategory | None = None) -> int:
        if category is None:
            return sum(self._used.values())
        return self._used.get(category, 0)

    def select_category(
        self,
        category: FileCategory,
        candidates: Iterable[ScoredFile],
    ) -> list[ContextFile]:
        """
        Fill one category from candidates (highest score first).

        Args:
            category: Category whose sub-budget is charged
            candidates: Ranked candidates; already selected paths are skipped

        Returns:
            The files added for this category, in selection order
        """
        limit = self.budget.for_category(category)
        used = 0
        selected: list[ContextFile] = []

        if limit <= 0:
            return selected

        for candidate in candidates:
            if candidate.path in self._chosen:
                continue
            if used > limit * SOFT_STOP_RATIO:
                break

            tokens = estimate_tokens(candidate.content)
            if used + tokens <= limit:
                selected.append(self._context_file(candidate, candidate.content, False, category))
                used += tokens
                continue

            remaining = limit - used
            excerpt = truncate_to_tokens(candidate.content, remaining)
            if excerpt is None:
                logger.debug(
                    "No room to truncate %s into %d remaining %s tokens",
                    candidate.path,
                    remaining,
                    category.value,
                )
            else:
                selected.append(self._context_file(candidate, excerpt, True, category))
                used += estimate_tokens(excerpt)
            break

        self._used[category] = self._used.get(category, 0) + used
        self.files.extend(selected)
        logger.debug("Selected %d %s files (%d/%d tokens)", len(selected), category.value, used, limit)
        return selected

    def _context_file(
        self,
        candidate: ScoredFile,
        content: str,
        truncated: bool,
        category: FileCategory,
    ) -> ContextFile:
        self._chosen.add(candidate.path)
        return ContextFile(
            path=candidate.path,
            relevance_score=candidate.score,
            reasons=candidate.reasons,
            content=content,
            truncated=truncated,
            token_count=estimate_tokens(content),
            category=category,
        )


def candidates_for_primary(scored: list[ScoredFile], include_type_definitions: bool = True) -> list[ScoredFile]:
    """
    Non-test files with any relevance signal, highest score first.

    Type definition files are left to the type category when
    include_type_definitions is False.
    """
    return [
        f
        for f in scored
        if f.score > 0 and not f.is_test and (include_type_definitions or not f.is_type_definition)
    ]


def candidates_for_tests(scored: list[ScoredFile]) -> list[ScoredFile]:
    return [f for f in scored if f.is_test and f.score > 0]


def candidates_for_types(scored: list[ScoredFile]) -> list[ScoredFile]:
    return [f for f in scored if f.is_type_definition and f.score > 0]
