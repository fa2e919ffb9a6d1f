"""
Token Budget Allocator
======================

Splits a total token budget into per-category sub-budgets using a fixed
percentage table per optimization strategy.

Categories the caller did not request get zero. Their share is left unused
rather than redistributed. The primary files category is always allocated.
"""

from __future__ import annotations

from collections.abc import Iterable

from .constants import INCLUDE_TYPES, STRATEGY_ALLOCATIONS
from .errors import ContextValidationError
from .models import BudgetBreakdown, OptimizationStrategy, TokenBudget


def allocate_budget(
    max_tokens: int,
    include_types: Iterable[str],
    strategy: OptimizationStrategy | str = OptimizationStrategy.RELEVANCE,
) -> TokenBudget:
    """
    Allocate a token budget.

    Args:
        max_tokens: Total budget, must be a positive integer
        include_types: Requested categories ("architecture", "dependencies",
            "tests", "types"; "relevant-files" is implied)
        strategy: Optimization strategy selecting the percentage table

    Returns:
        TokenBudget whose breakdown sums to at most max_tokens

    Raises:
        ContextValidationError: If max_tokens is not positive or the strategy is unknown
    """
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
        raise ContextValidationError(f"maxTokens must be a positive integer, got {max_tokens!r}")

    try:
        strategy = OptimizationStrategy(strategy)
    except ValueError:
        raise ContextValidationError(
            f"Unknown optimization strategy: {strategy!r} "
            f"(expected one of {', '.join(s.value for s in OptimizationStrategy)})"
        )

    requested = {t for t in include_types if t in INCLUDE_TYPES}
    arch_pct, primary_pct, deps_pct, tests_pct, types_pct = STRATEGY_ALLOCATIONS[strategy.value]

    def share(pct: int, include_type: str) -> int:
        if include_type not in requested:
            return 0
        return max_tokens * pct // 100

    breakdown = BudgetBreakdown(
        architecture=share(arch_pct, "architecture"),
        primary_files=max(1, max_tokens * primary_pct // 100),
        dependencies=share(deps_pct, "dependencies"),
        tests=share(tests_pct, "tests"),
        types=share(types_pct, "types"),
    )
    return TokenBudget(max=max_tokens, breakdown=breakdown)
