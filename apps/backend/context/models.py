"""
Data Models for Context Packs
=============================

Core data structures for task intent, scored files, token budgets and the
assembled context pack.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TaskType(str, Enum):
    """Kind of work a task description asks for."""

    FEATURE = "feature"
    BUG = "bug"
    REFACTOR = "refactor"
    INVESTIGATION = "investigation"
    DOCUMENTATION = "documentation"
    GENERAL = "general"


class OptimizationStrategy(str, Enum):
    """How the token budget is split between categories."""

    RELEVANCE = "relevance"
    BREADTH = "breadth"
    DEPTH = "depth"


class OutputFormat(str, Enum):
    """Wire formats the renderer supports."""

    MARKDOWN = "markdown"
    JSON = "json"
    XML = "xml"


class FileCategory(str, Enum):
    """Budget partition a context file is charged against."""

    PRIMARY = "primary"
    DEPENDENCY = "dependency"
    TEST = "test"
    TYPE = "type"
    ARCHITECTURE = "architecture"


@dataclass(frozen=True)
class TaskIntent:
    """Structured interpretation of a free-text task."""

    type: TaskType
    keywords: tuple[str, ...] = ()
    mentioned_files: tuple[str, ...] = ()
    framework_concepts: tuple[str, ...] = ()
    domain_concepts: tuple[str, ...] = ()
    action_verbs: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "keywords": list(self.keywords),
            "mentioned_files": list(self.mentioned_files),
            "framework_concepts": list(self.framework_concepts),
            "domain_concepts": list(self.domain_concepts),
            "action_verbs": list(self.action_verbs),
        }


@dataclass(frozen=True)
class ScoredFile:
    """A candidate file with its relevance score and justification."""

    path: str
    score: int
    reasons: tuple[str, ...]
    token_estimate: int
    content: str = field(default="", repr=False, compare=False)
    is_test: bool = False
    is_type_definition: bool = False


@dataclass(frozen=True)
class BudgetBreakdown:
    """Per-category token allowances."""

    architecture: int = 0
    primary_files: int = 0
    dependencies: int = 0
    tests: int = 0
    types: int = 0

    def total(self) -> int:
        return self.architecture + self.primary_files + self.dependencies + self.tests + self.types

    def to_dict(self) -> dict[str, int]:
        return {
            "architecture": self.architecture,
            "primary_files": self.primary_files,
            "dependencies": self.dependencies,
            "tests": self.tests,
            "types": self.types,
        }


@dataclass(frozen=True)
class TokenBudget:
    """Total token budget and how it is partitioned."""

    max: int
    breakdown: BudgetBreakdown

    def for_category(self, category: FileCategory) -> int:
        """Return the sub-budget a file category is charged against."""
        return {
            FileCategory.ARCHITECTURE: self.breakdown.architecture,
            FileCategory.PRIMARY: self.breakdown.primary_files,
            FileCategory.DEPENDENCY: self.breakdown.dependencies,
            FileCategory.TEST: self.breakdown.tests,
            FileCategory.TYPE: self.breakdown.types,
        }[category]

    def to_dict(self) -> dict[str, Any]:
        return {"max": self.max, "breakdown": self.breakdown.to_dict()}


@dataclass(frozen=True)
class ContextFile:
    """A file (or truncated excerpt) included in a context pack."""

    path: str
    relevance_score: int
    reasons: tuple[str, ...]
    content: str
    truncated: bool
    token_count: int
    category: FileCategory

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "relevance_score": self.relevance_score,
            "reasons": list(self.reasons),
            "content": self.content,
            "truncated": self.truncated,
            "token_count": self.token_count,
            "category": self.category.value,
        }


@dataclass
class PackMetadata:
    """Counts and timing information attached to a pack."""

    generated_at: str
    total_candidates: int
    included: int
    avg_score: float
    tokens_used: int = 0
    framework: str | None = None
    deadline_exceeded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "total_candidates": self.total_candidates,
            "included": self.included,
            "avg_score": self.avg_score,
            "tokens_used": self.tokens_used,
            "framework": self.framework,
            "deadline_exceeded": self.deadline_exceeded,
        }


@dataclass
class ContextPack:
    """Complete context bundle for a task."""

    task: str
    intent: TaskIntent
    strategy: OptimizationStrategy
    budget: TokenBudget
    files: list[ContextFile]
    metadata: PackMetadata
    architecture_summary: str | None = None
    architecture_tokens: int = 0
    suggestions: list[str] = field(default_factory=list)
    related_tests: list[str] = field(default_factory=list)
    rendered_output: str = ""

    @property
    def tokens_used(self) -> int:
        return sum(f.token_count for f in self.files) + self.architecture_tokens

    def to_dict(self, include_rendered: bool = True) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        data: dict[str, Any] = {
            "task": self.task,
            "intent": self.intent.to_dict(),
            "strategy": self.strategy.value,
            "budget": self.budget.to_dict(),
            "architecture_summary": self.architecture_summary,
            "architecture_tokens": self.architecture_tokens,
            "files": [f.to_dict() for f in self.files],
            "suggestions": list(self.suggestions),
            "related_tests": list(self.related_tests),
            "metadata": self.metadata.to_dict(),
        }
        if include_rendered:
            data["rendered_output"] = self.rendered_output
        return data
