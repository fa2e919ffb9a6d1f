"""
Context Builder
===============

Orchestrates context pack generation for a task: intent extraction,
relevance scoring, budget allocation, dependency expansion, selection and
rendering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any

from analysis.architecture.summary import ArchitectureSummaryProvider
from analysis.dependency.js_parser import JSDependencyParser
from analysis.file_discovery import discover_files
from analysis.framework_detector import (
    FrameworkDetector,
    default_exclude_globs,
    default_include_globs,
)

from .cancellation import CancellationToken
from .constants import NO_MATCH_SUGGESTION
from .dependency_expander import DependencyExpander
from .errors import CollaboratorFailure
from .keyword_extractor import KeywordExtractor
from .models import (
    ContextFile,
    ContextPack,
    FileCategory,
    PackMetadata,
    ScoredFile,
    TaskIntent,
    TokenBudget,
)
from .renderer import render_pack
from .request import ContextPackRequest
from .search import FileRelevanceScorer
from .selection import (
    SelectionEngine,
    candidates_for_primary,
    candidates_for_tests,
    candidates_for_types,
)
from .truncation import estimate_tokens, truncate_to_tokens

logger = logging.getLogger(__name__)


@dataclass
class _Plan:
    """Inputs computed before any candidate file is read."""

    intent: TaskIntent
    budget: TokenBudget
    cancel: CancellationToken
    framework: str | None
    candidates: list[Path]


class ContextPackBuilder:
    """Builds a task-scoped context pack for a project."""

    def __init__(
        self,
        request: ContextPackRequest,
        framework_detector: FrameworkDetector | None = None,
        architecture_provider: ArchitectureSummaryProvider | None = None,
        parser: JSDependencyParser | None = None,
    ):
        self.request = request
        self.project_dir = request.project_path
        config = request.config

        # Initialize components
        self.keyword_extractor = KeywordExtractor()
        self.scorer = FileRelevanceScorer(
            self.project_dir,
            max_file_bytes=config.max_file_bytes,
            max_workers=config.max_workers,
        )
        self.expander = DependencyExpander(
            self.project_dir,
            parser=parser or JSDependencyParser(self.project_dir),
            max_workers=config.max_workers,
        )
        self.framework_detector = framework_detector or FrameworkDetector(self.project_dir)
        self.architecture_provider = architecture_provider or ArchitectureSummaryProvider(self.project_dir)

    def build(self) -> ContextPack:
        """
        Build the context pack, reading files sequentially.

        Returns:
            ContextPack with selected files and rendered output
        """
        plan = self._plan()
        scored = self.scorer.score_files(
            plan.candidates, plan.intent, list(self.request.focus_areas), plan.cancel
        )
        engine = SelectionEngine(plan.budget)
        primary = self._select_primary(engine, scored)

        dependencies: list[ScoredFile] = []
        if plan.budget.breakdown.dependencies > 0 and primary:
            dependencies = self.expander.expand([f.path for f in primary], scored, plan.cancel)

        return self._assemble(plan, scored, engine, dependencies)

    async def build_async(self) -> ContextPack:
        """
        Build the context pack with concurrent file reads.

        Produces the same pack as build(); read completion order never
        affects the result.
        """
        plan = self._plan()
        scored = await self.scorer.score_files_async(
            plan.candidates, plan.intent, list(self.request.focus_areas), plan.cancel
        )
        engine = SelectionEngine(plan.budget)
        primary = self._select_primary(engine, scored)

        dependencies: list[ScoredFile] = []
        if plan.budget.breakdown.dependencies > 0 and primary:
            dependencies = await self.expander.expand_async(
                [f.path for f in primary], scored, plan.cancel
            )

        return self._assemble(plan, scored, engine, dependencies)

    def _plan(self) -> _Plan:
        intent = self.keyword_extractor.analyze(self.request.task)
        budget = self.request.budget()
        cancel = CancellationToken(self.request.deadline_seconds)
        framework = self._detect_framework()
        candidates = self._discover_candidates(framework or "node")
        logger.info(
            "Building context pack: type=%s, %d candidates, budget=%d",
            intent.type.value,
            len(candidates),
            budget.max,
        )
        return _Plan(intent, budget, cancel, framework, candidates)

    def _select_primary(self, engine: SelectionEngine, scored: list[ScoredFile]) -> list[ContextFile]:
        # Type definitions get their own category when it is requested
        candidates = candidates_for_primary(scored, include_type_definitions=not self.request.wants("types"))
        return engine.select_category(FileCategory.PRIMARY, candidates)

    def _detect_framework(self) -> str | None:
        try:
            return self.framework_detector.detect().framework
        except CollaboratorFailure as e:
            logger.warning("Framework detection failed, using generic globs: %s", e)
            return None

    def _discover_candidates(self, framework: str) -> list[Path]:
        config = self.request.config
        include_globs = config.include_globs or default_include_globs(framework)
        exclude_globs = default_exclude_globs(framework) + list(config.exclude_globs or [])
        return discover_files(
            self.project_dir,
            include_globs,
            exclude_globs,
            include_tests=self.request.wants("tests"),
            include_types=self.request.wants("types"),
        )

    def _architecture_overview(self, framework: str | None, budget: TokenBudget) -> str | None:
        """Render the architecture summary within its sub-budget, or None."""
        if budget.breakdown.architecture <= 0:
            return None
        try:
            summary = self.architecture_provider.summarize(framework or "node")
        except CollaboratorFailure as e:
            logger.warning("Architecture summary omitted: %s", e)
            return None
        return truncate_to_tokens(summary.render(), budget.breakdown.architecture)

    def _assemble(
        self,
        plan: _Plan,
        scored: list[ScoredFile],
        engine: SelectionEngine,
        dependencies: list[ScoredFile],
    ) -> ContextPack:
        engine.select_category(FileCategory.DEPENDENCY, dependencies)
        engine.select_category(FileCategory.TEST, candidates_for_tests(scored))
        engine.select_category(FileCategory.TYPE, candidates_for_types(scored))

        files = list(engine.files)
        overview = self._architecture_overview(plan.framework, plan.budget)
        architecture_tokens = estimate_tokens(overview) if overview else 0
        deadline_exceeded = plan.cancel.cancelled

        metadata = PackMetadata(
            generated_at=datetime.now(timezone.utc).isoformat(),
            total_candidates=len(plan.candidates),
            included=len(files),
            avg_score=_average_score(files),
            tokens_used=sum(f.token_count for f in files) + architecture_tokens,
            framework=plan.framework,
            deadline_exceeded=deadline_exceeded,
        )

        pack = ContextPack(
            task=self.request.task,
            intent=plan.intent,
            strategy=self.request.strategy,
            budget=plan.budget,
            files=files,
            metadata=metadata,
            architecture_summary=overview,
            architecture_tokens=architecture_tokens,
            suggestions=_suggestions(files, deadline_exceeded),
            related_tests=_related_tests(files, scored),
        )
        pack.rendered_output = render_pack(pack, self.request.format, self.request.include_line_numbers)

        logger.info(
            "Context pack ready: %d/%d files, %d/%d tokens",
            len(files),
            len(plan.candidates),
            pack.tokens_used,
            plan.budget.max,
        )
        return pack


def build_context_pack(params: dict[str, Any]) -> ContextPack:
    """Validate parameters and build a context pack."""
    return ContextPackBuilder(ContextPackRequest.from_params(params)).build()


async def build_context_pack_async(params: dict[str, Any]) -> ContextPack:
    """Validate parameters and build a context pack with concurrent reads."""
    return await ContextPackBuilder(ContextPackRequest.from_params(params)).build_async()


def _average_score(files: list[ContextFile]) -> float:
    if not files:
        return 0.0
    return round(sum(f.relevance_score for f in files) / len(files), 2)


def _suggestions(files: list[ContextFile], deadline_exceeded: bool) -> list[str]:
    suggestions = []
    if not files:
        suggestions.append(NO_MATCH_SUGGESTION)
    if any(f.truncated for f in files):
        suggestions.append(
            "Some files were truncated to fit the budget. Increase maxTokens "
            "or use the 'depth' strategy for fuller primary files."
        )
    if deadline_exceeded:
        suggestions.append("The deadline expired before all files were read; results may be incomplete.")
    return suggestions


def _stem(path: str) -> str:
    return PurePosixPath(path).name.split(".", 1)[0].lower()


def _related_tests(files: list[ContextFile], scored: list[ScoredFile]) -> list[str]:
    """Test files named after a selected source file."""
    stems = {_stem(f.path) for f in files if f.category is not FileCategory.TEST}
    return [f.path for f in scored if f.is_test and _stem(f.path) in stems]
