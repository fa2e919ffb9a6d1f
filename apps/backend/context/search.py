"""
File Relevance Scorer
=====================

Scores candidate files against a task intent using additive, independent
lexical signals on the file path and content. Every signal that fires adds a
human-readable reason.

Candidates are visited in lexicographic order of their project-relative
path and the final ranking is a stable sort by score, so the output never
depends on filesystem listing order or on read completion order.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable
from pathlib import Path

from .cancellation import CancellationToken
from .constants import (
    CAP_CONTENT_DOMAIN_CONCEPT,
    CAP_CONTENT_KEYWORD,
    WEIGHT_CONTENT_DOMAIN_CONCEPT,
    WEIGHT_CONTENT_KEYWORD,
    WEIGHT_FOCUS_AREA,
    WEIGHT_MENTIONED_FILE,
    WEIGHT_PATH_DOMAIN_CONCEPT,
    WEIGHT_PATH_FRAMEWORK_CONCEPT,
    WEIGHT_PATH_KEYWORD,
    WEIGHT_RELATED_TEST,
)
from .errors import PartialReadError
from .models import ScoredFile, TaskIntent, TaskType
from .truncation import estimate_tokens

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_BYTES = 1_000_000
DEFAULT_MAX_WORKERS = 16

_TEST_PATH_PATTERN = re.compile(r"(\.test\.|\.spec\.|(^|/)__tests__/|(^|/)tests?/|(^|/)e2e/)")
_TYPE_PATH_PATTERN = re.compile(r"(\.d\.ts$|(^|/)@?types/|(^|/)types\.ts$)")


def is_test_path(path: str) -> bool:
    """True for paths that look like test files."""
    return bool(_TEST_PATH_PATTERN.search(path.lower()))


def is_type_definition_path(path: str) -> bool:
    """True for declaration files and files under a types/ directory."""
    return bool(_TYPE_PATH_PATTERN.search(path.lower()))


class FileRelevanceScorer:
    """Scores candidate files for a task."""

    def __init__(
        self,
        project_root: Path,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """
        Args:
            project_root: Root directory used to compute relative paths
            max_file_bytes: Larger files are skipped as unreadable
            max_workers: Concurrent reads in the async variant
        """
        self.project_root = Path(project_root).resolve()
        self.max_file_bytes = max_file_bytes
        self.max_workers = max(1, max_workers)

    def relative_path(self, file_path: Path) -> str:
        path = Path(file_path)
        try:
            return path.resolve().relative_to(self.project_root).as_posix()
        except ValueError:
            return path.as_posix()

    def read_candidate(self, file_path: Path) -> str:
        """
        Read a candidate file.

        Raises:
            PartialReadError: If the file is too large, unreadable or not UTF-8
        """
        try:
            if file_path.stat().st_size > self.max_file_bytes:
                raise PartialReadError(str(file_path), "file too large")
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PartialReadError(str(file_path), str(e)) from e

    def score_files(
        self,
        candidates: Iterable[Path],
        intent: TaskIntent,
        focus_areas: list[str] | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[ScoredFile]:
        """
        Score candidates sequentially.

        Args:
            candidates: Candidate file paths
            intent: Task intent to score against
            focus_areas: Path substrings the caller wants emphasised
            cancel: Stops further reads once cancelled

        Returns:
            Scored files, highest score first
        """
        cancel = cancel or CancellationToken.none()
        scored: list[ScoredFile] = []

        for file_path in self._ordered(candidates):
            if cancel.cancelled:
                logger.warning("Relevance scoring cancelled after %d files", len(scored))
                break
            result = self._score_path(file_path, intent, focus_areas)
            if result is not None:
                scored.append(result)

        return rank(scored)

    async def score_files_async(
        self,
        candidates: Iterable[Path],
        intent: TaskIntent,
        focus_areas: list[str] | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[ScoredFile]:
        """Score candidates with concurrent reads; same output as score_files."""
        cancel = cancel or CancellationToken.none()
        semaphore = asyncio.Semaphore(self.max_workers)

        async def score_one(file_path: Path) -> ScoredFile | None:
            async with semaphore:
                if cancel.cancelled:
                    return None
                return await asyncio.to_thread(self._score_path, file_path, intent, focus_areas)

        results = await asyncio.gather(*(score_one(p) for p in self._ordered(candidates)))
        if cancel.cancelled:
            logger.warning("Relevance scoring cancelled before all files were read")
        return rank([r for r in results if r is not None])

    def _ordered(self, candidates: Iterable[Path]) -> list[Path]:
        unique = {self.relative_path(p): Path(p) for p in candidates}
        return [unique[key] for key in sorted(unique)]

    def _score_path(
        self,
        file_path: Path,
        intent: TaskIntent,
        focus_areas: list[str] | None,
    ) -> ScoredFile | None:
        try:
            content = self.read_candidate(file_path)
        except PartialReadError as e:
            logger.debug("Skipping candidate: %s", e)
            return None
        return score_file(self.relative_path(file_path), content, intent, focus_areas)


def score_file(
    path: str,
    content: str,
    intent: TaskIntent,
    focus_areas: list[str] | None = None,
) -> ScoredFile:
    """
    Score a single file.

    Args:
        path: Project-relative POSIX path
        content: File text
        intent: Task intent
        focus_areas: Optional path substrings

    Returns:
        ScoredFile with score, reasons and token estimate
    """
    lower_path = path.lower()
    lower_content = content.lower()
    score = 0
    reasons: list[str] = []

    for area in focus_areas or []:
        if area and area.lower() in lower_path:
            score += WEIGHT_FOCUS_AREA
            reasons.append(f"Matches focus area: {area}")

    for mentioned in intent.mentioned_files:
        if _matches_mentioned(lower_path, mentioned):
            score += WEIGHT_MENTIONED_FILE
            reasons.append(f"Explicitly mentioned in task: {mentioned}")
            break

    for keyword in intent.keywords:
        if keyword in lower_path:
            score += WEIGHT_PATH_KEYWORD
            reasons.append(f"Path contains keyword: {keyword}")

    for concept in intent.domain_concepts:
        if concept in lower_path:
            score += WEIGHT_PATH_DOMAIN_CONCEPT
            reasons.append(f"Path matches domain concept: {concept}")

    for concept in intent.framework_concepts:
        if concept in lower_path:
            score += WEIGHT_PATH_FRAMEWORK_CONCEPT
            reasons.append(f"Path matches framework concept: {concept}")

    for keyword in intent.keywords:
        count = lower_content.count(keyword)
        if count:
            score += min(count * WEIGHT_CONTENT_KEYWORD, CAP_CONTENT_KEYWORD)
            reasons.append(f"Content mentions keyword '{keyword}' ({count}x)")

    for concept in intent.domain_concepts:
        count = lower_content.count(concept)
        if count:
            score += min(count * WEIGHT_CONTENT_DOMAIN_CONCEPT, CAP_CONTENT_DOMAIN_CONCEPT)
            reasons.append(f"Content mentions domain concept '{concept}' ({count}x)")

    test_file = is_test_path(path)
    if test_file and (intent.type is TaskType.BUG or "test" in intent.action_verbs):
        score += WEIGHT_RELATED_TEST
        reasons.append("Related test file")

    return ScoredFile(
        path=path,
        score=score,
        reasons=tuple(reasons),
        token_estimate=estimate_tokens(content),
        content=content,
        is_test=test_file,
        is_type_definition=is_type_definition_path(path),
    )


def rank(scored: list[ScoredFile]) -> list[ScoredFile]:
    """Sort by score descending; ties keep their existing order."""
    return sorted(scored, key=lambda f: -f.score)


def _matches_mentioned(lower_path: str, mentioned: str) -> bool:
    return (
        lower_path == mentioned
        or lower_path.endswith("/" + mentioned)
        or mentioned.endswith("/" + lower_path)
    )
