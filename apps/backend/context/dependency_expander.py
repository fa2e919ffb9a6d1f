"""
Dependency Expander
===================

Follows one hop of imports out of the selected primary files and returns
the imported files that are part of the scored candidate pool.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
from collections.abc import Iterable
from pathlib import Path

from analysis.dependency.js_parser import JSDependencyParser

from .cancellation import CancellationToken
from .constants import MAX_DEPENDENCY_FILES, RESOLVE_EXTENSIONS
from .errors import PartialReadError
from .models import ScoredFile

logger = logging.getLogger(__name__)


class DependencyExpander:
    """Resolves local imports of primary files against the candidate pool."""

    def __init__(
        self,
        project_root: Path,
        parser: JSDependencyParser | None = None,
        max_workers: int = 16,
        limit: int = MAX_DEPENDENCY_FILES,
    ):
        self.project_root = Path(project_root).resolve()
        self.parser = parser or JSDependencyParser(self.project_root)
        self.max_workers = max(1, max_workers)
        self.limit = limit

    def expand(
        self,
        primary_paths: Iterable[str],
        pool: list[ScoredFile],
        cancel: CancellationToken | None = None,
    ) -> list[ScoredFile]:
        """
        Collect dependency candidates for the given primary files.

        Args:
            primary_paths: Project-relative paths of the selected primary files
            pool: All scored files, highest score first
            cancel: Stops further import extraction once cancelled

        Returns:
            Up to `limit` pool files imported by the primary files, highest score first
        """
        cancel = cancel or CancellationToken.none()
        pool_paths = {f.path for f in pool}
        resolved: set[str] = set()

        for path in primary_paths:
            if cancel.cancelled:
                logger.warning("Dependency expansion cancelled")
                break
            resolved.update(self.resolve_imports(path, pool_paths))

        return self._select(resolved, pool)

    async def expand_async(
        self,
        primary_paths: Iterable[str],
        pool: list[ScoredFile],
        cancel: CancellationToken | None = None,
    ) -> list[ScoredFile]:
        """Same as expand, extracting imports concurrently."""
        cancel = cancel or CancellationToken.none()
        pool_paths = {f.path for f in pool}
        semaphore = asyncio.Semaphore(self.max_workers)

        async def resolve_one(path: str) -> list[str]:
            async with semaphore:
                if cancel.cancelled:
                    return []
                return await asyncio.to_thread(self.resolve_imports, path, pool_paths)

        results = await asyncio.gather(*(resolve_one(p) for p in primary_paths))
        if cancel.cancelled:
            logger.warning("Dependency expansion cancelled")
        resolved = {path for paths in results for path in paths}
        return self._select(resolved, pool)

    def resolve_imports(self, importer: str, pool_paths: set[str]) -> list[str]:
        """
        Resolve the local imports of one file to pool paths.

        Files whose imports cannot be extracted contribute nothing.
        """
        try:
            imports = self.parser.extract_imports(self.project_root / importer)
        except PartialReadError as e:
            logger.debug("Skipping import extraction: %s", e)
            return []

        resolved: list[str] = []
        for record in imports:
            target = self.resolve_specifier(importer, record.source, pool_paths)
            if target is not None and target != importer and target not in resolved:
                resolved.append(target)
        return resolved

    def resolve_specifier(self, importer: str, specifier: str, pool_paths: set[str]) -> str | None:
        """
        Resolve an import specifier from `importer` to a pool path.

        Relative specifiers resolve against the importer's directory and
        aliased ones through tsconfig/jsconfig paths. The bare path is tried
        first, then each extension in RESOLVE_EXTENSIONS, then index files.
        """
        category = self.parser.categorize(specifier)
        if category == "relative":
            base = posixpath.normpath(posixpath.join(posixpath.dirname(importer), specifier))
        elif category == "alias":
            aliased = self.parser.resolve_alias(specifier)
            try:
                base = aliased.relative_to(self.project_root).as_posix()
            except ValueError:
                return None
        else:
            return None

        if base.startswith("../") or base == "..":
            return None

        probes = [base]
        probes.extend(base + ext for ext in RESOLVE_EXTENSIONS)
        probes.extend(posixpath.join(base, "index" + ext) for ext in RESOLVE_EXTENSIONS)
        for probe in probes:
            if probe in pool_paths:
                return probe
        return None

    def _select(self, resolved: set[str], pool: list[ScoredFile]) -> list[ScoredFile]:
        # pool is already ranked, so filtering keeps score order and tie order
        return [f for f in pool if f.path in resolved][: self.limit]
