"""
Candidate File Discovery
========================

Enumerates source files under a project using gitignore-style include and
exclude globs. Results are sorted by project-relative POSIX path so every
platform sees the same candidate order.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

import pathspec

from .framework_detector import TEST_GLOBS, TYPE_GLOBS

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = {".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".vue"}

# Never descended into
PRUNED_DIRS = {"node_modules", ".git"}

_BRACE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand shell-style alternatives: 'src/**/*.{ts,tsx}' -> two patterns."""
    match = _BRACE.search(pattern)
    if not match:
        return [pattern]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(pattern[: match.start()] + option + pattern[match.end():]))
    return expanded


def build_spec(globs: list[str]) -> pathspec.PathSpec:
    lines: list[str] = []
    for glob in globs:
        lines.extend(expand_braces(glob))
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def discover_files(
    project_dir: Path,
    include_globs: list[str],
    exclude_globs: list[str],
    include_tests: bool = False,
    include_types: bool = False,
) -> list[Path]:
    """
    Find candidate source files.

    Args:
        project_dir: Project root
        include_globs: Patterns a file must match
        exclude_globs: Patterns that remove a file
        include_tests: Also include test files (otherwise they are excluded)
        include_types: Also include type declaration files

    Returns:
        Absolute paths sorted by relative path
    """
    project_dir = Path(project_dir).resolve()
    includes = list(include_globs)
    excludes = list(exclude_globs)
    if include_tests:
        includes.extend(TEST_GLOBS)
    else:
        excludes.extend(TEST_GLOBS)
    if include_types:
        includes.extend(TYPE_GLOBS)

    include_spec = build_spec(includes)
    exclude_spec = build_spec(excludes)

    found: dict[str, Path] = {}
    for root, dirs, files in os.walk(project_dir):
        dirs[:] = [d for d in dirs if d not in PRUNED_DIRS]
        root_path = Path(root)
        for name in files:
            file_path = root_path / name
            if file_path.suffix.lower() not in SOURCE_EXTENSIONS:
                continue
            relative = file_path.relative_to(project_dir).as_posix()
            if include_spec.match_file(relative) and not exclude_spec.match_file(relative):
                found[relative] = file_path

    logger.debug("Discovered %d candidate files under %s", len(found), project_dir)
    return [found[key] for key in sorted(found)]
