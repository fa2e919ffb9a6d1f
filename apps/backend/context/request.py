"""
Context Pack Request
====================

Validated invocation parameters. Every check happens here, before any file
is read, so invalid input fails fast without producing a partial pack.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .budget import allocate_budget
from .config import ContextPackConfig, load_context_config
from .constants import INCLUDE_TYPES
from .errors import ContextValidationError
from .models import OptimizationStrategy, OutputFormat, TokenBudget
from .renderer import parse_format

logger = logging.getLogger(__name__)

# camelCase invocation keys -> field names
PARAM_ALIASES = {
    "projectPath": "project_path",
    "maxTokens": "max_tokens",
    "includeTypes": "include_types",
    "focusAreas": "focus_areas",
    "includeLineNumbers": "include_line_numbers",
    "optimizationStrategy": "optimization_strategy",
    "deadlineSeconds": "deadline_seconds",
}


@dataclass(frozen=True)
class ContextPackRequest:
    """A validated request for a context pack."""

    task: str
    project_path: Path
    max_tokens: int
    include_types: tuple[str, ...]
    focus_areas: tuple[str, ...] = ()
    format: OutputFormat = OutputFormat.MARKDOWN
    include_line_numbers: bool = True
    strategy: OptimizationStrategy = OptimizationStrategy.RELEVANCE
    deadline_seconds: float | None = None
    config: ContextPackConfig = field(default_factory=ContextPackConfig, compare=False)

    def wants(self, include_type: str) -> bool:
        return include_type in self.include_types

    def budget(self) -> TokenBudget:
        return allocate_budget(self.max_tokens, self.include_types, self.strategy)

    @classmethod
    def from_params(cls, params: dict[str, Any]) -> ContextPackRequest:
        """
        Build a request from raw invocation parameters.

        Args:
            params: Tool/CLI parameters; camelCase and snake_case keys are accepted

        Raises:
            ContextValidationError: On any invalid parameter
        """
        values = {PARAM_ALIASES.get(key, key): value for key, value in params.items() if value is not None}

        task = values.get("task")
        if not isinstance(task, str) or not task.strip():
            raise ContextValidationError("Task description is required")

        if "format" in values:
            parse_format(values["format"])

        project_path = Path(values.get("project_path") or Path.cwd()).expanduser()
        if not project_path.is_dir():
            raise ContextValidationError(f"Project path does not exist: {project_path}")
        project_path = project_path.resolve()

        config = load_context_config(project_path)

        max_tokens = values.get("max_tokens", config.max_tokens)
        if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
            raise ContextValidationError(f"maxTokens must be a positive integer, got {max_tokens!r}")

        output_format = parse_format(values.get("format", config.format))

        try:
            strategy = OptimizationStrategy(values.get("optimization_strategy", config.optimization_strategy))
        except ValueError:
            raise ContextValidationError(
                f"Unknown optimization strategy: {values.get('optimization_strategy')!r}"
            )

        include_types = _include_types(values.get("include_types", config.include_types))
        focus_areas = values.get("focus_areas", config.focus_areas)
        if isinstance(focus_areas, str):
            focus_areas = [focus_areas]
        if not isinstance(focus_areas, (list, tuple)) or not all(isinstance(area, str) for area in focus_areas):
            raise ContextValidationError("focusAreas must be a list of strings")

        deadline = values.get("deadline_seconds", config.deadline_seconds)
        if deadline is not None and (isinstance(deadline, bool) or not isinstance(deadline, (int, float)) or deadline <= 0):
            raise ContextValidationError(f"deadlineSeconds must be positive, got {deadline!r}")

        return cls(
            task=task.strip(),
            project_path=project_path,
            max_tokens=max_tokens,
            include_types=include_types,
            focus_areas=tuple(focus_areas),
            format=output_format,
            include_line_numbers=bool(values.get("include_line_numbers", config.include_line_numbers)),
            strategy=strategy,
            deadline_seconds=deadline,
            config=config,
        )


def _include_types(requested: Any) -> tuple[str, ...]:
    if isinstance(requested, str):
        requested = [requested]
    if isinstance(requested, (set, frozenset)):
        requested = sorted(requested, key=str)
    if not isinstance(requested, (list, tuple, set, frozenset)):
        raise ContextValidationError("includeTypes must be a list of strings")

    known: list[str] = ["relevant-files"]
    for item in requested:
        if item not in INCLUDE_TYPES:
            logger.warning("Ignoring unsupported include type: %s", item)
        elif item not in known:
            known.append(item)
    return tuple(known)
