"""
Context Pack Configuration Loader
=================================

Loads project-level defaults for context pack generation from the project's
.frontend-context directory. Supports JSON and YAML config formats.

Configuration files searched in order:
1. .frontend-context/context-pack.json
2. .frontend-context/context-pack.yaml
3. .frontend-context/context-pack.yml

Values from the config file replace the built-in defaults; explicit
invocation parameters replace both.

Usage:
    from context.config import load_context_config

    config = load_context_config(project_dir=Path("/path/to/project"))
    print(config.max_tokens, config.include_types)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .constants import DEFAULT_INCLUDE_TYPES, DEFAULT_MAX_TOKENS, INCLUDE_TYPES
from .errors import ContextValidationError
from .models import OptimizationStrategy, OutputFormat

CONFIG_DIR = ".frontend-context"

CONFIG_FILENAMES = [
    "context-pack.json",
    "context-pack.yaml",
    "context-pack.yml",
]

# Expected python type per key; lists are lists of strings
CONFIG_SCHEMA: dict[str, type | tuple[type, ...]] = {
    "max_tokens": int,
    "include_types": list,
    "focus_areas": list,
    "format": str,
    "include_line_numbers": bool,
    "optimization_strategy": str,
    "include_globs": list,
    "exclude_globs": list,
    "deadline_seconds": (int, float),
    "max_workers": int,
    "max_file_bytes": int,
}


@dataclass
class ContextPackConfig:
    """Project-level defaults for context pack generation."""

    max_tokens: int = DEFAULT_MAX_TOKENS
    include_types: list[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE_TYPES))
    focus_areas: list[str] = field(default_factory=list)
    format: str = OutputFormat.MARKDOWN.value
    include_line_numbers: bool = True
    optimization_strategy: str = OptimizationStrategy.RELEVANCE.value
    # None means "use the detected framework's defaults"
    include_globs: list[str] | None = None
    exclude_globs: list[str] | None = None
    deadline_seconds: float | None = None
    max_workers: int = 16
    max_file_bytes: int = 1_000_000

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContextPackConfig:
        # Null values keep the defaults
        return cls(**{key: value for key, value in data.items() if key in CONFIG_SCHEMA and value is not None})


class ContextConfigLoader:
    """
    Loads context pack configuration from a project directory.

    Attributes:
        project_dir: Root directory of the project
        config_dir: Path to the .frontend-context directory
        config_file: Path to the config file (if found)
    """

    def __init__(self, project_dir: Path):
        self.project_dir = Path(project_dir).resolve()
        self.config_dir = self.project_dir / CONFIG_DIR
        self.config_file: Path | None = None

    def load(self) -> ContextPackConfig:
        """
        Load configuration, falling back to defaults when no file exists.

        Raises:
            ContextValidationError: If the config file cannot be parsed or is invalid
        """
        self.config_file = self._find_config_file()
        if self.config_file is None:
            return ContextPackConfig()

        config_data = self._read_config_file(self.config_file)
        errors = validate_config(config_data)
        if errors:
            message = f"Config validation errors in {self.config_file.name}:\n"
            message += "\n".join(f"  - {err}" for err in errors)
            raise ContextValidationError(message)

        return ContextPackConfig.from_dict(config_data)

    def _find_config_file(self) -> Path | None:
        if not self.config_dir.is_dir():
            return None
        for filename in CONFIG_FILENAMES:
            config_path = self.config_dir / filename
            if config_path.exists():
                return config_path
        return None

    def _read_config_file(self, config_path: Path) -> dict[str, Any]:
        suffix = config_path.suffix.lower()
        try:
            with open(config_path, encoding="utf-8") as f:
                if suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ContextValidationError(f"Invalid {suffix.lstrip('.').upper()} in {config_path.name}: {e}")
        except OSError as e:
            raise ContextValidationError(f"Failed to read {config_path.name}: {e}")

        if not isinstance(data, dict):
            raise ContextValidationError(f"{config_path.name} must contain a mapping at the top level")
        return data


def validate_config(config_data: dict[str, Any]) -> list[str]:
    """
    Validate config data against CONFIG_SCHEMA.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    unknown_keys = set(config_data) - set(CONFIG_SCHEMA)
    if unknown_keys:
        errors.append(f"Unknown keys: {', '.join(sorted(unknown_keys))}")

    for key, expected in CONFIG_SCHEMA.items():
        if key not in config_data or config_data[key] is None:
            continue
        value = config_data[key]
        # bool is a subclass of int
        if isinstance(value, bool) and expected is not bool:
            errors.append(f"'{key}' must be {_type_name(expected)}")
        elif not isinstance(value, expected):
            errors.append(f"'{key}' must be {_type_name(expected)}")
        elif expected is list and not all(isinstance(item, str) for item in value):
            errors.append(f"'{key}' must be a list of strings")

    if isinstance(config_data.get("max_tokens"), int) and config_data["max_tokens"] <= 0:
        errors.append("'max_tokens' must be positive")

    for item in config_data.get("include_types") or []:
        if isinstance(item, str) and item not in INCLUDE_TYPES:
            errors.append(f"Unknown include type: {item}")

    output_format = config_data.get("format")
    if isinstance(output_format, str) and output_format not in {f.value for f in OutputFormat}:
        errors.append(f"Unknown format: {output_format}")

    strategy = config_data.get("optimization_strategy")
    if isinstance(strategy, str) and strategy not in {s.value for s in OptimizationStrategy}:
        errors.append(f"Unknown optimization strategy: {strategy}")

    return errors


def load_context_config(project_dir: Path) -> ContextPackConfig:
    """Load configuration for a project."""
    return ContextConfigLoader(project_dir).load()


def _type_name(expected: type | tuple[type, ...]) -> str:
    names = {bool: "a boolean", int: "an integer", float: "a number", str: "a string", list: "a list"}
    if isinstance(expected, tuple):
        return "a number"
    return names.get(expected, expected.__name__)
