"""
Framework Detector
==================

Detects the front-end framework of a project from package.json
dependencies, falling back to the directory layout, and supplies default
include/exclude globs for candidate discovery.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from context.errors import CollaboratorFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameworkDetection:
    """Result of framework detection."""

    framework: str
    confidence: float
    version: str | None = None
    evidence: list[str] = field(default_factory=list)


COMMON_EXCLUDE_GLOBS = [
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/coverage/**",
    "**/.git/**",
]

TEST_GLOBS = [
    "**/*.test.*",
    "**/*.spec.*",
    "**/__tests__/**",
]

TYPE_GLOBS = [
    "**/*.d.ts",
    "types/**/*.ts",
    "src/types/**/*.ts",
]

FRAMEWORK_EXCLUDE_GLOBS = {
    "nuxt3": ["**/.nuxt/**", "**/.output/**"],
    "react-native": ["**/android/**", "**/ios/**", "**/.expo/**", "**/web-build/**"],
    "expo": ["**/android/**", "**/ios/**", "**/.expo/**", "**/.expo-shared/**", "**/web-build/**"],
}

FRAMEWORK_INCLUDE_GLOBS = {
    "nuxt3": [
        "components/**/*.vue",
        "composables/**/*.{ts,js}",
        "pages/**/*.vue",
        "layouts/**/*.vue",
        "middleware/**/*.{ts,js}",
        "server/**/*.ts",
        "stores/**/*.{ts,js}",
        "utils/**/*.{ts,js}",
        "plugins/**/*.{ts,js}",
        "app.vue",
        "src/**/*.{vue,ts,js}",
    ],
    "vue3": [
        "src/**/*.{vue,ts,js}",
        "components/**/*.vue",
    ],
    "react-native": [
        "src/**/*.{ts,tsx,js,jsx}",
        "app/**/*.{ts,tsx,js,jsx}",
        "screens/**/*.{tsx,jsx}",
        "components/**/*.{tsx,jsx}",
        "navigation/**/*.{tsx,ts}",
        "hooks/**/*.{ts,tsx}",
        "contexts/**/*.{tsx,ts}",
        "services/**/*.{ts,tsx}",
        "api/**/*.{ts,tsx}",
        "utils/**/*.ts",
        "types/**/*.ts",
    ],
    "react": [
        "src/**/*.{ts,tsx,js,jsx}",
        "components/**/*.{tsx,jsx}",
        "hooks/**/*.ts",
    ],
}
FRAMEWORK_INCLUDE_GLOBS["expo"] = FRAMEWORK_INCLUDE_GLOBS["react-native"]

DEFAULT_INCLUDE_GLOBS = ["src/**/*.{ts,tsx,js,jsx}", "lib/**/*.{ts,js}"]


class FrameworkDetector:
    """Detects project framework from package.json and file structure."""

    def __init__(self, project_dir: Path):
        self.project_dir = Path(project_dir).resolve()

    def detect(self) -> FrameworkDetection:
        """
        Detect the project framework.

        Returns:
            FrameworkDetection

        Raises:
            CollaboratorFailure: If the project directory cannot be inspected
        """
        if not self.project_dir.is_dir():
            raise CollaboratorFailure("framework detection", f"{self.project_dir} is not a directory")

        package_json = self.project_dir / "package.json"
        if package_json.exists():
            try:
                data = json.loads(package_json.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.debug("Unreadable package.json, using file structure: %s", e)
            else:
                if isinstance(data, dict):
                    return self._detect_from_package_json(data)

        return self._detect_from_file_structure()

    def _detect_from_package_json(self, package_json: dict) -> FrameworkDetection:
        deps: dict[str, str] = {}
        for key in ("dependencies", "devDependencies"):
            section = package_json.get(key)
            if isinstance(section, dict):
                deps.update({name: str(version) for name, version in section.items()})

        if "nuxt" in deps and _major(deps["nuxt"]) == "3":
            evidence = ["nuxt v3 dependency found"]
            has_config = self._exists("nuxt.config.ts") or self._exists("nuxt.config.js")
            if has_config:
                evidence.append("nuxt.config found")
            return FrameworkDetection("nuxt3", 1.0 if has_config else 0.9, _clean(deps["nuxt"]), evidence)

        if "vue" in deps and _major(deps["vue"]) == "3":
            evidence = ["vue v3 dependency found"]
            if self._exists("vite.config.ts") or self._exists("vite.config.js"):
                evidence.append("vite config found")
            return FrameworkDetection("vue3", 0.95, _clean(deps["vue"]), evidence)

        if "expo" in deps:
            evidence = ["expo dependency found"]
            has_app_json = self._exists("app.json")
            if has_app_json:
                evidence.append("app.json found")
            return FrameworkDetection("expo", 1.0 if has_app_json else 0.9, _clean(deps["expo"]), evidence)

        if "react-native" in deps:
            evidence = ["react-native dependency found"]
            has_metro = self._exists("metro.config.js")
            if has_metro:
                evidence.append("metro.config.js found")
            return FrameworkDetection(
                "react-native", 1.0 if has_metro else 0.9, _clean(deps["react-native"]), evidence
            )

        if "react" in deps:
            evidence = ["react dependency found"]
            if self._exists("public") or self._exists("index.html"):
                evidence.append("web project structure detected")
            return FrameworkDetection("react", 0.85, _clean(deps["react"]), evidence)

        return FrameworkDetection("node", 0.5, None, ["no specific framework detected"])

    def _detect_from_file_structure(self) -> FrameworkDetection:
        has_nuxt_config = self._exists("nuxt.config.ts") or self._exists("nuxt.config.js")
        if has_nuxt_config and self._exists("pages") and self._exists("components"):
            return FrameworkDetection(
                "nuxt3", 0.8, None, ["nuxt.config found", "nuxt directory structure detected"]
            )

        if self._exists("vite.config.ts") and (self.project_dir / "src").is_dir():
            if any((self.project_dir / "src").glob("*.vue")):
                return FrameworkDetection("vue3", 0.75, None, ["Vue SFC files found", "Vite config found"])

        if self._exists("metro.config.js") or (self._exists("android") and self._exists("ios")):
            return FrameworkDetection("react-native", 0.7, None, ["React Native structure detected"])

        return FrameworkDetection("node", 0.3, None, ["no clear framework indicators found"])

    def _exists(self, relative: str) -> bool:
        return (self.project_dir / relative).exists()


def default_include_globs(framework: str) -> list[str]:
    """Default source globs for a framework."""
    return list(FRAMEWORK_INCLUDE_GLOBS.get(framework, DEFAULT_INCLUDE_GLOBS))


def default_exclude_globs(framework: str) -> list[str]:
    """Default exclusions for a framework (build output, vendored code)."""
    return COMMON_EXCLUDE_GLOBS + FRAMEWORK_EXCLUDE_GLOBS.get(framework, [])


def _clean(version: str) -> str:
    return version.lstrip("^~>=< ")


def _major(version: str) -> str:
    return _clean(version).split(".", 1)[0]
