"""
Architecture Summary Provider
=============================

Produces a short architecture overview of a front-end project: the
framework's conventional layers that are present, the state management
library and the navigation approach.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from context.errors import CollaboratorFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchitectureLayer:
    """A named layer of the project and the directories backing it."""

    name: str
    description: str
    directories: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArchitectureSummary:
    """High-level project architecture used as the context pack overview."""

    framework: str
    layers: tuple[ArchitectureLayer, ...] = ()
    state_management: str = "unknown"
    navigation: str = "unknown"

    def render(self) -> str:
        """Plain-text overview; this is the text charged to the architecture budget."""
        lines = [
            f"Framework: {self.framework}",
            f"State management: {self.state_management}",
            f"Navigation: {self.navigation}",
        ]
        if self.layers:
            lines.append("Layers:")
            for layer in self.layers:
                dirs = ", ".join(layer.directories)
                lines.append(f"- {layer.name}: {layer.description}" + (f" ({dirs})" if dirs else ""))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework,
            "state_management": self.state_management,
            "navigation": self.navigation,
            "layers": [
                {"name": l.name, "description": l.description, "directories": list(l.directories)}
                for l in self.layers
            ],
        }


# (name, description, candidate directories)
FRAMEWORK_LAYERS: dict[str, list[tuple[str, str, tuple[str, ...]]]] = {
    "nuxt3": [
        ("Pages", "File-based routing and page components", ("pages",)),
        ("Components", "Reusable Vue components (auto-imported)", ("components",)),
        ("Composables", "Vue Composition API composables (auto-imported)", ("composables",)),
        ("Stores", "Pinia stores for state management", ("stores",)),
        ("Server", "Server routes and API endpoints", ("server",)),
    ],
    "vue3": [
        ("Views", "Routed view components", ("src/views", "src/pages")),
        ("Components", "Vue 3 components using Composition API", ("src/components", "components")),
        ("Composables", "Reusable composition functions", ("src/composables", "composables")),
        ("Stores", "Application state stores", ("src/stores", "src/store")),
    ],
    "react-native": [
        ("Screens", "Top-level screen components", ("screens", "src/screens", "app")),
        ("Components", "Reusable UI components", ("components", "src/components")),
        ("Hooks", "Custom React hooks", ("hooks", "src/hooks")),
        ("Navigation", "Navigators and route definitions", ("navigation", "src/navigation")),
    ],
    "react": [
        ("Pages", "Routed page components", ("src/pages", "src/routes")),
        ("Components", "React components", ("src/components", "components")),
        ("Hooks", "Custom React hooks", ("src/hooks", "hooks")),
        ("Services", "API clients and side effects", ("src/services", "src/api")),
    ],
}
FRAMEWORK_LAYERS["expo"] = FRAMEWORK_LAYERS["react-native"]

# Checked in order; first dependency present wins
STATE_LIBRARIES = [
    ("pinia", "pinia"),
    ("vuex", "vuex"),
    ("@reduxjs/toolkit", "redux"),
    ("redux", "redux"),
    ("zustand", "zustand"),
    ("mobx", "mobx"),
    ("jotai", "jotai"),
    ("recoil", "recoil"),
]

NAVIGATION_LIBRARIES = [
    ("expo-router", "file-based (expo-router)"),
    ("@react-navigation/native", "react-navigation"),
    ("vue-router", "vue-router"),
    ("react-router-dom", "react-router"),
    ("react-router", "react-router"),
]


class ArchitectureSummaryProvider:
    """Summarizes project layers, state management and navigation."""

    def __init__(self, project_dir: Path):
        self.project_dir = Path(project_dir).resolve()

    def summarize(self, framework: str) -> ArchitectureSummary:
        """
        Build the architecture summary.

        Args:
            framework: Framework name from FrameworkDetector

        Raises:
            CollaboratorFailure: If the project cannot be inspected
        """
        if not self.project_dir.is_dir():
            raise CollaboratorFailure("architecture summary", f"{self.project_dir} is not a directory")

        deps = self._dependencies()
        return ArchitectureSummary(
            framework=framework,
            layers=self._detect_layers(framework),
            state_management=self._detect_state_management(framework, deps),
            navigation=self._detect_navigation(framework, deps),
        )

    def _detect_layers(self, framework: str) -> tuple[ArchitectureLayer, ...]:
        layers = []
        for name, description, candidates in FRAMEWORK_LAYERS.get(framework, []):
            present = tuple(d + "/" for d in candidates if (self.project_dir / d).is_dir())
            if present:
                layers.append(ArchitectureLayer(name, description, present))
        return tuple(layers)

    def _detect_state_management(self, framework: str, deps: set[str]) -> str:
        for package, label in STATE_LIBRARIES:
            if package in deps:
                return label
        if framework == "nuxt3" and (self.project_dir / "stores").is_dir():
            return "pinia"
        if framework in ("react", "react-native", "expo"):
            return "context"
        return "unknown"

    def _detect_navigation(self, framework: str, deps: set[str]) -> str:
        if framework == "nuxt3":
            return "file-based"
        for package, label in NAVIGATION_LIBRARIES:
            if package in deps:
                return label
        return "unknown"

    def _dependencies(self) -> set[str]:
        package_json = self.project_dir / "package.json"
        if not package_json.exists():
            return set()
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CollaboratorFailure("architecture summary", f"unreadable package.json: {e}") from e
        deps: set[str] = set()
        if isinstance(data, dict):
            for key in ("dependencies", "devDependencies"):
                section = data.get(key)
                if isinstance(section, dict):
                    deps.update(section)
        return deps
