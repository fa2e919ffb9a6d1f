#!/usr/bin/env python3
"""
Integration Tests for Context Pack Building
===========================================

Tests ContextPackBuilder end to end on the sample React project including:
- Primary and dependency selection for a bug task
- Tests and type definition categories
- Budget law, no duplicates and determinism
- Sync/async equivalence
- Empty packs, truncation and deadline expiry
- Recovery from collaborator failures
- Project config globs
"""

import asyncio
import json
from pathlib import Path

import pytest
from context.builder import ContextPackBuilder, build_context_pack, build_context_pack_async
from context.constants import ELISION_MARKER, NO_MATCH_SUGGESTION
from context.errors import CollaboratorFailure, ContextValidationError
from context.models import FileCategory, TaskType
from context.request import ContextPackRequest

BUG_TASK = "Fix login bug in auth flow"


def params(project: Path, **overrides) -> dict:
    values = {"task": BUG_TASK, "projectPath": str(project)}
    values.update(overrides)
    return values


def categories(pack) -> dict[str, str]:
    return {f.path: f.category.value for f in pack.files}


class FailingDetector:
    def detect(self):
        raise CollaboratorFailure("framework detection", "boom")


class FailingArchitecture:
    def summarize(self, framework):
        raise CollaboratorFailure("architecture summary", "boom")


class TestBugTask:
    """Tests for the default bug-task pack."""

    def test_login_file_is_primary(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project))

        assert pack.intent.type is TaskType.BUG
        login = next(f for f in pack.files if f.path == "src/auth/login.ts")
        assert login.category is FileCategory.PRIMARY
        assert "Path matches domain concept: auth" in login.reasons
        assert pack.files[0].path == "src/auth/login.ts"

    def test_primary_and_dependencies(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project))

        assert categories(pack) == {
            "src/auth/login.ts": "primary",
            "src/auth/session.ts": "primary",
            "src/api/client.ts": "dependency",
            "src/types/user.ts": "dependency",
        }

    def test_metadata(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project))

        assert pack.metadata.framework == "react"
        assert pack.metadata.total_candidates == 7
        assert pack.metadata.included == 4
        assert pack.metadata.tokens_used == pack.tokens_used
        assert pack.metadata.deadline_exceeded is False
        assert pack.metadata.generated_at

    def test_architecture_overview(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project))

        assert pack.architecture_summary.startswith("Framework: react")
        assert pack.architecture_tokens > 0
        assert "## Architecture Overview" in pack.rendered_output

    def test_rendered_markdown(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project))

        assert pack.rendered_output.startswith(f"# Context Pack: {BUG_TASK}")
        assert "### src/auth/login.ts" in pack.rendered_output

    def test_xml_format(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, format="xml"))

        assert pack.rendered_output.startswith("<context-pack>")

    def test_json_format(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, format="json"))

        assert json.loads(pack.rendered_output)["files"][0]["path"] == "src/auth/login.ts"

    def test_focus_area_pulls_in_file(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, focusAreas=["store"]))

        assert categories(pack)["src/store/cart.ts"] == "primary"


class TestOptionalCategories:
    """Tests for the tests and types categories."""

    def test_tests_category(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, includeTypes=["tests"]))

        assert categories(pack)["src/auth/login.test.ts"] == "test"
        assert pack.related_tests == ["src/auth/login.test.ts"]

    def test_tests_not_discovered_unless_requested(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project))

        assert "src/auth/login.test.ts" not in categories(pack)
        assert pack.related_tests == []

    def test_types_category(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, task="Fix user login bug", includeTypes=["types"]))

        assert categories(pack)["src/types/user.ts"] == "type"
        assert categories(pack)["src/auth/login.ts"] == "primary"

    def test_unrequested_categories_empty(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, includeTypes=[]))

        assert set(categories(pack).values()) == {"primary"}
        assert pack.architecture_summary is None
        assert pack.architecture_tokens == 0


class TestInvariants:
    """Tests for budget, duplicate and determinism guarantees."""

    @pytest.mark.parametrize("max_tokens", [40, 150, 300, 1000, 50_000])
    @pytest.mark.parametrize("strategy", ["relevance", "breadth", "depth"])
    def test_budget_law(self, frontend_project: Path, max_tokens: int, strategy: str):
        pack = build_context_pack(
            params(
                frontend_project,
                maxTokens=max_tokens,
                optimizationStrategy=strategy,
                includeTypes=["architecture", "dependencies", "tests", "types"],
            )
        )

        assert pack.tokens_used <= pack.budget.breakdown.total() <= max_tokens
        for f in pack.files:
            assert f.token_count <= pack.budget.for_category(f.category)

    def test_no_duplicate_paths(self, frontend_project: Path):
        pack = build_context_pack(
            params(frontend_project, includeTypes=["architecture", "dependencies", "tests", "types"])
        )

        paths = [f.path for f in pack.files]
        assert len(paths) == len(set(paths))

    def test_deterministic(self, frontend_project: Path):
        first = build_context_pack(params(frontend_project, includeTypes=["dependencies", "tests"]))
        second = build_context_pack(params(frontend_project, includeTypes=["dependencies", "tests"]))

        assert first.files == second.files
        assert first.suggestions == second.suggestions

    def test_async_matches_sync(self, frontend_project: Path):
        request_params = params(frontend_project, includeTypes=["dependencies", "tests"])

        sync_pack = build_context_pack(request_params)
        async_pack = asyncio.run(build_context_pack_async(request_params))

        assert async_pack.files == sync_pack.files
        assert async_pack.related_tests == sync_pack.related_tests


class TestEdgeCases:
    """Tests for empty, truncated and cancelled packs."""

    def test_no_matching_files(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, task="Optimize websocket throttling"))

        assert pack.files == []
        assert NO_MATCH_SUGGESTION in pack.suggestions
        assert pack.metadata.included == 0
        assert pack.metadata.avg_score == 0.0

    def test_small_budget_truncates(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, maxTokens=150, includeTypes=[]))

        assert [f.path for f in pack.files] == ["src/auth/login.ts"]
        login = pack.files[0]
        assert login.truncated
        assert login.content.count(ELISION_MARKER) == 1
        assert len(login.content) <= 90 * 4
        assert any("truncated" in s for s in pack.suggestions)

    def test_expired_deadline_returns_partial_pack(self, frontend_project: Path):
        pack = build_context_pack(params(frontend_project, deadlineSeconds=1e-9))

        assert pack.metadata.deadline_exceeded is True
        assert pack.files == []
        assert any("deadline" in s for s in pack.suggestions)

    def test_empty_project(self, temp_dir: Path):
        pack = build_context_pack(params(temp_dir))

        assert pack.files == []
        assert pack.metadata.total_candidates == 0
        assert pack.metadata.framework == "node"

    def test_validation_error_before_work(self, frontend_project: Path):
        with pytest.raises(ContextValidationError):
            build_context_pack(params(frontend_project, maxTokens=0))


class TestCollaboratorFailures:
    """Tests for recovering from optional collaborator failures."""

    def test_framework_detection_failure(self, frontend_project: Path):
        request = ContextPackRequest.from_params(params(frontend_project))

        pack = ContextPackBuilder(request, framework_detector=FailingDetector()).build()

        assert pack.metadata.framework is None
        assert pack.architecture_summary.startswith("Framework: node")
        assert pack.files[0].path == "src/auth/login.ts"

    def test_architecture_failure(self, frontend_project: Path):
        request = ContextPackRequest.from_params(params(frontend_project))

        pack = ContextPackBuilder(request, architecture_provider=FailingArchitecture()).build()

        assert pack.architecture_summary is None
        assert len(pack.files) == 4


class TestProjectConfig:
    """Tests for project config affecting discovery."""

    def test_include_globs(self, frontend_project: Path):
        config_dir = frontend_project / ".frontend-context"
        config_dir.mkdir()
        (config_dir / "context-pack.json").write_text(
            json.dumps({"include_globs": ["src/auth/**/*.ts"]}), encoding="utf-8"
        )

        pack = build_context_pack(params(frontend_project))

        assert pack.metadata.total_candidates == 2
        assert set(categories(pack)) == {"src/auth/login.ts", "src/auth/session.ts"}

    def test_exclude_globs(self, frontend_project: Path):
        config_dir = frontend_project / ".frontend-context"
        config_dir.mkdir()
        (config_dir / "context-pack.yaml").write_text("exclude_globs:\n  - src/api/**\n", encoding="utf-8")

        pack = build_context_pack(params(frontend_project))

        assert "src/api/client.ts" not in categories(pack)

    def test_malformed_tsconfig_does_not_break_pack(self, frontend_project: Path):
        (frontend_project / "tsconfig.json").write_text('{"compilerOptions": null}', encoding="utf-8")

        pack = build_context_pack(params(frontend_project))

        assert pack.files[0].path == "src/auth/login.ts"
        assert "src/types/user.ts" not in categories(pack)
