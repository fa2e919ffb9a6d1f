#!/usr/bin/env python3
"""
Tests for Context Pack Rendering
================================

Tests markdown, JSON and XML output including:
- Markdown sections, fences, line numbers and truncation notes
- Complete JSON serialization
- XML entity escaping of text and attributes
- Format validation
"""

import json

import pytest
from context.budget import allocate_budget
from context.errors import ContextValidationError
from context.keyword_extractor import KeywordExtractor
from context.models import ContextFile, ContextPack, FileCategory, OptimizationStrategy, OutputFormat, PackMetadata
from context.renderer import parse_format, render_pack
from context.truncation import estimate_tokens


def make_file(path: str, content: str, truncated: bool = False, reasons=("Path contains keyword: login",)):
    return ContextFile(
        path=path,
        relevance_score=42,
        reasons=tuple(reasons),
        content=content,
        truncated=truncated,
        token_count=estimate_tokens(content),
        category=FileCategory.PRIMARY,
    )


def make_pack(task: str = "Fix login bug in auth flow", files=None, **kwargs) -> ContextPack:
    files = files or []
    return ContextPack(
        task=task,
        intent=KeywordExtractor().analyze(task),
        strategy=OptimizationStrategy.RELEVANCE,
        budget=allocate_budget(1000, ["relevant-files"]),
        files=files,
        metadata=PackMetadata(
            generated_at="2026-01-01T00:00:00+00:00",
            total_candidates=5,
            included=len(files),
            avg_score=42.0 if files else 0.0,
        ),
        **kwargs,
    )


class TestMarkdown:
    """Tests for markdown output."""

    def test_header_and_intent(self):
        output = render_pack(make_pack(), "markdown")

        assert output.startswith("# Context Pack: Fix login bug in auth flow\n")
        assert "**Task type:** bug" in output
        assert "**Keywords:** login, auth, flow" in output
        assert "**Tokens:** 0/1000" in output

    def test_file_section_with_line_numbers(self):
        pack = make_pack(files=[make_file("src/auth/login.ts", "a\nb\nc")])

        output = render_pack(pack)

        assert "### src/auth/login.ts" in output
        assert "- **Relevance score:** 42" in output
        assert "- **Category:** primary" in output
        assert "- **Why:** Path contains keyword: login" in output
        assert "```typescript\n1 | a\n2 | b\n3 | c\n```" in output

    def test_line_number_width(self):
        content = "\n".join(f"line{i}" for i in range(1, 13))
        pack = make_pack(files=[make_file("src/a.js", content)])

        output = render_pack(pack)

        assert " 1 | line1\n" in output
        assert "12 | line12\n" in output

    def test_without_line_numbers(self):
        pack = make_pack(files=[make_file("src/App.vue", "<template/>")])

        output = render_pack(pack, OutputFormat.MARKDOWN, include_line_numbers=False)

        assert "```vue\n<template/>\n```" in output

    def test_at_most_three_reasons(self):
        reasons = ["r1", "r2", "r3", "r4"]
        pack = make_pack(files=[make_file("src/a.ts", "x", reasons=reasons)])

        output = render_pack(pack)

        assert "- **Why:** r1; r2; r3\n" in output
        assert "r4" not in output

    def test_truncation_note(self):
        pack = make_pack(files=[make_file("src/a.ts", "x", truncated=True)])

        assert "content truncated to fit the token budget" in render_pack(pack)

    def test_longer_fence_for_embedded_backticks(self):
        pack = make_pack(files=[make_file("src/README.ts", "```\ncode\n```")])

        output = render_pack(pack, include_line_numbers=False)

        assert "````typescript\n```\ncode\n```\n````" in output

    def test_architecture_and_suggestions(self):
        pack = make_pack(
            architecture_summary="Framework: react",
            suggestions=["Try adding focus areas."],
            related_tests=["src/auth/login.test.ts"],
        )

        output = render_pack(pack)

        assert "## Architecture Overview\n\nFramework: react" in output
        assert "## Related Tests\n\n- src/auth/login.test.ts" in output
        assert "## Suggestions\n\n- Try adding focus areas." in output

    def test_files_in_selection_order(self):
        pack = make_pack(files=[make_file("src/z.ts", "z"), make_file("src/a.ts", "a")])

        output = render_pack(pack)

        assert output.index("### src/z.ts") < output.index("### src/a.ts")


class TestJSON:
    """Tests for JSON output."""

    def test_complete_serialization(self):
        pack = make_pack(files=[make_file("src/a.ts", "const a = 1;")], suggestions=["s"])

        data = json.loads(render_pack(pack, "json"))

        assert data["task"] == pack.task
        assert data["intent"]["type"] == "bug"
        assert data["budget"]["breakdown"]["primary_files"] == 600
        assert data["files"][0]["content"] == "const a = 1;"
        assert data["files"][0]["category"] == "primary"
        assert data["metadata"]["total_candidates"] == 5
        assert data["suggestions"] == ["s"]
        assert "rendered_output" not in data


class TestXML:
    """Tests for XML output."""

    def test_task_with_script_tag_escaped(self):
        """Task text containing <script> never appears raw."""
        pack = make_pack(task="Fix <script> injection in comment form")

        output = render_pack(pack, "xml")

        assert "&lt;script&gt;" in output
        assert "<script>" not in output

    def test_content_and_attributes_escaped(self):
        content = 'if (a < b && c > d) { el.innerHTML = "<b>x</b>"; }'
        pack = make_pack(files=[make_file("src/it's&more.ts", content, truncated=True)])

        output = render_pack(pack, "xml")

        assert 'path="src/it&apos;s&amp;more.ts"' in output
        assert 'truncated="true"' in output
        assert "a &lt; b &amp;&amp; c &gt; d" in output
        assert "&quot;&lt;b&gt;x&lt;/b&gt;&quot;" in output
        assert "<b>" not in output

    def test_structure(self):
        pack = make_pack(files=[make_file("src/a.ts", "x")], architecture_summary="Framework: vue3")

        output = render_pack(pack, "xml")

        assert output.startswith("<context-pack>\n  <task>")
        assert '<intent type="bug">' in output
        assert "<keyword>login</keyword>" in output
        assert "<architecture>Framework: vue3</architecture>" in output
        assert '<file path="src/a.ts" category="primary" score="42" tokens="1" truncated="false">x</file>' in output
        assert output.rstrip().endswith("</context-pack>")


class TestFormatValidation:
    """Tests for unsupported formats."""

    @pytest.mark.parametrize("value", ["yaml", "html", "", "MARKDOWN"])
    def test_unsupported_format(self, value: str):
        with pytest.raises(ContextValidationError, match="Unsupported format"):
            parse_format(value)

    def test_render_rejects_unknown_format(self):
        with pytest.raises(ContextValidationError):
            render_pack(make_pack(), "yaml")

    @pytest.mark.parametrize("value", ["markdown", "json", "xml"])
    def test_supported_formats(self, value: str):
        assert parse_format(value) is OutputFormat(value)
