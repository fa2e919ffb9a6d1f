"""
Output Renderer
===============

Serializes an assembled ContextPack as markdown, JSON or XML.
"""

from __future__ import annotations

import json
from pathlib import PurePosixPath
from xml.sax.saxutils import escape

from .errors import ContextValidationError
from .models import ContextFile, ContextPack, OutputFormat

MAX_REASONS_SHOWN = 3

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_FENCE_LANGUAGES = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "jsx",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".vue": "vue",
}


def parse_format(value: OutputFormat | str) -> OutputFormat:
    """
    Validate an output format.

    Raises:
        ContextValidationError: If the format is not markdown, json or xml
    """
    try:
        return OutputFormat(value)
    except ValueError:
        raise ContextValidationError(
            f"Unsupported format: {value!r} (expected one of {', '.join(f.value for f in OutputFormat)})"
        )


def render_pack(
    pack: ContextPack,
    output_format: OutputFormat | str = OutputFormat.MARKDOWN,
    include_line_numbers: bool = True,
) -> str:
    """
    Render a context pack.

    Args:
        pack: Assembled pack
        output_format: markdown, json or xml
        include_line_numbers: Prefix code lines with 1-based numbers (markdown only)

    Returns:
        Rendered text

    Raises:
        ContextValidationError: If the format is unsupported
    """
    output_format = parse_format(output_format)

    if output_format is OutputFormat.JSON:
        return render_json(pack)
    if output_format is OutputFormat.XML:
        return render_xml(pack)
    return render_markdown(pack, include_line_numbers)


# =============================================================================
# MARKDOWN
# =============================================================================


def render_markdown(pack: ContextPack, include_line_numbers: bool = True) -> str:
    lines = [
        f"# Context Pack: {pack.task}",
        "",
        f"**Task type:** {pack.intent.type.value}",
        f"**Keywords:** {', '.join(pack.intent.keywords) if pack.intent.keywords else '(none)'}",
        f"**Strategy:** {pack.strategy.value} | "
        f"**Tokens:** {pack.tokens_used}/{pack.budget.max} | "
        f"**Files:** {len(pack.files)}",
        "",
    ]

    if pack.architecture_summary:
        lines.extend(["## Architecture Overview", "", pack.architecture_summary, ""])

    if pack.files:
        lines.extend(["## Files", ""])
        for context_file in pack.files:
            lines.extend(_markdown_file(context_file, include_line_numbers))

    if pack.related_tests:
        lines.extend(["## Related Tests", ""])
        lines.extend(f"- {path}" for path in pack.related_tests)
        lines.append("")

    if pack.suggestions:
        lines.extend(["## Suggestions", ""])
        lines.extend(f"- {suggestion}" for suggestion in pack.suggestions)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _markdown_file(context_file: ContextFile, include_line_numbers: bool) -> list[str]:
    lines = [
        f"### {context_file.path}",
        "",
        f"- **Relevance score:** {context_file.relevance_score}",
        f"- **Category:** {context_file.category.value}",
        f"- **Tokens:** {context_file.token_count}",
    ]
    reasons = context_file.reasons[:MAX_REASONS_SHOWN]
    if reasons:
        lines.append(f"- **Why:** {'; '.join(reasons)}")

    language = _FENCE_LANGUAGES.get(PurePosixPath(context_file.path).suffix.lower(), "")
    fence = "````" if "```" in context_file.content else "```"
    lines.extend(["", f"{fence}{language}"])
    lines.append(_number_lines(context_file.content) if include_line_numbers else context_file.content)
    lines.extend([fence, ""])

    if context_file.truncated:
        lines.extend(["> **Note:** content truncated to fit the token budget.", ""])
    return lines


def _number_lines(content: str) -> str:
    code_lines = content.split("\n")
    width = len(str(len(code_lines)))
    return "\n".join(f"{i:>{width}} | {line}" for i, line in enumerate(code_lines, 1))


# =============================================================================
# JSON
# =============================================================================


def render_json(pack: ContextPack) -> str:
    return json.dumps(pack.to_dict(include_rendered=False), indent=2)


# =============================================================================
# XML
# =============================================================================


def _x(value: object) -> str:
    return escape(str(value), _XML_ENTITIES)


def render_xml(pack: ContextPack) -> str:
    parts = [
        "<context-pack>",
        f"  <task>{_x(pack.task)}</task>",
        f'  <intent type="{_x(pack.intent.type.value)}">',
    ]
    parts.extend(f"    <keyword>{_x(k)}</keyword>" for k in pack.intent.keywords)
    parts.append("  </intent>")

    if pack.architecture_summary:
        parts.append(f"  <architecture>{_x(pack.architecture_summary)}</architecture>")

    parts.append("  <files>")
    for f in pack.files:
        parts.append(
            f'    <file path="{_x(f.path)}" category="{_x(f.category.value)}" '
            f'score="{_x(f.relevance_score)}" tokens="{_x(f.token_count)}" '
            f'truncated="{"true" if f.truncated else "false"}">{_x(f.content)}</file>'
        )
    parts.append("  </files>")

    if pack.suggestions:
        parts.append("  <suggestions>")
        parts.extend(f"    <suggestion>{_x(s)}</suggestion>" for s in pack.suggestions)
        parts.append("  </suggestions>")

    parts.append("</context-pack>")
    return "\n".join(parts) + "\n"
