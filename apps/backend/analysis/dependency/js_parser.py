"""
JS/TS Dependency Parser
========================

Extracts import and export statements from JavaScript, TypeScript and Vue
single-file components. Supports ES modules, CommonJS require() and dynamic
import().

Source text is lexed into a closed set of statement nodes
(ImportDeclaration, RequireCall, DynamicImport, ReExport, ExportDeclaration).
Consumers walk them with a StatementVisitor, which has one handler per node
kind and rejects anything else.

Path aliases from tsconfig.json / jsconfig.json are loaded so callers can
resolve "@/components/..." style specifiers.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from context.errors import PartialReadError

logger = logging.getLogger(__name__)


# =============================================================================
# STATEMENT NODES
# =============================================================================


@dataclass(frozen=True)
class ImportSpecifier:
    """A single binding introduced by an import or re-export."""

    name: str
    alias: str
    kind: str = "named"  # "named", "default", "namespace"

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "alias": self.alias, "kind": self.kind}


@dataclass(frozen=True)
class ImportDeclaration:
    """import x, { y } from 'source' / import 'source'"""

    source: str
    specifiers: tuple[ImportSpecifier, ...]
    line: int
    type_only: bool = False


@dataclass(frozen=True)
class RequireCall:
    """const x = require('source')"""

    source: str
    specifiers: tuple[ImportSpecifier, ...]
    line: int


@dataclass(frozen=True)
class DynamicImport:
    """import('source')"""

    source: str
    line: int


@dataclass(frozen=True)
class ReExport:
    """export { x } from 'source' / export * from 'source'"""

    source: str
    specifiers: tuple[ImportSpecifier, ...]
    line: int


@dataclass(frozen=True)
class ExportDeclaration:
    """export const x = ... / export default ..."""

    name: str
    is_default: bool
    line: int


ModuleStatement = Union[ImportDeclaration, RequireCall, DynamicImport, ReExport, ExportDeclaration]


class StatementVisitor:
    """
    Visitor over ModuleStatement nodes.

    Subclasses override the handlers they care about; the defaults do
    nothing. Nodes outside the closed set raise TypeError instead of being
    skipped silently.
    """

    _HANDLERS = {
        ImportDeclaration: "visit_import_declaration",
        RequireCall: "visit_require_call",
        DynamicImport: "visit_dynamic_import",
        ReExport: "visit_re_export",
        ExportDeclaration: "visit_export_declaration",
    }

    def visit(self, node: ModuleStatement) -> None:
        handler = self._HANDLERS.get(type(node))
        if handler is None:
            raise TypeError(f"Unknown statement node: {type(node).__name__}")
        getattr(self, handler)(node)

    def visit_all(self, nodes: list[ModuleStatement]) -> None:
        for node in nodes:
            self.visit(node)

    def visit_import_declaration(self, node: ImportDeclaration) -> None:
        pass

    def visit_require_call(self, node: RequireCall) -> None:
        pass

    def visit_dynamic_import(self, node: DynamicImport) -> None:
        pass

    def visit_re_export(self, node: ReExport) -> None:
        pass

    def visit_export_declaration(self, node: ExportDeclaration) -> None:
        pass


@dataclass(frozen=True)
class ImportRecord:
    """A module dependency of a file."""

    source: str
    specifiers: tuple[ImportSpecifier, ...]
    kind: str  # "es6", "commonjs", "dynamic", "re-export"
    line: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "specifiers": [s.to_dict() for s in self.specifiers],
            "kind": self.kind,
            "line": self.line,
        }


class ImportCollector(StatementVisitor):
    """Collects every dependency-bearing statement as an ImportRecord."""

    def __init__(self) -> None:
        self.imports: list[ImportRecord] = []

    def visit_import_declaration(self, node: ImportDeclaration) -> None:
        self.imports.append(ImportRecord(node.source, node.specifiers, "es6", node.line))

    def visit_require_call(self, node: RequireCall) -> None:
        self.imports.append(ImportRecord(node.source, node.specifiers, "commonjs", node.line))

    def visit_dynamic_import(self, node: DynamicImport) -> None:
        self.imports.append(ImportRecord(node.source, (), "dynamic", node.line))

    def visit_re_export(self, node: ReExport) -> None:
        self.imports.append(ImportRecord(node.source, node.specifiers, "re-export", node.line))


# =============================================================================
# LEXER
# =============================================================================

# String literals are matched first so "//" or "/*" inside them survive
_STRING_OR_COMMENT = re.compile(
    r"""(?P<string>"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*'|`(?:\\.|[^`\\])*`)"""
    r"""|(?P<block>/\*.*?\*/)|//[^\n]*""",
    re.DOTALL,
)
_VUE_SCRIPT = re.compile(r"<script\b[^>]*>(.*?)</script>", re.DOTALL | re.IGNORECASE)

_IMPORT_FROM = re.compile(
    r"^[ \t]*import\s+(?P<type>type\s+)?(?P<clause>[\w$*{}\s,]+?)\s+from\s+['\"](?P<source>[^'\"\n]+)['\"]",
    re.MULTILINE,
)
_IMPORT_SIDE_EFFECT = re.compile(r"^[ \t]*import\s+['\"](?P<source>[^'\"\n]+)['\"]", re.MULTILINE)
_RE_EXPORT = re.compile(
    r"^[ \t]*export\s+(?:type\s+)?(?P<clause>\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s*from\s+['\"](?P<source>[^'\"\n]+)['\"]",
    re.MULTILINE,
)
_REQUIRE = re.compile(
    r"(?:(?:const|let|var)\s+(?P<binding>[\w$]+|\{[^}]*\})\s*=\s*)?(?<![\w$.])require\(\s*['\"](?P<source>[^'\"\n]+)['\"]\s*\)"
)
_DYNAMIC_IMPORT = re.compile(r"(?<![\w$.])import\(\s*['\"](?P<source>[^'\"\n]+)['\"]\s*\)")
_EXPORT_DECL = re.compile(
    r"^[ \t]*export\s+(?:(?P<default>default)\b|(?:declare\s+)?(?:async\s+)?"
    r"(?:const|let|var|function\*?|class|interface|type|enum|abstract\s+class)\s+(?P<name>[\w$]+))",
    re.MULTILINE,
)


def strip_comments(text: str) -> str:
    """Blank out comments while keeping line numbers stable."""

    def replace(match: re.Match[str]) -> str:
        if match.group("string") is not None:
            return match.group("string")
        if match.group("block") is not None:
            return "\n" * match.group("block").count("\n")
        return ""

    return _STRING_OR_COMMENT.sub(replace, text)


def _parse_clause(clause: str) -> tuple[ImportSpecifier, ...]:
    """Parse 'React, { useState as s }' / '* as ns' into specifiers."""
    specifiers: list[ImportSpecifier] = []
    clause = " ".join(clause.split())

    named = ""
    if "{" in clause:
        before, _, rest = clause.partition("{")
        named = rest.partition("}")[0]
        clause = before

    for part in (p.strip() for p in clause.split(",")):
        if not part:
            continue
        if part.startswith("*"):
            alias = part.split(" as ", 1)[1].strip() if " as " in part else "*"
            specifiers.append(ImportSpecifier(name="*", alias=alias, kind="namespace"))
        else:
            specifiers.append(ImportSpecifier(name="default", alias=part, kind="default"))

    for part in (p.strip() for p in named.split(",")):
        if part.startswith("type "):
            part = part[5:].strip()
        if not part:
            continue
        if " as " in part:
            name, alias = part.split(" as ", 1)
            specifiers.append(ImportSpecifier(name=name.strip(), alias=alias.strip()))
        else:
            specifiers.append(ImportSpecifier(name=part, alias=part))

    return tuple(specifiers)


def parse_source(text: str, line_offset: int = 0) -> list[ModuleStatement]:
    """
    Lex JS/TS source into statement nodes, in source order.

    Args:
        text: Script source
        line_offset: Added to every line number (used for Vue script blocks)

    Returns:
        List of ModuleStatement nodes
    """
    code = strip_comments(text)
    found: list[tuple[int, ModuleStatement]] = []

    def line_of(offset: int) -> int:
        return code.count("\n", 0, offset) + 1 + line_offset

    for m in _IMPORT_FROM.finditer(code):
        found.append((m.start(), ImportDeclaration(
            source=m.group("source"),
            specifiers=_parse_clause(m.group("clause")),
            line=line_of(m.start()),
            type_only=bool(m.group("type")),
        )))

    for m in _IMPORT_SIDE_EFFECT.finditer(code):
        found.append((m.start(), ImportDeclaration(source=m.group("source"), specifiers=(), line=line_of(m.start()))))

    for m in _RE_EXPORT.finditer(code):
        found.append((m.start(), ReExport(
            source=m.group("source"),
            specifiers=_parse_clause(m.group("clause")),
            line=line_of(m.start()),
        )))

    for m in _REQUIRE.finditer(code):
        binding = m.group("binding") or ""
        specifiers: tuple[ImportSpecifier, ...] = ()
        if binding.startswith("{"):
            specifiers = _parse_clause(binding.replace(":", " as "))
        elif binding:
            specifiers = (ImportSpecifier(name="default", alias=binding, kind="default"),)
        found.append((m.start(), RequireCall(source=m.group("source"), specifiers=specifiers, line=line_of(m.start()))))

    for m in _DYNAMIC_IMPORT.finditer(code):
        found.append((m.start(), DynamicImport(source=m.group("source"), line=line_of(m.start()))))

    for m in _EXPORT_DECL.finditer(code):
        is_default = bool(m.group("default"))
        found.append((m.start(), ExportDeclaration(
            name="default" if is_default else m.group("name"),
            is_default=is_default,
            line=line_of(m.start()),
        )))

    found.sort(key=lambda item: item[0])
    return [node for _, node in found]


# =============================================================================
# PARSER
# =============================================================================


class JSDependencyParser:
    """Parses JavaScript/TypeScript/Vue files to extract imports and exports."""

    CONFIG_FILES = ["tsconfig.json", "jsconfig.json"]

    def __init__(self, project_root: Path | None = None):
        """
        Initialize the parser.

        Args:
            project_root: Root directory of the project. Used to resolve path aliases.
        """
        self.project_root = Path(project_root).resolve() if project_root else None
        self.path_aliases: dict[str, Path] = {}
        self._load_path_aliases()

    def _load_path_aliases(self) -> None:
        """Load compilerOptions.paths from tsconfig.json or jsconfig.json."""
        if not self.project_root:
            return

        for config_file in self.CONFIG_FILES:
            config_path = self.project_root / config_file
            if not config_path.exists():
                continue
            try:
                config = json.loads(strip_comments(config_path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.debug("Ignoring unreadable %s: %s", config_path, e)
                break

            compiler_options = config.get("compilerOptions") if isinstance(config, dict) else None
            if not isinstance(compiler_options, dict):
                logger.debug("No usable compilerOptions in %s", config_path)
                break
            base_url = compiler_options.get("baseUrl", ".")
            paths = compiler_options.get("paths") or {}
            if not isinstance(base_url, str) or not isinstance(paths, dict):
                logger.debug("Ignoring malformed baseUrl/paths in %s", config_path)
                break

            base_dir = self.project_root / base_url
            for alias, targets in paths.items():
                if isinstance(targets, str):
                    targets = [targets]
                if not isinstance(targets, list) or not targets or not isinstance(targets[0], str):
                    logger.debug("Ignoring malformed path alias %r in %s", alias, config_path)
                    continue
                alias_key = alias.rstrip("*").rstrip("/")
                target = targets[0].rstrip("*").rstrip("/")
                self.path_aliases[alias_key] = (base_dir / target).resolve()
            break

    def resolve_alias(self, specifier: str) -> Path | None:
        """
        Map an aliased specifier to a path (without extension probing).

        Returns:
            The aliased path, or None if no alias applies
        """
        for alias in sorted(self.path_aliases, key=len, reverse=True):
            target = self.path_aliases[alias]
            if specifier == alias:
                return target
            if specifier.startswith(alias + "/"):
                return target / specifier[len(alias) + 1:]
        return None

    def categorize(self, specifier: str) -> str:
        """Return "relative", "alias" or "package" for an import specifier."""
        if specifier.startswith("./") or specifier.startswith("../") or specifier in (".", ".."):
            return "relative"
        if self.resolve_alias(specifier) is not None:
            return "alias"
        return "package"

    def parse_text(self, text: str, suffix: str = ".ts") -> list[ModuleStatement]:
        """Parse source text; Vue files only contribute their <script> blocks."""
        if suffix != ".vue":
            return parse_source(text)

        statements: list[ModuleStatement] = []
        for block in _VUE_SCRIPT.finditer(text):
            offset = text.count("\n", 0, block.start(1))
            statements.extend(parse_source(block.group(1), line_offset=offset))
        return statements

    def parse_file(self, file_path: Path) -> list[ModuleStatement]:
        """
        Parse a file into statement nodes.

        Raises:
            PartialReadError: If the file cannot be read or decoded
        """
        try:
            content = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PartialReadError(str(file_path), str(e)) from e
        return self.parse_text(content, Path(file_path).suffix.lower())

    def extract_imports(self, file_path: Path) -> list[ImportRecord]:
        """Return the imports of a file in source order."""
        collector = ImportCollector()
        collector.visit_all(self.parse_file(file_path))
        return collector.imports
