"""
Dependency Analysis Module
==========================

Extracts imports and exports from JavaScript, TypeScript and Vue files.
"""

from __future__ import annotations

from .js_parser import ImportRecord, JSDependencyParser, StatementVisitor

__all__ = ["ImportRecord", "JSDependencyParser", "StatementVisitor"]
