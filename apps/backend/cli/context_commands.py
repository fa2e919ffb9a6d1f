"""
Context Commands
================

CLI for building task-scoped context packs.

    frontend-context pack "Fix login bug in auth flow" --project ./app --max-tokens 8000
    frontend-context intent "Refactor the cart store"
    frontend-context budget --max-tokens 1000 --strategy depth --include tests
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from context.budget import allocate_budget
from context.builder import build_context_pack
from context.constants import INCLUDE_TYPES
from context.errors import ContextValidationError
from context.keyword_extractor import KeywordExtractor
from context.models import OptimizationStrategy, OutputFormat
from context.tool import generate_context_pack

logger = logging.getLogger(__name__)

EXIT_VALIDATION_ERROR = 2


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def handle_pack_command(args: argparse.Namespace) -> int:
    """Build a context pack and print it (or the full tool payload)."""
    params = {
        "task": args.task,
        "projectPath": args.project,
        "maxTokens": args.max_tokens,
        "includeTypes": args.include,
        "focusAreas": args.focus,
        "format": args.format,
        "includeLineNumbers": False if args.no_line_numbers else None,
        "optimizationStrategy": args.strategy,
        "deadlineSeconds": args.deadline,
    }

    if args.payload:
        result = generate_context_pack(params)
        print(result["content"][0]["text"])
    else:
        pack = build_context_pack(params)
        print(pack.rendered_output, end="")
    return 0


def handle_intent_command(args: argparse.Namespace) -> int:
    """Print the intent extracted from a task description."""
    intent = KeywordExtractor().analyze(args.task)
    print(json.dumps(intent.to_dict(), indent=2))
    return 0


def handle_budget_command(args: argparse.Namespace) -> int:
    """Print the token budget breakdown for a strategy."""
    include = args.include or []
    budget = allocate_budget(args.max_tokens, ["relevant-files", *include], args.strategy)
    print(json.dumps(budget.to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frontend-context",
        description="Assemble task-scoped context packs from front-end codebases",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    strategies = [s.value for s in OptimizationStrategy]
    include_choices = [t for t in INCLUDE_TYPES if t != "relevant-files"]

    # pack command
    pack_parser = subparsers.add_parser("pack", help="Build a context pack for a task")
    pack_parser.add_argument("task", help="Task description")
    pack_parser.add_argument("--project", default=None, help="Project directory (default: cwd)")
    pack_parser.add_argument("--max-tokens", type=int, default=None, help="Total token budget")
    pack_parser.add_argument(
        "--include",
        action="append",
        choices=include_choices,
        default=None,
        help="Category to include (repeatable)",
    )
    pack_parser.add_argument("--focus", action="append", default=None, help="Focus area path substring (repeatable)")
    pack_parser.add_argument("--format", choices=[f.value for f in OutputFormat], default=None)
    pack_parser.add_argument("--strategy", choices=strategies, default=None)
    pack_parser.add_argument("--no-line-numbers", action="store_true", help="Omit line numbers in markdown")
    pack_parser.add_argument("--deadline", type=float, default=None, help="Seconds before file reading stops")
    pack_parser.add_argument("--payload", action="store_true", help="Print the JSON tool payload instead")
    pack_parser.set_defaults(handler=handle_pack_command)

    # intent command
    intent_parser = subparsers.add_parser("intent", help="Show the intent extracted from a task")
    intent_parser.add_argument("task", help="Task description")
    intent_parser.set_defaults(handler=handle_intent_command)

    # budget command
    budget_parser = subparsers.add_parser("budget", help="Show the budget breakdown")
    budget_parser.add_argument("--max-tokens", type=int, default=50_000)
    budget_parser.add_argument("--strategy", choices=strategies, default="relevance")
    budget_parser.add_argument("--include", action="append", choices=include_choices, default=None)
    budget_parser.set_defaults(handler=handle_budget_command)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        return args.handler(args)
    except ContextValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR


if __name__ == "__main__":
    sys.exit(main())
