"""
Context Pack Tool Entry Point
=============================

Tool-call style entry point: takes raw parameters and returns a single text
payload holding the rendered pack plus structured metadata.

Payloads above RESPONSE_TOKEN_LIMIT are shrunk with ordered steps (drop
file reasons, drop intent detail, truncate the rendered output) and the
applied steps are listed in metadata.responseOptimizations.
"""

from __future__ import annotations

import copy
import json
from typing import Any

from .builder import ContextPackBuilder
from .constants import RESPONSE_TOKEN_LIMIT
from .models import ContextPack
from .request import ContextPackRequest
from .truncation import ShrinkStep, estimate_tokens, progressive_shrink, truncate_to_tokens


def generate_context_pack(
    params: dict[str, Any],
    response_token_limit: int = RESPONSE_TOKEN_LIMIT,
) -> dict[str, Any]:
    """
    Build a context pack and wrap it as a tool result.

    Args:
        params: Invocation parameters (task, projectPath, maxTokens, ...)
        response_token_limit: Size cap for the returned payload

    Returns:
        {"content": [{"type": "text", "text": <JSON payload>}]}

    Raises:
        ContextValidationError: If the parameters are invalid
    """
    request = ContextPackRequest.from_params(params)
    pack = ContextPackBuilder(request).build()
    payload = build_payload(pack, request.format.value)
    payload = shrink_payload(payload, response_token_limit)
    return {"content": [{"type": "text", "text": json.dumps(payload, indent=2)}]}


def build_payload(pack: ContextPack, format_name: str) -> dict[str, Any]:
    """Structured response: pack summary, rendered output, suggestions and metadata."""
    return {
        "contextPack": {
            "task": pack.task,
            "intent": pack.intent.to_dict(),
            "strategy": pack.strategy.value,
            "budget": pack.budget.to_dict(),
            "tokensUsed": pack.tokens_used,
            "files": [
                {
                    "path": f.path,
                    "category": f.category.value,
                    "relevanceScore": f.relevance_score,
                    "tokenCount": f.token_count,
                    "truncated": f.truncated,
                    "reasons": list(f.reasons),
                }
                for f in pack.files
            ],
        },
        "content": {format_name: pack.rendered_output},
        "suggestions": list(pack.suggestions),
        "relatedTests": list(pack.related_tests),
        "metadata": {
            "generatedAt": pack.metadata.generated_at,
            "totalCandidates": pack.metadata.total_candidates,
            "included": pack.metadata.included,
            "avgScore": pack.metadata.avg_score,
            "tokensUsed": pack.metadata.tokens_used,
            "framework": pack.metadata.framework,
            "deadlineExceeded": pack.metadata.deadline_exceeded,
            "responseOptimizations": [],
        },
    }


def payload_tokens(payload: dict[str, Any]) -> int:
    return estimate_tokens(json.dumps(payload, indent=2))


def shrink_payload(payload: dict[str, Any], limit: int) -> dict[str, Any]:
    """Apply response shrink steps until the payload fits `limit` tokens."""
    steps = [
        ShrinkStep("drop-file-reasons", _drop_file_reasons),
        ShrinkStep("drop-intent-detail", _drop_intent_detail),
        ShrinkStep("truncate-rendered-output", lambda p: _truncate_rendered(p, limit)),
    ]
    result = progressive_shrink(payload, steps, payload_tokens, limit)
    shrunk = result.value
    if result.applied:
        shrunk = copy.deepcopy(shrunk)
        shrunk["metadata"]["responseOptimizations"] = result.applied
    return shrunk


def _drop_file_reasons(payload: dict[str, Any]) -> dict[str, Any]:
    shrunk = copy.deepcopy(payload)
    for entry in shrunk["contextPack"]["files"]:
        entry.pop("reasons", None)
    return shrunk


def _drop_intent_detail(payload: dict[str, Any]) -> dict[str, Any]:
    shrunk = copy.deepcopy(payload)
    intent = shrunk["contextPack"]["intent"]
    shrunk["contextPack"]["intent"] = {"type": intent["type"]}
    return shrunk


def _truncate_rendered(payload: dict[str, Any], limit: int) -> dict[str, Any]:
    shrunk = copy.deepcopy(payload)
    content = shrunk["content"]
    (format_name, rendered), = content.items()

    content[format_name] = ""
    # Headroom for the optimizations list added after shrinking and for JSON escaping
    overhead = payload_tokens(shrunk) + 50
    allowance = max(0, limit - overhead)
    # Escaped characters (newlines, quotes) can double in JSON
    excerpt = truncate_to_tokens(rendered, allowance // 2)
    content[format_name] = excerpt if excerpt is not None else ""
    return shrunk
