"""Code rewrite, explanation and Sybase to Oracle conversion tasks."""

from __future__ import annotations

import re
from typing import Optional

from ..models.completion import CompletionOutcome
from ..providers.base import BaseProvider
from .config import get_task_config
from .prompts import build_convert_request, build_explain_request, build_rewrite_request

_FENCE_RE = re.compile(r"^\s*```[\w+-]*[ \t]*\n(.*?)\n?```\s*$", re.DOTALL)
_INNER_FENCE_RE = re.compile(r"^\s*```", re.MULTILINE)


def strip_code_fences(text: str) -> str:
    """Remove a single markdown fence wrapping the whole text, if present."""
    match = _FENCE_RE.match(text)
    if not match or not match.group(1).strip():
        return text
    body = match.group(1)
    # More than one fenced block: leave the reply as the model wrote it
    if _INNER_FENCE_RE.search(body):
        return text
    return body


def format_explanation(explanation: str, language: Optional[str]) -> str:
    """Give unstructured explanations a markdown header."""
    if "##" in explanation or "**" in explanation:
        return explanation
    return (
        "## Code Analysis\n\n"
        f"**Language**: {language or 'Unknown'}\n\n"
        f"{explanation}\n\n"
        "---\n"
        "*Analysis provided by AI Code Analyzer*"
    )


async def rewrite_code(
    provider: BaseProvider,
    code: str,
    instruction: str,
    language: Optional[str],
    config: dict,
) -> CompletionOutcome:
    request = build_rewrite_request(code, instruction, language, get_task_config(config, "rewrite"))
    return await provider.complete_with_retry(request.to_payload())


async def explain_code(
    provider: BaseProvider,
    code: str,
    language: Optional[str],
    config: dict,
) -> CompletionOutcome:
    request = build_explain_request(code, language, get_task_config(config, "explain"))
    outcome = await provider.complete_with_retry(request.to_payload())
    if outcome.success:
        outcome.text = format_explanation(outcome.text, language)
    return outcome


async def convert_code(
    provider: BaseProvider,
    code: str,
    config: dict,
    object_name: Optional[str] = None,
) -> CompletionOutcome:
    request = build_convert_request(code, get_task_config(config, "convert"), object_name)
    outcome = await provider.complete_with_retry(request.to_payload())
    if outcome.success:
        outcome.text = strip_code_fences(outcome.text)
    return outcome
