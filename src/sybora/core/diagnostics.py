"""Provider connectivity checks."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional

import httpx

from ..models.completion import ChatMessage, CompletionRequest
from ..providers.base import get_ai_provider
from .config import PROVIDER_NAMES

TEST_MESSAGE = "Hello, this is a test message."


def _test_model(config: dict, name: str) -> str:
    if name == "gemini":
        return config.get("ai", {}).get("gemini", {}).get("model", "")
    return config.get("tasks", {}).get("chat", {}).get("model", "")


async def check_providers(
    config: dict,
    api_keys: Mapping[str, Optional[str]],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict:
    """Report key presence and a single test completion per provider."""
    report: dict = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "apiKeys": {},
        "tests": {},
    }

    for name in PROVIDER_NAMES:
        key = api_keys.get(name)
        report["apiKeys"][name] = {"present": bool(key), "length": len(key) if key else 0}

        if not key:
            report["tests"][name] = {"success": False, "error": "API key not configured"}
            continue

        model = _test_model(config, name)
        provider = get_ai_provider(config, name, key, transport)
        request = CompletionRequest(
            model=model, messages=[ChatMessage(role="user", content=TEST_MESSAGE)]
        )
        outcome = await provider.complete_with_retry(request.to_payload(), max_retries=1)
        if outcome.success:
            report["tests"][name] = {
                "success": True,
                "responseLength": len(outcome.text),
                "model": model,
            }
        else:
            report["tests"][name] = {"success": False, "error": outcome.error}

    return report
