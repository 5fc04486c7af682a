"""AI provider abstraction.

Providers only know how to send one completion payload upstream and
how to read text back out of the response. Retrying lives in
core/retry.py.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from ..models.completion import CompletionOutcome


class ProviderError(Exception):
    """Upstream API answered, but not with a usable response."""


@runtime_checkable
class CompletionClient(Protocol):
    """Protocol the bounded retry wrapper drives."""

    name: str

    async def send(self, payload: dict) -> Any: ...

    def extract_text(self, data: Any) -> str: ...

    def extract_error(self, data: Any) -> Optional[str]: ...


class BaseProvider:
    """Base class with shared HTTP and config handling."""

    name: str = "base"

    def __init__(
        self,
        api_key: Optional[str],
        provider_config: dict,
        common_config: dict,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.config = provider_config
        self.common = common_config
        self.transport = transport
        self.timeout = common_config.get("timeout_seconds", 30)
        self.max_attempts = common_config.get("retry_attempts", 3)
        self.retry_delay = common_config.get("retry_delay_seconds", 0.5)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _post_json(self, url: str, body: dict, headers: dict) -> Any:
        async with self._client() as client:
            response = await client.post(url, json=body, headers=headers)
        if response.is_error:
            raise ProviderError(
                f"{self.label} API error: {response.status_code} - {response.text}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{self.label} API returned invalid JSON") from e

    @property
    def label(self) -> str:
        return self.name

    async def send(self, payload: dict) -> Any:
        raise NotImplementedError

    def extract_text(self, data: Any) -> str:
        """Return choices[0].message.content, or "" when the path is absent."""
        if not isinstance(data, dict):
            return ""
        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""

    def extract_error(self, data: Any) -> Optional[str]:
        if not isinstance(data, dict) or not data.get("error"):
            return None
        error = data["error"]
        if isinstance(error, dict):
            return str(error.get("message") or error)
        return str(error)

    async def complete_with_retry(
        self,
        payload: dict,
        max_retries: Optional[int] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> CompletionOutcome:
        """Run payload through the bounded retry wrapper using configured limits."""
        from ..core.retry import attempt_completion

        return await attempt_completion(
            self,
            payload,
            max_retries=self.max_attempts if max_retries is None else max_retries,
            retry_delay=self.retry_delay,
            cancel=cancel,
        )


def get_ai_provider(
    config: dict,
    provider_name: str,
    api_key: Optional[str],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseProvider:
    """Factory function to create a configured AI provider."""
    ai_config = config.get("ai", {})
    provider_config = dict(ai_config.get(provider_name, {}))

    # Common config is the ai section minus provider sub-configs
    common_config = {
        k: v
        for k, v in ai_config.items()
        if k not in ("openrouter", "gemini")
    }

    if provider_name == "openrouter":
        from .openrouter import OpenRouterProvider
        return OpenRouterProvider(api_key, provider_config, common_config, transport)
    elif provider_name == "gemini":
        from .gemini import GeminiProvider
        return GeminiProvider(api_key, provider_config, common_config, transport)
    else:
        raise ValueError(f"Unknown AI provider: {provider_name}")
