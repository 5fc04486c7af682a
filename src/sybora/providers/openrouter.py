"""OpenRouter chat-completions provider."""

from __future__ import annotations

from typing import Any

from .base import BaseProvider, ProviderError


class OpenRouterProvider(BaseProvider):
    name = "openrouter"
    API_URL = "https://openrouter.ai/api/v1/chat/completions"

    @property
    def label(self) -> str:
        return "OpenRouter"

    async def send(self, payload: dict) -> Any:
        if not self.api_key:
            raise ProviderError("OpenRouter API key not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        url = self.config.get("endpoint") or self.API_URL
        return await self._post_json(url, payload, headers)
