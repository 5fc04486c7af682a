"""Google Generative Language (Gemini) provider.

Accepts the same chat-completions payload as the other providers and
translates it to a generateContent request.
"""

from __future__ import annotations

from typing import Any

from .base import BaseProvider, ProviderError


class GeminiProvider(BaseProvider):
    name = "gemini"
    API_BASE = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-2.0-flash-exp"

    @property
    def label(self) -> str:
        return "Gemini"

    def _resolve_model(self, requested: str | None) -> str:
        # Chat payloads carry OpenRouter model ids; only honour Gemini ones.
        if requested and requested.startswith("gemini"):
            return requested
        return self.config.get("model", self.DEFAULT_MODEL)

    def build_body(self, payload: dict) -> dict:
        """Translate a chat-completions payload into a generateContent body."""
        system_parts: list[dict] = []
        contents: list[dict] = []
        for message in payload.get("messages", []):
            role = message.get("role", "user")
            text = message.get("content", "")
            if role == "system":
                system_parts.append({"text": text})
                continue
            contents.append({
                "role": "model" if role == "assistant" else "user",
                "parts": [{"text": text}],
            })

        body: dict = {"contents": contents}
        if system_parts:
            body["systemInstruction"] = {"parts": system_parts}

        generation: dict = {}
        if payload.get("temperature") is not None:
            generation["temperature"] = payload["temperature"]
        if payload.get("max_tokens"):
            generation["maxOutputTokens"] = payload["max_tokens"]
        if generation:
            body["generationConfig"] = generation
        return body

    async def send(self, payload: dict) -> Any:
        if not self.api_key:
            raise ProviderError("Gemini API key not configured")

        model = self._resolve_model(payload.get("model"))
        endpoint = (self.config.get("endpoint") or self.API_BASE).rstrip("/")
        url = f"{endpoint}/models/{model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        return await self._post_json(url, self.build_body(payload), headers)

    def extract_text(self, data: Any) -> str:
        """Join the text parts of the first candidate."""
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return ""
        content = candidates[0].get("content") or {}
        parts = (content.get("parts") or []) if isinstance(content, dict) else []
        return "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
