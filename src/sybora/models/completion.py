"""Completion request and outcome models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ChatMessage(BaseModel):
    role: str
    content: str


class CompletionRequest(BaseModel):
    """Chat-completion payload forwarded as-is to the upstream API."""

    model_config = ConfigDict(extra="allow")

    model: str
    messages: list[ChatMessage] = []
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class CompletionOutcome(BaseModel):
    success: bool
    text: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0

    @classmethod
    def ok(cls, text: str, attempts: int = 1) -> CompletionOutcome:
        return cls(success=True, text=text, attempts=attempts)

    @classmethod
    def fail(cls, reason: str, attempts: int = 0) -> CompletionOutcome:
        return cls(success=False, error=reason, attempts=attempts)
