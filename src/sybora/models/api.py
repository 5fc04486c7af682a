"""Request bodies accepted by the HTTP API.

Fields are optional so that handlers can answer missing input with a
400 and a readable message instead of a validation dump.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RewriteBody(BaseModel):
    code: Optional[str] = None
    prompt: Optional[str] = None
    language: Optional[str] = None


class ExplainBody(BaseModel):
    code: Optional[str] = None
    language: Optional[str] = None


class ConvertBody(BaseModel):
    code: Optional[str] = None
    object_name: Optional[str] = None


class HistoryEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str
    content: str


class ChatBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    conversation_history: list[HistoryEntry] = Field(default=[], alias="conversationHistory")
