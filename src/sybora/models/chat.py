"""Migration assistant chat models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ChatIntent(str, Enum):
    CODE_EXPLANATION = "code_explanation"
    MIGRATION_HELP = "migration_help"
    DATA_TYPE_MAPPING = "data_type_mapping"
    SYNTAX_HELP = "syntax_help"
    BEST_PRACTICES = "best_practices"
    GENERAL_QUESTION = "general_question"


class ChatReply(BaseModel):
    message: str
    intent: ChatIntent = ChatIntent.GENERAL_QUESTION
    suggestions: list[str] = []
    provider: str = "unknown"
