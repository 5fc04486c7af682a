"""Sybase to Oracle migration assistant chat."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ..models.chat import ChatIntent, ChatReply
from ..models.completion import CompletionOutcome, CompletionRequest
from ..providers.base import BaseProvider
from .config import get_task_config
from .prompts import build_chat_messages

# Checked in order; first match wins.
INTENT_KEYWORDS: list[tuple[ChatIntent, tuple[str, ...]]] = [
    (ChatIntent.CODE_EXPLANATION, ("explain", "what does", "how does")),
    (ChatIntent.MIGRATION_HELP, ("migrate", "convert", "oracle")),
    (ChatIntent.DATA_TYPE_MAPPING, ("data type", "varchar", "int")),
    (ChatIntent.SYNTAX_HELP, ("syntax", "error", "fix")),
    (ChatIntent.BEST_PRACTICES, ("performance", "optimize", "fast")),
]

SUGGESTIONS: dict[ChatIntent, list[str]] = {
    ChatIntent.CODE_EXPLANATION: [
        "Can you show me the converted Oracle version?",
        "What are the key differences between Sybase and Oracle?",
        "How can I optimize this code for Oracle?",
    ],
    ChatIntent.MIGRATION_HELP: [
        "What are the main challenges in Sybase to Oracle migration?",
        "How do I handle stored procedures?",
        "What about triggers and functions?",
    ],
    ChatIntent.DATA_TYPE_MAPPING: [
        "Show me the complete data type mapping table",
        "How do I handle TEXT and IMAGE types?",
        "What about custom data types?",
    ],
    ChatIntent.SYNTAX_HELP: [
        "How do I convert Sybase date functions?",
        "What's the Oracle equivalent of @@IDENTITY?",
        "How do I handle temporary tables?",
    ],
    ChatIntent.BEST_PRACTICES: [
        "What are Oracle performance best practices?",
        "How do I use bulk operations?",
        "What about indexing strategies?",
    ],
    ChatIntent.GENERAL_QUESTION: [
        "How do I start a migration project?",
        "What tools do you recommend?",
        "Can you explain the migration process?",
    ],
}


def extract_intent(message: str) -> ChatIntent:
    text = message.lower()
    for intent, keywords in INTENT_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return intent
    return ChatIntent.GENERAL_QUESTION


def generate_suggestions(intent: ChatIntent) -> list[str]:
    return list(SUGGESTIONS.get(intent, SUGGESTIONS[ChatIntent.GENERAL_QUESTION]))


def _provider_order(config: dict, providers: Mapping[str, BaseProvider]) -> list[BaseProvider]:
    ai_config = config.get("ai", {})
    order: list[BaseProvider] = []
    for name in (ai_config.get("chat_provider"), ai_config.get("chat_fallback")):
        provider = providers.get(name) if name else None
        if provider is not None and provider not in order:
            order.append(provider)
    return order


async def respond(
    message: str,
    history: Iterable,
    providers: Mapping[str, BaseProvider],
    config: dict,
) -> tuple[CompletionOutcome, Optional[ChatReply]]:
    """Answer a chat message, falling back to the secondary provider on failure.

    Returns the final outcome and, on success, the reply to send back.
    """
    intent = extract_intent(message)
    task_config = get_task_config(config, "chat")
    request = CompletionRequest(
        model=task_config.get("model", ""),
        messages=build_chat_messages(message, history),
        temperature=task_config.get("temperature"),
        max_tokens=task_config.get("max_tokens"),
    )

    outcome = CompletionOutcome.fail("No API keys available")
    for provider in _provider_order(config, providers):
        outcome = await provider.complete_with_retry(request.to_payload())
        if outcome.success:
            reply = ChatReply(
                message=outcome.text,
                intent=intent,
                suggestions=generate_suggestions(intent),
                provider=provider.name,
            )
            return outcome, reply
    return outcome, None
