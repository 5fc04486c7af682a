"""Prompt text and payload builders for each AI task."""

from __future__ import annotations

from typing import Iterable, Optional

from ..models.completion import ChatMessage, CompletionRequest

REWRITE_SYSTEM_PROMPT = (
    "You are a code rewriting assistant. Your task is to rewrite code according "
    "to the user's instructions. Return ONLY the rewritten code without any "
    "explanations, comments, or markdown formatting. The response should be "
    "clean, executable code."
)

EXPLAIN_SYSTEM_PROMPT = """You are an expert code analyst and technical writer. Your task is to provide comprehensive, well-structured explanations of code.

IMPORTANT REQUIREMENTS:
1. Use proper markdown formatting with clear headings and sections
2. Include the original code in a code block with proper syntax highlighting
3. Break down complex code into logical sections
4. Explain the purpose, functionality, and implementation details
5. Highlight important concepts, patterns, and best practices

Your response should be structured as follows:
- **Code Overview**: Brief summary of what the code does
- **Original Code**: The code in a properly formatted code block
- **Detailed Analysis**: Section-by-section breakdown
- **Key Components**: Important functions, variables, and their purposes
- **Technical Details**: Implementation patterns, algorithms, or techniques used
- **Best Practices**: Any relevant coding standards or recommendations"""

CONVERT_SYSTEM_PROMPT = """You are an expert database migration engineer converting Sybase ASE T-SQL to Oracle PL/SQL.

Rules:
- Preserve the business logic exactly.
- Map Sybase data types to their Oracle equivalents (e.g. VARCHAR to VARCHAR2, DATETIME to DATE or TIMESTAMP, TEXT to CLOB, IMAGE to BLOB, BIT to NUMBER(1)).
- Replace @variables with PL/SQL variables, @@IDENTITY with sequences or identity columns, @@ROWCOUNT with SQL%ROWCOUNT, and GETDATE() with SYSDATE.
- Replace temporary #tables with global temporary tables.
- Return result sets through SYS_REFCURSOR OUT parameters.
- Return ONLY the converted Oracle code. No explanations."""

CHAT_SYSTEM_PROMPT = """You are an expert Oracle database migration assistant specializing in Sybase to Oracle conversions.

Provide concise, practical answers. Focus on actionable advice and clear explanations without unnecessary details.

You help with:
- Code explanations and analysis
- Migration best practices and strategies
- Data type mapping between Sybase and Oracle
- Syntax conversion help
- Error resolution and debugging
- Performance optimization tips
- Oracle-specific features and recommendations

Be direct and efficient in your responses."""


def _request(task_config: dict, system: str, user: str) -> CompletionRequest:
    return CompletionRequest(
        model=task_config.get("model", ""),
        messages=[
            ChatMessage(role="system", content=system),
            ChatMessage(role="user", content=user),
        ],
        temperature=task_config.get("temperature"),
        max_tokens=task_config.get("max_tokens"),
    )


def build_rewrite_request(
    code: str, instruction: str, language: Optional[str], task_config: dict
) -> CompletionRequest:
    user = (
        f"Rewrite the following {language or 'code'} according to this instruction: {instruction}\n\n"
        f"Original code:\n```{language or 'text'}\n{code}\n```\n\n"
        "IMPORTANT: Return ONLY the rewritten code. Do not include any explanations, "
        "comments, or markdown formatting. Just the clean, rewritten code."
    )
    return _request(task_config, REWRITE_SYSTEM_PROMPT, user)


def build_explain_request(
    code: str, language: Optional[str], task_config: dict
) -> CompletionRequest:
    user = (
        f"Please provide a comprehensive analysis of the following {language or 'code'}:\n\n"
        f"```{language or 'text'}\n{code}\n```\n\n"
        "Focus on what the code accomplishes, how it works step by step, the "
        "important functions and variables, and any technical considerations."
    )
    return _request(task_config, EXPLAIN_SYSTEM_PROMPT, user)


def build_convert_request(
    code: str, task_config: dict, object_name: Optional[str] = None
) -> CompletionRequest:
    subject = f"the Sybase object {object_name}" if object_name else "the following Sybase code"
    user = f"Convert {subject} to Oracle PL/SQL:\n\n```sql\n{code}\n```"
    return _request(task_config, CONVERT_SYSTEM_PROMPT, user)


def build_chat_messages(message: str, history: Iterable) -> list[ChatMessage]:
    """System prompt, then prior turns (role and content only), then the new message."""
    messages = [ChatMessage(role="system", content=CHAT_SYSTEM_PROMPT)]
    for turn in history:
        messages.append(ChatMessage(role=turn.role, content=turn.content))
    messages.append(ChatMessage(role="user", content=message))
    return messages
