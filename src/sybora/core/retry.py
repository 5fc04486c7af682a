"""Bounded retry wrapper for upstream completion calls.

Attempts are strictly sequential with a fixed delay between them. A
transport exception and an empty completion are treated the same way:
both record a reason and move on to the next attempt.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..models.completion import CompletionOutcome
from ..providers.base import CompletionClient
from ..utils.sanitize import sanitize_error

console = Console(stderr=True)

EMPTY_RESULT = "AI did not return a result."
UNKNOWN_ERROR = "unknown error"
CANCELLED = "Request cancelled"


async def attempt_completion(
    client: CompletionClient,
    payload: dict,
    max_retries: int = 3,
    retry_delay: float = 0.5,
    cancel: Optional[asyncio.Event] = None,
) -> CompletionOutcome:
    """Call client up to max_retries times and return the first non-empty text.

    Never raises for upstream failures; the last recorded reason is
    returned in a failed outcome instead.
    """
    last_reason = UNKNOWN_ERROR

    for attempt in range(max_retries):
        if cancel is not None and cancel.is_set():
            return CompletionOutcome.fail(CANCELLED, attempts=attempt)

        try:
            data = await client.send(payload)
        except Exception as e:
            last_reason = str(e) or type(e).__name__
        else:
            text = client.extract_text(data)
            if text and text.strip():
                return CompletionOutcome.ok(text, attempts=attempt + 1)
            last_reason = client.extract_error(data) or EMPTY_RESULT

        console.print(
            f"  [yellow]RETRY[/yellow] {client.name} attempt {attempt + 1}/{max_retries}: "
            f"{escape(sanitize_error(last_reason))}",
            highlight=False,
        )

        # No sleep after the final attempt
        if attempt < max_retries - 1:
            await asyncio.sleep(retry_delay)

    return CompletionOutcome.fail(sanitize_error(last_reason), attempts=max(max_retries, 0))
