"""Shared fixtures for Sybora tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from sybora.core.config import DEFAULT_CONFIG, deep_merge


@pytest.fixture
def config() -> dict:
    """Default config with retry delays disabled."""
    return deep_merge(
        copy.deepcopy(DEFAULT_CONFIG),
        {"ai": {"retry_delay_seconds": 0, "timeout_seconds": 5}},
    )


@pytest.fixture
def api_keys() -> dict:
    return {"openrouter": "sk-or-v1-testkey", "gemini": "AIzaTestKey"}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """Build a transport replaying the given responses in order.

    Items may be dicts (200 JSON), httpx.Response objects, or exceptions
    to raise. The last item repeats once the list is exhausted.
    """

    def factory(*responses) -> RecordingTransport:
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            item = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(item, Exception):
                raise item
            if isinstance(item, httpx.Response):
                return item
            return httpx.Response(200, json=item)

        return RecordingTransport(handler)

    return factory


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "sybora.yaml"
    path.write_text(
        "server:\n  port: 9000\n\nai:\n  retry_attempts: 5\n  gemini:\n    model: gemini-1.5-flash\n",
        encoding="utf-8",
    )
    return path
