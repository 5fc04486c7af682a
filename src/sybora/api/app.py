"""HTTP API for the AI conversion endpoints.

Serves:
- /health: Liveness probe
- /api/ai-rewrite: Rewrite code following an instruction
- /api/ai-explain: Explain a code snippet
- /api/convert: Convert Sybase T-SQL to Oracle PL/SQL
- /api/chatbot: Migration assistant chat
- /api/diagnostics: Provider key and connectivity checks
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional, Type, TypeVar

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.markup import escape
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..core.assistant import convert_code, explain_code, rewrite_code
from ..core.chat import respond
from ..core.config import get_effective_config, resolve_api_keys
from ..core.diagnostics import check_providers
from ..models.api import ChatBody, ConvertBody, ExplainBody, RewriteBody
from ..models.completion import CompletionOutcome
from ..providers.base import BaseProvider, get_ai_provider

console = Console(stderr=True)

OPENROUTER_KEY_MISSING = (
    "OpenRouter API key not configured. Please set OPENROUTER_API_KEY environment variable."
)
NO_KEYS = (
    "API keys not configured. Please set OPENROUTER_API_KEY or GEMINI_API_KEY "
    "environment variables."
)

BodyT = TypeVar("BodyT", bound=BaseModel)


class BadRequest(Exception):
    pass


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(message: str, status_code: int, **extra) -> JSONResponse:
    content = {"error": message, "timestamp": _timestamp()}
    content.update(extra)
    return JSONResponse(content=content, status_code=status_code)


async def _parse_body(request: Request, model: Type[BodyT]) -> BodyT:
    try:
        data = await request.json()
    except ValueError as e:
        raise BadRequest("Invalid JSON body") from e
    if not isinstance(data, dict):
        raise BadRequest("Invalid JSON body")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise BadRequest("Invalid request body") from e


def _outcome_response(outcome: CompletionOutcome, field: str, fallback_error: str) -> JSONResponse:
    if outcome.success:
        return JSONResponse(content={field: outcome.text, "timestamp": _timestamp()})
    console.print(f"  [red]FAILED[/red] {field}: {escape(outcome.error or fallback_error)}")
    return _error(outcome.error or fallback_error, 500)


def create_app(
    config: Optional[dict] = None,
    api_keys: Optional[Mapping[str, Optional[str]]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Credentials are resolved once here, from the environment, unless
    passed in explicitly.
    """
    config = config if config is not None else get_effective_config()
    keys = dict(api_keys) if api_keys is not None else resolve_api_keys(config)

    app = FastAPI(
        title="Sybora API",
        description="AI-assisted Sybase to Oracle conversion",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get("server", {}).get("cors_origins", ["*"]),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.state.config = config
    app.state.api_keys = keys

    def provider(name: str) -> Optional[BaseProvider]:
        key = keys.get(name)
        if not key:
            return None
        return get_ai_provider(config, name, key, transport)

    @app.exception_handler(BadRequest)
    async def bad_request(request: Request, exc: BadRequest) -> JSONResponse:
        return _error(str(exc), 400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
        response = _error(message, exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.get("/")
    async def root():
        return {
            "name": "Sybora API",
            "version": __version__,
            "endpoints": [
                "/health",
                "/api/ai-rewrite",
                "/api/ai-explain",
                "/api/convert",
                "/api/chatbot",
                "/api/diagnostics",
            ],
            "timestamp": _timestamp(),
        }

    @app.get("/health")
    async def health():
        return {"status": "ok", "timestamp": _timestamp()}

    @app.post("/api/ai-rewrite")
    async def ai_rewrite(request: Request) -> JSONResponse:
        openrouter = provider("openrouter")
        if openrouter is None:
            return _error(OPENROUTER_KEY_MISSING, 500)

        body = await _parse_body(request, RewriteBody)
        if not body.code or not body.prompt:
            return _error("Missing code or prompt", 400)

        outcome = await rewrite_code(openrouter, body.code, body.prompt, body.language, config)
        return _outcome_response(outcome, "rewrittenCode", "AI rewrite failed after multiple attempts")

    @app.post("/api/ai-explain")
    async def ai_explain(request: Request) -> JSONResponse:
        openrouter = provider("openrouter")
        if openrouter is None:
            return _error(OPENROUTER_KEY_MISSING, 500)

        body = await _parse_body(request, ExplainBody)
        if not body.code:
            return _error("Missing code", 400)

        outcome = await explain_code(openrouter, body.code, body.language, config)
        return _outcome_response(outcome, "explanation", "AI model returned empty explanation")

    @app.post("/api/convert")
    async def convert(request: Request) -> JSONResponse:
        openrouter = provider("openrouter")
        if openrouter is None:
            return _error(OPENROUTER_KEY_MISSING, 500)

        body = await _parse_body(request, ConvertBody)
        if not body.code:
            return _error("Missing code", 400)

        outcome = await convert_code(openrouter, body.code, config, body.object_name)
        return _outcome_response(outcome, "convertedCode", "Conversion failed after multiple attempts")

    @app.get("/api/chatbot")
    async def chatbot_status():
        return {
            "message": "Chatbot is running!",
            "status": "ok",
            "timestamp": _timestamp(),
            "hasOpenRouterKey": bool(keys.get("openrouter")),
            "hasGeminiKey": bool(keys.get("gemini")),
        }

    @app.post("/api/chatbot")
    async def chatbot(request: Request) -> JSONResponse:
        providers = {
            name: instance
            for name, instance in (("gemini", provider("gemini")), ("openrouter", provider("openrouter")))
            if instance is not None
        }
        if not providers:
            return _error(NO_KEYS, 500)

        body = await _parse_body(request, ChatBody)
        if not body.message:
            return _error("Missing message", 400)

        outcome, reply = await respond(body.message, body.conversation_history, providers, config)
        if reply is None:
            console.print(f"  [red]FAILED[/red] chatbot: {escape(outcome.error or '')}")
            return _error("Failed to process message", 500, details=outcome.error)

        return JSONResponse(content={
            "message": reply.message,
            "intent": reply.intent.value,
            "suggestions": reply.suggestions,
            "timestamp": _timestamp(),
        })

    @app.get("/api/diagnostics")
    async def diagnostics():
        return await check_providers(config, keys, transport)

    return app
