"""Tests for api/app.py."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from sybora.api.app import create_app


def completion_response(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def make_client(config, api_keys, make_transport):
    def factory(*responses, keys=None):
        transport = make_transport(*responses) if responses else make_transport({})
        app = create_app(config, api_keys=api_keys if keys is None else keys, transport=transport)
        return TestClient(app), transport

    return factory


class TestServiceEndpoints:
    def test_root_lists_endpoints(self, make_client):
        client, _ = make_client()
        response = client.get("/")
        assert response.status_code == 200
        assert "/api/ai-rewrite" in response.json()["endpoints"]
        assert "timestamp" in response.json()

    def test_health(self, make_client):
        client, _ = make_client()
        assert client.get("/health").json()["status"] == "ok"

    def test_cors_preflight(self, make_client):
        client, _ = make_client()
        response = client.options(
            "/api/ai-rewrite",
            headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] in ("*", "http://localhost:5173")


class TestRewriteEndpoint:
    def test_success(self, make_client):
        client, transport = make_client(completion_response("SELECT 1 FROM DUAL;"))
        response = client.post(
            "/api/ai-rewrite", json={"code": "select 1", "prompt": "uppercase", "language": "sql"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["rewrittenCode"] == "SELECT 1 FROM DUAL;"
        assert "timestamp" in body
        assert transport.requests[0].headers["Authorization"] == "Bearer sk-or-v1-testkey"

    def test_missing_prompt(self, make_client):
        client, transport = make_client()
        response = client.post("/api/ai-rewrite", json={"code": "select 1"})
        assert response.status_code == 400
        assert response.json()["error"] == "Missing code or prompt"
        assert transport.requests == []

    def test_failure_maps_to_500(self, make_client):
        client, transport = make_client(completion_response("  "))
        response = client.post("/api/ai-rewrite", json={"code": "select 1", "prompt": "x"})
        assert response.status_code == 500
        assert response.json()["error"] == "AI did not return a result."
        assert len(transport.requests) == 3

    def test_transport_error_reason(self, make_client):
        client, _ = make_client(httpx.ConnectError("ECONNRESET"))
        response = client.post("/api/ai-rewrite", json={"code": "select 1", "prompt": "x"})
        assert response.status_code == 500
        assert response.json()["error"] == "ECONNRESET"

    def test_missing_key(self, make_client):
        client, _ = make_client(keys={"openrouter": None, "gemini": None})
        response = client.post("/api/ai-rewrite", json={"code": "select 1", "prompt": "x"})
        assert response.status_code == 500
        assert "OPENROUTER_API_KEY" in response.json()["error"]

    def test_invalid_json(self, make_client):
        client, _ = make_client()
        response = client.post(
            "/api/ai-rewrite", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON body"

    def test_get_not_allowed(self, make_client):
        client, _ = make_client()
        response = client.get("/api/ai-rewrite")
        assert response.status_code == 405
        body = response.json()
        assert body["error"] == "Method not allowed"
        assert "timestamp" in body
        assert "POST" in response.headers["allow"]

    def test_unknown_route_uses_error_shape(self, make_client):
        client, _ = make_client()
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"
        assert "timestamp" in response.json()


class TestExplainEndpoint:
    def test_success(self, make_client):
        client, _ = make_client(completion_response("## Overview\nSelects one row."))
        response = client.post("/api/ai-explain", json={"code": "select 1", "language": "sql"})
        assert response.status_code == 200
        assert response.json()["explanation"] == "## Overview\nSelects one row."

    def test_missing_code(self, make_client):
        client, _ = make_client()
        response = client.post("/api/ai-explain", json={"language": "sql"})
        assert response.status_code == 400
        assert response.json()["error"] == "Missing code"


class TestConvertEndpoint:
    def test_success(self, make_client):
        client, transport = make_client(completion_response("```sql\nSELECT SYSDATE FROM dual;\n```"))
        response = client.post("/api/convert", json={"code": "select getdate()"})
        assert response.status_code == 200
        assert response.json()["convertedCode"] == "SELECT SYSDATE FROM dual;"
        assert transport.bodies()[0]["model"] == "openai/gpt-4o-mini"

    def test_missing_code(self, make_client):
        client, _ = make_client()
        assert client.post("/api/convert", json={}).status_code == 400


class TestChatbotEndpoint:
    def test_status(self, make_client):
        client, _ = make_client(keys={"openrouter": "k", "gemini": None})
        body = client.get("/api/chatbot").json()
        assert body["status"] == "ok"
        assert body["hasOpenRouterKey"] is True
        assert body["hasGeminiKey"] is False

    def test_message(self, make_client):
        client, transport = make_client(
            {"candidates": [{"content": {"parts": [{"text": "Use VARCHAR2."}]}}]}
        )
        response = client.post(
            "/api/chatbot",
            json={
                "message": "What data type replaces varchar?",
                "conversationHistory": [{"id": "1", "role": "user", "content": "hi"}],
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Use VARCHAR2."
        assert body["intent"] == "data_type_mapping"
        assert len(body["suggestions"]) == 3
        sent = transport.bodies()[0]
        assert [c["role"] for c in sent["contents"]] == ["user", "user"]

    def test_missing_message(self, make_client):
        client, _ = make_client()
        response = client.post("/api/chatbot", json={"conversationHistory": []})
        assert response.status_code == 400
        assert response.json()["error"] == "Missing message"

    def test_no_keys(self, make_client):
        client, _ = make_client(keys={"openrouter": None, "gemini": None})
        response = client.post("/api/chatbot", json={"message": "hi"})
        assert response.status_code == 500
        assert "API keys not configured" in response.json()["error"]

    def test_failure(self, make_client):
        client, _ = make_client(httpx.Response(502, text="bad gateway"))
        response = client.post("/api/chatbot", json={"message": "hi"})
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to process message"
        assert "502" in body["details"]


class TestDiagnosticsEndpoint:
    def test_reports_both_providers(self, make_client):
        client, _ = make_client(completion_response("Hello!"), keys={"openrouter": "k", "gemini": None})
        body = client.get("/api/diagnostics").json()
        assert body["apiKeys"]["openrouter"] == {"present": True, "length": 1}
        assert body["tests"]["openrouter"]["success"] is True
        assert body["tests"]["gemini"] == {"success": False, "error": "API key not configured"}
