"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from health_advisor.adapters.http_estimate_client import HttpxEstimateClient
from health_advisor.adapters.openai_estimate_client import OpenAIEstimateClient
from health_advisor.services.ai_estimator import ESTIMATE_SCHEMA


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = json.dumps({"items": []})) -> None:
        self.responses = _FakeResponses(output_text)


def test_openai_estimate_client_parses_output() -> None:
    fake = _FakeOpenAI()
    client = OpenAIEstimateClient(
        client=fake, model="gpt-5.2", reasoning_effort="high", store=False
    )

    result = asyncio.run(client.estimate(text="2 eggs", recent_groceries=["Fage"]))

    assert result == {"items": []}
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["reasoning"] == {"effort": "high"}
    assert payload["text"]["format"]["schema"] is ESTIMATE_SCHEMA
    assert "- Fage" in payload["instructions"]


def test_openai_estimate_client_rejects_empty_output() -> None:
    client = OpenAIEstimateClient(
        client=_FakeOpenAI(output_text=""),
        model="gpt-5.2",
        reasoning_effort=None,
        store=False,
    )

    with pytest.raises(RuntimeError):
        asyncio.run(client.estimate(text="2 eggs", recent_groceries=[]))


def test_http_estimate_client_posts_text() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"items": [], "totalCalories": 0})

    transport = httpx.MockTransport(handler)
    client = HttpxEstimateClient(
        base_url="https://advisor.example.com",
        http_client=httpx.AsyncClient(transport=transport),
    )

    result = asyncio.run(client.estimate(text="toast", recent_groceries=["Bread"]))

    assert result == {"items": [], "totalCalories": 0}
    assert seen["path"] == "/api/estimate-calories"
    assert seen["body"] == {"text": "toast", "recentGroceries": ["Bread"]}


def test_http_estimate_client_raises_on_error_status() -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(502, json={"error": "bad gateway"})
    )
    client = HttpxEstimateClient(
        base_url="https://advisor.example.com",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.estimate(text="toast", recent_groceries=[]))
