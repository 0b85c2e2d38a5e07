"""Tests for the AI roadmap-generation client."""

import json

import httpx
import pytest

from learnboard.core.config import get_settings
from learnboard.services import generation_client

GENERATION_URL = "https://generator.test/roadmap"


@pytest.fixture(autouse=True)
def generation_settings(monkeypatch: pytest.MonkeyPatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "GENERATION_URL", GENERATION_URL)
    monkeypatch.setattr(settings, "GENERATION_API_KEY", "secret")
    return settings


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_generate_roadmap_parses_sections() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"sections": [{"title": "Async", "topics": ["asyncio", {"title": "Tasks", "subTopics": ["gather"]}]}]},
        )

    async with _client(handler) as client:
        generated = await generation_client.generate_roadmap("Python", "Python", client=client)

    assert [s.title for s in generated.sections] == ["Async"]
    assert generated.sections[0].topics[1].children[0].title == "gather"
    assert seen[0].headers["Authorization"] == "Bearer secret"
    assert json.loads(seen[0].content) == {"title": "Python", "languageName": "Python"}


@pytest.mark.asyncio
async def test_fenced_response_is_accepted() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text='```json\n{"sections": [{"title": "Basics",}]}\n```')

    async with _client(handler) as client:
        generated = await generation_client.generate_roadmap("Python", "Python", client=client)
    assert generated.sections[0].title == "Basics"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "error_type", "kind"),
    [
        (429, generation_client.RateLimitError, "rate_limited"),
        (402, generation_client.InsufficientBalanceError, "insufficient_balance"),
        (500, generation_client.GenerationError, "generation_failed"),
    ],
)
async def test_http_errors_map_to_kinds(status_code: int, error_type: type, kind: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"error": "nope"})

    async with _client(handler) as client:
        with pytest.raises(error_type) as exc_info:
            await generation_client.generate_roadmap("Python", "Python", client=client)

    assert exc_info.value.kind == kind
    assert exc_info.value.status_code == status_code


@pytest.mark.asyncio
async def test_invalid_response_format() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"outline": []})

    async with _client(handler) as client:
        with pytest.raises(generation_client.GenerationError, match="Invalid response format"):
            await generation_client.generate_roadmap("Python", "Python", client=client)


@pytest.mark.asyncio
async def test_transport_error_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(generation_client.GenerationError, match="request failed"):
            await generation_client.generate_roadmap("Python", "Python", client=client)


@pytest.mark.asyncio
async def test_unconfigured_endpoint(monkeypatch: pytest.MonkeyPatch, generation_settings) -> None:
    monkeypatch.setattr(generation_settings, "GENERATION_URL", "")
    with pytest.raises(generation_client.GenerationError, match="not configured"):
        await generation_client.generate_roadmap("Python", "Python")
