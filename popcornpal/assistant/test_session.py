from __future__ import annotations

import asyncio

import pytest

from popcornpal.assistant.session import AssistantSession
from popcornpal.catalog.client import CatalogConnectionError, CatalogResponseError
from popcornpal.catalog.types import AIStatus, AISuggestion
from popcornpal.notices import NoticeBoard


class _FakeClient:
    def __init__(self, message: str = "Try **Heat** or **Ronin**", available: tuple[str, ...] = ("Heat",)) -> None:
        self.message = message
        self.available = available
        self.suggestion_error: Exception | None = None
        self.gates: dict[str, asyncio.Event] = {}
        self.questions: list[str] = []
        self.watch_calls: list[str] = []

    async def ai_status(self) -> AIStatus:
        raise CatalogConnectionError("GET /ai/status failed")

    async def ai_examples(self) -> list[str]:
        return ["Space movies with a twist"]

    async def ai_suggestions(self, query: str, match_count: int = 5, include_sources: bool = False) -> AISuggestion:
        self.questions.append(query)
        if query in self.gates:
            await self.gates[query].wait()
        if self.suggestion_error is not None:
            raise self.suggestion_error
        return AISuggestion(success=True, message=f"{self.message} ({query})", match_count=2)

    async def ai_watch(self, movie_name: str) -> dict:
        self.watch_calls.append(movie_name)
        if movie_name not in self.available:
            return {"success": True, "available": False}
        return {
            "success": True,
            "available": True,
            "movie": {"name": movie_name},
            "watchData": {"movieId": f"id-{movie_name}", "server": "http://media.test"},
        }


@pytest.mark.asyncio
async def test_ask_extracts_and_resolves_links() -> None:
    notices = NoticeBoard()
    client = _FakeClient()
    session = AssistantSession(client, notices=notices)

    state = await session.ask("  tense heist movies ")

    assert client.questions == ["tense heist movies"]
    assert state.extraction.titles == ("Heat", "Ronin")
    assert client.watch_calls == ["Heat", "Ronin"]
    assert list(state.watch_links) == ["Heat"]
    assert state.loading is False
    assert notices.notices[0].message == "Got your movie suggestions!"


@pytest.mark.asyncio
async def test_blank_question_is_rejected() -> None:
    notices = NoticeBoard()
    client = _FakeClient()

    state = await AssistantSession(client, notices=notices).ask("   ")

    assert client.questions == []
    assert state.is_empty()
    assert notices.latest().message == "Please enter a movie question or description"


@pytest.mark.asyncio
async def test_backend_error_message_is_shown() -> None:
    notices = NoticeBoard()
    client = _FakeClient()
    client.suggestion_error = CatalogResponseError(503, "AI service is not configured")

    state = await AssistantSession(client, notices=notices).ask("anything")

    assert state.suggestion == AISuggestion(success=False, message="AI service is not configured")
    assert notices.latest().is_error
    assert client.watch_calls == []


@pytest.mark.asyncio
async def test_connection_error_uses_generic_message() -> None:
    client = _FakeClient()
    client.suggestion_error = CatalogConnectionError("POST /ai/suggestions failed")

    state = await AssistantSession(client).ask("anything")

    assert state.suggestion.message == "Failed to get AI suggestions"


@pytest.mark.asyncio
async def test_no_watchable_titles_emits_info() -> None:
    notices = NoticeBoard()
    client = _FakeClient(available=())

    state = await AssistantSession(client, notices=notices).ask("heists")

    assert state.watch_links == {}
    assert not state.has_watch_links()
    assert notices.latest().level == "info"


@pytest.mark.asyncio
async def test_superseded_answer_is_dropped() -> None:
    client = _FakeClient()
    client.gates["first"] = asyncio.Event()
    session = AssistantSession(client)

    first = asyncio.create_task(session.ask("first"))
    await asyncio.sleep(0)
    second = await session.ask("second")
    client.gates["first"].set()
    await first

    assert session.state is second
    assert session.state.query == "second"
    assert "(second)" in session.state.suggestion.message


@pytest.mark.asyncio
async def test_status_and_examples_fall_back() -> None:
    session = AssistantSession(_FakeClient())

    status = await session.load_status()
    examples = await session.load_examples()

    assert status == AIStatus(status="error", configured=False)
    assert examples == ["Space movies with a twist"]
