from __future__ import annotations

import aiohttp
import pytest

from popcornpal.catalog.client import CatalogClient, CatalogConnectionError, CatalogResponseError
from popcornpal.config import CatalogConfig


class _FakeResponse:
    def __init__(self, status: int, payload: object, reason: str = "OK") -> None:
        self.status = status
        self.reason = reason
        self._payload = payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type=None) -> object:
        return self._payload


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error
        self.closed = False
        self.calls: list[dict] = []

    def request(self, method: str, url: str, *, params=None, json=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json})
        if self._error is not None:
            raise self._error
        return self._response

    async def close(self) -> None:
        self.closed = True


def _client(session: _FakeSession) -> CatalogClient:
    client = CatalogClient(CatalogConfig(base_url="http://catalog.test/api/", page_size=12))
    client._session = session
    return client


@pytest.mark.asyncio
async def test_list_titles_builds_paged_request() -> None:
    payload = {"movies": [], "pagination": {"currentPage": 3, "totalPages": 4, "totalMovies": 40}}
    session = _FakeSession(_FakeResponse(200, payload))

    page = await _client(session).list_titles("movies", page=3)

    assert session.calls[0]["url"] == "http://catalog.test/api/movies"
    assert session.calls[0]["params"] == {"page": 3, "limit": 12}
    assert page.pagination.current_page == 3


@pytest.mark.asyncio
async def test_search_sends_query() -> None:
    session = _FakeSession(_FakeResponse(200, {"tvShows": []}))

    await _client(session).search("tvshows", "dark", page=2)

    assert session.calls[0]["url"] == "http://catalog.test/api/tvshows/search"
    assert session.calls[0]["params"] == {"q": "dark", "page": 2, "limit": 12}


@pytest.mark.asyncio
async def test_ai_suggestions_posts_body() -> None:
    session = _FakeSession(_FakeResponse(200, {"success": True, "message": "Try **Heat**"}))

    suggestion = await _client(session).ai_suggestions("crime thrillers", match_count=3)

    assert session.calls[0]["method"] == "POST"
    assert session.calls[0]["json"] == {"query": "crime thrillers", "matchCount": 3, "includeSources": False}
    assert suggestion.success is True


@pytest.mark.asyncio
async def test_error_status_raises_with_backend_message() -> None:
    session = _FakeSession(_FakeResponse(503, {"message": "AI service is not configured"}, reason="Unavailable"))

    with pytest.raises(CatalogResponseError) as excinfo:
        await _client(session).ai_status()

    assert excinfo.value.status == 503
    assert excinfo.value.message == "AI service is not configured"


@pytest.mark.asyncio
async def test_error_status_falls_back_to_reason() -> None:
    session = _FakeSession(_FakeResponse(404, None, reason="Not Found"))

    with pytest.raises(CatalogResponseError) as excinfo:
        await _client(session).torrent_stats()

    assert excinfo.value.message == "Not Found"


@pytest.mark.asyncio
async def test_connection_failure_is_wrapped_and_not_retried() -> None:
    session = _FakeSession(error=aiohttp.ClientConnectionError("refused"))

    with pytest.raises(CatalogConnectionError):
        await _client(session).list_titles("movies")

    assert len(session.calls) == 1


@pytest.mark.asyncio
async def test_close_closes_session() -> None:
    session = _FakeSession(_FakeResponse(200, {}))
    client = _client(session)

    await client.close()

    assert session.closed is True


@pytest.mark.asyncio
async def test_torrent_stats_and_cache_analysis_endpoints() -> None:
    stats_session = _FakeSession(_FakeResponse(200, {"totalTrackedTorrents": 7, "dataSource": "real"}))
    stats = await _client(stats_session).torrent_stats()

    analysis_session = _FakeSession(_FakeResponse(200, {"analysis": {"movieCount": 9}}))
    analysis = await _client(analysis_session).analyze_cache()

    assert stats_session.calls[0]["url"] == "http://catalog.test/api/torrent-stats"
    assert stats.total_tracked == 7
    assert analysis_session.calls[0]["url"] == "http://catalog.test/api/analyze-redis-structure"
    assert analysis.movie_count == 9
