"""Catalog and AI backend client built on a shared aiohttp session."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from popcornpal import logger
from popcornpal.__version__ import __version__
from popcornpal.catalog.parsers import (
    as_object,
    parse_ai_examples,
    parse_ai_status,
    parse_ai_suggestion,
    parse_cache_analysis,
    parse_catalog_page,
    parse_torrent_stats,
)
from popcornpal.catalog.types import AIStatus, AISuggestion, CacheAnalysis, CatalogKind, CatalogPage, TorrentStats
from popcornpal.config import CatalogConfig

DEFAULT_USER_AGENT = f"PopcornPal/{__version__}"


class CatalogError(Exception):
    """Base error for failed catalog/AI backend calls."""


class CatalogConnectionError(CatalogError):
    """The backend could not be reached or timed out."""


class CatalogResponseError(CatalogError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"HTTP {status}: {message}" if message else f"HTTP {status}")
        self.status = status
        self.message = message


def _error_message(body: object, fallback: str) -> str:
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message:
            return message
    return fallback


class CatalogClient:
    """Read-only catalog API plus the AI suggestion endpoints."""

    def __init__(self, config: CatalogConfig):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout
        self._semaphore = asyncio.Semaphore(config.max_concurrency)
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def list_titles(self, kind: CatalogKind, page: int = 1, limit: Optional[int] = None) -> CatalogPage:
        """GET /movies or /tvshows for one page."""
        params = {"page": page, "limit": limit or self.config.page_size}
        payload = await self._request("GET", f"/{kind}", params=params)
        return parse_catalog_page(payload, kind)

    async def search(
        self,
        kind: CatalogKind,
        query: str,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> CatalogPage:
        """GET /movies/search or /tvshows/search."""
        params = {"q": query, "page": page, "limit": limit or self.config.page_size}
        payload = await self._request("GET", f"/{kind}/search", params=params)
        return parse_catalog_page(payload, kind)

    async def torrent_stats(self) -> TorrentStats:
        """GET /torrent-stats: seeding health of the tracked torrents."""
        return parse_torrent_stats(await self._request("GET", "/torrent-stats"))

    async def analyze_cache(self) -> CacheAnalysis:
        """GET /analyze-redis-structure: shape and coverage of the cached catalog."""
        return parse_cache_analysis(await self._request("GET", "/analyze-redis-structure"))

    async def ai_status(self) -> AIStatus:
        return parse_ai_status(await self._request("GET", "/ai/status"))

    async def ai_examples(self) -> list[str]:
        return parse_ai_examples(await self._request("GET", "/ai/examples"))

    async def ai_suggestions(self, query: str, match_count: int = 5, include_sources: bool = False) -> AISuggestion:
        body = {"query": query, "matchCount": match_count, "includeSources": include_sources}
        return parse_ai_suggestion(await self._request("POST", "/ai/suggestions", json_body=body))

    async def ai_watch(self, movie_name: str) -> Dict[str, Any]:
        """Ask the backend whether ``movie_name`` is playable on the media server."""
        payload = await self._request("POST", "/ai/watch", json_body={"movieName": movie_name})
        return as_object(payload, "ai watch")

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        log = logger.get_logger()
        log.api_request(method, url, params or json_body)
        request_start = time.time()

        async with self._semaphore:
            session = await self._ensure_session()
            try:
                async with session.request(method, url, params=params, json=json_body) as response:
                    if response.status >= 400:
                        try:
                            body = await response.json(content_type=None)
                        except (aiohttp.ContentTypeError, ValueError):
                            body = None
                        message = _error_message(body, response.reason or "")
                        log.api_failed(path, f"status {response.status}")
                        raise CatalogResponseError(response.status, message)
                    data = await response.json(content_type=None)
                    elapsed_ms = (time.time() - request_start) * 1000
                    log.api_response(response.status, data, elapsed_ms)
                    return data
            except (asyncio.TimeoutError, aiohttp.ClientError) as exc:
                log.api_failed(path, f"{type(exc).__name__}: {exc}")
                raise CatalogConnectionError(f"{method} {path} failed: {exc}") from exc

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                self._session = aiohttp.ClientSession(
                    headers={"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"},
                    timeout=timeout,
                )
            return self._session

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()
