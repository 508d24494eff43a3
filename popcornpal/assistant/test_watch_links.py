from __future__ import annotations

import asyncio

import pytest

from popcornpal.assistant.watch_links import WatchLinkResolver, parse_watch_payload


def _available(movie_id: str, name: str) -> dict:
    return {
        "success": True,
        "available": True,
        "movie": {"name": name, "year": 2016, "rating": 7.9},
        "watchData": {"movieId": movie_id, "server": "http://media.test:8096/"},
    }


@pytest.mark.asyncio
async def test_failed_lookup_is_skipped() -> None:
    async def _lookup(title: str) -> dict:
        if title == "Heat":
            raise RuntimeError("backend exploded")
        return _available(f"id-{title}", title)

    links = await WatchLinkResolver(_lookup).resolve(["Arrival", "Heat", "Ronin"])

    assert list(links) == ["Arrival", "Ronin"]
    assert links["Arrival"].movie_id == "id-Arrival"
    assert links["Arrival"].server == "http://media.test:8096"
    assert links["Arrival"].rating == "7.9"


@pytest.mark.asyncio
async def test_lookups_run_concurrently() -> None:
    started: list[str] = []
    all_started = asyncio.Event()

    async def _lookup(title: str) -> dict:
        started.append(title)
        if len(started) == 3:
            all_started.set()
        await all_started.wait()
        return _available(title, title)

    links = await asyncio.wait_for(WatchLinkResolver(_lookup).resolve(["A1", "B2", "C3"]), timeout=1)

    assert started == ["A1", "B2", "C3"]
    assert len(links) == 3


@pytest.mark.asyncio
async def test_unavailable_and_malformed_are_skipped() -> None:
    payloads = {
        "Missing": {"success": True, "available": False},
        "Broken": {"success": True, "available": True, "watchData": ["not", "a", "dict"]},
        "NoServer": {"success": True, "available": True, "watchData": {"movieId": "x"}},
    }

    async def _lookup(title: str) -> dict:
        return payloads[title]

    assert await WatchLinkResolver(_lookup).resolve(list(payloads)) == {}


@pytest.mark.asyncio
async def test_empty_titles() -> None:
    async def _lookup(title: str) -> dict:
        raise AssertionError("should not be called")

    assert await WatchLinkResolver(_lookup).resolve([]) == {}


def test_parse_watch_payload_uses_title_when_name_missing() -> None:
    link = parse_watch_payload("Arrival", {"success": True, "available": True, "watchData": {"movieId": 5, "server": "s"}})
    assert link is not None
    assert link.name == "Arrival"
    assert link.movie_id == "5"
