"""Resolve extracted candidate titles to playable media-server items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from popcornpal import logger
from popcornpal.catalog.parsers import as_int, field_object
from popcornpal.concurrency import gather_settled

WatchLookup = Callable[[str], Awaitable[Dict[str, Any]]]


@dataclass(frozen=True)
class WatchLink:
    """A candidate title that the media server can play."""

    title: str
    movie_id: str
    name: str
    server: str
    year: Optional[int] = None
    rating: Optional[str] = None


def parse_watch_payload(title: str, payload: Dict[str, Any]) -> WatchLink | None:
    """Return a WatchLink for an ``available`` answer, None for a miss."""
    if not payload.get("success") or not payload.get("available"):
        return None
    watch_data = field_object(payload, "watchData", "ai watch")
    movie = field_object(payload, "movie", "ai watch")
    movie_id = watch_data.get("movieId")
    server = watch_data.get("server")
    if not movie_id or not server:
        return None
    rating = movie.get("rating")
    return WatchLink(
        title=title,
        movie_id=str(movie_id),
        name=str(movie.get("name") or title),
        server=str(server).rstrip("/"),
        year=as_int(movie.get("year")),
        rating=str(rating) if rating not in (None, "") else None,
    )


class WatchLinkResolver:
    """Fans out one lookup per title and keeps the ones that resolved."""

    def __init__(self, lookup: WatchLookup):
        self._lookup = lookup

    async def resolve(self, titles: Sequence[str]) -> dict[str, WatchLink]:
        if not titles:
            return {}
        log = logger.get_logger()
        # Every lookup is started before any is awaited.
        settled = await gather_settled(self._lookup(title) for title in titles)

        links: dict[str, WatchLink] = {}
        for title, outcome in zip(titles, settled):
            if not outcome.ok:
                log.debug(f"Watch lookup for '{title}' failed: {outcome.error}")
                continue
            try:
                link = parse_watch_payload(title, outcome.value or {})
            except ValueError as exc:
                log.debug(f"Watch lookup for '{title}' returned a malformed payload: {exc}")
                continue
            if link is None:
                log.debug(f"'{title}' is not available on the media server")
                continue
            links[title] = link
        log.debug(f"Resolved {len(links)}/{len(titles)} candidate titles")
        return links
