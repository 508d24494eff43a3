"""Send a "request this file" message to the configured webhook."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

import aiohttp

from popcornpal import logger
from popcornpal.catalog.client import DEFAULT_USER_AGENT
from popcornpal.catalog.types import CatalogItem, FileOption
from popcornpal.config import RequestsConfig
from popcornpal.notices import Notice


def build_request_payload(item: CatalogItem, file: FileOption) -> Dict[str, Any]:
    return {
        "movie": {
            "title": item.title,
            "year": item.year,
            "imdbRating": item.imdb_rating,
            "tmdbRating": item.tmdb_rating,
        },
        "file": {
            "filename": file.filename,
            "originalFilename": file.original_filename,
            "size": file.size,
            "href": file.href,
            "language": file.language,
            "releaseYear": file.release_year,
        },
    }


async def request_file(
    config: RequestsConfig,
    item: CatalogItem,
    file: FileOption,
    timeout: int = 10,
) -> Notice:
    if not config.webhook_url:
        return Notice("warning", "File requests are not configured (set [requests] webhook_url)")

    payload = build_request_payload(item, file)
    log = logger.get_logger()
    log.api_request("POST", config.webhook_url, payload)
    try:
        async with aiohttp.ClientSession(
            headers={"User-Agent": DEFAULT_USER_AGENT},
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as session:
            async with session.post(config.webhook_url, json=payload) as response:
                if 200 <= response.status < 300:
                    log.debug(f"Requested '{file.filename}' for '{item.title}'")
                    return Notice("success", f"Movie \"{item.title}\" requested successfully!")
                log.api_failed("webhook", f"status {response.status}")
                return Notice(
                    "error",
                    f"Failed to request movie. Server responded with status: {response.status}",
                )
    except (asyncio.TimeoutError, aiohttp.ClientError) as exc:
        log.api_failed("webhook", f"{type(exc).__name__}: {exc}")
        return Notice("error", "Network error: Unable to send movie request")
