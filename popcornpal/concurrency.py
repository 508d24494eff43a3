"""Structured concurrent join helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

_T = TypeVar("_T")


@dataclass(frozen=True)
class Settled(Generic[_T]):
    """Outcome of one awaited unit of work: a value or the exception it raised."""

    value: _T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_settled(awaitables: Iterable[Awaitable[_T]]) -> list[Settled[_T]]:
    """
    Run every awaitable concurrently and wait until all of them settle.

    Results keep input order. A failure is captured in its own slot and never
    cancels or short-circuits its siblings.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []
    raw = await asyncio.gather(*tasks, return_exceptions=True)
    settled: list[Settled[_T]] = []
    for outcome in raw:
        if isinstance(outcome, BaseException):
            settled.append(Settled(error=outcome))
        else:
            settled.append(Settled(value=outcome))
    return settled
