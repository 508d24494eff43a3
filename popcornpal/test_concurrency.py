from __future__ import annotations

import asyncio

import pytest

from popcornpal.concurrency import gather_settled


@pytest.mark.asyncio
async def test_failures_are_isolated_and_order_kept() -> None:
    async def _value(value: int, delay: float) -> int:
        await asyncio.sleep(delay)
        return value

    async def _boom() -> int:
        raise RuntimeError("boom")

    settled = await gather_settled([_value(1, 0.02), _boom(), _value(3, 0.0)])

    assert [outcome.ok for outcome in settled] == [True, False, True]
    assert settled[0].value == 1
    assert settled[2].value == 3
    assert isinstance(settled[1].error, RuntimeError)


@pytest.mark.asyncio
async def test_empty_input() -> None:
    assert await gather_settled([]) == []
