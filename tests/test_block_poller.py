from __future__ import annotations

import asyncio
from typing import Any, Mapping

import pytest

from engine.block_poller import BlockHeightPoller
from engine.worker import OP_GET_BLOCK_HEIGHT, WorkerService


def height_handler(results: list[Any]):
    async def handler(params: Mapping[str, Any]) -> int:
        result = results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    return handler


@pytest.mark.asyncio
async def test_poll_updates_height_and_notifies_listeners() -> None:
    seen: list[int] = []
    handler = height_handler([100, 101])
    async with WorkerService({OP_GET_BLOCK_HEIGHT: handler}) as worker:
        poller = BlockHeightPoller(worker, interval_sec=1)
        poller.add_listener(seen.append)

        assert await poller.poll_once() == 100
        assert await poller.poll_once() == 101

    assert poller.latest_height == 101
    assert seen == [100, 101]


@pytest.mark.asyncio
async def test_failed_poll_keeps_previous_height() -> None:
    handler = height_handler([100, RuntimeError("explorer down")])
    async with WorkerService({OP_GET_BLOCK_HEIGHT: handler}) as worker:
        poller = BlockHeightPoller(worker, interval_sec=1)
        await poller.poll_once()
        height = await poller.poll_once()

    assert height == 100
    assert poller.last_error == "explorer down"


@pytest.mark.asyncio
async def test_start_polls_immediately_and_stop_cancels() -> None:
    polled = asyncio.Event()

    async def handler(params: Mapping[str, Any]) -> int:
        polled.set()
        return 7

    async with WorkerService({OP_GET_BLOCK_HEIGHT: handler}) as worker:
        poller = BlockHeightPoller(worker, interval_sec=60)
        poller.start()
        await asyncio.wait_for(polled.wait(), timeout=1)
        await poller.stop()

    assert not poller.running


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        BlockHeightPoller(WorkerService(), interval_sec=0)


@pytest.mark.asyncio
async def test_bounded_start_stops_after_max_polls() -> None:
    handler = height_handler([5, 6, 7])
    seen: list[int] = []
    async with WorkerService({OP_GET_BLOCK_HEIGHT: handler}) as worker:
        poller = BlockHeightPoller(worker, interval_sec=0.001)
        poller.add_listener(seen.append)
        poller.start(max_polls=2)
        await asyncio.wait_for(poller.wait(), timeout=1)

    assert seen == [5, 6]
    assert not poller.running
