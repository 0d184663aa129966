"""Fixed-interval block height polling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from aleo_client.constants import BLOCK_POLL_INTERVAL_SEC
from engine.worker import OP_GET_BLOCK_HEIGHT, WorkerService

LOGGER = logging.getLogger(__name__)

HeightListener = Callable[[int], None]


class BlockHeightPoller:
    """Polls the latest block height through the worker.

    The first poll happens immediately on start. Failed polls are logged and
    the previous height is kept.
    """

    def __init__(
        self,
        worker: WorkerService,
        *,
        interval_sec: float = BLOCK_POLL_INTERVAL_SEC,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        self.worker = worker
        self.interval_sec = interval_sec
        self.latest_height: int | None = None
        self.last_error: str | None = None
        self._listeners: list[HeightListener] = []
        self._task: asyncio.Task[None] | None = None

    def add_listener(self, listener: HeightListener) -> None:
        self._listeners.append(listener)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> int | None:
        response = await self.worker.submit(OP_GET_BLOCK_HEIGHT)
        if not response.success:
            self.last_error = response.error
            LOGGER.warning("Error getting block height: %s", response.error)
            return self.latest_height
        height = int(response.result)
        self.last_error = None
        if height != self.latest_height:
            LOGGER.info("Current block height: %s", height)
        self.latest_height = height
        for listener in self._listeners:
            listener(height)
        return height

    def start(self, *, max_polls: int | None = None) -> None:
        """Poll in the background, stopping after ``max_polls`` when given."""
        if self.running:
            return
        self._task = asyncio.create_task(
            self._run(max_polls), name="block-height-poller"
        )

    async def wait(self) -> None:
        """Wait until a bounded polling run has finished."""
        if self._task is not None:
            await self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self, max_polls: int | None = None) -> None:
        polls = 0
        while True:
            await self.poll_once()
            polls += 1
            if max_polls is not None and polls >= max_polls:
                return
            await asyncio.sleep(self.interval_sec)
