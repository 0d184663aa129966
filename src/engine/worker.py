"""Background task-queue service for chain-affecting operations.

Requests are processed one at a time by a single asyncio task. Every request
carries a correlation id and resolves its own future, so two in-flight
requests of the same operation never get their responses mixed up. A handler
exception is turned into a failed response; it never stops the worker.
In-flight requests cannot be cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Mapping

from aleo_client.constants import DCA_PROGRAM_ID
from aleo_client.models import TransactionRequest
from aleo_client.network import AleoNetworkClient
from engine.custody import CustodyClient

LOGGER = logging.getLogger(__name__)

OP_CREATE_POSITION = "create_position"
OP_EXECUTE_DCA = "execute_dca"
OP_CANCEL_POSITION = "cancel_position"
OP_GET_BLOCK_HEIGHT = "get_block_height"
OP_GET_RECORDS = "get_records"

Handler = Callable[[Mapping[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class WorkerRequest:
    operation: str
    params: Mapping[str, Any] = field(default_factory=dict)
    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class WorkerResponse:
    operation: str
    correlation_id: str
    success: bool
    result: Any = None
    error: str | None = None
    error_type: str | None = None


class WorkerStoppedError(RuntimeError):
    """Raised when submitting to a worker that is not running."""


class WorkerService:
    def __init__(self, handlers: Mapping[str, Handler] | None = None) -> None:
        self._handlers: dict[str, Handler] = dict(handlers or {})
        self._queue: asyncio.Queue[WorkerRequest | None] = asyncio.Queue()
        self._pending: dict[str, asyncio.Future[WorkerResponse]] = {}
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def register(self, operation: str, handler: Handler) -> None:
        self._handlers[operation] = handler

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="dca-worker")
        LOGGER.debug("Worker started with operations: %s", sorted(self._handlers))

    async def stop(self) -> None:
        if self._task is None:
            return
        await self._queue.put(None)
        await self._task
        self._task = None
        for correlation_id, future in list(self._pending.items()):
            if not future.done():
                future.set_result(
                    WorkerResponse(
                        operation="unknown",
                        correlation_id=correlation_id,
                        success=False,
                        error="Worker stopped before the request was processed",
                        error_type=WorkerStoppedError.__name__,
                    )
                )
        self._pending.clear()

    async def __aenter__(self) -> "WorkerService":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    def post(
        self, operation: str, params: Mapping[str, Any] | None = None
    ) -> tuple[str, asyncio.Future[WorkerResponse]]:
        """Queue a request and return its correlation id and response future."""
        if not self.running:
            raise WorkerStoppedError("Worker is not running")
        request = WorkerRequest(operation=operation, params=dict(params or {}))
        future: asyncio.Future[WorkerResponse] = (
            asyncio.get_running_loop().create_future()
        )
        self._pending[request.correlation_id] = future
        self._queue.put_nowait(request)
        return request.correlation_id, future

    async def submit(
        self, operation: str, params: Mapping[str, Any] | None = None
    ) -> WorkerResponse:
        _, future = self.post(operation, params)
        return await future

    async def _run(self) -> None:
        while True:
            request = await self._queue.get()
            if request is None:
                self._queue.task_done()
                break
            response = await self._dispatch(request)
            future = self._pending.pop(request.correlation_id, None)
            if future is not None and not future.done():
                future.set_result(response)
            self._queue.task_done()

    async def _dispatch(self, request: WorkerRequest) -> WorkerResponse:
        handler = self._handlers.get(request.operation)
        if handler is None:
            return WorkerResponse(
                operation=request.operation,
                correlation_id=request.correlation_id,
                success=False,
                error=f"Unsupported operation: {request.operation}",
                error_type="UnsupportedOperation",
            )
        try:
            result = await handler(request.params)
        except Exception as exc:
            LOGGER.warning(
                "Worker operation %s (%s) failed: %s",
                request.operation,
                request.correlation_id,
                exc,
            )
            return WorkerResponse(
                operation=request.operation,
                correlation_id=request.correlation_id,
                success=False,
                error=str(exc),
                error_type=type(exc).__name__,
            )
        return WorkerResponse(
            operation=request.operation,
            correlation_id=request.correlation_id,
            success=True,
            result=result,
        )


def build_dca_handlers(
    custody: CustodyClient,
    network: AleoNetworkClient | None = None,
    *,
    program_id: str = DCA_PROGRAM_ID,
) -> dict[str, Handler]:
    """Return handlers that forward DCA operations to the collaborators."""

    async def submit_transaction(params: Mapping[str, Any]) -> str:
        request = params["request"]
        if not isinstance(request, TransactionRequest):
            raise TypeError("params['request'] must be a TransactionRequest")
        return await custody.request_transaction(request)

    async def get_records(params: Mapping[str, Any]) -> list[Any]:
        return await custody.request_records(params.get("program_id", program_id))

    handlers: dict[str, Handler] = {
        OP_CREATE_POSITION: submit_transaction,
        OP_EXECUTE_DCA: submit_transaction,
        OP_CANCEL_POSITION: submit_transaction,
        OP_GET_RECORDS: get_records,
    }
    if network is not None:

        async def get_block_height(params: Mapping[str, Any]) -> int:
            return await network.get_latest_height()

        handlers[OP_GET_BLOCK_HEIGHT] = get_block_height
    return handlers
