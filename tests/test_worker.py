from __future__ import annotations

import asyncio
from typing import Any, Mapping

import pytest

from aleo_client.models import WalletRecord
from dca.errors import NotConnected
from dca.transactions import build_cancel_request
from engine.custody import DryRunWallet
from engine.worker import (
    OP_CANCEL_POSITION,
    OP_GET_BLOCK_HEIGHT,
    OP_GET_RECORDS,
    WorkerService,
    WorkerStoppedError,
    build_dca_handlers,
)

OWNER = "aleo1" + "q" * 58


@pytest.mark.asyncio
async def test_concurrent_same_operation_requests_get_their_own_responses() -> None:
    release = asyncio.Event()

    async def echo(params: Mapping[str, Any]) -> Any:
        if params["value"] == "first":
            await release.wait()
        return params["value"]

    async with WorkerService({"echo": echo}) as worker:
        first_id, first = worker.post("echo", {"value": "first"})
        second_id, second = worker.post("echo", {"value": "second"})
        assert first_id != second_id
        release.set()
        responses = await asyncio.gather(first, second)

    assert [response.result for response in responses] == ["first", "second"]
    assert responses[0].correlation_id == first_id
    assert responses[1].correlation_id == second_id


@pytest.mark.asyncio
async def test_handler_exception_becomes_failed_response() -> None:
    async def broken(params: Mapping[str, Any]) -> Any:
        raise ValueError("nope")

    async def healthy(params: Mapping[str, Any]) -> Any:
        return "ok"

    async with WorkerService({"broken": broken, "healthy": healthy}) as worker:
        failed = await worker.submit("broken")
        succeeded = await worker.submit("healthy")

    assert not failed.success
    assert failed.error == "nope"
    assert failed.error_type == "ValueError"
    assert succeeded.success
    assert succeeded.result == "ok"


@pytest.mark.asyncio
async def test_unknown_operation_fails() -> None:
    async with WorkerService() as worker:
        response = await worker.submit("does_not_exist")

    assert not response.success
    assert response.error_type == "UnsupportedOperation"


@pytest.mark.asyncio
async def test_post_requires_running_worker() -> None:
    worker = WorkerService()

    with pytest.raises(WorkerStoppedError):
        worker.post("anything")


@pytest.mark.asyncio
async def test_dca_handlers_forward_to_custody_and_network() -> None:
    class FakeNetwork:
        async def get_latest_height(self) -> int:
            return 321

    record = WalletRecord(plaintext="{}", programId="zk_dca_arcane_finance.aleo")
    other = WalletRecord(plaintext="{}", programId="credits.aleo")
    wallet = DryRunWallet(records=[record, other])
    request = build_cancel_request(OWNER, "{position}")

    async with WorkerService(build_dca_handlers(wallet, FakeNetwork())) as worker:
        tx = await worker.submit(OP_CANCEL_POSITION, {"request": request})
        height = await worker.submit(OP_GET_BLOCK_HEIGHT)
        records = await worker.submit(OP_GET_RECORDS, {})

    assert tx.success
    assert tx.result.startswith("at1")
    assert wallet.submitted == [request]
    assert height.result == 321
    assert records.result == [record]


@pytest.mark.asyncio
async def test_disconnected_wallet_reports_not_connected() -> None:
    wallet = DryRunWallet(connected=False)
    request = build_cancel_request(OWNER, "{position}")

    async with WorkerService(build_dca_handlers(wallet)) as worker:
        response = await worker.submit(OP_CANCEL_POSITION, {"request": request})

    assert not response.success
    assert response.error_type == NotConnected.__name__
