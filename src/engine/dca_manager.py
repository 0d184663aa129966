"""Orchestrates DCA positions across the worker, custody and position book."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from aleo_client.constants import (
    DCA_PROGRAM_ID,
    DEFAULT_CHAIN_ID,
    DEFAULT_FEE_MICROCREDITS,
)
from aleo_client.models import TransactionRequest, WalletRecord
from dca.errors import InvalidArgument, InvalidState, NotConnected
from dca.position import Position, PositionState
from dca.reconcile import reconcile_records
from dca.tokens import format_token
from dca.transactions import (
    build_cancel_request,
    build_create_request,
    build_execute_request,
)
from engine.state import PositionBook
from engine.worker import (
    OP_CANCEL_POSITION,
    OP_CREATE_POSITION,
    OP_EXECUTE_DCA,
    OP_GET_RECORDS,
    WorkerResponse,
    WorkerService,
)
from utils.logging_config import LogContext

LOGGER = logging.getLogger("zkdca.activity")


@dataclass(frozen=True)
class CreatePositionParams:
    input_token_id: int
    input_amount: int
    output_token_id: int
    interval: int
    executions_remaining: int
    min_output_amount: int


@dataclass(frozen=True)
class OperationResult:
    success: bool
    position: Position
    request: TransactionRequest
    tx_id: str | None = None
    error: str | None = None


class DcaManager:
    def __init__(
        self,
        worker: WorkerService,
        owner: str,
        *,
        book: PositionBook | None = None,
        state_path: str | Path | None = None,
        fee: int = DEFAULT_FEE_MICROCREDITS,
        fee_private: bool = False,
        program_id: str = DCA_PROGRAM_ID,
        chain_id: str = DEFAULT_CHAIN_ID,
    ) -> None:
        self.worker = worker
        self.owner = owner
        self.state_path = Path(state_path) if state_path is not None else None
        if book is None:
            book = (
                PositionBook.load(self.state_path)
                if self.state_path is not None
                else PositionBook()
            )
        self.book = book
        self.fee = fee
        self.fee_private = fee_private
        self.program_id = program_id
        self.chain_id = chain_id

    def _request_options(self) -> dict[str, Any]:
        return {
            "fee": self.fee,
            "fee_private": self.fee_private,
            "program_id": self.program_id,
            "chain_id": self.chain_id,
        }

    def save(self) -> None:
        if self.state_path is not None:
            self.book.save(self.state_path)

    def observe_height(self, height: int) -> None:
        """Block poller listener that remembers the latest height."""
        self.book.last_block_height = height

    def active_positions(self) -> list[Position]:
        return self.book.active()

    def get_position(self, position_id: str) -> Position:
        position = self.book.get(position_id)
        if position is None:
            raise InvalidArgument(f"Unknown position id: {position_id}")
        return position

    def due_positions(self, current_height: int) -> list[Position]:
        return [
            position
            for position in self.book.active()
            if position.is_due(current_height) and position.record
        ]

    async def _submit(
        self, operation: str, request: TransactionRequest
    ) -> WorkerResponse:
        response = await self.worker.submit(operation, {"request": request})
        if not response.success and response.error_type == NotConnected.__name__:
            raise NotConnected(response.error or "Wallet is not connected")
        return response

    async def create_position(
        self, params: CreatePositionParams, current_height: int
    ) -> OperationResult:
        position = Position.create(
            owner=self.owner,
            input_token_id=params.input_token_id,
            input_amount=params.input_amount,
            output_token_id=params.output_token_id,
            interval=params.interval,
            executions_remaining=params.executions_remaining,
            min_output_amount=params.min_output_amount,
            block_height=current_height,
        )
        request = build_create_request(
            self.owner,
            position.input_token_id,
            position.input_amount,
            position.output_token_id,
            position.interval,
            position.executions_remaining,
            position.min_output_amount,
            current_height,
            **self._request_options(),
        )
        LOGGER.info(
            "Creating DCA position: %s %s -> %s every %s blocks",
            params.input_amount,
            format_token(params.input_token_id),
            format_token(params.output_token_id),
            params.interval,
        )
        response = await self._submit(OP_CREATE_POSITION, request)
        if not response.success:
            LOGGER.error("Error creating position: %s", response.error)
            return OperationResult(
                success=False, position=position, request=request, error=response.error
            )
        position.created_tx_id = response.result
        self.book.add(position)
        self.save()
        LOGGER.info(
            "Created DCA position %s (tx %s), next execution at block %s",
            position.id,
            response.result,
            position.next_execution_height,
        )
        return OperationResult(
            success=True, position=position, request=request, tx_id=response.result
        )

    async def execute_position(
        self, position_id: str, token_record: str, current_height: int
    ) -> OperationResult:
        position = self.get_position(position_id)
        with LogContext(position_id=position.id, operation=OP_EXECUTE_DCA):
            position.check_executable(current_height)
            if not position.record:
                raise InvalidState(
                    f"Position {position.id} has no wallet record yet; reconcile first"
                )
            request = build_execute_request(
                self.owner,
                position.record,
                token_record,
                current_height,
                **self._request_options(),
            )
            response = await self._submit(OP_EXECUTE_DCA, request)
            position.apply_execution(
                response.success, tx_id=response.result if response.success else None
            )
            self.save()
            if not response.success:
                LOGGER.error("Error executing position: %s", response.error)
                return OperationResult(
                    success=False,
                    position=position,
                    request=request,
                    error=response.error,
                )
            LOGGER.info(
                "Executed DCA position %s; %s execution(s) remaining, state %s",
                position.id,
                position.executions_remaining,
                position.state.value,
            )
            return OperationResult(
                success=True, position=position, request=request, tx_id=response.result
            )

    async def cancel_position(self, position_id: str) -> OperationResult:
        position = self.get_position(position_id)
        with LogContext(position_id=position.id, operation=OP_CANCEL_POSITION):
            position.check_cancellable()
            if not position.record:
                raise InvalidState(
                    f"Position {position.id} has no wallet record yet; reconcile first"
                )
            request = build_cancel_request(
                self.owner, position.record, **self._request_options()
            )
            response = await self._submit(OP_CANCEL_POSITION, request)
            position.apply_cancellation(
                response.success, tx_id=response.result if response.success else None
            )
            if not response.success:
                LOGGER.error("Error cancelling position: %s", response.error)
                return OperationResult(
                    success=False,
                    position=position,
                    request=request,
                    error=response.error,
                )
            self.book.remove(position.id)
            self.save()
            LOGGER.info("Cancelled position %s", position.id)
            return OperationResult(
                success=True, position=position, request=request, tx_id=response.result
            )

    def reconcile(self, records: Iterable[WalletRecord]) -> list[Position]:
        """Rebuild the book from wallet records, keeping unmatched pending ones."""
        reconciled = [item.position for item in reconcile_records(records)]
        pending = self.book.pending()
        kept_pending: list[Position] = []
        claimed: list[Position] = []
        for local in pending:
            match = next(
                (
                    candidate
                    for candidate in reconciled
                    if candidate.same_terms(local)
                    and not any(candidate is other for other in claimed)
                ),
                None,
            )
            if match is None:
                kept_pending.append(local)
                continue
            claimed.append(match)
            match.created_tx_id = local.created_tx_id
            match.last_tx_id = local.last_tx_id
        active = [
            position
            for position in reconciled
            if position.state != PositionState.EXHAUSTED
        ]
        self.book.replace([*active, *kept_pending])
        self.save()
        LOGGER.info(
            "Reconciled %d active position(s); %d pending",
            len(active),
            len(kept_pending),
        )
        return self.book.active()

    async def sync_records(self) -> list[Position]:
        """Fetch records from the wallet through the worker and reconcile."""
        response = await self.worker.submit(
            OP_GET_RECORDS, {"program_id": self.program_id}
        )
        if not response.success:
            if response.error_type == NotConnected.__name__:
                raise NotConnected(response.error or "Wallet is not connected")
            LOGGER.error("Error fetching records: %s", response.error)
            return self.book.active()
        return self.reconcile(response.result)
