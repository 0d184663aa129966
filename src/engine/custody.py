"""Custody/signing collaborator interface and a dry-run wallet."""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Iterable, Protocol

from aleo_client.models import TransactionRequest, WalletRecord
from dca.errors import NotConnected

LOGGER = logging.getLogger(__name__)


class CustodyClient(Protocol):
    async def request_transaction(self, request: TransactionRequest) -> str:
        """Sign and broadcast a request, returning the transaction id.

        Raises NotConnected when no wallet is available.
        """

    async def request_records(self, program_id: str) -> list[WalletRecord]:
        """Return the wallet's records for a program."""


class DryRunWallet:
    """In-memory custody stand-in that records requests instead of signing."""

    def __init__(
        self,
        *,
        connected: bool = True,
        records: Iterable[WalletRecord] | None = None,
    ) -> None:
        self.connected = connected
        self.records: list[WalletRecord] = list(records or [])
        self.submitted: list[TransactionRequest] = []

    def _require_connected(self) -> None:
        if not self.connected:
            raise NotConnected("Wallet is not connected")

    async def request_transaction(self, request: TransactionRequest) -> str:
        self._require_connected()
        self.submitted.append(request)
        digest = hashlib.sha256(
            json.dumps(
                {"n": len(self.submitted), "request": request.to_payload()},
                sort_keys=True,
            ).encode("utf8")
        ).hexdigest()
        tx_id = f"at1{digest[:58]}"
        LOGGER.info(
            "Dry run: %s.%s accepted as %s",
            request.program_id,
            request.function_name,
            tx_id,
        )
        return tx_id

    async def request_records(self, program_id: str) -> list[WalletRecord]:
        self._require_connected()
        return [
            record
            for record in self.records
            if record.program_id in (None, program_id)
        ]
