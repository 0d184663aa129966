"""Ledger network client for the Aleo explorer API."""

from __future__ import annotations

from typing import Any

from aleo_client.async_rest import AsyncRestClient, AsyncRestError
from aleo_client.constants import DEFAULT_NETWORK, EXPLORER_URL, latest_height_path


class AleoNetworkClient:
    """Reads chain progress from the explorer.

    Errors propagate: callers decide whether a missing height is fatal.
    """

    def __init__(
        self,
        rest_client: AsyncRestClient | None = None,
        *,
        network: str = DEFAULT_NETWORK,
    ) -> None:
        self.rest_client = rest_client or AsyncRestClient(EXPLORER_URL)
        self.network = network

    async def close(self) -> None:
        await self.rest_client.close()

    async def get_latest_height(self) -> int:
        payload = await self.rest_client.get(latest_height_path(self.network))
        return self._parse_height(payload)

    @staticmethod
    def _parse_height(payload: Any) -> int:
        if isinstance(payload, dict):
            payload = payload.get("height", payload.get("data"))
        if isinstance(payload, bool):
            raise AsyncRestError(f"Unexpected block height payload: {payload!r}")
        try:
            height = int(payload)
        except (TypeError, ValueError) as exc:
            raise AsyncRestError(
                f"Unexpected block height payload: {payload!r}"
            ) from exc
        if height < 0:
            raise AsyncRestError(f"Negative block height: {height}")
        return height
