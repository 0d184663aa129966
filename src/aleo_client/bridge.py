"""Verulink bridge client and transfer builder."""

from __future__ import annotations

import logging
from typing import Any

from aleo_client.async_rest import (
    AsyncNotFoundError,
    AsyncRestClient,
    AsyncRestError,
    path_segment,
)
from aleo_client.constants import (
    BRIDGE_CHAINS,
    BRIDGE_TRANSFER_LIMIT,
    CHAIN_ID_ALEO,
    PACKET_FILTERS,
    SOURCE_CHAIN_CONTRACTS,
    SUPPORTED_BRIDGE_TOKENS,
    VERULINK_CONTRACTS,
    VERULINK_URL,
)
from aleo_client.models import (
    AleoBridgeCall,
    BridgeStatus,
    BridgeTransferParams,
    EvmBridgeCall,
    PacketListResponse,
)
from dca.errors import InvalidArgument
from dca.validation import validate_aleo_address, validate_evm_address

LOGGER = logging.getLogger(__name__)

NATIVE_ETH = "eth"


def _hex_payload(text: str) -> str:
    return "0x" + text.encode("utf8").hex()


def build_bridge_transfer(
    params: BridgeTransferParams,
) -> EvmBridgeCall | AleoBridgeCall:
    """Build the call that starts a bridge transfer.

    EVM -> Aleo transfers target the source chain's token service contract;
    Aleo -> EVM transfers call the Aleo token service program.
    """
    if params.destination_chain_id == CHAIN_ID_ALEO:
        if not validate_aleo_address(params.receiver):
            raise InvalidArgument("Invalid Aleo address format")
    elif not validate_evm_address(params.receiver):
        raise InvalidArgument("Invalid EVM address format")

    if params.source_chain_id == CHAIN_ID_ALEO:
        return AleoBridgeCall(
            program=VERULINK_CONTRACTS["aleo"]["token_service"],
            function="transfer",
            inputs=(
                params.token_address,
                params.amount,
                params.receiver,
                params.destination_chain_id,
            ),
        )

    contract_key = SOURCE_CHAIN_CONTRACTS.get(params.source_chain_id)
    if contract_key is None:
        raise InvalidArgument(f"Unsupported source chain: {params.source_chain_id}")
    target_contract = VERULINK_CONTRACTS[contract_key]["token_service"]

    if params.token_address.lower() == NATIVE_ETH:
        return EvmBridgeCall(
            to=target_contract,
            value=params.amount,
            data=_hex_payload(params.receiver),
            method="transfer(string)",
            chain_id=params.source_chain_id,
        )
    return EvmBridgeCall(
        to=target_contract,
        value="0",
        data=_hex_payload(params.token_address + params.amount + params.receiver),
        method="transfer(address,uint256,string)",
        chain_id=params.source_chain_id,
    )


def get_bridge_status() -> BridgeStatus:
    """Return the bridge's static operational status."""
    return BridgeStatus(
        is_operational=True,
        transfer_limit=BRIDGE_TRANSFER_LIMIT,
        supported_tokens=tuple(SUPPORTED_BRIDGE_TOKENS),
        supported_chains=tuple(BRIDGE_CHAINS),
    )


def _check_paging(packet_filter: str, page: int, limit: int) -> None:
    if packet_filter not in PACKET_FILTERS:
        raise InvalidArgument(
            f"filter must be one of {', '.join(PACKET_FILTERS)}, got: {packet_filter!r}"
        )
    if page < 1:
        raise InvalidArgument(f"page must be >= 1, got: {page}")
    if limit < 1:
        raise InvalidArgument(f"limit must be >= 1, got: {limit}")


class BridgeClient:
    """Client for the Verulink packet API."""

    def __init__(self, rest_client: AsyncRestClient | None = None) -> None:
        self.rest_client = rest_client or AsyncRestClient(VERULINK_URL, max_retries=0)

    async def close(self) -> None:
        await self.rest_client.close()

    async def _fetch_packets(
        self, path: str, params: dict[str, Any], page: int, description: str
    ) -> PacketListResponse:
        try:
            payload = await self.rest_client.get(path, params=params)
        except AsyncNotFoundError:
            return PacketListResponse.empty(page)
        except AsyncRestError as exc:
            LOGGER.error("Error fetching packets by %s: %s", description, exc)
            return PacketListResponse.empty(page)
        body = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(body, dict):
            LOGGER.error("Unexpected packet payload for %s: %r", description, payload)
            return PacketListResponse.empty(page)
        try:
            return PacketListResponse.model_validate(body)
        except ValueError as exc:
            LOGGER.error("Malformed packet payload for %s: %s", description, exc)
            return PacketListResponse.empty(page)

    async def fetch_packets_by_wallet(
        self,
        wallet: str,
        packet_filter: str = "all",
        page: int = 1,
        limit: int = 10,
    ) -> PacketListResponse:
        _check_paging(packet_filter, page, limit)
        return await self._fetch_packets(
            f"/packet/wallet/{path_segment(wallet)}",
            {"filter": packet_filter, "page": page, "limit": limit},
            page,
            "wallet",
        )

    async def fetch_packets_by_wallet_and_chain(
        self,
        wallet: str,
        chain_id: str,
        packet_filter: str = "all",
        page: int = 1,
        limit: int = 10,
    ) -> PacketListResponse:
        _check_paging(packet_filter, page, limit)
        return await self._fetch_packets(
            f"/packet/{path_segment(wallet)}/{path_segment(chain_id)}",
            {"filter": packet_filter, "page": page, "limit": limit},
            page,
            "wallet and chain",
        )

    async def fetch_packets_by_chain(
        self,
        chain_id: str,
        packet_filter: str = "all",
        min_signature_count: int = 0,
        page: int = 1,
        limit: int = 10,
    ) -> PacketListResponse:
        _check_paging(packet_filter, page, limit)
        params: dict[str, Any] = {"filter": packet_filter, "page": page, "limit": limit}
        if min_signature_count > 0:
            params["min_signature_count"] = min_signature_count
        return await self._fetch_packets(
            f"/packet/{path_segment(chain_id)}", params, page, "chain"
        )
