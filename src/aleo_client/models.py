"""Shared data models for the Aleo DCA clients.

Pydantic-based models for wallet-adapter payloads and remote API responses.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aleo_client.constants import DEFAULT_CHAIN_ID, DEFAULT_FEE_MICROCREDITS


class Transition(BaseModel):
    """A single program call inside a transaction request."""

    model_config = ConfigDict(frozen=True)

    program: str
    function_name: str
    inputs: tuple[str, ...]

    def to_payload(self) -> dict[str, Any]:
        return {
            "program": self.program,
            "functionName": self.function_name,
            "inputs": list(self.inputs),
        }


class TransactionRequest(BaseModel):
    """Transaction descriptor handed to the custody/signing collaborator."""

    model_config = ConfigDict(frozen=True)

    address: str
    chain_id: str = DEFAULT_CHAIN_ID
    transitions: tuple[Transition, ...]
    fee: int = DEFAULT_FEE_MICROCREDITS
    fee_private: bool = False

    @field_validator("fee")
    @classmethod
    def validate_fee(cls, v: int) -> int:
        """Fees are expressed in whole microcredits."""
        if v <= 0:
            raise ValueError("Fee must be positive")
        return v

    @property
    def program_id(self) -> str:
        return self.transitions[0].program

    @property
    def function_name(self) -> str:
        return self.transitions[0].function_name

    @property
    def inputs(self) -> tuple[str, ...]:
        return self.transitions[0].inputs

    def to_payload(self) -> dict[str, Any]:
        """Convert to the wallet-adapter request payload."""
        return {
            "address": self.address,
            "chainId": self.chain_id,
            "transitions": [transition.to_payload() for transition in self.transitions],
            "fee": self.fee,
            "feePrivate": self.fee_private,
        }


class WalletRecord(BaseModel):
    """Opaque record held by the wallet, as returned by ``requestRecords``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    plaintext: str
    spent: bool = False
    record_name: str | None = Field(default=None, alias="recordName")
    program_id: str | None = Field(default=None, alias="programId")

    @field_validator("spent", mode="before")
    @classmethod
    def validate_spent(cls, v: Any) -> bool:
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip().lower() in {"true", "1", "yes"}
        return bool(v)


class NameHashResult(BaseModel):
    """Name and balance resolved from an ANS name hash."""

    model_config = ConfigDict(frozen=True)

    name: str
    balance: str

    @field_validator("balance", mode="before")
    @classmethod
    def validate_balance(cls, v: Any) -> str:
        if v is None:
            return "0"
        return str(v)


class PacketData(BaseModel):
    """Bridge packet summary. Unknown fields are kept on the model."""

    model_config = ConfigDict(
        frozen=True, extra="allow", populate_by_name=True, arbitrary_types_allowed=True
    )

    packet_id: str = Field(alias="packetId")
    version: str | None = None
    destination_address: str | None = Field(default=None, alias="destinationAddress")
    source_address: str | None = Field(default=None, alias="sourceAddress")
    destination_chain: str | None = Field(default=None, alias="destinationChain")
    source_chain: str | None = Field(default=None, alias="sourceChain")
    status: str | None = None
    token_address: str | None = Field(default=None, alias="tokenAddress")
    amount: str | None = None
    signatures: int | None = None
    timestamp: int | str | None = None

    @field_validator(
        "packet_id",
        "version",
        "destination_chain",
        "source_chain",
        "amount",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        return str(v)


class PacketListResponse(BaseModel):
    """Paginated packet listing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_items: int = Field(default=0, alias="totalItems")
    total_pages: int = Field(default=0, alias="totalPages")
    current_page: int = Field(default=1, alias="currentPage")
    data: Sequence[PacketData] = Field(default_factory=tuple)

    @classmethod
    def empty(cls, page: int) -> "PacketListResponse":
        return cls(total_items=0, total_pages=0, current_page=page, data=())


class BridgeStatus(BaseModel):
    """Operational status of the bridge."""

    model_config = ConfigDict(frozen=True)

    is_operational: bool
    transfer_limit: str
    supported_tokens: tuple[str, ...]
    supported_chains: tuple[str, ...]


class BridgeTransferParams(BaseModel):
    """Parameters for a cross-chain bridge transfer."""

    model_config = ConfigDict(frozen=True)

    source_chain_id: str
    destination_chain_id: str
    token_address: str
    amount: str
    receiver: str

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> str:
        return str(v)


class EvmBridgeCall(BaseModel):
    """EVM contract call that moves assets into Aleo."""

    model_config = ConfigDict(frozen=True)

    to: str
    value: str
    data: str
    method: str
    chain_id: str


class AleoBridgeCall(BaseModel):
    """Aleo program call that moves assets out to an EVM chain."""

    model_config = ConfigDict(frozen=True)

    program: str
    function: str
    inputs: tuple[str, ...]


class AccountInfo(BaseModel):
    """Wallet account material. Never log ``private_key``."""

    model_config = ConfigDict(frozen=True)

    address: str
    view_key: str | None = None
    private_key: str | None = Field(default=None, repr=False)

    def redacted(self) -> Mapping[str, Any]:
        return {
            "address": self.address,
            "view_key": "[REDACTED]" if self.view_key else None,
            "private_key": "[REDACTED]" if self.private_key else None,
        }
