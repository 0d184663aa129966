"""DCA position model and lifecycle transitions.

A position moves through::

    Active --execute(ok)--> Active | Exhausted
    Active --execute(failed)--> Active   (no mutation)
    Active --cancel(ok)--> Cancelled
    Unknown --classify--> Active | Exhausted

``Exhausted`` and ``Cancelled`` are terminal. While ``Active`` a position is
either ``Pending`` (local projection, ledger not yet seen) or ``Confirmed``.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dca.errors import InvalidArgument, InvalidState, NotYetDue
from dca.validation import validate_aleo_address, validate_amount

LOGGER = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 7


class PositionState(str, Enum):
    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class Confirmation(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


TERMINAL_STATES = frozenset({PositionState.EXHAUSTED, PositionState.CANCELLED})


def generate_position_id() -> str:
    """Return a short presentational id. Not guaranteed to be unique."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not validate_amount(value):
        raise InvalidArgument(f"{name} must be a positive integer, got: {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got: {value!r}")
    return value


@dataclass
class Position:
    id: str
    owner: str
    input_token_id: int
    input_amount: int
    output_token_id: int
    interval: int
    executions_remaining: int
    min_output_amount: int
    next_execution_height: int
    record: str | None = None
    state: PositionState = PositionState.ACTIVE
    confirmation: Confirmation = Confirmation.PENDING
    created_tx_id: str | None = None
    last_tx_id: str | None = None

    @classmethod
    def create(
        cls,
        *,
        owner: str,
        input_token_id: int,
        input_amount: int,
        output_token_id: int,
        interval: int,
        executions_remaining: int,
        min_output_amount: int,
        block_height: int,
        created_tx_id: str | None = None,
        position_id: str | None = None,
    ) -> "Position":
        """Materialise a pending local projection of a newly created position."""
        if not validate_aleo_address(owner):
            raise InvalidArgument(f"owner must be an Aleo address, got: {owner!r}")
        interval_value = _positive_int("interval", interval)
        if isinstance(block_height, bool) or not isinstance(block_height, int):
            raise InvalidArgument(
                f"block_height must be an integer, got: {block_height!r}"
            )
        if block_height < 0:
            raise InvalidArgument(
                f"block_height must be non-negative, got: {block_height}"
            )
        return cls(
            id=position_id or generate_position_id(),
            owner=owner,
            input_token_id=_positive_int("input_token_id", input_token_id),
            input_amount=_positive_int("input_amount", input_amount),
            output_token_id=_positive_int("output_token_id", output_token_id),
            interval=interval_value,
            executions_remaining=_positive_int(
                "executions_remaining", executions_remaining
            ),
            min_output_amount=_positive_int("min_output_amount", min_output_amount),
            next_execution_height=block_height + interval_value,
            created_tx_id=created_tx_id,
        )

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_active(self) -> bool:
        return self.state == PositionState.ACTIVE

    def is_due(self, current_height: int) -> bool:
        return self.is_active and current_height >= self.next_execution_height

    def _require_active(self, operation: str) -> None:
        if self.state != PositionState.ACTIVE:
            raise InvalidState(
                f"Cannot {operation} position {self.id}: state is {self.state.value}"
            )

    def check_executable(self, current_height: int) -> None:
        """Raise unless an execution may be submitted at ``current_height``."""
        self._require_active("execute")
        if self.executions_remaining <= 0:
            raise InvalidState(
                f"Cannot execute position {self.id}: no executions remaining"
            )
        if current_height < self.next_execution_height:
            raise NotYetDue(
                f"Position {self.id} is due at block {self.next_execution_height}, "
                f"current height is {current_height}",
                next_execution_height=self.next_execution_height,
                current_height=current_height,
            )

    def check_cancellable(self) -> None:
        self._require_active("cancel")

    def apply_execution(
        self, success: bool, *, tx_id: str | None = None
    ) -> PositionState:
        """Apply the outcome of an execute attempt.

        Only a confirmed success decrements the counter and advances the
        schedule. A failed attempt leaves the position untouched.
        The submitted record is spent by a successful execution, so the
        position is Pending again until a reconcile supplies the new record.
        """
        self._require_active("execute")
        if self.executions_remaining <= 0:
            raise InvalidState(
                f"Cannot execute position {self.id}: no executions remaining"
            )
        if not success:
            LOGGER.info("Execution of position %s failed; state unchanged", self.id)
            return self.state
        self.executions_remaining -= 1
        self.next_execution_height += self.interval
        self.record = None
        self.confirmation = Confirmation.PENDING
        if tx_id is not None:
            self.last_tx_id = tx_id
        if self.executions_remaining == 0:
            self.state = PositionState.EXHAUSTED
        return self.state

    def apply_cancellation(
        self, success: bool, *, tx_id: str | None = None
    ) -> PositionState:
        self._require_active("cancel")
        if not success:
            LOGGER.info("Cancellation of position %s failed; state unchanged", self.id)
            return self.state
        self.state = PositionState.CANCELLED
        if tx_id is not None:
            self.last_tx_id = tx_id
        return self.state

    def confirm(self, record: str | None = None) -> None:
        """Mark the position as seen on the ledger."""
        if record is not None:
            self.record = record
        self.confirmation = Confirmation.CONFIRMED

    def classify(self) -> PositionState:
        """Resolve an ``Unknown`` position from its counters."""
        if self.state != PositionState.UNKNOWN:
            return self.state
        self.state = (
            PositionState.ACTIVE
            if self.executions_remaining > 0
            else PositionState.EXHAUSTED
        )
        return self.state

    def same_terms(self, other: "Position") -> bool:
        """True when both positions describe the same swap schedule."""
        return (
            self.input_token_id == other.input_token_id
            and self.output_token_id == other.output_token_id
            and self.input_amount == other.input_amount
            and self.interval == other.interval
            and self.min_output_amount == other.min_output_amount
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "input_token_id": self.input_token_id,
            "input_amount": self.input_amount,
            "output_token_id": self.output_token_id,
            "interval": self.interval,
            "executions_remaining": self.executions_remaining,
            "min_output_amount": self.min_output_amount,
            "next_execution_height": self.next_execution_height,
            "record": self.record,
            "state": self.state.value,
            "confirmation": self.confirmation.value,
            "created_tx_id": self.created_tx_id,
            "last_tx_id": self.last_tx_id,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Position":
        return cls(
            id=str(payload["id"]),
            owner=payload.get("owner", ""),
            input_token_id=int(payload.get("input_token_id", 0)),
            input_amount=int(payload.get("input_amount", 0)),
            output_token_id=int(payload.get("output_token_id", 0)),
            interval=int(payload.get("interval", 0)),
            executions_remaining=int(payload.get("executions_remaining", 0)),
            min_output_amount=int(payload.get("min_output_amount", 0)),
            next_execution_height=int(payload.get("next_execution_height", 0)),
            record=payload.get("record"),
            state=PositionState(payload.get("state", PositionState.UNKNOWN.value)),
            confirmation=Confirmation(
                payload.get("confirmation", Confirmation.PENDING.value)
            ),
            created_tx_id=payload.get("created_tx_id"),
            last_tx_id=payload.get("last_tx_id"),
        )


@dataclass
class ReconciledPosition:
    """A position rebuilt from a wallet record plus any fields it lacked."""

    position: Position
    missing_fields: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing_fields
