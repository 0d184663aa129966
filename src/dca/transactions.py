"""Transaction request builders for the DCA program.

Each builder is pure: it validates its arguments, appends the Leo integer
type tag to numeric inputs and returns a :class:`TransactionRequest` ready for
the custody collaborator. Nothing here touches the network.
"""

from __future__ import annotations

from typing import Any

from aleo_client.constants import (
    DCA_PROGRAM_ID,
    DEFAULT_CHAIN_ID,
    DEFAULT_FEE_MICROCREDITS,
)
from aleo_client.models import TransactionRequest, Transition
from dca.errors import InvalidArgument
from dca.validation import validate_aleo_address, validate_amount

CREATE_POSITION = "create_position"
EXECUTE_DCA = "execute_dca"
CANCEL_POSITION = "cancel_position"

U32 = "u32"
U64 = "u64"
_TYPE_BOUNDS = {U32: 2**32 - 1, U64: 2**64 - 1}


def _require_owner(owner: Any) -> str:
    if not validate_aleo_address(owner):
        raise InvalidArgument(f"owner must be an Aleo address, got: {owner!r}")
    return owner


def _require_integer(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidArgument(f"{name} must be an integer, got: bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise InvalidArgument(f"{name} must be an integer, got: {value!r}")


def _typed(name: str, value: Any, type_tag: str, *, allow_zero: bool = False) -> str:
    if not allow_zero and not validate_amount(value):
        raise InvalidArgument(f"{name} must be a positive number, got: {value!r}")
    integer = _require_integer(name, value)
    if integer < 0:
        raise InvalidArgument(f"{name} must be non-negative, got: {integer}")
    if integer > _TYPE_BOUNDS[type_tag]:
        raise InvalidArgument(f"{name} does not fit in {type_tag}: {integer}")
    return f"{integer}{type_tag}"


def _require_record(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{name} must be a non-empty record string")
    return value


def _build(
    owner: str,
    function_name: str,
    inputs: list[str],
    *,
    fee: int,
    fee_private: bool,
    program_id: str,
    chain_id: str,
) -> TransactionRequest:
    if isinstance(fee, bool) or not isinstance(fee, int) or fee <= 0:
        raise InvalidArgument(f"fee must be a positive integer, got: {fee!r}")
    return TransactionRequest(
        address=owner,
        chain_id=chain_id,
        transitions=(
            Transition(
                program=program_id, function_name=function_name, inputs=tuple(inputs)
            ),
        ),
        fee=fee,
        fee_private=fee_private,
    )


def build_create_request(
    owner: str,
    input_token_id: int,
    input_amount: int,
    output_token_id: int,
    interval: int,
    executions_remaining: int,
    min_output_amount: int,
    block_height: int,
    *,
    fee: int = DEFAULT_FEE_MICROCREDITS,
    fee_private: bool = False,
    program_id: str = DCA_PROGRAM_ID,
    chain_id: str = DEFAULT_CHAIN_ID,
) -> TransactionRequest:
    """Build a ``create_position`` request with seven typed inputs."""
    owner = _require_owner(owner)
    inputs = [
        _typed("input_token_id", input_token_id, U64),
        _typed("input_amount", input_amount, U64),
        _typed("output_token_id", output_token_id, U64),
        _typed("interval", interval, U32),
        _typed("executions_remaining", executions_remaining, U32),
        _typed("min_output_amount", min_output_amount, U64),
        _typed("block_height", block_height, U32, allow_zero=True),
    ]
    return _build(
        owner,
        CREATE_POSITION,
        inputs,
        fee=fee,
        fee_private=fee_private,
        program_id=program_id,
        chain_id=chain_id,
    )


def build_execute_request(
    owner: str,
    position_record: str,
    token_record: str,
    block_height: int,
    *,
    fee: int = DEFAULT_FEE_MICROCREDITS,
    fee_private: bool = False,
    program_id: str = DCA_PROGRAM_ID,
    chain_id: str = DEFAULT_CHAIN_ID,
) -> TransactionRequest:
    """Build an ``execute_dca`` request from wallet-held records."""
    owner = _require_owner(owner)
    inputs = [
        _require_record("position_record", position_record),
        _require_record("token_record", token_record),
        _typed("block_height", block_height, U32, allow_zero=True),
    ]
    return _build(
        owner,
        EXECUTE_DCA,
        inputs,
        fee=fee,
        fee_private=fee_private,
        program_id=program_id,
        chain_id=chain_id,
    )


def build_cancel_request(
    owner: str,
    position_record: str,
    *,
    fee: int = DEFAULT_FEE_MICROCREDITS,
    fee_private: bool = False,
    program_id: str = DCA_PROGRAM_ID,
    chain_id: str = DEFAULT_CHAIN_ID,
) -> TransactionRequest:
    """Build a ``cancel_position`` request."""
    owner = _require_owner(owner)
    inputs = [_require_record("position_record", position_record)]
    return _build(
        owner,
        CANCEL_POSITION,
        inputs,
        fee=fee,
        fee_private=fee_private,
        program_id=program_id,
        chain_id=chain_id,
    )
