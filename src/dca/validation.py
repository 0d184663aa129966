"""Format-only validation for chain addresses and numeric form fields."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any

ALEO_ADDRESS_PREFIX = "aleo1"
ALEO_ADDRESS_LENGTH = 63
EVM_ADDRESS_PREFIX = "0x"
EVM_ADDRESS_LENGTH = 42

CHAIN_KIND_NATIVE = "native"
CHAIN_KIND_EVM = "evm"

_CHAIN_KIND_ALIASES = {
    "native": CHAIN_KIND_NATIVE,
    "aleo": CHAIN_KIND_NATIVE,
    "evm": CHAIN_KIND_EVM,
    "ethereum": CHAIN_KIND_EVM,
}


def validate_aleo_address(address: Any) -> bool:
    """Return True for an ``aleo1`` address of the exact expected length."""
    if not isinstance(address, str):
        return False
    return (
        address.startswith(ALEO_ADDRESS_PREFIX)
        and len(address) == ALEO_ADDRESS_LENGTH
    )


def validate_evm_address(address: Any) -> bool:
    """Return True for a ``0x`` address of the exact expected length."""
    if not isinstance(address, str):
        return False
    return address.startswith(EVM_ADDRESS_PREFIX) and len(address) == EVM_ADDRESS_LENGTH


def validate_address(address: Any, chain_kind: str) -> bool:
    """Validate an address for the given chain kind.

    No checksum is verified. Unknown chain kinds are never valid.
    """
    if not isinstance(chain_kind, str):
        return False
    kind = _CHAIN_KIND_ALIASES.get(chain_kind.strip().lower())
    if kind == CHAIN_KIND_NATIVE:
        return validate_aleo_address(address)
    if kind == CHAIN_KIND_EVM:
        return validate_evm_address(address)
    return False


def validate_amount(value: Any) -> bool:
    """Return True when ``value`` parses as a finite number greater than zero."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return False
    if not parsed.is_finite():
        return False
    return parsed > 0
