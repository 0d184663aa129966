"""Rebuild the active position set from wallet-held records.

Records are the ledger's own plaintext encoding, e.g.::

    {
      owner: aleo1...private,
      input_token_id: 1u64.private,
      executions_remaining: 5u32.private,
      ...
    }

Fields are located with ``name: <digits>`` patterns. This is a stopgap until
the record schema is published; missing fields default to zero and are
reported on the result.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from aleo_client.models import WalletRecord
from dca.position import (
    Confirmation,
    Position,
    PositionState,
    ReconciledPosition,
    generate_position_id,
)

LOGGER = logging.getLogger(__name__)

POSITION_RECORD_NAME = "DCAPosition"

NUMERIC_FIELDS = (
    "input_token_id",
    "input_amount",
    "output_token_id",
    "interval",
    "executions_remaining",
    "min_output_amount",
    "next_execution_height",
)
_FIELD_ALIASES = {"next_execution_height": ("next_execution_height", "next_execution")}
_SIGNATURE_FIELDS = ("executions_remaining", "interval", "min_output_amount")
_OWNER_PATTERN = re.compile(r"\bowner\s*:\s*(aleo1[0-9a-z]+)")


def _field_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(name)}\s*:\s*(\d+)")


_PATTERNS = {
    name: tuple(_field_pattern(alias) for alias in _FIELD_ALIASES.get(name, (name,)))
    for name in NUMERIC_FIELDS
}


def is_position_record(record: WalletRecord) -> bool:
    """True for records tagged as DCA positions."""
    if record.record_name is not None:
        return record.record_name == POSITION_RECORD_NAME
    return all(
        _field_pattern(name).search(record.plaintext) for name in _SIGNATURE_FIELDS
    )


def extract_field(plaintext: str, name: str) -> int | None:
    """Return the integer value of ``name`` or None when absent/malformed."""
    for pattern in _PATTERNS.get(name, (_field_pattern(name),)):
        match = pattern.search(plaintext)
        if match:
            return int(match.group(1))
    return None


def extract_owner(plaintext: str) -> str | None:
    match = _OWNER_PATTERN.search(plaintext)
    return match.group(1) if match else None


def reconstruct_position(record: WalletRecord) -> ReconciledPosition:
    """Build a confirmed position from one record."""
    values: dict[str, int] = {}
    missing: list[str] = []
    for name in NUMERIC_FIELDS:
        value = extract_field(record.plaintext, name)
        if value is None:
            missing.append(name)
            value = 0
        values[name] = value
    owner = extract_owner(record.plaintext)
    if owner is None:
        missing.append("owner")

    position = Position(
        id=generate_position_id(),
        owner=owner or "",
        record=record.plaintext,
        state=PositionState.UNKNOWN,
        confirmation=Confirmation.CONFIRMED,
        **values,
    )
    if "executions_remaining" not in missing:
        position.classify()
    if missing:
        LOGGER.warning(
            "Position record %s is missing fields: %s",
            position.id,
            ", ".join(missing),
        )
    return ReconciledPosition(position=position, missing_fields=missing)


def reconcile_records(records: Iterable[WalletRecord]) -> list[ReconciledPosition]:
    """Return reconstructed positions for unspent position-kind records.

    Local ids are regenerated on every call and are not stable across runs.
    """
    results: list[ReconciledPosition] = []
    skipped = 0
    for record in records:
        if record.spent or not is_position_record(record):
            skipped += 1
            continue
        results.append(reconstruct_position(record))
    LOGGER.info(
        "Reconciled %d position(s) from wallet records (%d skipped)",
        len(results),
        skipped,
    )
    return results


def active_positions(results: Iterable[ReconciledPosition]) -> list[Position]:
    return [item.position for item in results if item.position.is_active]
