"""DCA position domain: validation, builders, lifecycle and reconciliation."""

from .errors import (
    DcaError,
    InvalidArgument,
    InvalidState,
    NotConnected,
    NotYetDue,
    RemoteUnavailable,
)
from .position import Confirmation, Position, PositionState, ReconciledPosition
from .reconcile import reconcile_records
from .transactions import (
    build_cancel_request,
    build_create_request,
    build_execute_request,
)
from .validation import validate_address, validate_amount

__all__ = [
    "Confirmation",
    "DcaError",
    "InvalidArgument",
    "InvalidState",
    "NotConnected",
    "NotYetDue",
    "Position",
    "PositionState",
    "ReconciledPosition",
    "RemoteUnavailable",
    "build_cancel_request",
    "build_create_request",
    "build_execute_request",
    "reconcile_records",
    "validate_address",
    "validate_amount",
]
