"""Error kinds raised by the DCA position manager."""

from __future__ import annotations


class DcaError(Exception):
    """Base exception for DCA position manager errors."""


class InvalidArgument(DcaError, ValueError):
    """Raised when a builder or validator receives malformed input."""


class InvalidState(DcaError):
    """Raised when an operation targets a terminal or unclassified position."""


class NotYetDue(DcaError):
    """Raised when an execution is attempted before its scheduled height."""

    def __init__(
        self, message: str, *, next_execution_height: int, current_height: int
    ) -> None:
        super().__init__(message)
        self.next_execution_height = next_execution_height
        self.current_height = current_height

    @property
    def blocks_remaining(self) -> int:
        return self.next_execution_height - self.current_height


class NotConnected(DcaError):
    """Raised when the custody collaborator is unavailable."""


class RemoteUnavailable(DcaError):
    """Raised for non-404 failures from an auxiliary HTTP API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
