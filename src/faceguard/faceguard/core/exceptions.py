from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, *, fields: Sequence[str] = ()):
        super().__init__(message)
        self.fields = tuple(fields)


class CaptureFailure(DomainError):
    """Raised when the camera could not produce a frame (no device, denied)."""


class OracleFailure(DomainError):
    """Raised when the recognition oracle times out, errors or breaks its schema."""


class SessionBusyError(DomainError):
    """Raised when a scan is requested while another one is in flight."""


class InvalidTransitionError(DomainError):
    """Raised when the session state machine is driven along an undefined edge."""
