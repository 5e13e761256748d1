from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    UNKNOWN = "UNKNOWN"


class SubmitKind(str, Enum):
    """What the ledger did with a submitted match."""

    RECORDED = "RECORDED"
    REJECTED_UNKNOWN = "REJECTED_UNKNOWN"
    REJECTED_DUPLICATE = "REJECTED_DUPLICATE"


class SessionState(str, Enum):
    IDLE = "IDLE"
    CAPTURING = "CAPTURING"
    AWAITING = "AWAITING"
    RESOLVED = "RESOLVED"


class ScanOutcome(str, Enum):
    """Terminal outcome of one capture/identify/record cycle."""

    MATCHED_NEW = "MATCHED_NEW"
    MATCHED_DUPLICATE = "MATCHED_DUPLICATE"
    UNKNOWN = "UNKNOWN"
    CAPTURE_FAILED = "CAPTURE_FAILED"
    ORACLE_FAILURE = "ORACLE_FAILURE"


class MessageCategory(str, Enum):
    """How the kiosk screen should present a resolution."""

    SUCCESS = "success"
    INFO = "info"
    UNKNOWN = "unknown"
    ERROR = "error"
