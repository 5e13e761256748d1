from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import MessageCategory, ScanOutcome
from ..matching.model import MatchResult
from .model import ScanResolution

CATEGORY_BY_OUTCOME = {
    ScanOutcome.MATCHED_NEW: MessageCategory.SUCCESS,
    ScanOutcome.MATCHED_DUPLICATE: MessageCategory.INFO,
    ScanOutcome.UNKNOWN: MessageCategory.UNKNOWN,
    ScanOutcome.CAPTURE_FAILED: MessageCategory.ERROR,
    ScanOutcome.ORACLE_FAILURE: MessageCategory.ERROR,
}


def _clock(value: datetime) -> str:
    return value.strftime("%H:%M:%S")


def matched_new(record: AttendanceRecord, *, now: datetime) -> ScanResolution:
    confidence = record.confidence or 0.0
    return ScanResolution(
        outcome=ScanOutcome.MATCHED_NEW,
        category=CATEGORY_BY_OUTCOME[ScanOutcome.MATCHED_NEW],
        message=f"Welcome, {record.identity_name}!",
        details=f"Attendance marked at {_clock(record.timestamp)} (Confidence: {round(confidence * 100)}%)",
        identity_id=record.identity_id,
        identity_name=record.identity_name,
        confidence=record.confidence,
        record=record,
        resolved_at=now,
    )


def matched_duplicate(existing: AttendanceRecord, match: MatchResult, *, now: datetime) -> ScanResolution:
    return ScanResolution(
        outcome=ScanOutcome.MATCHED_DUPLICATE,
        category=CATEGORY_BY_OUTCOME[ScanOutcome.MATCHED_DUPLICATE],
        message=f"Welcome back, {existing.identity_name}!",
        details=f"Attendance was already marked today at {_clock(existing.timestamp)}.",
        identity_id=existing.identity_id,
        identity_name=existing.identity_name,
        confidence=match.confidence,
        record=existing,
        resolved_at=now,
    )


def unknown_face(match: MatchResult, *, now: datetime) -> ScanResolution:
    return ScanResolution(
        outcome=ScanOutcome.UNKNOWN,
        category=CATEGORY_BY_OUTCOME[ScanOutcome.UNKNOWN],
        message="Face not recognized.",
        details=match.reasoning or "Please register first or try again.",
        confidence=match.confidence,
        resolved_at=now,
    )


def capture_failed(reason: Optional[str], *, now: datetime) -> ScanResolution:
    return ScanResolution(
        outcome=ScanOutcome.CAPTURE_FAILED,
        category=CATEGORY_BY_OUTCOME[ScanOutcome.CAPTURE_FAILED],
        message="Failed to capture camera frame. Please check permissions.",
        details=reason,
        resolved_at=now,
    )


def oracle_failure(*, now: datetime) -> ScanResolution:
    return ScanResolution(
        outcome=ScanOutcome.ORACLE_FAILURE,
        category=CATEGORY_BY_OUTCOME[ScanOutcome.ORACLE_FAILURE],
        message="System Error. Please check API configuration.",
        details="The recognition service did not return a usable answer. Please scan again.",
        resolved_at=now,
    )
