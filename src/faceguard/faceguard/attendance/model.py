from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, SubmitKind


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance event.

    Identity fields are copied at recording time so history never changes later.
    """

    id: str
    identity_id: str
    identity_name: str
    department: str
    timestamp: datetime
    status: AttendanceStatus
    confidence: Optional[float] = None


@dataclass(frozen=True)
class SubmitOutcome:
    kind: SubmitKind
    record: Optional[AttendanceRecord] = None

    @property
    def recorded(self) -> bool:
        return self.kind == SubmitKind.RECORDED

    @classmethod
    def recorded_as(cls, record: AttendanceRecord) -> "SubmitOutcome":
        return cls(kind=SubmitKind.RECORDED, record=record)

    @classmethod
    def rejected_unknown(cls) -> "SubmitOutcome":
        return cls(kind=SubmitKind.REJECTED_UNKNOWN)

    @classmethod
    def rejected_duplicate(cls, existing: AttendanceRecord) -> "SubmitOutcome":
        return cls(kind=SubmitKind.REJECTED_DUPLICATE, record=existing)
