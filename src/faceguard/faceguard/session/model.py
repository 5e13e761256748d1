from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import MessageCategory, ScanOutcome


@dataclass(frozen=True)
class ScanResolution:
    """What one scan cycle ended with, ready for the kiosk screen."""

    outcome: ScanOutcome
    category: MessageCategory
    message: str
    resolved_at: datetime
    details: Optional[str] = None
    identity_id: Optional[str] = None
    identity_name: Optional[str] = None
    confidence: Optional[float] = None
    record: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
            "identity_id": self.identity_id,
            "identity_name": self.identity_name,
            "confidence": self.confidence,
            "record_id": self.record.id if self.record else None,
            "resolved_at": self.resolved_at.isoformat(),
        }
