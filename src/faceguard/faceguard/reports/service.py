from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional, Sequence

from ..attendance.ledger import AttendanceLedger
from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_RECENT_ACTIVITY_LIMIT
from ..registry.store import UserRegistry

CSV_FIELDS = [
    "id",
    "identity_id",
    "identity_name",
    "department",
    "date",
    "time",
    "timestamp",
    "status",
    "confidence",
]


@dataclass(frozen=True)
class DashboardStats:
    total_users: int
    present_today: int
    unique_present_today: int
    attendance_rate: int
    last_check_in: Optional[datetime]
    hourly_activity: list[int]
    recent_activity: Sequence[AttendanceRecord]


def record_row(r: AttendanceRecord, tz: Optional[tzinfo] = None) -> dict:
    """Flat, display-ready view of a record (JSON listing and CSV export)."""
    local = r.timestamp.astimezone(tz) if (tz and r.timestamp.tzinfo) else r.timestamp
    return {
        "id": r.id,
        "identity_id": r.identity_id,
        "identity_name": r.identity_name,
        "department": r.department,
        "date": local.strftime("%Y-%m-%d"),
        "time": local.strftime("%H:%M:%S"),
        "timestamp": r.timestamp.isoformat(),
        "status": r.status.value,
        "confidence": r.confidence,
    }


class DashboardService:
    """Read model over the registry and the ledger for the admin dashboard."""

    def __init__(
        self,
        registry: UserRegistry,
        ledger: AttendanceLedger,
        *,
        tz: Optional[tzinfo] = None,
        recent_limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT,
    ):
        self._registry = registry
        self._ledger = ledger
        self._tz = tz
        self._recent_limit = int(recent_limit)

    def stats(self, *, now: datetime | None = None) -> DashboardStats:
        now = now or now_local(self._tz)
        today = self._ledger.day_of(now)

        total_users = self._registry.count()
        todays = self._ledger.records_for_day(today)
        unique_present = len({r.identity_id for r in todays})
        rate = round(unique_present / total_users * 100) if total_users > 0 else 0

        hourly = [0] * 24
        for r in todays:
            local = r.timestamp.astimezone(self._tz) if (self._tz and r.timestamp.tzinfo) else r.timestamp
            hourly[local.hour] += 1

        return DashboardStats(
            total_users=total_users,
            present_today=len(todays),
            unique_present_today=unique_present,
            attendance_rate=rate,
            last_check_in=todays[0].timestamp if todays else None,
            hourly_activity=hourly,
            recent_activity=self._ledger.list_records(self._recent_limit),
        )

    def to_dict(self, stats: DashboardStats) -> dict:
        return {
            "total_users": stats.total_users,
            "present_today": stats.present_today,
            "unique_present_today": stats.unique_present_today,
            "attendance_rate": stats.attendance_rate,
            "last_check_in": stats.last_check_in.isoformat() if stats.last_check_in else None,
            "hourly_activity": stats.hourly_activity,
            "recent_activity": [record_row(r, self._tz) for r in stats.recent_activity],
        }

    def export_rows(self) -> list[dict]:
        return [record_row(r, self._tz) for r in self._ledger.list_records()]
