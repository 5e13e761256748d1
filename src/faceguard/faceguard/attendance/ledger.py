from __future__ import annotations

import threading
import uuid
from datetime import date, datetime, tzinfo
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import local_day, now_local
from ..common.observers import Subscribers
from ..core.constants import LEDGER_SNAPSHOT
from ..core.enums import AttendanceStatus
from ..logging_config import get_logger
from ..matching.model import MatchResult
from ..persistence.codec import record_from_dict, record_to_dict
from ..persistence.repository import SnapshotRepository
from ..persistence.snapshots import load_collection, save_collection
from ..registry.model import Identity
from .model import AttendanceRecord, SubmitOutcome

logger = get_logger(__name__)

IdentityLookup = Callable[[Optional[str]], Optional[Identity]]


class AttendanceLedger:
    """Newest-first store of attendance records, one per identity per day.

    The day of a record is its timestamp's calendar day in ``tz`` (the
    organisation timezone). The duplicate check and the append happen under
    one lock, so two submits for the same person cannot both be recorded.
    """

    def __init__(
        self,
        snapshots: SnapshotRepository,
        *,
        tz: Optional[tzinfo] = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._snapshots = snapshots
        self._tz = tz
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._lock = threading.Lock()
        self._subscribers: Subscribers[Sequence[AttendanceRecord]] = Subscribers()
        self._records: list[AttendanceRecord] = load_collection(snapshots, LEDGER_SNAPSHOT, record_from_dict)

    def day_of(self, value: datetime) -> date:
        return local_day(value, self._tz)

    def _find(self, identity_id: str, day: date) -> Optional[AttendanceRecord]:
        for r in self._records:
            if r.identity_id == identity_id and self.day_of(r.timestamp) == day:
                return r
        return None

    def submit(
        self,
        match: MatchResult,
        identity_lookup: IdentityLookup,
        now: datetime | None = None,
    ) -> SubmitOutcome:
        if not match.is_match:
            return SubmitOutcome.rejected_unknown()

        identity = identity_lookup(match.matched_identity_id)
        if identity is None:
            logger.warning("Match %s does not resolve to a registered identity", match.matched_identity_id)
            return SubmitOutcome.rejected_unknown()

        now = now or now_local(self._tz)
        today = self.day_of(now)

        with self._lock:
            existing = self._find(identity.id, today)
            if existing:
                logger.info("Attendance for %s already recorded on %s", identity.id, today.isoformat())
                return SubmitOutcome.rejected_duplicate(existing)

            record = AttendanceRecord(
                id=self._id_factory(),
                identity_id=identity.id,
                identity_name=identity.name,
                department=identity.department,
                timestamp=now,
                status=AttendanceStatus.PRESENT,
                confidence=match.confidence,
            )
            updated = [record, *self._records]
            save_collection(self._snapshots, LEDGER_SNAPSHOT, updated, record_to_dict)
            self._records = updated
            snapshot = tuple(updated)

        logger.info(
            "Recorded attendance %s for %s (confidence %.2f)", record.id, identity.name, match.confidence
        )
        self._subscribers.notify(snapshot)
        return SubmitOutcome.recorded_as(record)

    def clear(self) -> int:
        """Administrative reset: drop every record. Returns how many were removed."""
        with self._lock:
            removed = len(self._records)
            save_collection(self._snapshots, LEDGER_SNAPSHOT, [], record_to_dict)
            self._records = []

        logger.info("Cleared attendance ledger (%d record(s) removed)", removed)
        self._subscribers.notify(())
        return removed

    def list_records(self, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        with self._lock:
            items = tuple(self._records)
        return items[:limit] if limit is not None else items

    def records_for_day(self, day: date) -> Sequence[AttendanceRecord]:
        with self._lock:
            return tuple(r for r in self._records if self.day_of(r.timestamp) == day)

    def has_record_for(self, identity_id: str, day: date) -> bool:
        with self._lock:
            return self._find(identity_id, day) is not None

    def subscribe(self, listener: Callable[[Sequence[AttendanceRecord]], None]) -> Callable[[], None]:
        return self._subscribers.subscribe(listener)
