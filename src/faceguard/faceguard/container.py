from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Optional

from .attendance.ledger import AttendanceLedger
from .common.datetime_utils import resolve_timezone
from .core.constants import (
    DEFAULT_DISPLAY_INTERVAL_SECONDS,
    DEFAULT_GEMINI_API_BASE,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_ORACLE_TIMEOUT_SECONDS,
)
from .database.connection import DatabaseConnection, DBConfig
from .matching.gemini_oracle import GeminiOracle
from .matching.oracle import RecognitionOracle
from .matching.orchestrator import MatchOrchestrator
from .persistence.json_file_repository import JsonFileSnapshotRepository
from .persistence.mysql_snapshot_repository import MySQLSnapshotRepository
from .persistence.repository import SnapshotRepository
from .registry.store import UserRegistry
from .reports.service import DashboardService
from .session.state_machine import AttendanceSession


@dataclass(frozen=True)
class Container:
    tz: tzinfo
    snapshots: SnapshotRepository

    registry: UserRegistry
    ledger: AttendanceLedger
    orchestrator: MatchOrchestrator
    session: AttendanceSession
    dashboard_service: DashboardService


def build_snapshot_repository(settings: Any) -> SnapshotRepository:
    backend = str(getattr(settings, "STORAGE_BACKEND", "json")).lower()
    if backend == "json":
        return JsonFileSnapshotRepository(getattr(settings, "DATA_DIR", "data"))
    if backend == "mysql":
        return MySQLSnapshotRepository(DatabaseConnection(DBConfig.from_mapping(settings.DB_CONFIG)))
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")


def build_oracle(settings: Any) -> RecognitionOracle:
    return GeminiOracle(
        str(getattr(settings, "GEMINI_API_KEY", "")),
        model=str(getattr(settings, "GEMINI_MODEL", DEFAULT_GEMINI_MODEL)),
        api_base=str(getattr(settings, "GEMINI_API_BASE", DEFAULT_GEMINI_API_BASE)),
    )


def build_container(
    settings: Any,
    *,
    snapshots: Optional[SnapshotRepository] = None,
    oracle: Optional[RecognitionOracle] = None,
) -> Container:
    """Wire stores and services from a settings module.

    ``snapshots`` and ``oracle`` override the configured backends (tests, demos).
    """
    tz = resolve_timezone(getattr(settings, "ORG_TIMEZONE", "") or None)
    snapshots = snapshots or build_snapshot_repository(settings)
    oracle = oracle or build_oracle(settings)

    registry = UserRegistry(snapshots, tz=tz)
    ledger = AttendanceLedger(snapshots, tz=tz)
    orchestrator = MatchOrchestrator(
        oracle,
        timeout=float(getattr(settings, "ORACLE_TIMEOUT_SECONDS", DEFAULT_ORACLE_TIMEOUT_SECONDS)),
    )
    session = AttendanceSession(
        registry,
        orchestrator,
        ledger,
        display_interval=float(getattr(settings, "DISPLAY_INTERVAL_SECONDS", DEFAULT_DISPLAY_INTERVAL_SECONDS)),
        tz=tz,
    )
    dashboard_service = DashboardService(registry, ledger, tz=tz)

    return Container(
        tz=tz,
        snapshots=snapshots,
        registry=registry,
        ledger=ledger,
        orchestrator=orchestrator,
        session=session,
        dashboard_service=dashboard_service,
    )
