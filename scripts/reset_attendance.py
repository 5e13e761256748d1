"""Administrative reset: remove every attendance record.

Usage:
    APP_ENV=production python scripts/reset_attendance.py --yes
"""
from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.faceguard.faceguard.attendance.ledger import AttendanceLedger
from src.faceguard.faceguard.common.datetime_utils import resolve_timezone
from src.faceguard.faceguard.container import build_snapshot_repository
from src.faceguard.faceguard.logging_config import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--yes", action="store_true", help="confirm that every record should be deleted")
    args = parser.parse_args()
    if not args.yes:
        raise SystemExit("Refusing to clear the ledger without --yes")

    settings = importlib.import_module(get_settings_module())
    setup_logging(str(getattr(settings, "KIOSK_ID", "kiosk")), level="INFO")

    ledger = AttendanceLedger(
        build_snapshot_repository(settings),
        tz=resolve_timezone(getattr(settings, "ORG_TIMEZONE", "") or None),
    )
    removed = ledger.clear()
    print(f"OK: Removed {removed} attendance record(s).")


if __name__ == "__main__":
    main()
