"""Create the MySQL database and the ``snapshots`` table for STORAGE_BACKEND=mysql.

Usage:
    APP_ENV=production python scripts/init_db.py
"""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.faceguard.faceguard.database.bootstrap import apply_schema, default_schema_path, list_tables
from src.faceguard.faceguard.logging_config import setup_logging


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    setup_logging(str(getattr(settings, "KIOSK_ID", "kiosk")), level="INFO")

    if str(getattr(settings, "STORAGE_BACKEND", "json")).lower() != "mysql":
        print("Note: STORAGE_BACKEND is not 'mysql'; the kiosk will keep using JSON files.")

    db_config = dict(settings.DB_CONFIG)
    apply_schema(db_config, schema_path=default_schema_path())

    tables = list_tables(db_config)
    print(f"OK: {db_config.get('database')} on {db_config.get('host')} has tables: {', '.join(sorted(tables))}")


if __name__ == "__main__":
    main()
