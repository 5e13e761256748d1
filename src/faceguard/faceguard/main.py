from __future__ import annotations

import importlib
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .database.bootstrap import apply_schema, default_schema_path, list_tables
from .logging_config import get_logger, setup_logging
from .matching.oracle import RecognitionOracle
from .persistence.repository import SnapshotRepository
from .registry.controller import register as register_registry
from .session.controller import register as register_session

logger = get_logger(__name__)


def create_app(
    settings: Any = None,
    *,
    snapshots: Optional[SnapshotRepository] = None,
    oracle: Optional[RecognitionOracle] = None,
) -> Flask:
    load_dotenv(override=False)

    if settings is None:
        settings = importlib.import_module(get_settings_module())

    setup_logging(
        str(getattr(settings, "KIOSK_ID", "kiosk")),
        level=str(getattr(settings, "LOG_LEVEL", "INFO")),
        log_dir=getattr(settings, "LOG_DIR", "") or None,
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ADMIN_TOKEN"] = getattr(settings, "ADMIN_TOKEN", "")

    backend = str(getattr(settings, "STORAGE_BACKEND", "json")).lower()
    if snapshots is None and backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        db_config = settings.DB_CONFIG
        apply_schema(db_config, schema_path=default_schema_path())
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(settings, snapshots=snapshots, oracle=oracle)
    app.extensions["faceguard"] = container

    register_registry(app, container)
    register_session(app, container)
    register_attendance(app, container)

    @app.route("/health", endpoint="health")
    def health():
        return jsonify(
            {
                "status": "running",
                "storage": container.snapshots.backend_name,
                "identities": container.registry.count(),
                "records": len(container.ledger.list_records()),
            }
        )

    logger.info(
        "FaceGuard kiosk ready (storage=%s, identities=%d, records=%d)",
        container.snapshots.backend_name,
        container.registry.count(),
        len(container.ledger.list_records()),
    )
    return app
