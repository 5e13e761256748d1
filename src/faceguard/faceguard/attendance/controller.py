from __future__ import annotations

import csv
import hmac
import io
from functools import wraps

from flask import Flask, jsonify, request

from ..container import Container
from ..logging_config import get_logger
from ..reports.service import CSV_FIELDS, record_row

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            expected = str(app.config.get("ADMIN_TOKEN") or "")
            supplied = request.headers.get("X-Admin-Token", "")
            if not expected or not hmac.compare_digest(expected, supplied):
                logger.warning("Rejected admin request to %s", request.path)
                return jsonify({"success": False, "message": "Admin token required"}), 403
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    def list_attendance():
        limit = request.args.get("limit", type=int)
        if limit is not None and limit < 0:
            return jsonify({"success": False, "message": "limit must be >= 0"}), 400
        records = container.ledger.list_records(limit)
        return jsonify([record_row(r, container.tz) for r in records])

    @app.route("/api/attendance.csv", methods=["GET"], endpoint="export_attendance_csv")
    def export_attendance_csv():
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in container.dashboard_service.export_rows():
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=attendance.csv"},
        )

    @app.route("/api/attendance", methods=["DELETE"], endpoint="clear_attendance")
    @admin_required
    def clear_attendance():
        removed = container.ledger.clear()
        return jsonify({"success": True, "removed": removed})

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    def dashboard():
        svc = container.dashboard_service
        return jsonify(svc.to_dict(svc.stats()))
