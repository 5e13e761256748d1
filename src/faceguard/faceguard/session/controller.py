from __future__ import annotations

from flask import Flask, jsonify, request

from ..capture.frame_source import Base64FrameSource
from ..container import Container
from ..core.exceptions import SessionBusyError
from ..logging_config import get_logger

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/scan", methods=["POST"], endpoint="scan")
    def scan():
        """Run one scan cycle on the frame posted by the camera widget.

        Capture and oracle failures are scan outcomes (HTTP 200, category "error");
        only a busy kiosk or an unexpected crash is an HTTP error.
        """
        data = request.get_json(silent=True) or {}
        try:
            resolution = container.session.scan(Base64FrameSource(data.get("frame")))
        except SessionBusyError as e:
            return jsonify({"success": False, "message": str(e)}), 409
        except Exception:
            logger.exception("Scan crashed")
            return jsonify({"success": False, "message": "System error while scanning"}), 500

        return jsonify({"success": True, "resolution": resolution.to_dict()}), 200

    @app.route("/api/session", methods=["GET"], endpoint="session_status")
    def session_status():
        return jsonify(container.session.status())
