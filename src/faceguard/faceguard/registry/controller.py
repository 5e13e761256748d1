from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from ..logging_config import get_logger
from .model import Identity, RegistrationCandidate

logger = get_logger(__name__)


def identity_view(identity: Identity) -> dict:
    # The reference image never leaves the kiosk through the API.
    return {
        "id": identity.id,
        "name": identity.name,
        "department": identity.department,
        "registered_at": identity.registered_at.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/identities", methods=["POST"], endpoint="register_identity")
    def register_identity():
        data = request.get_json(silent=True) or {}
        candidate = RegistrationCandidate(
            name=data.get("name"),
            department=data.get("department"),
            reference_image=data.get("image"),
        )
        try:
            identity = container.registry.register(candidate)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e), "fields": list(e.fields)}), 400
        except Exception:
            logger.exception("Registration failed")
            return jsonify({"success": False, "message": "System error while registering"}), 500

        return jsonify({"success": True, "identity": identity_view(identity)}), 201

    @app.route("/api/identities", methods=["GET"], endpoint="list_identities")
    def list_identities():
        return jsonify([identity_view(i) for i in container.registry.list_identities()])
