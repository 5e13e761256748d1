"""Row mapping between domain entities and snapshot JSON objects.

Key names follow the kiosk's stored layout (camelCase), so snapshots written by
earlier kiosk builds load unchanged.
"""
from __future__ import annotations

from typing import Any, Dict

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import parse_iso, to_iso
from ..core.enums import AttendanceStatus
from ..registry.model import Identity


def identity_to_dict(identity: Identity) -> Dict[str, Any]:
    return {
        "id": identity.id,
        "name": identity.name,
        "department": identity.department,
        "photoBase64": identity.reference_image,
        "registeredAt": to_iso(identity.registered_at),
    }


def identity_from_dict(r: Dict[str, Any]) -> Identity:
    return Identity(
        id=str(r["id"]),
        name=str(r["name"]),
        department=str(r["department"]),
        reference_image=str(r["photoBase64"]),
        registered_at=parse_iso(str(r["registeredAt"])),
    )


def record_to_dict(record: AttendanceRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "userId": record.identity_id,
        "userName": record.identity_name,
        "department": record.department,
        "timestamp": to_iso(record.timestamp),
        "status": record.status.value,
        "confidence": record.confidence,
    }


def record_from_dict(r: Dict[str, Any]) -> AttendanceRecord:
    confidence = r.get("confidence")
    return AttendanceRecord(
        id=str(r["id"]),
        identity_id=str(r["userId"]),
        identity_name=str(r["userName"]),
        department=str(r["department"]),
        timestamp=parse_iso(str(r["timestamp"])),
        status=AttendanceStatus(r.get("status", AttendanceStatus.PRESENT.value)),
        confidence=float(confidence) if confidence is not None else None,
    )
