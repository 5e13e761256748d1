from __future__ import annotations

import json
from datetime import timezone

import pytest

from conftest import InMemorySnapshots, SequentialIds

from src.faceguard.faceguard.core.constants import REGISTRY_SNAPSHOT
from src.faceguard.faceguard.core.exceptions import ValidationError
from src.faceguard.faceguard.registry.model import RegistrationCandidate
from src.faceguard.faceguard.registry.store import UserRegistry


def test_register_assigns_id_timestamp_and_persists(registry, snapshots, image_b64, fixed_now):
    identity = registry.register(
        RegistrationCandidate(name="  Ana ", department="Engineering", reference_image=image_b64),
        now=fixed_now,
    )

    assert identity.id == "u1"
    assert identity.name == "Ana"
    assert identity.registered_at == fixed_now
    assert registry.get("u1") == identity
    assert snapshots.saves == [REGISTRY_SNAPSHOT]


@pytest.mark.parametrize(
    "name, department, image, missing",
    [
        ("", "Eng", "IMG", ["name"]),
        ("Ana", "   ", "IMG", ["department"]),
        ("Ana", "Eng", None, ["reference_image"]),
        (None, None, "", ["name", "department", "reference_image"]),
    ],
)
def test_register_reports_every_missing_field(registry, snapshots, image_b64, name, department, image, missing):
    image = image_b64 if image == "IMG" else image

    with pytest.raises(ValidationError) as exc:
        registry.register(RegistrationCandidate(name=name, department=department, reference_image=image))

    assert list(exc.value.fields) == missing
    assert registry.count() == 0
    assert snapshots.saves == []


def test_register_rejects_undecodable_image(registry):
    with pytest.raises(ValidationError) as exc:
        registry.register(RegistrationCandidate(name="Ana", department="Eng", reference_image="bm90IGFuIGltYWdl"))

    assert exc.value.fields == ("reference_image",)
    assert registry.count() == 0


def test_register_strips_data_url_prefix(registry, image_b64):
    identity = registry.register(
        RegistrationCandidate(name="Ana", department="Eng", reference_image=f"data:image/png;base64,{image_b64}")
    )

    assert identity.reference_image == image_b64


def test_same_name_gets_distinct_ids(registry, image_b64):
    first = registry.register(RegistrationCandidate(name="Ana", department="Eng", reference_image=image_b64))
    second = registry.register(RegistrationCandidate(name="Ana", department="Eng", reference_image=image_b64))

    assert first.id != second.id
    assert [i.name for i in registry.list_identities()] == ["Ana", "Ana"]


def test_id_collision_is_rejected_without_mutation(snapshots, image_b64):
    registry = UserRegistry(snapshots, id_factory=lambda: "same")
    registry.register(RegistrationCandidate(name="Ana", department="Eng", reference_image=image_b64))

    with pytest.raises(ValidationError):
        registry.register(RegistrationCandidate(name="Binh", department="HR", reference_image=image_b64))

    assert registry.count() == 1


def test_failed_save_leaves_registry_unchanged(image_b64):
    class FailingSnapshots:
        backend_name = "failing"

        def load(self, name):
            return None

        def save(self, name, payload):
            raise OSError("read-only")

    registry = UserRegistry(FailingSnapshots())

    with pytest.raises(OSError):
        registry.register(RegistrationCandidate(name="Ana", department="Eng", reference_image=image_b64))

    assert registry.count() == 0


def test_subscribers_see_new_snapshot_until_unsubscribed(registry, image_b64):
    seen = []
    unsubscribe = registry.subscribe(lambda identities: seen.append([i.name for i in identities]))

    registry.register(RegistrationCandidate(name="Ana", department="Eng", reference_image=image_b64))
    unsubscribe()
    registry.register(RegistrationCandidate(name="Binh", department="HR", reference_image=image_b64))

    assert seen == [["Ana"]]


def test_failing_subscriber_does_not_undo_registration(registry, image_b64):
    def boom(_):
        raise RuntimeError("listener bug")

    registry.subscribe(boom)
    identity = registry.register(RegistrationCandidate(name="Ana", department="Eng", reference_image=image_b64))

    assert registry.get(identity.id) is not None


def test_registry_reloads_from_snapshot(snapshots, image_b64):
    first = UserRegistry(snapshots, tz=timezone.utc, id_factory=SequentialIds("u"))
    first.register(RegistrationCandidate(name="Ana", department="Eng", reference_image=image_b64))

    second = UserRegistry(snapshots, tz=timezone.utc)

    assert second.list_identities() == first.list_identities()
    assert second.get(None) is None


def test_reload_ignores_repeated_identity_ids(image_b64):
    def row(name):
        return {
            "id": "dup",
            "name": name,
            "department": "Eng",
            "photoBase64": image_b64,
            "registeredAt": "2026-01-05T09:00:00+00:00",
        }

    snapshots = InMemorySnapshots({REGISTRY_SNAPSHOT: json.dumps([row("Ana"), row("Binh")])})

    registry = UserRegistry(snapshots, tz=timezone.utc)

    assert registry.count() == 1
    assert registry.get("dup").name == "Ana"
