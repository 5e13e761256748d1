from __future__ import annotations

import threading
import uuid
from datetime import datetime, tzinfo
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.images import normalize_image
from ..common.observers import Subscribers
from ..common.validators import require_fields
from ..core.constants import REGISTRY_SNAPSHOT
from ..core.exceptions import ValidationError
from ..logging_config import get_logger
from ..persistence.codec import identity_from_dict, identity_to_dict
from ..persistence.repository import SnapshotRepository
from ..persistence.snapshots import load_collection, save_collection
from .model import Identity, RegistrationCandidate

logger = get_logger(__name__)


def _drop_duplicate_ids(identities: list[Identity]) -> list[Identity]:
    # First occurrence wins.
    seen: set[str] = set()
    unique: list[Identity] = []
    for identity in identities:
        if identity.id in seen:
            logger.warning("Snapshot %s repeats identity id %s, ignoring the later entry", REGISTRY_SNAPSHOT, identity.id)
            continue
        seen.add(identity.id)
        unique.append(identity)
    return unique


class UserRegistry:
    """Append-only store of enrolled identities.

    Identities are never updated or deleted once registered. Every mutation
    is followed by a whole-snapshot save.
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
        self._subscribers: Subscribers[Sequence[Identity]] = Subscribers()
        self._identities: list[Identity] = _drop_duplicate_ids(
            load_collection(snapshots, REGISTRY_SNAPSHOT, identity_from_dict)
        )

    def register(self, candidate: RegistrationCandidate, *, now: datetime | None = None) -> Identity:
        fields = require_fields(
            {
                "name": candidate.name,
                "department": candidate.department,
                "reference_image": candidate.reference_image,
            }
        )
        try:
            image = normalize_image(fields["reference_image"])
        except ValueError as e:
            raise ValidationError(f"reference_image is invalid: {e}", fields=["reference_image"]) from e

        with self._lock:
            identity_id = self._id_factory()
            if any(i.id == identity_id for i in self._identities):
                raise ValidationError("Generated identity id collides with an existing one", fields=["id"])

            identity = Identity(
                id=identity_id,
                name=fields["name"],
                department=fields["department"],
                reference_image=image,
                registered_at=now or now_local(self._tz),
            )
            updated = [*self._identities, identity]
            save_collection(self._snapshots, REGISTRY_SNAPSHOT, updated, identity_to_dict)
            self._identities = updated
            snapshot = tuple(updated)

        logger.info("Registered identity %s (%s, %s)", identity.id, identity.name, identity.department)
        self._subscribers.notify(snapshot)
        return identity

    def list_identities(self) -> Sequence[Identity]:
        """Registration-ordered, immutable view of the registry."""
        with self._lock:
            return tuple(self._identities)

    def get(self, identity_id: Optional[str]) -> Optional[Identity]:
        if identity_id is None:
            return None
        with self._lock:
            for identity in self._identities:
                if identity.id == identity_id:
                    return identity
        return None

    def lookup(self, identity_id: Optional[str]) -> Optional[Identity]:
        return self.get(identity_id)

    def count(self) -> int:
        with self._lock:
            return len(self._identities)

    def subscribe(self, listener: Callable[[Sequence[Identity]], None]) -> Callable[[], None]:
        return self._subscribers.subscribe(listener)
