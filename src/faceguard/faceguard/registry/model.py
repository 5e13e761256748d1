from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """Domain entity: an enrolled person.

    Note: Pure data. ``reference_image`` is bare base64 of one encoded still image.
    """

    id: str
    name: str
    department: str
    reference_image: str
    registered_at: datetime


@dataclass(frozen=True)
class RegistrationCandidate:
    """Raw registration input as typed by the operator."""

    name: Optional[str]
    department: Optional[str]
    reference_image: Optional[str]
