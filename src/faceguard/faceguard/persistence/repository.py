from __future__ import annotations

from typing import Optional, Protocol


class SnapshotRepository(Protocol):
    """Named whole-collection snapshots.

    Note (DIP): the stores depend on this interface, never on a concrete medium.
    ``load`` returns the raw text of a snapshot, or None when it was never saved.
    ``save`` must replace the previous snapshot atomically: either the new text
    is durable or the old one is still intact.
    """

    backend_name: str

    def load(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def save(self, name: str, payload: str) -> None:
        raise NotImplementedError
