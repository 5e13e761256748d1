from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Sequence, TypeVar

from ..logging_config import get_logger
from .repository import SnapshotRepository

logger = get_logger(__name__)

T = TypeVar("T")


def load_collection(
    repo: SnapshotRepository,
    name: str,
    from_dict: Callable[[Dict[str, Any]], T],
) -> List[T]:
    """Load a named snapshot; absent or unparsable snapshots come back empty.

    A bad snapshot must not block kiosk startup, so decoding problems are
    logged and the collection starts empty.
    """
    payload = repo.load(name)
    if payload is None:
        logger.info("Snapshot %s not found, starting empty", name)
        return []

    try:
        rows = json.loads(payload)
        if not isinstance(rows, list):
            raise ValueError(f"expected a JSON array, got {type(rows).__name__}")
        items = [from_dict(r) for r in rows]
    except (ValueError, KeyError, TypeError) as e:
        logger.warning("Snapshot %s is unreadable (%s), starting empty", name, e)
        return []

    logger.info("Loaded %d item(s) from snapshot %s", len(items), name)
    return items


def save_collection(
    repo: SnapshotRepository,
    name: str,
    items: Sequence[T],
    to_dict: Callable[[T], Dict[str, Any]],
) -> None:
    payload = json.dumps([to_dict(i) for i in items], ensure_ascii=False)
    repo.save(name, payload)
