from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from ..logging_config import get_logger
from .repository import SnapshotRepository

logger = get_logger(__name__)

_SAFE_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileSnapshotRepository(SnapshotRepository):
    """One ``<name>.json`` file per snapshot under ``data_dir``.

    Writes go to a temp file in the same directory, are fsynced, then swapped in
    with ``os.replace`` so a crash mid-write leaves the previous file untouched.
    """

    backend_name = "json"

    def __init__(self, data_dir: str | Path):
        self._dir = Path(data_dir)
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        if not _SAFE_NAME.match(name):
            raise ValueError(f"Invalid snapshot name: {name!r}")
        return self._dir / f"{name}.json"

    def load(self, name: str) -> Optional[str]:
        path = self._path(name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def save(self, name: str, payload: str) -> None:
        path = self._path(name)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=self._dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.debug("Saved snapshot %s (%d bytes)", name, len(payload))
