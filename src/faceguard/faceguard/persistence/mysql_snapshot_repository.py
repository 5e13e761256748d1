from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_text
from ..logging_config import get_logger
from .repository import SnapshotRepository

logger = get_logger(__name__)


class MySQLSnapshotRepository(SnapshotRepository):
    """Snapshots as rows of the ``snapshots`` table (see database/schema.sql).

    Each save is a single upsert inside ``db_cursor``'s transaction.
    """

    backend_name = "mysql"

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load(self, name: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT payload
                FROM snapshots
                WHERE name=%s
                """,
                (name,),
            )
            return fetch_text(cur, "payload")

    def save(self, name: str, payload: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO snapshots(name, payload, updated_at)
                VALUES(%s, %s, UTC_TIMESTAMP()) AS new
                ON DUPLICATE KEY UPDATE payload=new.payload, updated_at=new.updated_at
                """,
                (name, payload),
            )
        logger.debug("Saved snapshot %s to MySQL (%d bytes)", name, len(payload))
