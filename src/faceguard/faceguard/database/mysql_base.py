from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Optional

from ..logging_config import get_logger
from .connection import DatabaseConnection

logger = get_logger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` inside one transaction: commit on success, rollback on error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        logger.warning("Rolling back MySQL transaction", exc_info=True)
        conn.rollback()
        raise
    finally:
        conn.close()


def fetch_text(cur, column: str) -> Optional[str]:
    """First row's ``column`` as text, or None when the query matched nothing.

    LONGTEXT can come back as bytes depending on the connector build.
    """
    row: Optional[dict[str, Any]] = cur.fetchone()
    if not row:
        return None
    value = row[column]
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return value
