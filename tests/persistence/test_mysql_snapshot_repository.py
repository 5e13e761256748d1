from __future__ import annotations

import pytest

from src.faceguard.faceguard.persistence.mysql_snapshot_repository import MySQLSnapshotRepository


class FakeCursor:
    def __init__(self, rows):
        self._rows = list(rows)
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor, fail_on_execute=False):
        self.cur = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False
        if fail_on_execute:
            def boom(sql, params=None):
                raise RuntimeError("lost connection")

            cursor.execute = boom

    def cursor(self, dictionary=False):
        return self.cur

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self, conn):
        self.conn = conn

    def connect(self):
        return self.conn


def test_save_upserts_with_row_alias_in_one_transaction():
    conn = FakeConnection(FakeCursor([]))

    MySQLSnapshotRepository(FakeConnectionFactory(conn)).save("faceguard_users", "[]")

    ((sql, params),) = conn.cur.executed
    assert "AS new ON DUPLICATE KEY UPDATE payload=new.payload, updated_at=new.updated_at" in sql
    assert "VALUES(payload)" not in sql
    assert params == ("faceguard_users", "[]")
    assert conn.committed and conn.closed


def test_failed_save_rolls_back():
    conn = FakeConnection(FakeCursor([]), fail_on_execute=True)

    with pytest.raises(RuntimeError):
        MySQLSnapshotRepository(FakeConnectionFactory(conn)).save("faceguard_users", "[]")

    assert conn.rolled_back
    assert not conn.committed


@pytest.mark.parametrize("stored, expected", [([{"payload": b"[1]"}], "[1]"), ([{"payload": "[]"}], "[]"), ([], None)])
def test_load_returns_text_or_none(stored, expected):
    conn = FakeConnection(FakeCursor(stored))

    assert MySQLSnapshotRepository(FakeConnectionFactory(conn)).load("faceguard_records") == expected
