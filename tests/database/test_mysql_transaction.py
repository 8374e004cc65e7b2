from __future__ import annotations

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.inventory_system.inventory_system.core.exceptions import ValidationError
from src.inventory_system.inventory_system.database.connection import DBConfig, DatabaseConnection
from src.inventory_system.inventory_system.database.mysql_base import build_set_clause, db_cursor, unique_violation


class FakeCursor:
    def close(self):
        pass


class FakeConn:
    def __init__(self):
        self.events: list[str] = []

    def cursor(self, dictionary=True):
        return FakeCursor()

    def start_transaction(self):
        self.events.append("begin")

    def commit(self):
        self.events.append("commit")

    def rollback(self):
        self.events.append("rollback")

    def close(self):
        self.events.append("close")


@pytest.fixture
def factory(monkeypatch):
    conns: list[FakeConn] = []
    db = DatabaseConnection(DBConfig(host="h", port=3306, user="u", password="p", database="d"))

    def connect():
        conns.append(FakeConn())
        return conns[-1]

    monkeypatch.setattr(db, "connect", connect)
    return db, conns


def test_cursor_outside_transaction_commits_per_call(factory):
    db, conns = factory
    with db_cursor(db):
        pass
    with db_cursor(db):
        pass
    assert [c.events for c in conns] == [["commit", "close"], ["commit", "close"]]


def test_transaction_shares_one_connection(factory):
    db, conns = factory
    with db.transaction():
        with db_cursor(db) as (first, _):
            pass
        with db.transaction():
            with db_cursor(db) as (second, _):
                pass

    assert first is second
    assert len(conns) == 1
    assert conns[0].events == ["begin", "commit", "close"]
    assert db.active_connection is None


def test_transaction_rolls_back_on_error(factory):
    db, conns = factory
    with pytest.raises(RuntimeError):
        with db.transaction():
            with db_cursor(db):
                raise RuntimeError("boom")

    assert conns[0].events == ["begin", "rollback", "close"]


def test_set_clause_rejects_unknown_fields():
    clause, params = build_set_clause({"name": "Laptop"}, {"name": "name"})
    assert clause == "name=%s"
    assert params == ["Laptop"]
    with pytest.raises(KeyError):
        build_set_clause({"employee_id": 1}, {"name": "name"})


def test_duplicate_key_becomes_validation_error():
    with pytest.raises(ValidationError, match="INV-1"):
        with unique_violation("Inventory number INV-1 is already in use"):
            raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)

    with pytest.raises(mysql.connector.IntegrityError):
        with unique_violation("unused"):
            raise mysql.connector.IntegrityError(msg="Cannot add row", errno=errorcode.ER_NO_REFERENCED_ROW_2)
