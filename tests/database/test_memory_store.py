from __future__ import annotations

import threading
import time

import pytest

from src.inventory_system.inventory_system.database.memory import MemoryStore


def test_transaction_restores_tables_on_error():
    store = MemoryStore()
    store.table("things")[store.next_id("things")] = "kept"

    with pytest.raises(ValueError):
        with store.transaction():
            store.table("things")[store.next_id("things")] = "dropped"
            store.role_permissions.add((1, 1))
            raise ValueError("boom")

    assert list(store.table("things").values()) == ["kept"]
    assert store.role_permissions == set()
    assert store.next_id("things") == 2


def test_nested_transaction_joins_outer():
    store = MemoryStore()

    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                store.table("things")[store.next_id("things")] = "inner"
            raise RuntimeError("outer fails")

    assert store.table("things") == {}


def test_other_thread_commit_survives_rollback():
    store = MemoryStore()
    first_inside = threading.Event()
    failures = []

    def failing_writer():
        try:
            with store.transaction():
                store.table("t")[1] = "A"
                first_inside.set()
                time.sleep(0.1)
                raise RuntimeError("A fails")
        except RuntimeError as exc:
            failures.append(exc)

    def committing_writer():
        first_inside.wait(timeout=5)
        with store.transaction():
            store.table("t")[2] = "B committed"

    threads = [threading.Thread(target=failing_writer), threading.Thread(target=committing_writer)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(failures) == 1
    assert store.table("t") == {2: "B committed"}

    # Later transactions in this thread still roll back on their own.
    with pytest.raises(ValueError):
        with store.transaction():
            store.table("t")[3] = "dropped"
            raise ValueError("boom")
    assert store.table("t") == {2: "B committed"}
