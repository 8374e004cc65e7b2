from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, Set, Tuple


class MemoryStore:
    """In-process storage arena used by the in-memory repositories.

    Tables are ``dict[id, frozen dataclass]``; ids are assigned per table.
    ``transaction()`` snapshots everything and restores it if the block raises.
    One outermost transaction runs at a time; nested blocks in the same
    context join it, other threads wait for it to finish.
    """

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now):
        self.tables: Dict[str, Dict[int, Any]] = defaultdict(dict)
        self.role_permissions: Set[Tuple[int, int]] = set()
        self._ids: Dict[str, int] = defaultdict(int)
        self._clock = clock
        self._lock = threading.RLock()
        self._in_transaction: ContextVar[bool] = ContextVar(f"memory_tx_{id(self)}", default=False)

    def table(self, name: str) -> Dict[int, Any]:
        return self.tables[name]

    def next_id(self, name: str) -> int:
        with self._lock:
            self._ids[name] += 1
            return self._ids[name]

    def now(self) -> datetime:
        return self._clock()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._in_transaction.get():
            yield
            return

        with self._lock:
            token = self._in_transaction.set(True)
            saved_tables = {name: dict(rows) for name, rows in self.tables.items()}
            saved_grants = set(self.role_permissions)
            saved_ids = dict(self._ids)
            try:
                yield
            except Exception:
                self.tables = defaultdict(dict, saved_tables)
                self.role_permissions = saved_grants
                self._ids = defaultdict(int, saved_ids)
                raise
            finally:
                self._in_transaction.reset(token)
