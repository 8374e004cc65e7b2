from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol


class UnitOfWork(Protocol):
    """Transaction boundary shared by the repositories of one backend.

    ``DatabaseConnection`` (MySQL) and ``MemoryStore`` (in-memory) both satisfy
    it. Nested ``transaction()`` blocks join the outermost one.
    """

    def transaction(self) -> AbstractContextManager[None]:
        raise NotImplementedError
