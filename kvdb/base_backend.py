"""Backend abstraction layer.

The store only needs a connection that can run parameterized statements,
hand back cursors, and be closed. Keeping that behind a Protocol lets tests
substitute a fake engine and leaves room for another embedded engine later.
"""
from __future__ import annotations
from typing import Protocol, Any, Dict, Iterable, Optional

class CursorLike(Protocol):  # pragma: no cover - structural typing helper
    def fetchone(self) -> Optional[tuple]: ...
    def close(self): ...

class ConnectionLike(Protocol):  # pragma: no cover - structural typing helper
    in_transaction: bool
    def execute(self, sql: str, parameters: Iterable[Any] = ...) -> CursorLike: ...
    def interrupt(self): ...
    def rollback(self): ...
    def close(self): ...

class Backend(Protocol):
    path: Optional[str]

    @property
    def memory(self) -> bool: ...

    def connect(self) -> ConnectionLike:
        """Return a connection with the ``data`` table already in place.
        Engine errors (missing directory, permissions) MUST propagate unchanged.
        """
        ...

    def health_check(self, conn: Optional[ConnectionLike] = None) -> Dict[str, Any]: ...
