"""Opening and closing a key-value handle.

``open_kvdb`` resolves the caller's options into exactly one backing, opens it
through SQLiteBackend, prepares the StatementSet and returns a KVDb: the string
view itself, with the JSON view attached as ``.json``.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .base_backend import Backend, ConnectionLike
from .errors import ClosedHandleError
from .logging_util import debug
from .sqlite_backend import MEMORY_PATH, BackendConfig, SQLiteBackend
from .statements import StatementSet
from .views import JsonView, StringView

_OPTION_KEYS = {"path", "memory"}


@dataclass(frozen=True)
class DbOptions:
    """Backing selection: a file ``path`` or ``memory=True``, never both.

    ``DbOptions()`` and ``DbOptions(path=":memory:")`` are both ephemeral.
    """
    path: Optional[str] = None
    memory: bool = False

    def __post_init__(self):
        if self.memory and self.path is not None:
            raise ValueError("options 'path' and 'memory' are mutually exclusive")

    @property
    def is_memory(self) -> bool:
        return self.path is None or self.path == MEMORY_PATH

    @property
    def backend_path(self) -> Optional[str]:
        return None if self.is_memory else self.path


OptionsLike = Union[None, str, "os.PathLike[str]", Mapping[str, Any], DbOptions]


def resolve_options(options: OptionsLike = None) -> DbOptions:
    """Normalize everything open_kvdb accepts into a DbOptions."""
    if options is None:
        return DbOptions()
    if isinstance(options, DbOptions):
        return options
    if isinstance(options, (str, os.PathLike)):
        path = os.fspath(options)
        if not isinstance(path, str):
            raise TypeError("path options must be text, got bytes")
        return DbOptions(path=path)
    if isinstance(options, Mapping):
        unknown = set(options) - _OPTION_KEYS
        if unknown:
            raise ValueError(f"unknown option(s): {', '.join(sorted(unknown))}")
        memory = bool(options.get("memory", False))
        path = options.get("path")
        if path is not None:
            path = os.fspath(path)
        return DbOptions(path=path, memory=memory)
    raise TypeError(f"unsupported options type: {type(options).__name__}")


class KVDb(StringView):
    """An open key-value handle.

    Behaves as the string view; ``kv.json`` is the JSON view over the same
    rows. ``close()`` on either releases the statements and the connection,
    after which both views raise ClosedHandleError on every operation.
    """

    def __init__(self, backend: Backend, conn: ConnectionLike):
        statements = StatementSet(conn)  # type: ignore[arg-type]
        super().__init__(statements, self)
        self.backend = backend
        self._conn: Optional[ConnectionLike] = conn
        self.json = JsonView(statements, self)

    @property
    def closed(self) -> bool:
        return self._conn is None

    @property
    def path(self) -> Optional[str]:
        return None if self.backend.memory else self.backend.path

    def close(self, force: bool = False) -> None:
        """Release every statement, then the connection.

        ``force`` interrupts a query still running and rolls back an open
        transaction instead of leaving it to the engine. Closing twice is a no-op.
        """
        conn = self._conn
        if conn is None:
            debug("kvdb_close_repeated", path=self.backend.path)
            return
        self._conn = None
        self._statements.finalize()
        if force:
            conn.interrupt()
            if conn.in_transaction:
                conn.rollback()
        conn.close()
        debug("kvdb_closed", path=self.backend.path, force=force)

    def health_check(self) -> Dict[str, Any]:
        if self._conn is None:
            raise ClosedHandleError()
        return self.backend.health_check(self._conn)


def open_kvdb(options: OptionsLike = None, *, config: Optional[BackendConfig] = None) -> KVDb:
    """Open a key-value handle.

    ``options`` may be None (in-memory), a path, ``":memory:"``,
    ``{"path": ...}``, ``{"memory": True}`` or a DbOptions. Engine errors while
    opening a file (sqlite3.OperationalError for a missing directory or denied
    permission) propagate unchanged.
    """
    opts = resolve_options(options)
    backend = SQLiteBackend(opts.backend_path, config)
    conn = backend.connect()
    debug("kvdb_opened", path=backend.path, memory=backend.memory)
    return KVDb(backend, conn)
