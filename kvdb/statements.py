"""The nine parameterized queries behind both views.

sqlite3 compiles each distinct SQL text once per connection and keeps it in
the connection's statement cache, so binding every query to a fixed string
here is what "prepare once, reuse for the handle's lifetime" amounts to.
"""
from __future__ import annotations
import sqlite3
from typing import Any, Iterator, Optional, Sequence, Tuple

from .errors import ClosedHandleError

QUERY_CLEAR = "DELETE FROM data"
QUERY_DELETE = "DELETE FROM data WHERE key = ?"
QUERY_ENTRIES = "SELECT key, value FROM data ORDER BY key ASC"
QUERY_GET = "SELECT value FROM data WHERE key = ?"
QUERY_HAS = "SELECT COUNT(key) FROM data WHERE key = ?"
QUERY_KEYS = "SELECT key FROM data ORDER BY key ASC"
QUERY_SET = """
INSERT INTO data (key, value)
VALUES (?, ?)
ON CONFLICT (key) DO
UPDATE SET value = excluded.value
"""
QUERY_SIZE = "SELECT COUNT(key) FROM data"
QUERY_VALUES = "SELECT value FROM data ORDER BY key ASC"

QUERIES = {
    "clear": QUERY_CLEAR,
    "delete": QUERY_DELETE,
    "entries": QUERY_ENTRIES,
    "get": QUERY_GET,
    "has": QUERY_HAS,
    "keys": QUERY_KEYS,
    "set": QUERY_SET,
    "size": QUERY_SIZE,
    "values": QUERY_VALUES,
}


class Statement:
    """One reusable query bound to a connection until finalized."""

    def __init__(self, conn: sqlite3.Connection, name: str, sql: str):
        self.name = name
        self.sql = sql
        self._conn: Optional[sqlite3.Connection] = conn

    @property
    def finalized(self) -> bool:
        return self._conn is None

    def _live(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ClosedHandleError()
        return self._conn

    def execute(self, params: Sequence[Any] = ()) -> None:
        self._live().execute(self.sql, params).close()

    def first(self, params: Sequence[Any] = ()) -> Optional[tuple]:
        cur = self._live().execute(self.sql, params)
        try:
            return cur.fetchone()
        finally:
            cur.close()

    def iter(self, params: Sequence[Any] = ()) -> Iterator[tuple]:
        """Run the query now, hand back a single-pass iterator over its rows.

        The query is executed eagerly so a finalized statement fails at call
        time; each later step re-checks, so an iterator that outlives close()
        raises ClosedHandleError instead of touching a closed connection.
        """
        cur = self._live().execute(self.sql, params)
        return self._rows(cur)

    def _rows(self, cur: sqlite3.Cursor) -> Iterator[tuple]:
        try:
            while True:
                self._live()
                row = cur.fetchone()
                if row is None:
                    return
                yield row
        finally:
            # Closing the connection already released the cursor.
            if self._conn is not None:
                cur.close()

    def finalize(self) -> None:
        self._conn = None


class StatementSet:
    """clear/delete/get/has/keys/entries/set/size/values over the data table.

    Keys and values are coerced with str() on the way in; everything read back
    is text. Sequence operations return a fresh iterator per call.
    """

    def __init__(self, conn: sqlite3.Connection):
        self._stmts = {name: Statement(conn, name, sql) for name, sql in QUERIES.items()}

    @property
    def closed(self) -> bool:
        return all(s.finalized for s in self._stmts.values())

    def ensure_open(self) -> "StatementSet":
        if self.closed:
            raise ClosedHandleError()
        return self

    def clear(self) -> None:
        self._stmts["clear"].execute()

    def delete(self, key: str) -> None:
        self._stmts["delete"].execute((str(key),))

    def get(self, key: str) -> Optional[str]:
        row = self._stmts["get"].first((str(key),))
        return None if row is None else row[0]

    def has(self, key: str) -> bool:
        row = self._stmts["has"].first((str(key),))
        return row[0] == 1

    def keys(self) -> Iterator[str]:
        return (row[0] for row in self._stmts["keys"].iter())

    def entries(self) -> Iterator[Tuple[str, str]]:
        return ((row[0], row[1]) for row in self._stmts["entries"].iter())

    def values(self) -> Iterator[str]:
        return (row[0] for row in self._stmts["values"].iter())

    def set(self, key: str, value: str) -> None:
        self._stmts["set"].execute((str(key), str(value)))

    def size(self) -> int:
        return self._stmts["size"].first()[0]

    def finalize(self) -> None:
        for stmt in self._stmts.values():
            stmt.finalize()
