"""SQLite backing store for the key-value table.

Responsibilities:
    - Open an ephemeral (``:memory:``) or file-backed connection in autocommit mode
    - Environment driven tuning with clamping + sanity logging
    - Idempotent creation of the ``data`` table on every open
    - Health check helper + optional integrity_check (KVDB_VERIFY_ON_CONNECT=1)

Engine errors raised while opening (missing directory, permission denied) are
left untouched so callers see exactly what sqlite3 reported.
"""
from __future__ import annotations
import sqlite3, os
from dataclasses import dataclass
from .logging_util import warn, debug
from typing import Any, Optional, Dict

MEMORY_PATH = ":memory:"
TABLE_NAME = "data"

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS data (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL
)
"""

MAX_CACHE_KIB = 512 * 1024        # 512 MiB upper clamp
MIN_CACHE_KIB = 16                # SQLite minimum practical
DEFAULT_CACHE_KIB = 8 * 1024      # 8 MiB
MAX_BUSY_TIMEOUT_MS = 10 * 60 * 1000
DEFAULT_BUSY_TIMEOUT_MS = 5000

@dataclass
class BackendConfig:
    cache_kib: int = DEFAULT_CACHE_KIB
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    wal: bool = True
    verify_on_connect: bool = False

    @classmethod
    def from_env(cls) -> "BackendConfig":
        def _int(name: str, default: int) -> int:
            raw = os.environ.get(name)
            if raw is None:
                return default
            try:
                return int(raw)
            except ValueError:
                warn("invalid_env_int", key=name, value=raw, default=default)
                return default
        cache_kib = _int("KVDB_CACHE_SIZE_KIB", DEFAULT_CACHE_KIB)
        busy_ms = _int("KVDB_BUSY_TIMEOUT_MS", DEFAULT_BUSY_TIMEOUT_MS)
        wal = os.environ.get("KVDB_WAL", "1") != "0"
        verify = os.environ.get("KVDB_VERIFY_ON_CONNECT", "0") == "1"
        # Clamp
        adjusted = {}
        if cache_kib < MIN_CACHE_KIB or cache_kib > MAX_CACHE_KIB:
            adjusted["cache_kib"] = cache_kib
            cache_kib = min(MAX_CACHE_KIB, max(MIN_CACHE_KIB, cache_kib))
        if busy_ms < 0 or busy_ms > MAX_BUSY_TIMEOUT_MS:
            adjusted["busy_timeout_ms"] = busy_ms
            busy_ms = min(MAX_BUSY_TIMEOUT_MS, max(0, busy_ms))
        if adjusted:
            final_values = {"cache_kib": cache_kib, "busy_timeout_ms": busy_ms}
            warn("backend_config_clamped", original=adjusted, clamped=final_values)
        return cls(cache_kib=cache_kib, busy_timeout_ms=busy_ms, wal=wal, verify_on_connect=verify)


class SQLiteBackend:
    """SQLite backing for one key-value handle.

    ``path=None`` and ``path=":memory:"`` both select an ephemeral database.
    Any other path is a file, created if absent; its directory must exist.
    """
    def __init__(self, path: Optional[str] = None, config: Optional[BackendConfig] = None):
        self.path = MEMORY_PATH if path is None else os.fspath(path)
        self.config = config or BackendConfig.from_env()

    @property
    def memory(self) -> bool:
        return self.path == MEMORY_PATH

    # --- Public API -----------------------------------------------------------------
    def connect(self) -> sqlite3.Connection:
        """Return an autocommit sqlite3.Connection with the data table created.

        isolation_level=None keeps every statement in its own implicit
        transaction, so a single upsert is atomic and immediately visible.
        """
        conn = sqlite3.connect(self.path, isolation_level=None)
        try:
            self._apply_pragmas(conn)
            if self.config.verify_on_connect and not self.memory:
                res = conn.execute("PRAGMA integrity_check").fetchone()[0]
                if res != "ok":
                    warn("integrity_check_failed", path=self.path, result=res)
            conn.execute(CREATE_TABLE_SQL)
        except BaseException:
            conn.close()
            raise
        debug("backend_connected", path=self.path, memory=self.memory)
        return conn

    def health_check(self, conn: Optional[sqlite3.Connection] = None) -> Dict[str, Any]:
        """Return core pragma values, the row count and basic status.

        Without ``conn`` a fresh connection is opened and closed again, which for
        an in-memory backing inspects a new, empty database.
        """
        own = conn is None
        if own:
            try:
                conn = self.connect()
            except Exception as e:
                return {"ok": False, "path": self.path, "error": str(e)}
        try:
            rows = {
                "journal_mode": conn.execute("PRAGMA journal_mode").fetchone()[0],
                "synchronous": conn.execute("PRAGMA synchronous").fetchone()[0],
                "cache_size": conn.execute("PRAGMA cache_size").fetchone()[0],
                "busy_timeout": conn.execute("PRAGMA busy_timeout").fetchone()[0],
                "rows": conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()[0],
            }
        except sqlite3.Error as e:
            return {"ok": False, "path": self.path, "error": str(e)}
        finally:
            if own:
                conn.close()
        return {"ok": True, "path": self.path, "memory": self.memory, **rows}

    # --- Internal -------------------------------------------------------------------
    def _apply_pragmas(self, conn: sqlite3.Connection) -> None:
        mode = "memory" if self.memory else "file"
        pragmas = [
            (f"busy_timeout={self.config.busy_timeout_ms}", "busy_timeout"),
            (f"cache_size=-{self.config.cache_kib}", "cache_size"),  # negative => KiB
            ("trusted_schema=OFF", "trusted_schema"),
        ]
        if not self.memory and self.config.wal:
            try:
                jm = conn.execute("PRAGMA journal_mode=WAL").fetchone()[0]
                if jm.lower() != "wal":
                    warn("journal_mode_unexpected", got=jm, path=self.path)
                else:
                    pragmas.append(("synchronous=NORMAL", "synchronous"))
            except sqlite3.OperationalError as e:
                # A file we cannot open surfaces here first; leave it to the caller.
                if "unable to open" in str(e) or "readonly" in str(e):
                    raise
                warn("pragma_failed", pragma="journal_mode=WAL", mode=mode, path=self.path, error=str(e))
        for p, tag in pragmas:
            try:
                conn.execute(f"PRAGMA {p}")
            except sqlite3.Error as e:
                warn("pragma_failed", pragma=p, tag=tag, mode=mode, path=self.path, error=str(e))


def cli_dump_config():  # pragma: no cover - thin CLI wrapper
    """CLI helper: print resolved BackendConfig + health_check JSON."""
    import argparse, json
    ap = argparse.ArgumentParser(description='Dump kvdb backend config and health info')
    ap.add_argument('db', nargs='?', default=MEMORY_PATH, help='Path to the key-value database (default: :memory:)')
    args = ap.parse_args()
    be = SQLiteBackend(args.db)
    cfg = be.config.__dict__.copy()
    hc = be.health_check()
    out = {'config': cfg, 'health_check': hc}
    print(json.dumps(out, indent=2))
    return 0 if hc.get('ok') else 1

if __name__ == '__main__':  # pragma: no cover
    raise SystemExit(cli_dump_config())
