#!/usr/bin/env python3
"""Create a consistent backup of a file-backed key-value store.

Checkpoints the WAL when the source is in WAL mode, then copies through the
sqlite3 online backup API so a store in use by another handle stays readable.

Usage:
  python scripts/backup_safe.py /path/to/kv.sqlite3 /path/to/backup.sqlite3
"""
from __future__ import annotations
import sys, sqlite3, pathlib, time

def main():
    if len(sys.argv) < 3:
        print('Usage: backup_safe.py <db_path> <backup_path>', file=sys.stderr)
        return 2
    src = pathlib.Path(sys.argv[1])
    dst = pathlib.Path(sys.argv[2])
    if not src.exists():
        print(f"source missing: {src}", file=sys.stderr)
        return 1
    start = time.time()
    conn = sqlite3.connect(src)
    try:
        try:
            conn.execute('PRAGMA wal_checkpoint(FULL)')
        except sqlite3.Error as e:
            print(f"checkpoint skipped: {e}", file=sys.stderr)
        bconn = sqlite3.connect(dst)
        try:
            with bconn:
                conn.backup(bconn)
            rows = bconn.execute("SELECT COUNT(*) FROM data").fetchone()[0]
        finally:
            bconn.close()
    finally:
        conn.close()
    dur_ms = int((time.time()-start)*1000)
    print(f"backup_created path={dst} rows={rows} ms={dur_ms}")
    return 0

if __name__ == '__main__':
    raise SystemExit(main())
