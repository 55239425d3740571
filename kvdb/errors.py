"""Error types raised to callers.

Only two kinds reach callers at runtime:

  - BackingStoreError: whatever sqlite3 raised (I/O, permission, corrupt file).
    It is an alias, not a wrapper, so the engine's exception propagates as-is.
  - ClosedHandleError: any operation on either view after close().
"""
from __future__ import annotations
import sqlite3

BackingStoreError = sqlite3.Error


class KVDbError(Exception):
    """Base class for errors raised by kvdb itself."""


class ClosedHandleError(KVDbError):
    def __init__(self, message: str = "Database is closed"):
        super().__init__(message)
