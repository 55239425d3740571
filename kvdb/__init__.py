"""kvdb: SQLite-backed key-value store with a string view and a JSON view.

Both views read and write the same ``data`` table; closing the handle closes
both of them.
"""

SCHEMA_VERSION = "1"
PACKAGE_VERSION = "0.1.0"  # Keep in sync with pyproject version.

from .errors import BackingStoreError, ClosedHandleError, KVDbError  # noqa: E402
from .store import DbOptions, KVDb, open_kvdb  # noqa: E402
from .views import JsonView, StringView  # noqa: E402

__all__ = [
    "SCHEMA_VERSION",
    "PACKAGE_VERSION",
    "BackingStoreError",
    "ClosedHandleError",
    "KVDbError",
    "DbOptions",
    "KVDb",
    "JsonView",
    "StringView",
    "open_kvdb",
]
