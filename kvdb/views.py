"""Typed facades over one StatementSet.

A view owns nothing: it holds the shared StatementSet, a value codec and a
back-reference to the handle so ``close()`` works from either side. Every
public operation goes through ``_live()`` first, which raises
ClosedHandleError once the handle has been closed, no matter when the view
reference was obtained.
"""
from __future__ import annotations
import json
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple, Union

from .statements import StatementSet

if TYPE_CHECKING:  # pragma: no cover
    from .store import KVDb

JsonValue = Union[bool, int, float, None, str, List["JsonValue"], Dict[str, "JsonValue"]]


class _View:
    def __init__(self, statements: StatementSet, handle: "KVDb"):
        self._statements = statements
        self._handle = handle

    # --- codec ----------------------------------------------------------------------
    def _encode(self, value: Any) -> str:
        raise NotImplementedError

    def _decode(self, text: str) -> Any:
        raise NotImplementedError

    def _live(self) -> StatementSet:
        return self._statements.ensure_open()

    # --- value-agnostic operations (shared verbatim by both views) --------------------
    def clear(self) -> None:
        self._live().clear()

    def delete(self, key: str) -> None:
        self._live().delete(key)

    def has(self, key: str) -> bool:
        return self._live().has(key)

    def keys(self) -> Iterator[str]:
        return self._live().keys()

    @property
    def size(self) -> int:
        return self._live().size()

    # --- value-typed operations -------------------------------------------------------
    def get(self, key: str) -> Any:
        text = self._live().get(key)
        return None if text is None else self._decode(text)

    def set(self, key: str, value: Any) -> None:
        stmts = self._live()
        stmts.set(key, self._encode(value))

    def values(self) -> Iterator[Any]:
        return (self._decode(v) for v in self._live().values())

    def entries(self) -> Iterator[Tuple[str, Any]]:
        return ((k, self._decode(v)) for k, v in self._live().entries())

    # --- protocol sugar ---------------------------------------------------------------
    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return self.entries()

    def __len__(self) -> int:
        return self.size

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    def close(self, force: bool = False) -> None:
        self._handle.close(force)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class StringView(_View):
    """Raw text values, stored and returned exactly as given."""

    def _encode(self, value: Any) -> str:
        return str(value)

    def _decode(self, text: str) -> str:
        return text

    def get(self, key: str) -> Optional[str]:
        return self._live().get(key)

    def values(self) -> Iterator[str]:
        return self._live().values()

    def entries(self) -> Iterator[Tuple[str, str]]:
        return self._live().entries()


class JsonView(_View):
    """JSON-serializable values, stored as compact JSON text.

    ``get`` returns None both for a missing key and for a stored JSON null;
    use ``has`` when the difference matters.
    """

    def _encode(self, value: JsonValue) -> str:
        # allow_nan=False keeps the stored text strict JSON.
        return json.dumps(value, separators=(",", ":"), allow_nan=False)

    def _decode(self, text: str) -> JsonValue:
        return json.loads(text)
