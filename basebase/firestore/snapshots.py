"""Point-in-time read results (document and query snapshots)."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from basebase.domain.exceptions import InternalError

if TYPE_CHECKING:
    from basebase.firestore.references import DocumentReference


class _Missing:
    """Marker for a field path that does not resolve in a document."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def get_field_value(data: Any, field_path: str) -> Any:
    """Look up a dotted field path through nested dicts.

    Returns MISSING when any segment is absent or a non-dict is crossed.
    """
    current = data
    for segment in field_path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return MISSING
        current = current[segment]
    return current


@dataclass(frozen=True)
class WriteResult:
    """Write acknowledgement: server update time, or client-observed time."""

    write_time: datetime


class DocumentSnapshot:
    """Snapshot of one document; data() is None when it does not exist."""

    __slots__ = ("_ref", "_data", "_exists")

    def __init__(
        self,
        ref: DocumentReference,
        data: dict[str, Any] | None,
        exists: bool,
    ) -> None:
        self._ref = ref
        self._exists = exists
        self._data = data if exists else None

    @property
    def id(self) -> str:
        return self._ref.id

    @property
    def ref(self) -> DocumentReference:
        return self._ref

    @property
    def exists(self) -> bool:
        return self._exists

    def data(self) -> dict[str, Any] | None:
        """Return a deep copy of the document fields, or None if missing."""
        if self._data is None:
            return None
        return copy.deepcopy(self._data)

    def get(self, field_path: str) -> Any:
        """Return a (possibly nested, dotted) field, or None if absent."""
        if self._data is None:
            return None
        value = get_field_value(self._data, field_path)
        return None if value is MISSING else copy.deepcopy(value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self._ref.path!r}, exists={self._exists})"


class QueryDocumentSnapshot(DocumentSnapshot):
    """Snapshot returned by collection reads and queries; always exists."""

    __slots__ = ()

    def __init__(self, ref: DocumentReference, data: dict[str, Any]) -> None:
        super().__init__(ref, data, True)

    def data(self) -> dict[str, Any]:
        data = super().data()
        if data is None:
            raise InternalError("Query document snapshot should always have data")
        return data


class QuerySnapshot:
    """Ordered, immutable result of a collection read or query."""

    __slots__ = ("_docs",)

    def __init__(self, docs: Sequence[QueryDocumentSnapshot] = ()) -> None:
        self._docs = tuple(docs)

    @property
    def docs(self) -> tuple[QueryDocumentSnapshot, ...]:
        return self._docs

    @property
    def size(self) -> int:
        return len(self._docs)

    @property
    def empty(self) -> bool:
        return not self._docs

    def for_each(self, callback: Callable[[QueryDocumentSnapshot], Any]) -> None:
        for doc in self._docs:
            callback(doc)

    def __iter__(self) -> Iterator[QueryDocumentSnapshot]:
        return iter(self._docs)

    def __len__(self) -> int:
        return len(self._docs)

    def __repr__(self) -> str:
        return f"QuerySnapshot(size={self.size})"
