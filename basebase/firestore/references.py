"""Document and collection references (REST, Firestore calling style).

References are immutable addresses: a canonical project-qualified path bound
to a Basebase instance. Every read or write is a remote call; nothing is
cached or mutated locally.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from basebase.core.constants import API_VERSION
from basebase.domain.exceptions import InvalidArgumentError, NotFoundError
from basebase.domain.paths import (
    SEPARATOR,
    documents_resource_name,
    parse_path,
    resolve_collection_path,
    validate_document_id,
    validate_path,
)
from basebase.firestore._rest_encoding import (
    decode_document,
    decode_value,
    encode_document,
    expand_field_paths,
    parse_timestamp,
)
from basebase.firestore.snapshots import (
    DocumentSnapshot,
    QueryDocumentSnapshot,
    QuerySnapshot,
    WriteResult,
)
from basebase.shared.utils.datetime import to_timestamp_ms, utc_now
from basebase.shared.utils.generators import generate_document_id

if TYPE_CHECKING:
    from basebase.core.registry import Basebase
    from basebase.firestore.query import Query

logger = logging.getLogger(__name__)

_ID_FIELDS = ("id", "_id", "ID")


@dataclass(frozen=True)
class SetOptions:
    """Options for DocumentReference.set().

    merge: shallow-merge the new data over the existing document.
    merge_fields: take only these top-level keys from the new data; keep all
        other existing fields.
    """

    merge: bool = False
    merge_fields: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.merge and self.merge_fields is not None:
            raise InvalidArgumentError("Specify either merge or merge_fields, not both")
        if self.merge_fields is not None:
            fields = tuple(self.merge_fields)
            if not all(isinstance(f, str) and f for f in fields):
                raise InvalidArgumentError("merge_fields must be non-empty strings")
            object.__setattr__(self, "merge_fields", fields)


def api_url(basebase: Basebase, path: str = "", project_id: str | None = None) -> str:
    """REST URL of a canonical path (or of the project's documents root)."""
    if path:
        project_id, relative = parse_path(path)
    else:
        relative = ""
    return f"{basebase.base_url}/{API_VERSION}/{documents_resource_name(project_id or basebase.project_id, relative)}"


async def send_request(
    basebase: Basebase,
    url: str,
    method: str = "GET",
    *,
    body: Any = None,
    params: list[tuple[str, str]] | None = None,
) -> Any:
    """Authenticated request through the instance's transport."""
    return await basebase.transport.request(
        url,
        method,
        headers=basebase.auth.auth_header(),
        body=body,
        params=params,
    )


def _write_result(resp: Any) -> WriteResult:
    update_time = resp.get("updateTime") if isinstance(resp, dict) else None
    if update_time:
        return WriteResult(parse_timestamp(update_time))
    return WriteResult(utc_now())


def extract_document_id(record: dict[str, Any], fallback_index: int) -> str:
    """Document id of a wire record.

    Order: last segment of ``name``; then an ``id`` / ``_id`` / ``ID`` string
    (top level, then inside ``fields``); then a synthesized
    ``doc_<index>_<epoch ms>``, logged as a degraded record.
    """
    name = record.get("name")
    if isinstance(name, str) and name:
        last = name.rstrip(SEPARATOR).split(SEPARATOR)[-1]
        if last:
            return last
    for key in _ID_FIELDS:
        value = record.get(key)
        if isinstance(value, str) and value:
            return value
    fields = record.get("fields")
    if isinstance(fields, dict):
        for key in _ID_FIELDS:
            if key in fields:
                value = decode_value(fields[key])
                if isinstance(value, str) and value:
                    return value
    synthesized = f"doc_{fallback_index}_{to_timestamp_ms(utc_now())}"
    logger.warning(
        "Record at index %d has no name or id field; using synthesized id %s",
        fallback_index,
        synthesized,
    )
    return synthesized


def document_snapshots(
    collection: CollectionReference,
    records: Iterable[dict[str, Any]],
    start_index: int = 0,
) -> list[QueryDocumentSnapshot]:
    """Snapshots for wire records belonging to ``collection``."""
    docs = []
    for index, record in enumerate(records, start=start_index):
        doc_id = extract_document_id(record, index)
        ref = DocumentReference(
            collection.basebase, f"{collection.path}{SEPARATOR}{doc_id}", doc_id, collection
        )
        docs.append(QueryDocumentSnapshot(ref, decode_document(record)))
    return docs


def document_at(basebase: Basebase, path: str) -> DocumentReference:
    """Reference for an already-canonical document path."""
    segments = path.split(SEPARATOR)
    parent = collection_at(basebase, SEPARATOR.join(segments[:-1]))
    return DocumentReference(basebase, path, segments[-1], parent)


def collection_at(basebase: Basebase, path: str) -> CollectionReference:
    """Reference for an already-canonical collection path."""
    segments = path.split(SEPARATOR)
    parent = document_at(basebase, SEPARATOR.join(segments[:-1])) if len(segments) > 2 else None
    return CollectionReference(basebase, path, parent)


class DocumentReference:
    """Reference to a single document."""

    __slots__ = ("_basebase", "_path", "_id", "_parent")

    def __init__(
        self,
        basebase: Basebase,
        path: str,
        id_: str,
        parent: CollectionReference,
    ) -> None:
        self._basebase = basebase
        self._path = path
        self._id = id_
        self._parent = parent

    @property
    def basebase(self) -> Basebase:
        return self._basebase

    @property
    def path(self) -> str:
        return self._path

    @property
    def id(self) -> str:
        return self._id

    @property
    def parent(self) -> CollectionReference:
        return self._parent

    def _url(self) -> str:
        return api_url(self._basebase, self._path)

    async def get(self) -> DocumentSnapshot:
        """Fetch the document; a missing document yields exists=False."""
        try:
            out = await send_request(self._basebase, self._url())
        except NotFoundError:
            return DocumentSnapshot(self, None, False)
        return DocumentSnapshot(self, decode_document(out if isinstance(out, dict) else None), True)

    async def set(
        self, data: dict[str, Any], options: SetOptions | None = None
    ) -> WriteResult:
        """Write the whole document.

        With options.merge or options.merge_fields the existing document is
        read first and combined with ``data``; the read and the write are two
        separate calls, so concurrent writers can interleave.
        """
        if not isinstance(data, dict):
            raise InvalidArgumentError("Document data must be a dict")
        payload = data
        if options is not None and (options.merge or options.merge_fields is not None):
            existing = await self.get()
            current = existing.data() or {}
            if options.merge:
                payload = {**current, **data}
            else:
                payload = dict(current)
                for field in options.merge_fields or ():
                    if field in data:
                        payload[field] = data[field]
        resp = await send_request(
            self._basebase, self._url(), "PATCH", body=encode_document(payload)
        )
        return _write_result(resp)

    async def update(self, data: dict[str, Any]) -> WriteResult:
        """Update only the given fields; dotted keys address nested fields.

        The document must exist (the server answers NotFoundError otherwise).
        """
        if not isinstance(data, dict) or not data:
            raise InvalidArgumentError("Update data must be a non-empty dict")
        params = [("updateMask.fieldPaths", key) for key in data]
        params.append(("currentDocument.exists", "true"))
        resp = await send_request(
            self._basebase,
            self._url(),
            "PATCH",
            body=encode_document(expand_field_paths(data)),
            params=params,
        )
        return _write_result(resp)

    async def delete(self) -> WriteResult:
        """Delete the document."""
        await send_request(self._basebase, self._url(), "DELETE")
        return WriteResult(utc_now())

    def collection(self, collection_path: str) -> CollectionReference:
        """Reference to a subcollection below this document."""
        validate_path(collection_path)
        full_path = resolve_collection_path(
            self._basebase.project_id, f"{self._path}{SEPARATOR}{collection_path}"
        )
        return collection_at(self._basebase, full_path)

    def is_equal(self, other: object) -> bool:
        return (
            isinstance(other, DocumentReference)
            and self._basebase is other._basebase
            and self._path == other._path
        )

    def __eq__(self, other: object) -> bool:
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((id(self._basebase), self._path))

    def __repr__(self) -> str:
        return f"DocumentReference(path={self._path!r})"


class CollectionReference:
    """Reference to a collection (top-level or below a document)."""

    __slots__ = ("_basebase", "_path", "_parent", "_id")

    def __init__(
        self,
        basebase: Basebase,
        path: str,
        parent: DocumentReference | None = None,
    ) -> None:
        self._basebase = basebase
        self._path = path.rstrip(SEPARATOR)
        self._parent = parent
        self._id = self._path.split(SEPARATOR)[-1]

    @property
    def basebase(self) -> Basebase:
        return self._basebase

    @property
    def path(self) -> str:
        return self._path

    @property
    def id(self) -> str:
        return self._id

    @property
    def parent(self) -> DocumentReference | None:
        return self._parent

    def _url(self) -> str:
        return api_url(self._basebase, self._path)

    async def get(self) -> QuerySnapshot:
        """List every document in the collection (all pages).

        A collection the server reports as not found is an empty result.
        """
        docs: list[QueryDocumentSnapshot] = []
        page_token: str | None = None
        while True:
            params = [("pageSize", str(self._basebase.list_page_size))]
            if page_token:
                params.append(("pageToken", page_token))
            try:
                out = await send_request(self._basebase, self._url(), params=params)
            except NotFoundError:
                return QuerySnapshot(docs)
            if not isinstance(out, dict):
                break
            docs.extend(document_snapshots(self, out.get("documents") or [], len(docs)))
            page_token = out.get("nextPageToken")
            if not page_token:
                break
        return QuerySnapshot(docs)

    def doc(self, document_id: str | None = None) -> DocumentReference:
        """Reference to a document in this collection; no request is made.

        Without ``document_id`` a random 20-character id is generated.
        """
        doc_id = document_id if document_id is not None else generate_document_id()
        validate_document_id(doc_id)
        return DocumentReference(
            self._basebase, f"{self._path}{SEPARATOR}{doc_id}", doc_id, self
        )

    async def add(self, data: dict[str, Any]) -> DocumentReference:
        """Create a document with a server-assigned id and return its reference."""
        if not isinstance(data, dict):
            raise InvalidArgumentError("Document data must be a dict")
        out = await send_request(
            self._basebase, self._url(), "POST", body=encode_document(data)
        )
        doc_id = extract_document_id(out if isinstance(out, dict) else {}, 0)
        return DocumentReference(
            self._basebase, f"{self._path}{SEPARATOR}{doc_id}", doc_id, self
        )

    def where(self, field_path: str, op: str, value: Any) -> Query:
        """Start a query with a filter. Chain .where(), .order_by(), .limit(), then .get()."""
        from basebase.firestore.query import Query

        return Query(self).where(field_path, op, value)

    def order_by(self, field_path: str, direction: str = "asc") -> Query:
        from basebase.firestore.query import Query

        return Query(self).order_by(field_path, direction)

    def limit(self, count: int) -> Query:
        from basebase.firestore.query import Query

        return Query(self).limit(count)

    def is_equal(self, other: object) -> bool:
        return (
            isinstance(other, CollectionReference)
            and self._basebase is other._basebase
            and self._path == other._path
        )

    def __eq__(self, other: object) -> bool:
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((id(self._basebase), self._path))

    def __repr__(self) -> str:
        return f"CollectionReference(path={self._path!r})"
