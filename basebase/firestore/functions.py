"""Module-level Firestore-style functions.

doc() and collection() resolve relative paths against the instance's default
project (or ``project_name`` when given) and never make a request; the other
functions delegate to the reference methods.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from basebase.domain.exceptions import InvalidArgumentError
from basebase.domain.paths import resolve_collection_path, resolve_document_path
from basebase.firestore.query import Query
from basebase.firestore.references import (
    CollectionReference,
    DocumentReference,
    SetOptions,
    collection_at,
    document_at,
)
from basebase.firestore.snapshots import DocumentSnapshot, QuerySnapshot, WriteResult

if TYPE_CHECKING:
    from basebase.core.registry import Basebase


def doc(basebase: Basebase, path: str, project_name: str | None = None) -> DocumentReference:
    """Reference to a document, e.g. ``doc(bb, "users/alice")``.

    ``"myproject/users/alice"`` addresses another project explicitly, as does
    ``doc(bb, "users/alice", "myproject")``.
    """
    return document_at(basebase, resolve_document_path(basebase.project_id, path, project_name))


def collection(
    basebase: Basebase, path: str, project_name: str | None = None
) -> CollectionReference:
    """Reference to a collection, e.g. ``collection(bb, "users")``."""
    return collection_at(
        basebase, resolve_collection_path(basebase.project_id, path, project_name)
    )


async def get_doc(reference: DocumentReference) -> DocumentSnapshot:
    return await reference.get()


async def get_docs(source: CollectionReference | Query) -> QuerySnapshot:
    """Run a query, or list a whole collection."""
    if not isinstance(source, (CollectionReference, Query)):
        raise InvalidArgumentError("get_docs() expects a CollectionReference or Query")
    return await source.get()


async def set_doc(
    reference: DocumentReference,
    data: dict[str, Any],
    options: SetOptions | None = None,
) -> WriteResult:
    return await reference.set(data, options)


async def update_doc(reference: DocumentReference, data: dict[str, Any]) -> WriteResult:
    return await reference.update(data)


async def delete_doc(reference: DocumentReference) -> WriteResult:
    return await reference.delete()


async def add_doc(reference: CollectionReference, data: dict[str, Any]) -> DocumentReference:
    return await reference.add(data)
