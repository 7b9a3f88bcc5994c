"""Firestore-style data access over the basebase REST API."""

from basebase.firestore.functions import (
    add_doc,
    collection,
    delete_doc,
    doc,
    get_doc,
    get_docs,
    set_doc,
    update_doc,
)
from basebase.firestore.query import (
    LimitConstraint,
    OrderByConstraint,
    Query,
    QueryConstraint,
    WhereConstraint,
    end_at,
    get_constraints_of_type,
    has_constraint_type,
    limit,
    order_by,
    query,
    start_at,
    where,
)
from basebase.firestore.references import CollectionReference, DocumentReference, SetOptions
from basebase.firestore.snapshots import (
    DocumentSnapshot,
    QueryDocumentSnapshot,
    QuerySnapshot,
    WriteResult,
)
from basebase.firestore.tasks import do_task

__all__ = [
    # References
    "CollectionReference",
    "DocumentReference",
    "SetOptions",
    # Snapshots
    "DocumentSnapshot",
    "QueryDocumentSnapshot",
    "QuerySnapshot",
    "WriteResult",
    # Queries
    "LimitConstraint",
    "OrderByConstraint",
    "Query",
    "QueryConstraint",
    "WhereConstraint",
    "end_at",
    "get_constraints_of_type",
    "has_constraint_type",
    "limit",
    "order_by",
    "query",
    "start_at",
    "where",
    # Functions
    "add_doc",
    "collection",
    "delete_doc",
    "do_task",
    "doc",
    "get_doc",
    "get_docs",
    "set_doc",
    "update_doc",
]
