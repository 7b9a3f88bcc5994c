"""Query execution: server-side runQuery or client-side filter/sort/limit.

A query without constraints is a plain collection listing. Otherwise the
instance's QueryStrategy decides:

- STRUCTURED: constraints are compiled into one structuredQuery and posted
  to ``{parent}:runQuery``. Constraints with no server equivalent
  (``matches``) make the query fall back to the client-side strategy.
- CLIENT: the whole collection is fetched and filtered (AND), sorted (one
  stable multi-key sort) and truncated locally.

compare_values() defines the client-side ordering.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Iterable, Sequence
from datetime import datetime
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any

from basebase.core.constants import API_VERSION
from basebase.domain.enums import OrderDirection, QueryStrategy, WhereOperator
from basebase.domain.exceptions import InvalidArgumentError, NotFoundError
from basebase.domain.paths import SEPARATOR, documents_resource_name, parse_path
from basebase.firestore._rest_encoding import encode_value
from basebase.firestore.query import (
    LimitConstraint,
    OrderByConstraint,
    QueryConstraint,
    WhereConstraint,
)
from basebase.firestore.references import document_snapshots, send_request
from basebase.firestore.snapshots import MISSING, QueryDocumentSnapshot, QuerySnapshot, get_field_value
from basebase.shared.utils.datetime import ensure_utc

if TYPE_CHECKING:
    from basebase.firestore.query import Query

logger = logging.getLogger(__name__)

_OP_MAP: dict[WhereOperator, str] = {
    WhereOperator.EQUAL: "EQUAL",
    WhereOperator.NOT_EQUAL: "NOT_EQUAL",
    WhereOperator.LESS_THAN: "LESS_THAN",
    WhereOperator.LESS_THAN_OR_EQUAL: "LESS_THAN_OR_EQUAL",
    WhereOperator.GREATER_THAN: "GREATER_THAN",
    WhereOperator.GREATER_THAN_OR_EQUAL: "GREATER_THAN_OR_EQUAL",
    WhereOperator.ARRAY_CONTAINS: "ARRAY_CONTAINS",
    WhereOperator.IN: "IN",
    WhereOperator.NOT_IN: "NOT_IN",
    WhereOperator.ARRAY_CONTAINS_ANY: "ARRAY_CONTAINS_ANY",
}

_DIRECTION_MAP: dict[OrderDirection, str] = {
    OrderDirection.ASC: "ASCENDING",
    OrderDirection.DESC: "DESCENDING",
}

_RANGE_OPERATORS = frozenset(
    {
        WhereOperator.LESS_THAN,
        WhereOperator.LESS_THAN_OR_EQUAL,
        WhereOperator.GREATER_THAN,
        WhereOperator.GREATER_THAN_OR_EQUAL,
    }
)


# ---------------------------------------------------------------------------
# Value semantics
# ---------------------------------------------------------------------------


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _kind(v: Any) -> str:
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "bool"
    if _is_number(v):
        return "number"
    if isinstance(v, str):
        return "string"
    if isinstance(v, datetime):
        return "timestamp"
    if isinstance(v, bytes):
        return "bytes"
    if isinstance(v, (list, tuple)):
        return "array"
    if isinstance(v, dict):
        return "map"
    return type(v).__name__


def _collation_key(s: str) -> tuple[str, str, str]:
    """Locale-style key: accents and case only break ties, lowercase first."""
    decomposed = unicodedata.normalize("NFD", s)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold(), s.swapcase())


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison used for client-side ordering.

    MISSING sorts first, then None, then everything else. Numbers compare
    numerically, strings by a locale-style collation, booleans False < True,
    datetimes chronologically; any other pairing compares string forms.
    """
    if a is MISSING or b is MISSING:
        return 0 if a is b else (-1 if a is MISSING else 1)
    if a is None or b is None:
        return 0 if a is b else (-1 if a is None else 1)
    if _is_number(a) and _is_number(b):
        return _cmp(a, b)
    if isinstance(a, str) and isinstance(b, str):
        return _cmp(_collation_key(a), _collation_key(b))
    if isinstance(a, bool) and isinstance(b, bool):
        return _cmp(a, b)
    if isinstance(a, datetime) and isinstance(b, datetime):
        return _cmp(ensure_utc(a), ensure_utc(b))
    return _cmp(_collation_key(str(a)), _collation_key(str(b)))


def values_equal(a: Any, b: Any) -> bool:
    """Type-aware equality: booleans never equal numbers, arrays and maps compare deeply."""
    kind = _kind(a)
    if kind != _kind(b):
        return False
    if kind == "timestamp":
        return ensure_utc(a) == ensure_utc(b)
    if kind == "array":
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if kind == "map":
        return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
    return a == b


def _contains(items: Iterable[Any], value: Any) -> bool:
    return any(values_equal(item, value) for item in items)


def evaluate_filter(field_value: Any, op: WhereOperator, value: Any) -> bool:
    """Evaluate one where clause against a document's field value.

    A MISSING field equals no value: it satisfies ``!=`` and ``not-in`` and
    nothing else. Range operators only match values of the
    same kind (number with number, string with string, ...); null never
    satisfies a range. ``matches`` is a regular-expression search on string
    fields only.
    """
    if field_value is MISSING:
        return op in (WhereOperator.NOT_EQUAL, WhereOperator.NOT_IN)
    if op is WhereOperator.EQUAL:
        return values_equal(field_value, value)
    if op is WhereOperator.NOT_EQUAL:
        return not values_equal(field_value, value)
    if op in _RANGE_OPERATORS:
        kind = _kind(field_value)
        if kind == "null" or kind != _kind(value):
            return False
        c = compare_values(field_value, value)
        if op is WhereOperator.LESS_THAN:
            return c < 0
        if op is WhereOperator.LESS_THAN_OR_EQUAL:
            return c <= 0
        if op is WhereOperator.GREATER_THAN:
            return c > 0
        return c >= 0
    if op is WhereOperator.ARRAY_CONTAINS:
        return isinstance(field_value, list) and _contains(field_value, value)
    if op is WhereOperator.IN:
        return _contains(value, field_value)
    if op is WhereOperator.NOT_IN:
        return not _contains(value, field_value)
    if op is WhereOperator.ARRAY_CONTAINS_ANY:
        return isinstance(field_value, list) and any(_contains(field_value, v) for v in value)
    if op is WhereOperator.MATCHES:
        return isinstance(field_value, str) and re.search(value, field_value) is not None
    raise InvalidArgumentError(f"Unsupported operator: {op!r}")


# ---------------------------------------------------------------------------
# Client-side strategy
# ---------------------------------------------------------------------------


def _effective_limit(constraints: Sequence[QueryConstraint]) -> int | None:
    limits = [c.limit for c in constraints if isinstance(c, LimitConstraint)]
    return min(limits) if limits else None


def apply_client_side_constraints(
    docs: Sequence[QueryDocumentSnapshot],
    constraints: Sequence[QueryConstraint],
) -> list[QueryDocumentSnapshot]:
    """Filter, sort and truncate snapshots exactly as the server would be asked to."""
    rows = [(doc, doc.data()) for doc in docs]

    for c in constraints:
        if isinstance(c, WhereConstraint):
            rows = [
                row
                for row in rows
                if evaluate_filter(get_field_value(row[1], c.field_path), c.op, c.value)
            ]

    order_bys = [c for c in constraints if isinstance(c, OrderByConstraint)]
    if order_bys:

        def _compare_rows(left: tuple[Any, dict], right: tuple[Any, dict]) -> int:
            for c in order_bys:
                result = compare_values(
                    get_field_value(left[1], c.field_path),
                    get_field_value(right[1], c.field_path),
                )
                if result:
                    return -result if c.direction is OrderDirection.DESC else result
            return 0

        rows = sorted(rows, key=cmp_to_key(_compare_rows))

    count = _effective_limit(constraints)
    if count is not None:
        rows = rows[:count]
    return [doc for doc, _ in rows]


async def run_client_side_query(q: Query) -> QuerySnapshot:
    snapshot = await q.collection.get()
    return QuerySnapshot(apply_client_side_constraints(snapshot.docs, q.constraints))


# ---------------------------------------------------------------------------
# Structured-query strategy
# ---------------------------------------------------------------------------


def server_operator(op: WhereOperator) -> str:
    """Server vocabulary for an operator; unknown operators are rejected."""
    try:
        return _OP_MAP[op]
    except KeyError:
        raise InvalidArgumentError(
            f"Operator {getattr(op, 'value', op)!r} cannot be sent in a structured query",
            field="op",
        ) from None


def can_compile(constraints: Iterable[QueryConstraint]) -> bool:
    return all(
        not isinstance(c, WhereConstraint) or c.op in _OP_MAP for c in constraints
    )


def _field_filter(c: WhereConstraint) -> dict[str, Any]:
    return {
        "fieldFilter": {
            "field": {"fieldPath": c.field_path},
            "op": server_operator(c.op),
            "value": encode_value(list(c.value) if isinstance(c.value, tuple) else c.value),
        }
    }


def build_structured_query(
    collection_id: str, constraints: Sequence[QueryConstraint]
) -> dict[str, Any]:
    """Compile constraints into a structuredQuery body.

    One where clause becomes a fieldFilter; several become a single AND
    compositeFilter. orderBy keeps declaration order. The smallest declared
    limit wins.
    """
    structured: dict[str, Any] = {"from": [{"collectionId": collection_id}]}
    filters = [_field_filter(c) for c in constraints if isinstance(c, WhereConstraint)]
    if len(filters) == 1:
        structured["where"] = filters[0]
    elif filters:
        structured["where"] = {"compositeFilter": {"op": "AND", "filters": filters}}
    order_bys = [c for c in constraints if isinstance(c, OrderByConstraint)]
    if order_bys:
        structured["orderBy"] = [
            {"field": {"fieldPath": c.field_path}, "direction": _DIRECTION_MAP[c.direction]}
            for c in order_bys
        ]
    count = _effective_limit(constraints)
    if count is not None:
        structured["limit"] = count
    return structured


def parent_resource_name(collection_path: str) -> str:
    """Resource name of the document (or database root) a collection hangs off."""
    project_id, relative = parse_path(collection_path)
    parent_relative = SEPARATOR.join(relative.split(SEPARATOR)[:-1])
    return documents_resource_name(project_id, parent_relative)


async def run_structured_query(q: Query) -> QuerySnapshot:
    collection = q.collection
    parent = parent_resource_name(collection.path)
    body = {
        "structuredQuery": build_structured_query(collection.id, q.constraints),
        "parent": parent,
    }
    url = f"{collection.basebase.base_url}/{API_VERSION}/{parent}:runQuery"
    try:
        resp = await send_request(collection.basebase, url, "POST", body=body)
    except NotFoundError:
        return QuerySnapshot()
    items = resp if isinstance(resp, list) else ([resp] if resp else [])
    records = [item["document"] for item in items if isinstance(item, dict) and item.get("document")]
    return QuerySnapshot(document_snapshots(collection, records))


async def execute_query(q: Query) -> QuerySnapshot:
    """Run a query with the strategy configured on its Basebase instance."""
    if not q.constraints:
        return await q.collection.get()
    if q.basebase.query_strategy is QueryStrategy.STRUCTURED:
        if can_compile(q.constraints):
            return await run_structured_query(q)
        logger.debug(
            "Query on %s has operators without a server equivalent; filtering client-side",
            q.path,
        )
    return await run_client_side_query(q)
