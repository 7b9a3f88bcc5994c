"""Query constraint model: where / order_by / limit over a collection.

Constraints are validated when they are built and never change afterwards.
A Query is an immutable (collection, constraints) pair; every chaining call
returns a new Query, so one Query value can be shared and extended from
several call sites without interference.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from basebase.domain.enums import OrderDirection, WhereOperator
from basebase.domain.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from basebase.core.registry import Basebase
    from basebase.firestore.references import CollectionReference
    from basebase.firestore.snapshots import QuerySnapshot

ConstraintType = Literal["where", "orderBy", "limit"]

_LIST_OPERATORS = frozenset(
    {WhereOperator.IN, WhereOperator.NOT_IN, WhereOperator.ARRAY_CONTAINS_ANY}
)


def _validate_field_path(field_path: str) -> None:
    if not field_path or not isinstance(field_path, str):
        raise InvalidArgumentError("Field path must be a non-empty string", field="field_path")
    if any(part == "" for part in field_path.split(".")):
        raise InvalidArgumentError(f"Invalid field path: {field_path!r}", field="field_path")


@dataclass(frozen=True)
class WhereConstraint:
    """Filter: ``field_path <op> value``."""

    type: ClassVar[ConstraintType] = "where"

    field_path: str
    op: WhereOperator
    value: Any


@dataclass(frozen=True)
class OrderByConstraint:
    """Sort key; several keys apply in declaration order."""

    type: ClassVar[ConstraintType] = "orderBy"

    field_path: str
    direction: OrderDirection = OrderDirection.ASC


@dataclass(frozen=True)
class LimitConstraint:
    """Maximum number of results."""

    type: ClassVar[ConstraintType] = "limit"

    limit: int


QueryConstraint = WhereConstraint | OrderByConstraint | LimitConstraint


def where(field_path: str, op: str, value: Any) -> WhereConstraint:
    """Build a filter constraint.

    Raises:
        InvalidArgumentError: For an empty field path, an unknown operator, a
            non-list (or empty list) value for ``in`` / ``not-in`` /
            ``array-contains-any``, or a ``matches`` pattern that is not a
            string or does not compile.
    """
    _validate_field_path(field_path)
    try:
        operator = WhereOperator(op)
    except ValueError:
        raise InvalidArgumentError(
            f"Unsupported operator: {op!r} (expected one of {', '.join(WhereOperator.values())})",
            field="op",
        ) from None
    if operator in _LIST_OPERATORS:
        if not isinstance(value, (list, tuple)) or not value:
            raise InvalidArgumentError(
                f"Operator {operator.value!r} requires a non-empty list value", field="value"
            )
        value = tuple(value)
    elif operator is WhereOperator.MATCHES:
        if not isinstance(value, str):
            raise InvalidArgumentError("Operator 'matches' requires a string pattern", field="value")
        try:
            re.compile(value)
        except re.error as e:
            raise InvalidArgumentError(f"Invalid regular expression: {e}", field="value") from e
    return WhereConstraint(field_path, operator, value)


def order_by(field_path: str, direction: str = "asc") -> OrderByConstraint:
    """Build a sort constraint (direction ``asc`` or ``desc``)."""
    _validate_field_path(field_path)
    try:
        direction_value = OrderDirection(direction)
    except ValueError:
        raise InvalidArgumentError('Direction must be "asc" or "desc"', field="direction") from None
    return OrderByConstraint(field_path, direction_value)


def limit(count: int) -> LimitConstraint:
    """Build a limit constraint; count must be a positive integer."""
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise InvalidArgumentError("Limit must be a positive integer", field="limit")
    return LimitConstraint(count)


def start_at(*values: Any) -> QueryConstraint:
    raise InvalidArgumentError("start_at cursors are not supported")


def end_at(*values: Any) -> QueryConstraint:
    raise InvalidArgumentError("end_at cursors are not supported")


def _check_constraint(constraint: Any) -> QueryConstraint:
    if not isinstance(constraint, (WhereConstraint, OrderByConstraint, LimitConstraint)):
        raise InvalidArgumentError(
            f"Query constraint must be built with where(), order_by() or limit(), got {constraint!r}"
        )
    return constraint


class Query:
    """Immutable query over one collection."""

    __slots__ = ("_collection", "_constraints")

    def __init__(
        self,
        collection: CollectionReference,
        constraints: tuple[QueryConstraint, ...] = (),
    ) -> None:
        self._collection = collection
        self._constraints = tuple(_check_constraint(c) for c in constraints)

    @property
    def collection(self) -> CollectionReference:
        return self._collection

    @property
    def basebase(self) -> Basebase:
        return self._collection.basebase

    @property
    def path(self) -> str:
        return self._collection.path

    @property
    def constraints(self) -> tuple[QueryConstraint, ...]:
        return self._constraints

    def _with(self, constraint: QueryConstraint) -> Query:
        return Query(self._collection, (*self._constraints, constraint))

    def where(self, field_path: str, op: str, value: Any) -> Query:
        return self._with(where(field_path, op, value))

    def order_by(self, field_path: str, direction: str = "asc") -> Query:
        return self._with(order_by(field_path, direction))

    def limit(self, count: int) -> Query:
        return self._with(limit(count))

    async def get(self) -> QuerySnapshot:
        """Execute the query."""
        from basebase.firestore._query_engine import execute_query

        return await execute_query(self)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Query)
            and self._collection == other._collection
            and self._constraints == other._constraints
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Query(path={self.path!r}, constraints={list(self._constraints)!r})"


def query(collection: CollectionReference, *constraints: QueryConstraint) -> Query:
    """Create a query from a collection reference and constraints."""
    return Query(collection, constraints)


def has_constraint_type(q: Query, constraint_type: str) -> bool:
    return any(c.type == constraint_type for c in q.constraints)


def get_constraints_of_type(q: Query, constraint_type: str) -> list[QueryConstraint]:
    return [c for c in q.constraints if c.type == constraint_type]
