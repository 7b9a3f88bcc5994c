"""Domain enumerations for the basebase client.

Enums represent fixed sets of values shared by the path, reference, and
query layers (error kinds, filter operators, sort directions).
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error kind carried by every BasebaseException."""

    INVALID_ARGUMENT = "invalid-argument"
    UNAUTHENTICATED = "unauthenticated"
    PERMISSION_DENIED = "permission-denied"
    NOT_FOUND = "not-found"
    ALREADY_EXISTS = "already-exists"
    UNAVAILABLE = "unavailable"
    NETWORK_ERROR = "network-error"
    INTERNAL = "internal"

    @classmethod
    def values(cls) -> list[str]:
        """Return all error code strings."""
        return [code.value for code in cls]


class WhereOperator(str, Enum):
    """Filter operators accepted by where()."""

    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    ARRAY_CONTAINS = "array-contains"
    IN = "in"
    NOT_IN = "not-in"
    ARRAY_CONTAINS_ANY = "array-contains-any"
    MATCHES = "matches"

    @classmethod
    def values(cls) -> list[str]:
        """Return all operator strings in declaration order."""
        return [op.value for op in cls]


class OrderDirection(str, Enum):
    """Sort direction for order_by()."""

    ASC = "asc"
    DESC = "desc"


class QueryStrategy(str, Enum):
    """How queries with constraints are executed.

    STRUCTURED compiles constraints into a server-side runQuery request;
    CLIENT fetches the whole collection and filters, sorts and truncates
    locally (for servers without structured-query support).
    """

    STRUCTURED = "structured"
    CLIENT = "client"
