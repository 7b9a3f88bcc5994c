"""Domain layer: error kinds, enums, and path rules.

No dependencies on transport or configuration. Used by the firestore and
infrastructure layers.
"""

from basebase.domain.enums import ErrorCode, OrderDirection, QueryStrategy, WhereOperator
from basebase.domain.exceptions import (
    AlreadyExistsError,
    BasebaseException,
    InternalError,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
    UnavailableError,
    error_for_status,
)

__all__ = [
    # Enums
    "ErrorCode",
    "OrderDirection",
    "QueryStrategy",
    "WhereOperator",
    # Exceptions
    "AlreadyExistsError",
    "BasebaseException",
    "InternalError",
    "InvalidArgumentError",
    "NetworkError",
    "NotFoundError",
    "PermissionDeniedError",
    "UnauthenticatedError",
    "UnavailableError",
    "error_for_status",
]
