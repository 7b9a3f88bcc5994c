"""basebase: Firestore-style client for the basebase REST API.

Typical use::

    registry = AppRegistry()
    bb = registry.initialize_basebase(BasebaseConfig.create(api_key="bb_myapp_...", token=jwt))
    snap = await get_docs(query(collection(bb, "users"), where("age", ">=", 18)))
"""

import logging

from basebase.core import (
    AppRegistry,
    Basebase,
    BasebaseApp,
    BasebaseConfig,
    Settings,
    create_basebase,
    create_basebase_from_settings,
    get_settings,
    validate_config,
)
from basebase.domain import (
    AlreadyExistsError,
    BasebaseException,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    OrderDirection,
    PermissionDeniedError,
    QueryStrategy,
    UnauthenticatedError,
    UnavailableError,
    WhereOperator,
)
from basebase.domain.paths import get_project_id_from_api_key, resolve_path
from basebase.firestore import (
    CollectionReference,
    DocumentReference,
    DocumentSnapshot,
    Query,
    QueryDocumentSnapshot,
    QuerySnapshot,
    SetOptions,
    WriteResult,
    add_doc,
    collection,
    delete_doc,
    do_task,
    doc,
    get_doc,
    get_docs,
    limit,
    order_by,
    query,
    set_doc,
    update_doc,
    where,
)
from basebase.infrastructure import AuthSession, AuthState, BasebaseProject, BasebaseUser
from basebase.shared.telemetry import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AlreadyExistsError",
    "AppRegistry",
    "AuthSession",
    "AuthState",
    "Basebase",
    "BasebaseApp",
    "BasebaseConfig",
    "BasebaseException",
    "BasebaseProject",
    "BasebaseUser",
    "CollectionReference",
    "DocumentReference",
    "DocumentSnapshot",
    "ErrorCode",
    "InternalError",
    "InvalidArgumentError",
    "NetworkError",
    "NotFoundError",
    "OrderDirection",
    "PermissionDeniedError",
    "Query",
    "QueryDocumentSnapshot",
    "QuerySnapshot",
    "QueryStrategy",
    "SetOptions",
    "Settings",
    "UnauthenticatedError",
    "UnavailableError",
    "WhereOperator",
    "WriteResult",
    "add_doc",
    "collection",
    "create_basebase",
    "create_basebase_from_settings",
    "delete_doc",
    "do_task",
    "doc",
    "get_doc",
    "get_docs",
    "get_project_id_from_api_key",
    "get_settings",
    "limit",
    "order_by",
    "query",
    "resolve_path",
    "set_doc",
    "setup_logging",
    "update_doc",
    "validate_config",
    "where",
]
