"""Infrastructure: HTTP transport and authentication collaborators."""

from basebase.infrastructure.auth import (
    AuthSession,
    AuthState,
    BasebaseProject,
    BasebaseUser,
    decode_token_payload,
    is_token_expired,
)
from basebase.infrastructure.http import HttpTransport

__all__ = [
    "AuthSession",
    "AuthState",
    "BasebaseProject",
    "BasebaseUser",
    "HttpTransport",
    "decode_token_payload",
    "is_token_expired",
]
