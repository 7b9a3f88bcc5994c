from basebase.infrastructure.auth.session import (
    AuthSession,
    AuthState,
    BasebaseProject,
    BasebaseUser,
    decode_token_payload,
    is_token_expired,
)

__all__ = [
    "AuthSession",
    "AuthState",
    "BasebaseProject",
    "BasebaseUser",
    "decode_token_payload",
    "is_token_expired",
]
