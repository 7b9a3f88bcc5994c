"""Bearer-token session for basebase requests.

Holds the JWT (and the user/project returned by phone verification) for one
client instance and supplies the Authorization header. Tokens are never
verified client-side; only the ``exp`` claim is inspected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt

from basebase.core.constants import AUTH_TIMEOUT_SECONDS, DEFAULT_BASE_URL
from basebase.domain.exceptions import InvalidArgumentError, UnauthenticatedError
from basebase.infrastructure.http.transport import HttpTransport
from basebase.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BasebaseUser:
    id: str
    name: str
    phone: str


@dataclass(frozen=True)
class BasebaseProject:
    id: str
    name: str


@dataclass(frozen=True)
class AuthState:
    """Snapshot handed to auth state listeners."""

    token: str | None
    user: BasebaseUser | None
    is_authenticated: bool


AuthStateListener = Callable[[AuthState], Any]


def decode_token_payload(token: str) -> dict[str, Any]:
    """Decode JWT claims without verifying the signature.

    Raises:
        InvalidArgumentError: If the token is not a well-formed JWT.
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        raise InvalidArgumentError("Invalid JWT token format", field="token") from e


def is_token_expired(token: str) -> bool:
    """Return True if the token's exp claim is in the past.

    Tokens without exp never expire; undecodable tokens count as expired.
    """
    try:
        payload = decode_token_payload(token)
    except InvalidArgumentError:
        return True
    exp = payload.get("exp")
    if exp is None:
        return False
    try:
        return float(exp) < utc_now().timestamp()
    except (TypeError, ValueError):
        return True


class AuthSession:
    """Token holder for one basebase instance."""

    def __init__(
        self,
        token: str | None = None,
        *,
        transport: HttpTransport | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self._token = token or None
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self.user: BasebaseUser | None = None
        self.project: BasebaseProject | None = None
        self._listeners: list[AuthStateListener] = []

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str) -> None:
        if not token:
            raise InvalidArgumentError("Token must be a non-empty string", field="token")
        self._token = token
        self._notify()

    def sign_out(self) -> None:
        """Forget the token, user and project."""
        self._token = None
        self.user = None
        self.project = None
        self._notify()

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and not is_token_expired(self._token)

    @property
    def state(self) -> AuthState:
        return AuthState(self._token, self.user, self.is_authenticated)

    def on_auth_state_changed(self, listener: AuthStateListener) -> Callable[[], None]:
        """Register a listener; it is called now and after every token change.

        Returns:
            A function that unregisters the listener.
        """
        self._listeners.append(listener)
        listener(self.state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.warning("Auth state listener %r failed", listener, exc_info=True)

    def auth_header(self) -> dict[str, str]:
        """Return the Authorization header for a request.

        Raises:
            UnauthenticatedError: If there is no token or it has expired (the
                expired token is dropped).
        """
        if not self._token:
            raise UnauthenticatedError("No authentication token found. Please sign in first.")
        if is_token_expired(self._token):
            logger.warning("Authentication token has expired; clearing it")
            self._token = None
            self._notify()
            raise UnauthenticatedError("Authentication token has expired. Please sign in again.")
        return {"Authorization": f"Bearer {self._token}"}

    def _require_transport(self) -> HttpTransport:
        if self._transport is None:
            raise InvalidArgumentError("AuthSession has no transport for remote calls")
        return self._transport

    async def request_code(self, name: str, phone: str) -> dict[str, Any]:
        """Ask the server to send a verification code to ``phone``."""
        if not name or not phone:
            raise InvalidArgumentError("Username and phone number are required")
        resp = await self._require_transport().request(
            f"{self._base_url}/requestCode",
            "POST",
            body={"username": name.strip(), "phone": phone.strip()},
            timeout=AUTH_TIMEOUT_SECONDS,
        )
        return resp if isinstance(resp, dict) else {}

    async def verify_code(self, phone: str, code: str, project_api_key: str) -> dict[str, Any]:
        """Exchange a verification code for a token; stores token, user and project."""
        if not phone or not code or not project_api_key:
            raise InvalidArgumentError(
                "Phone number, verification code, and project API key are required"
            )
        resp = await self._require_transport().request(
            f"{self._base_url}/verifyCode",
            "POST",
            body={
                "phone": phone.strip(),
                "code": code.strip(),
                "projectApiKey": project_api_key.strip(),
            },
            timeout=AUTH_TIMEOUT_SECONDS,
        )
        if not isinstance(resp, dict):
            return {}
        token = resp.get("token")
        user = resp.get("user")
        if token and isinstance(user, dict):
            self._token = token
            self.user = BasebaseUser(
                id=str(user.get("id", "")),
                name=str(user.get("name", "")),
                phone=str(user.get("phone", "")),
            )
            project = resp.get("project")
            if isinstance(project, dict):
                self.project = BasebaseProject(
                    id=str(project.get("id", "")), name=str(project.get("name", ""))
                )
            self._notify()
        return resp
