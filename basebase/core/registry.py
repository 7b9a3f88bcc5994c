"""App registry and Basebase instances.

A Basebase instance is what references hang off: it carries the default
project, the server origin, the HTTP transport and the auth session. An
AppRegistry maps app names to their config and lazily created instance.
Registries are created and owned by the caller; there is no module-level
default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType

import httpx

from basebase.core.config import BasebaseConfig, Settings, validate_config
from basebase.core.constants import DEFAULT_APP_NAME, HEALTH_CHECK_TIMEOUT_SECONDS
from basebase.domain.enums import QueryStrategy
from basebase.domain.exceptions import (
    AlreadyExistsError,
    BasebaseException,
    InvalidArgumentError,
    NotFoundError,
)
from basebase.domain.paths import get_project_id_from_api_key, validate_project_id
from basebase.infrastructure.auth.session import AuthSession
from basebase.infrastructure.http.transport import HttpTransport
from basebase.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BasebaseApp:
    """A named, initialized app and its (immutable) configuration."""

    name: str
    options: BasebaseConfig


class Basebase:
    """Client instance: default project, origin, transport and auth session."""

    def __init__(
        self,
        app: BasebaseApp,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        options = app.options
        self._app = app
        self._project_id = options.project_id or get_project_id_from_api_key(options.api_key)
        validate_project_id(self._project_id)
        self._transport = HttpTransport(http_client, timeout_seconds=options.timeout_seconds)
        self._auth = AuthSession(
            options.token.get_secret_value() if options.token else None,
            transport=self._transport,
            base_url=options.base_url,
        )

    @property
    def app(self) -> BasebaseApp:
        return self._app

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def api_key(self) -> str:
        return self._app.options.api_key

    @property
    def base_url(self) -> str:
        return self._app.options.base_url

    @property
    def query_strategy(self) -> QueryStrategy:
        return self._app.options.query_strategy

    @property
    def list_page_size(self) -> int:
        return self._app.options.list_page_size

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def auth(self) -> AuthSession:
        return self._auth

    async def health_check(self) -> bool:
        """Return True if GET {base_url}/health answers with a 2xx status."""
        try:
            await self._transport.request(
                f"{self.base_url}/health", timeout=HEALTH_CHECK_TIMEOUT_SECONDS
            )
        except BasebaseException as e:
            logger.debug("Health check against %s failed: %s", self.base_url, e)
            return False
        return True

    async def aclose(self) -> None:
        """Release the HTTP client (only if this instance created it)."""
        await self._transport.aclose()

    async def __aenter__(self) -> Basebase:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"Basebase(app={self._app.name!r}, project_id={self._project_id!r})"


def create_basebase(
    config: BasebaseConfig,
    *,
    name: str = DEFAULT_APP_NAME,
    http_client: httpx.AsyncClient | None = None,
) -> Basebase:
    """Create a standalone instance without going through a registry."""
    return Basebase(BasebaseApp(name, config), http_client=http_client)


def create_basebase_from_settings(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> Basebase:
    """Create an instance from explicitly loaded Settings.

    BASEBASE_DEBUG=true also installs the stdout log handler.
    """
    if settings.debug:
        setup_logging(debug=True)
    return create_basebase(settings.to_config(), http_client=http_client)


class AppRegistry:
    """Named apps and their lazily created Basebase instances."""

    def __init__(self, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._apps: dict[str, BasebaseApp] = {}
        self._instances: dict[str, Basebase] = {}
        self._http_client = http_client

    def initialize_app(self, config: BasebaseConfig, name: str = DEFAULT_APP_NAME) -> BasebaseApp:
        """Register an app under ``name``.

        The project id defaults to the one derived from the API key.

        Raises:
            AlreadyExistsError: If an app with this name is already registered.
            InvalidArgumentError: If the name is empty or the project id is invalid.
        """
        if not name:
            raise InvalidArgumentError("App name must be a non-empty string", field="name")
        if name in self._apps:
            raise AlreadyExistsError(f'Basebase app "{name}" already exists')
        project_id = config.project_id or get_project_id_from_api_key(config.api_key)
        validate_project_id(project_id)
        app = BasebaseApp(name, config.model_copy(update={"project_id": project_id}))
        self._apps[name] = app
        logger.debug("Initialized app %s for project %s", name, project_id)
        return app

    def get_app(self, name: str = DEFAULT_APP_NAME) -> BasebaseApp:
        """Raises NotFoundError if no app is registered under ``name``."""
        try:
            return self._apps[name]
        except KeyError:
            raise NotFoundError(
                f'Basebase app "{name}" does not exist. Call initialize_app() first.'
            ) from None

    def get_apps(self) -> list[BasebaseApp]:
        return list(self._apps.values())

    def has_app(self, name: str = DEFAULT_APP_NAME) -> bool:
        return name in self._apps

    def get_app_config(self, name: str = DEFAULT_APP_NAME) -> BasebaseConfig:
        return self.get_app(name).options.model_copy()

    async def delete_app(self, app: BasebaseApp | str) -> None:
        """Unregister an app and close its instance, if one was created."""
        name = app if isinstance(app, str) else app.name
        if name not in self._apps:
            raise NotFoundError(f'Basebase app "{name}" does not exist')
        del self._apps[name]
        instance = self._instances.pop(name, None)
        if instance is not None:
            await instance.aclose()

    def get_basebase(self, app: BasebaseApp | str | None = None) -> Basebase:
        """Instance for ``app`` (default app when omitted), created on first use."""
        if app is None:
            target = self.get_app()
        elif isinstance(app, str):
            target = self.get_app(app)
        else:
            target = app
        instance = self._instances.get(target.name)
        if instance is None:
            instance = Basebase(target, http_client=self._http_client)
            self._instances[target.name] = instance
        return instance

    def initialize_basebase(
        self, config: BasebaseConfig, name: str | None = None
    ) -> Basebase:
        """Validate ``config`` strictly, register it and return its instance.

        An app already registered under the name is reused.
        """
        validate_config(config)
        app_name = name or DEFAULT_APP_NAME
        app = self.get_app(app_name) if self.has_app(app_name) else self.initialize_app(config, app_name)
        return self.get_basebase(app)

    async def clear(self) -> None:
        """Unregister every app and close their instances."""
        instances = list(self._instances.values())
        self._apps.clear()
        self._instances.clear()
        for instance in instances:
            await instance.aclose()
