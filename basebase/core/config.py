"""Client configuration (settings and per-instance config).

BasebaseConfig is what initialize_app() takes. Settings reads the same
values from BASEBASE_* environment variables and .env via pydantic-settings;
it is only consulted when the caller loads it explicitly and passes it to
create_basebase_from_settings().
"""

import re
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from basebase.core.constants import (
    API_KEY_MIN_LENGTH,
    API_KEY_PREFIX,
    DEFAULT_BASE_URL,
    DEFAULT_LIST_PAGE_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
)
from basebase.domain.enums import QueryStrategy
from basebase.domain.exceptions import InvalidArgumentError

_STRICT_PROJECT_ID_RE = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")


class BasebaseConfig(BaseModel):
    """Configuration of one app / client instance.

    Attributes:
        api_key: Project API key (required, non-empty).
        project_id: Default project for relative paths; derived from the API
            key when omitted.
        base_url: Server origin, without trailing slash.
        token: Bearer token (JWT) used for requests.
        timeout_seconds: Per-request timeout handed to the transport.
        query_strategy: How queries with constraints are executed.
        list_page_size: pageSize requested when listing a collection.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: str
    project_id: str | None = None
    base_url: str = DEFAULT_BASE_URL
    token: SecretStr | None = None
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    query_strategy: QueryStrategy = QueryStrategy.STRUCTURED
    list_page_size: int = Field(default=DEFAULT_LIST_PAGE_SIZE, gt=0)

    @field_validator("api_key")
    @classmethod
    def _strip_api_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("API key must be a non-empty string")
        return v

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, v: str) -> str:
        v = (v or "").strip() or DEFAULT_BASE_URL
        if not v.startswith(("http://", "https://")):
            raise ValueError("Invalid base URL format")
        return v.rstrip("/")

    @classmethod
    def create(cls, **values: object) -> "BasebaseConfig":
        """Build a config, reporting pydantic validation failures as InvalidArgumentError."""
        try:
            return cls(**values)  # type: ignore[arg-type]
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first.get("loc", ())) or None
            raise InvalidArgumentError(
                f"Invalid basebase configuration: {first.get('msg')}", field=field
            ) from e


def validate_config(config: BasebaseConfig) -> None:
    """Apply the strict checks used by initialize_basebase().

    - project_id, when given: 3-30 chars, lowercase letters, digits and
      hyphens, not starting or ending with a hyphen.
    - api_key: must start with ``bb_`` and be at least 10 characters.

    Raises:
        InvalidArgumentError: On the first failing rule.
    """
    if config.project_id:
        if not 3 <= len(config.project_id) <= 30:
            raise InvalidArgumentError(
                "Project ID must be between 3 and 30 characters", field="project_id"
            )
        if not _STRICT_PROJECT_ID_RE.match(config.project_id):
            raise InvalidArgumentError(
                "Project ID must contain only lowercase letters, numbers, and hyphens, "
                "and cannot start or end with a hyphen",
                field="project_id",
            )
    if not config.api_key.startswith(API_KEY_PREFIX):
        raise InvalidArgumentError(
            f'Invalid API key format. API keys must start with "{API_KEY_PREFIX}"',
            field="api_key",
        )
    if len(config.api_key) < API_KEY_MIN_LENGTH:
        raise InvalidArgumentError("API key appears to be too short", field="api_key")


class Settings(BaseSettings):
    """Client settings loaded from BASEBASE_* environment variables and .env.

    Example .env:
        BASEBASE_API_KEY=bb_myapp_0123456789
        BASEBASE_PROJECT_ID=myapp
        BASEBASE_TOKEN=eyJ...
    """

    api_key: str = ""
    project_id: str | None = None
    base_url: str = DEFAULT_BASE_URL
    token: SecretStr | None = None
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    query_strategy: QueryStrategy = QueryStrategy.STRUCTURED
    list_page_size: int = DEFAULT_LIST_PAGE_SIZE
    debug: bool = False

    model_config = SettingsConfigDict(
        env_prefix="BASEBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    def to_config(self) -> BasebaseConfig:
        """Convert to a BasebaseConfig.

        Raises:
            InvalidArgumentError: If BASEBASE_API_KEY is missing or a value is invalid.
        """
        if not self.api_key:
            raise InvalidArgumentError(
                "BASEBASE_API_KEY is required to build a client from settings",
                field="api_key",
            )
        return BasebaseConfig.create(
            api_key=self.api_key,
            project_id=self.project_id,
            base_url=self.base_url,
            token=self.token,
            timeout_seconds=self.request_timeout_seconds,
            query_strategy=self.query_strategy,
            list_page_size=self.list_page_size,
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (call get_settings.cache_clear() to reload)."""
    return Settings()
