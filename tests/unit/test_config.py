"""Unit tests for BasebaseConfig, validate_config and Settings."""

import pytest
from pydantic import ValidationError

from basebase.core.config import BasebaseConfig, Settings, get_settings, validate_config
from basebase.core.registry import create_basebase_from_settings
from basebase.domain.enums import QueryStrategy
from basebase.domain.exceptions import InvalidArgumentError


class TestBasebaseConfig:
    """Pydantic config model."""

    def test_defaults(self) -> None:
        config = BasebaseConfig(api_key="  bb_app_0123456789  ")
        assert config.api_key == "bb_app_0123456789"
        assert config.base_url == "https://app.basebase.us"
        assert config.query_strategy is QueryStrategy.STRUCTURED
        assert config.token is None

    def test_base_url_trailing_slash_stripped(self) -> None:
        assert BasebaseConfig(api_key="k", base_url="http://localhost:8000/").base_url == (
            "http://localhost:8000"
        )

    def test_create_wraps_validation_errors(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            BasebaseConfig.create(api_key="k", base_url="ftp://x")
        assert exc_info.value.details == {"field": "base_url"}

    def test_create_accepts_token(self) -> None:
        config = BasebaseConfig.create(api_key="bb_myapp_0123456789", token="jwt")
        assert config.token is not None and config.token.get_secret_value() == "jwt"
        with pytest.raises(InvalidArgumentError):
            BasebaseConfig.create(api_key="bb_myapp_0123456789", timeout_seconds=-1)

    def test_create_rejects_blank_key(self) -> None:
        with pytest.raises(InvalidArgumentError):
            BasebaseConfig.create(api_key="   ")

    def test_frozen(self) -> None:
        config = BasebaseConfig(api_key="k")
        with pytest.raises(ValidationError):
            config.api_key = "other"  # type: ignore[misc]

    def test_token_is_secret(self) -> None:
        config = BasebaseConfig(api_key="k", token="abc")
        assert "abc" not in repr(config)
        assert config.token is not None and config.token.get_secret_value() == "abc"


class TestValidateConfig:
    """Strict checks used by initialize_basebase."""

    def test_valid(self) -> None:
        validate_config(BasebaseConfig(api_key="bb_app_0123456789", project_id="my-app"))

    @pytest.mark.parametrize("project_id", ["My-App", "-app", "app-", "a" * 31])
    def test_bad_project_ids(self, project_id: str) -> None:
        with pytest.raises(InvalidArgumentError):
            validate_config(BasebaseConfig(api_key="bb_app_0123456789", project_id=project_id))

    def test_short_key(self) -> None:
        with pytest.raises(InvalidArgumentError, match="too short"):
            validate_config(BasebaseConfig(api_key="bb_a"))


class TestSettings:
    """BASEBASE_* environment settings."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BASEBASE_API_KEY", "bb_envapp_0123456789")
        monkeypatch.setenv("BASEBASE_BASE_URL", "https://example.test/")
        monkeypatch.setenv("BASEBASE_QUERY_STRATEGY", "client")
        settings = Settings(_env_file=None)
        config = settings.to_config()
        assert config.api_key == "bb_envapp_0123456789"
        assert config.base_url == "https://example.test"
        assert config.query_strategy is QueryStrategy.CLIENT

    def test_missing_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("BASEBASE_API_KEY", raising=False)
        with pytest.raises(InvalidArgumentError, match="BASEBASE_API_KEY"):
            Settings(_env_file=None).to_config()

    @pytest.mark.asyncio
    async def test_instance_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BASEBASE_API_KEY", "bb_envapp_0123456789")
        bb = create_basebase_from_settings(Settings(_env_file=None))
        assert bb.project_id == "envapp"
        await bb.aclose()

    def test_get_settings_cached(self) -> None:
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
