"""Core: configuration, constants and the app registry."""

from basebase.core.config import BasebaseConfig, Settings, get_settings, validate_config
from basebase.core.registry import (
    AppRegistry,
    Basebase,
    BasebaseApp,
    create_basebase,
    create_basebase_from_settings,
)

__all__ = [
    "AppRegistry",
    "Basebase",
    "BasebaseApp",
    "BasebaseConfig",
    "Settings",
    "create_basebase",
    "create_basebase_from_settings",
    "get_settings",
    "validate_config",
]
