"""Telemetry: logging setup."""

from basebase.shared.telemetry.logging import setup_logging

__all__ = ["setup_logging"]
