"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, firestore, and infrastructure. No client logic.
"""

from basebase.shared.utils import (
    ensure_utc,
    generate_document_id,
    utc_now,
)

__all__ = [
    "generate_document_id",
    "utc_now",
    "ensure_utc",
]
