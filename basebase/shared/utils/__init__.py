"""Shared utilities: datetime and id generators."""

from basebase.shared.utils.datetime import (
    ensure_utc,
    to_timestamp_ms,
    utc_now,
)
from basebase.shared.utils.generators import (
    AUTO_ID_ALPHABET,
    AUTO_ID_LENGTH,
    generate_document_id,
)

__all__ = [
    "AUTO_ID_ALPHABET",
    "AUTO_ID_LENGTH",
    "generate_document_id",
    "utc_now",
    "ensure_utc",
    "to_timestamp_ms",
]
