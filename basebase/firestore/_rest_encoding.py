"""Encode/decode Python values to/from the Firestore REST 'fields' format.

Tagged-value dialect only: every value is a one-key envelope such as
``{"stringValue": "x"}`` or ``{"mapValue": {"fields": {...}}}``.
decode_value(encode_value(v)) == v for every supported type (datetimes come
back timezone-aware UTC; naive input is read as UTC).
"""

import base64
import re
from datetime import datetime
from typing import Any

from basebase.domain.exceptions import InternalError, InvalidArgumentError
from basebase.shared.utils.datetime import ensure_utc

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def format_timestamp(v: datetime) -> str:
    aware = ensure_utc(v)
    assert aware is not None
    return aware.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(s: str) -> datetime:
    # The server may send nanosecond precision; datetime keeps microseconds.
    s = _FRACTION_RE.sub(r"\1", s.replace("Z", "+00:00"))
    parsed = ensure_utc(datetime.fromisoformat(s))
    assert parsed is not None
    return parsed


def encode_value(v: Any) -> dict:
    if v is None:
        return {"nullValue": None}
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        return {"timestampValue": format_timestamp(v)}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": _encode_fields(v)}}
    raise InvalidArgumentError(f"Unsupported value type: {type(v).__name__}")


def _encode_fields(data: dict) -> dict:
    fields = {}
    for k, x in data.items():
        if not isinstance(k, str):
            raise InvalidArgumentError(f"Field names must be strings, got {type(k).__name__}")
        fields[k] = encode_value(x)
    return fields


def encode_document(data: dict[str, Any]) -> dict:
    """Convert a Python dict to Firestore REST Document format ({"fields": ...})."""
    if not isinstance(data, dict):
        raise InvalidArgumentError("Document data must be a dict")
    return {"fields": _encode_fields(data)}


def decode_value(obj: dict) -> Any:
    if not isinstance(obj, dict):
        raise InternalError(f"Malformed wire value: {obj!r}")
    if "nullValue" in obj:
        return None
    if "booleanValue" in obj:
        return bool(obj["booleanValue"])
    if "integerValue" in obj:
        return int(obj["integerValue"])
    if "doubleValue" in obj:
        return float(obj["doubleValue"])
    if "timestampValue" in obj:
        return parse_timestamp(obj["timestampValue"])
    if "stringValue" in obj:
        return obj["stringValue"]
    if "bytesValue" in obj:
        return base64.standard_b64decode(obj["bytesValue"])
    if "arrayValue" in obj:
        vals = (obj.get("arrayValue") or {}).get("values") or []
        return [decode_value(x) for x in vals]
    if "mapValue" in obj:
        fields = (obj.get("mapValue") or {}).get("fields") or {}
        return {k: decode_value(x) for k, x in fields.items()}
    raise InternalError(f"Unsupported wire value: {sorted(obj)}")


def decode_document(doc: dict | None) -> dict:
    """Convert a Firestore REST Document (with "fields") to a Python dict."""
    if not doc:
        return {}
    return {k: decode_value(v) for k, v in (doc.get("fields") or {}).items()}


def expand_field_paths(data: dict[str, Any]) -> dict[str, Any]:
    """Expand dotted keys into nested maps for an update body.

    ``{"profile.lastLogin": t, "name": "a"}`` becomes
    ``{"profile": {"lastLogin": t}, "name": "a"}``. The dotted keys themselves
    go verbatim into the update mask, so sibling fields of ``profile`` are
    left alone by the server.
    """
    out: dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError("Field paths must be non-empty strings")
        parts = key.split(".")
        if any(p == "" for p in parts):
            raise InvalidArgumentError(f"Invalid field path: {key!r}", field=key)
        node = out
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
    return out
