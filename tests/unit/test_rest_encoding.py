"""Unit tests for the REST value codec."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from basebase.domain.exceptions import InternalError, InvalidArgumentError
from basebase.firestore._rest_encoding import (
    decode_document,
    decode_value,
    encode_document,
    encode_value,
    expand_field_paths,
    parse_timestamp,
)


class TestEncodeValue:
    """Tests for encode_value tagging."""

    def test_bool_is_not_integer(self) -> None:
        assert encode_value(True) == {"booleanValue": True}

    def test_integer_is_string_encoded(self) -> None:
        assert encode_value(42) == {"integerValue": "42"}

    def test_float(self) -> None:
        assert encode_value(1.5) == {"doubleValue": 1.5}

    def test_null(self) -> None:
        assert encode_value(None) == {"nullValue": None}

    def test_naive_datetime_is_utc(self) -> None:
        assert encode_value(datetime(2024, 1, 2, 3, 4, 5)) == {
            "timestampValue": "2024-01-02T03:04:05.000000Z"
        }

    def test_aware_datetime_converted_to_utc(self) -> None:
        dt = datetime(2024, 1, 2, 5, 0, tzinfo=timezone(timedelta(hours=2)))
        assert encode_value(dt) == {"timestampValue": "2024-01-02T03:00:00.000000Z"}

    def test_bytes_are_base64(self) -> None:
        assert encode_value(b"hi") == {"bytesValue": "aGk="}

    def test_nested(self) -> None:
        assert encode_value({"tags": ["a", 1]}) == {
            "mapValue": {
                "fields": {
                    "tags": {
                        "arrayValue": {
                            "values": [{"stringValue": "a"}, {"integerValue": "1"}]
                        }
                    }
                }
            }
        }

    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(InvalidArgumentError, match="set"):
            encode_value({1, 2})

    def test_non_string_key_raises(self) -> None:
        with pytest.raises(InvalidArgumentError):
            encode_document({1: "x"})


class TestDecodeValue:
    """Tests for decode_value and decode_document."""

    def test_document_round_trip(self) -> None:
        data = {
            "name": "Alice",
            "age": 30,
            "score": 9.5,
            "active": False,
            "nickname": None,
            "joined": datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=UTC),
            "avatar": b"\x00\x01",
            "profile": {"city": "Kampala", "tags": ["x", {"deep": True}]},
            "empty_list": [],
            "empty_map": {},
        }
        assert decode_document(encode_document(data)) == data

    def test_double_value_integral_stays_float(self) -> None:
        value = decode_value({"doubleValue": 3})
        assert value == 3.0
        assert isinstance(value, float)

    def test_nanosecond_timestamp_truncated(self) -> None:
        assert parse_timestamp("2024-05-01T12:00:00.123456789Z") == datetime(
            2024, 5, 1, 12, 0, 0, 123456, tzinfo=UTC
        )

    def test_empty_array_and_map_envelopes(self) -> None:
        assert decode_value({"arrayValue": {}}) == []
        assert decode_value({"mapValue": {}}) == {}

    def test_unknown_tag_raises(self) -> None:
        with pytest.raises(InternalError):
            decode_value({"geoPointValue": {"latitude": 0, "longitude": 0}})

    def test_decode_document_without_fields(self) -> None:
        assert decode_document({"name": "projects/p/databases/(default)/documents/a/b"}) == {}
        assert decode_document(None) == {}


class TestExpandFieldPaths:
    """Tests for dotted update keys."""

    def test_dotted_keys_nest(self) -> None:
        assert expand_field_paths({"profile.city": "X", "name": "a"}) == {
            "profile": {"city": "X"},
            "name": "a",
        }

    def test_siblings_share_parent(self) -> None:
        assert expand_field_paths({"a.b": 1, "a.c": 2}) == {"a": {"b": 1, "c": 2}}

    def test_empty_segment_raises(self) -> None:
        with pytest.raises(InvalidArgumentError):
            expand_field_paths({"a..b": 1})
