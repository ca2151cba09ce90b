"""Unit tests for doccodec.codecs.scalars, type_map and transformers."""
from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from bson.binary import Binary as PyMongoBinary
from bson.binary import UuidRepresentation
from bson.code import Code
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.max_key import MaxKey
from bson.min_key import MinKey
from bson.objectid import ObjectId
from bson.regex import Regex
from bson.timestamp import Timestamp

from doccodec.bsonio import (
    BsonBinary,
    BsonDateTime,
    BsonDocument,
    BsonDocumentReader,
    BsonDocumentWriter,
    BsonInt32,
    BsonInt64,
    BsonRegularExpression,
    BsonSerializationError,
    BsonType,
    BsonUndefined,
    BsonValue,
)
from doccodec.codecs import (
    BinaryToBytesTransformer,
    BinaryToUUIDTransformer,
    BsonTypeClassMap,
    Codec,
    CodecNotFoundError,
    UnmappedBsonTypeError,
    default_registry,
    uuid_from_bytes,
    uuid_to_bytes,
)
from doccodec.codecs.scalars import (
    DateTimeCodec,
    IntegerCodec,
    UUIDCodec,
)
from doccodec.config import UUID_REPRESENTATIONS, CodecOptions
from doccodec.model import Binary, Symbol

_UUID = uuid.UUID("00112233-4455-6677-8899-aabbccddeeff")


def _encode(codec: Codec, value: Any) -> BsonValue:
    tree = BsonDocument()
    writer = BsonDocumentWriter(tree)
    writer.write_start_document()
    writer.write_name("v")
    codec.encode(writer, value)
    writer.write_end_document()
    return tree["v"]


def _decode(codec: Codec, value: BsonValue) -> Any:
    reader = BsonDocumentReader(BsonDocument(v=value))
    reader.read_start_document()
    reader.read_bson_type()
    reader.read_name()
    return codec.decode(reader)


def _roundtrip(value: Any, options: CodecOptions | None = None) -> Any:
    codec = default_registry(options).get(type(value))
    return _decode(codec, _encode(codec, value))


# ===========================================================================
# default_registry contents
# ===========================================================================


class TestDefaultRegistry:
    @pytest.mark.parametrize(
        "python_type",
        [
            str, bool, int, Int64, float, datetime, ObjectId, Regex, re.Pattern,
            Code, Symbol, Binary, uuid.UUID, Timestamp, Decimal128, MinKey, MaxKey,
            BsonValue,
        ],
    )
    def test_has_codec(self, python_type: type) -> None:
        assert python_type in default_registry()

    def test_bool_not_handled_by_int_codec(self) -> None:
        assert not isinstance(default_registry().get(bool), IntegerCodec)

    def test_bson_values_use_passthrough(self) -> None:
        registry = default_registry()
        assert registry.get(BsonInt32) is registry.get(BsonValue)

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(CodecNotFoundError):
            default_registry().get(complex)


# ===========================================================================
# Leaf round trips
# ===========================================================================


class TestScalarRoundTrips:
    @pytest.mark.parametrize(
        "value",
        [
            "text",
            True,
            42,
            1.5,
            ObjectId("5f1d7a2b9c8e4a3b2c1d0e0f"),
            Code("function () { return 1; }"),
            Symbol("sym"),
            Binary(0x80, b"\x01\x02"),
            Timestamp(100, 3),
            Decimal128("12.50"),
            _UUID,
        ],
    )
    def test_value_survives(self, value: Any) -> None:
        result = _roundtrip(value)
        assert result == value
        assert type(result) is type(value)

    def test_int64_survives_as_int64(self) -> None:
        result = _roundtrip(Int64(5))
        assert result == 5
        assert isinstance(result, Int64)

    def test_min_and_max_key(self) -> None:
        assert isinstance(_roundtrip(MinKey()), MinKey)
        assert isinstance(_roundtrip(MaxKey()), MaxKey)

    def test_bson_value_passthrough(self) -> None:
        assert _roundtrip(BsonUndefined()) == BsonUndefined()


# ===========================================================================
# Integers
# ===========================================================================


class TestIntegerCodec:
    def test_small_int_is_int32(self) -> None:
        assert _encode(IntegerCodec(), 7) == BsonInt32(7)

    def test_large_int_is_int64(self) -> None:
        assert _encode(IntegerCodec(), 2**40) == BsonInt64(2**40)

    def test_negative_boundary(self) -> None:
        assert _encode(IntegerCodec(), -(2**31)) == BsonInt32(-(2**31))
        assert _encode(IntegerCodec(), -(2**31) - 1) == BsonInt64(-(2**31) - 1)

    def test_too_large_raises(self) -> None:
        with pytest.raises(BsonSerializationError):
            _encode(IntegerCodec(), 2**64)


# ===========================================================================
# Datetimes
# ===========================================================================


class TestDateTimeCodec:
    def test_epoch_is_zero(self) -> None:
        assert _encode(DateTimeCodec(), datetime(1970, 1, 1)) == BsonDateTime(0)

    def test_milliseconds_kept_microseconds_dropped(self) -> None:
        value = datetime(2024, 1, 2, 3, 4, 5, 678_901)
        result = _decode(DateTimeCodec(), _encode(DateTimeCodec(), value))
        assert result == value.replace(microsecond=678_000)

    def test_aware_value_converted_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2024, 1, 1, 12, 0, tzinfo=plus_two)
        assert _encode(DateTimeCodec(), value) == _encode(
            DateTimeCodec(), datetime(2024, 1, 1, 10, 0)
        )

    def test_before_epoch(self) -> None:
        value = datetime(1969, 12, 31, 23, 59, 59)
        assert _encode(DateTimeCodec(), value) == BsonDateTime(-1000)
        assert _decode(DateTimeCodec(), BsonDateTime(-1000)) == value

    def test_naive_by_default(self) -> None:
        assert _decode(DateTimeCodec(), BsonDateTime(0)).tzinfo is None

    def test_tz_aware_option(self) -> None:
        result = _roundtrip(datetime(2024, 5, 6), CodecOptions(tz_aware=True))
        assert result == datetime(2024, 5, 6, tzinfo=timezone.utc)

    def test_out_of_range_millis_raises(self) -> None:
        with pytest.raises(BsonSerializationError):
            _decode(DateTimeCodec(), BsonDateTime(2**62))

    def test_unconvertible_aware_value_raises(self) -> None:
        value = datetime.min.replace(tzinfo=timezone(timedelta(hours=1)))
        with pytest.raises(BsonSerializationError):
            _encode(DateTimeCodec(), value)


# ===========================================================================
# Regular expressions and code
# ===========================================================================


class TestRegexCodecs:
    def test_regex_options(self) -> None:
        codec = default_registry().get(Regex)
        assert _encode(codec, Regex("^a", "mi")) == BsonRegularExpression("^a", "im")

    def test_regex_roundtrip(self) -> None:
        result = _roundtrip(Regex("^a.*b$", "ix"))
        assert isinstance(result, Regex)
        assert result.pattern == "^a.*b$"
        assert result.flags == re.IGNORECASE | re.VERBOSE

    def test_compiled_pattern_decodes_as_regex(self) -> None:
        pattern = re.compile("^x", re.IGNORECASE | re.MULTILINE)
        codec = default_registry().get(re.Pattern)
        encoded = _encode(codec, pattern)
        assert encoded.pattern == "^x"  # type: ignore[attr-defined]
        assert "i" in encoded.options and "m" in encoded.options  # type: ignore[attr-defined]
        assert isinstance(_decode(codec, encoded), Regex)

    def test_non_utf8_bytes_pattern_raises(self) -> None:
        codec = default_registry().get(Regex)
        with pytest.raises(BsonSerializationError):
            _encode(codec, Regex(b"\xff", 0))

    def test_code_with_scope_rejected(self) -> None:
        codec = default_registry().get(Code)
        with pytest.raises(BsonSerializationError):
            _encode(codec, Code("f()", {"x": 1}))


# ===========================================================================
# UUIDs and transformers
# ===========================================================================


class TestUuid:
    def test_encoded_as_legacy_subtype(self) -> None:
        encoded = _encode(UUIDCodec(), _UUID)
        assert encoded == BsonBinary(3, _UUID.bytes)

    @pytest.mark.parametrize("representation", list(UUID_REPRESENTATIONS.values()))
    def test_bytes_roundtrip(self, representation: int) -> None:
        raw = uuid_to_bytes(_UUID, representation)
        assert len(raw) == 16
        assert uuid_from_bytes(raw, representation) == _UUID

    def test_java_legacy_byte_order(self) -> None:
        raw = uuid_to_bytes(_UUID, UuidRepresentation.JAVA_LEGACY)
        assert raw == bytes.fromhex("7766554433221100ffeeddccbbaa9988")

    def test_csharp_legacy_byte_order(self) -> None:
        raw = uuid_to_bytes(_UUID, UuidRepresentation.CSHARP_LEGACY)
        assert raw == bytes.fromhex("33221100554477668899aabbccddeeff")

    def test_wrong_length_rejected(self) -> None:
        with pytest.raises(BsonSerializationError):
            uuid_from_bytes(b"\x00" * 15, UuidRepresentation.PYTHON_LEGACY)

    def test_decode_wrong_subtype_rejected(self) -> None:
        with pytest.raises(BsonSerializationError):
            _decode(UUIDCodec(), BsonBinary(0, _UUID.bytes))

    def test_uuid_transformer(self) -> None:
        transformer = BinaryToUUIDTransformer(UuidRepresentation.JAVA_LEGACY)
        raw = uuid_to_bytes(_UUID, UuidRepresentation.JAVA_LEGACY)
        assert transformer.transform(BsonBinary(3, raw)) == _UUID

    def test_bytes_transformer(self) -> None:
        assert BinaryToBytesTransformer().transform(BsonBinary(0, b"ab")) == b"ab"

    @pytest.mark.parametrize("representation", list(UUID_REPRESENTATIONS.values()))
    def test_matches_pymongo_legacy_binary(self, representation: int) -> None:
        expected = PyMongoBinary.from_uuid(_UUID, representation)
        assert expected.subtype == 3
        assert uuid_to_bytes(_UUID, representation) == bytes(expected)

    @pytest.mark.parametrize(
        "representation", [UuidRepresentation.STANDARD, UuidRepresentation.UNSPECIFIED]
    )
    def test_non_legacy_representation_rejected(self, representation: int) -> None:
        with pytest.raises(BsonSerializationError):
            uuid_to_bytes(_UUID, representation)
        with pytest.raises(BsonSerializationError):
            uuid_from_bytes(_UUID.bytes, representation)


# ===========================================================================
# BsonTypeClassMap
# ===========================================================================


class TestBsonTypeClassMap:
    @pytest.mark.parametrize(
        ("bson_type", "python_type"),
        [
            (BsonType.DOUBLE, float),
            (BsonType.STRING, str),
            (BsonType.OBJECT_ID, ObjectId),
            (BsonType.BOOLEAN, bool),
            (BsonType.DATE_TIME, datetime),
            (BsonType.REGULAR_EXPRESSION, Regex),
            (BsonType.JAVASCRIPT, Code),
            (BsonType.SYMBOL, Symbol),
            (BsonType.INT32, int),
            (BsonType.TIMESTAMP, Timestamp),
            (BsonType.INT64, Int64),
            (BsonType.DECIMAL128, Decimal128),
            (BsonType.MIN_KEY, MinKey),
            (BsonType.MAX_KEY, MaxKey),
            (BsonType.UNDEFINED, BsonUndefined),
        ],
    )
    def test_defaults(self, bson_type: BsonType, python_type: type) -> None:
        assert BsonTypeClassMap().get(bson_type) is python_type

    def test_override(self) -> None:
        type_map = BsonTypeClassMap({BsonType.INT64: int})
        assert type_map.get(BsonType.INT64) is int
        assert type_map.get(BsonType.INT32) is int

    def test_unmapped_type_raises_codec_not_found(self) -> None:
        with pytest.raises(CodecNotFoundError) as excinfo:
            BsonTypeClassMap().get(BsonType.END_OF_DOCUMENT)
        assert isinstance(excinfo.value, UnmappedBsonTypeError)
        assert "END_OF_DOCUMENT" in str(excinfo.value)

    def test_override_keys_must_be_bson_types(self) -> None:
        with pytest.raises(TypeError):
            BsonTypeClassMap({"INT32": int})  # type: ignore[dict-item]

    def test_contains(self) -> None:
        type_map = BsonTypeClassMap()
        assert BsonType.STRING in type_map
        assert BsonType.DOCUMENT not in type_map
