"""Built-in scalar codecs.

One codec per leaf Python type.  ``default_registry`` returns a
``CodecRegistry`` populated with all of them; the ``DocumentCodec``
uses it unless a caller supplies a registry of their own.

Integers are written as INT32 when they fit and INT64 otherwise.
``bson.int64.Int64`` always writes INT64 and is what INT64 values
decode to, so a 64-bit field keeps its width across a round trip.
"""
from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta, timezone

from bson.binary import UuidRepresentation
from bson.code import Code
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.max_key import MaxKey
from bson.min_key import MinKey
from bson.objectid import ObjectId
from bson.regex import Regex
from bson.timestamp import Timestamp

from doccodec.bsonio.errors import BsonSerializationError
from doccodec.bsonio.reader import BsonReader
from doccodec.bsonio.types import BsonBinarySubType
from doccodec.bsonio.values import BsonBinary, BsonRegularExpression, BsonTimestamp, BsonValue
from doccodec.bsonio.writer import INT32_MAX, INT32_MIN, BsonWriter
from doccodec.codecs.base import Codec
from doccodec.codecs.registry import CodecRegistry
from doccodec.codecs.transformers import uuid_from_bytes, uuid_to_bytes
from doccodec.config import CodecOptions
from doccodec.model.special import Binary, Symbol

_EPOCH = datetime(1970, 1, 1)

# Order matters: options are always emitted alphabetically.
_REGEX_FLAGS: tuple[tuple[int, str], ...] = (
    (re.IGNORECASE, "i"),
    (re.LOCALE, "l"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.UNICODE, "u"),
    (re.VERBOSE, "x"),
)


# ---------------------------------------------------------------------------
# Text, numbers, booleans
# ---------------------------------------------------------------------------


class StringCodec(Codec[str]):
    encoder_class = str

    def encode(self, writer: BsonWriter, value: str) -> None:
        writer.write_string(str(value))

    def decode(self, reader: BsonReader) -> str:
        return reader.read_string()


class BooleanCodec(Codec[bool]):
    encoder_class = bool

    def encode(self, writer: BsonWriter, value: bool) -> None:
        writer.write_boolean(value)

    def decode(self, reader: BsonReader) -> bool:
        return reader.read_boolean()


class IntegerCodec(Codec[int]):
    """Writes the narrowest integer type that holds the value."""

    encoder_class = int

    def encode(self, writer: BsonWriter, value: int) -> None:
        if INT32_MIN <= value <= INT32_MAX:
            writer.write_int32(int(value))
        else:
            writer.write_int64(int(value))

    def decode(self, reader: BsonReader) -> int:
        return reader.read_int32()


class Int64Codec(Codec[Int64]):
    encoder_class = Int64

    def encode(self, writer: BsonWriter, value: Int64) -> None:
        writer.write_int64(int(value))

    def decode(self, reader: BsonReader) -> Int64:
        return Int64(reader.read_int64())


class DoubleCodec(Codec[float]):
    encoder_class = float

    def encode(self, writer: BsonWriter, value: float) -> None:
        writer.write_double(float(value))

    def decode(self, reader: BsonReader) -> float:
        return reader.read_double()


class Decimal128Codec(Codec[Decimal128]):
    encoder_class = Decimal128

    def encode(self, writer: BsonWriter, value: Decimal128) -> None:
        writer.write_decimal128(value)

    def decode(self, reader: BsonReader) -> Decimal128:
        return reader.read_decimal128()


# ---------------------------------------------------------------------------
# Dates, identifiers, timestamps
# ---------------------------------------------------------------------------


class DateTimeCodec(Codec[datetime]):
    """Millisecond-precision UTC datetimes.

    Naive datetimes are taken to be UTC already.  Aware datetimes are
    converted to UTC before encoding.
    """

    encoder_class = datetime

    def __init__(self, tz_aware: bool = False) -> None:
        self._tz_aware = tz_aware

    def encode(self, writer: BsonWriter, value: datetime) -> None:
        try:
            if value.tzinfo is not None and value.utcoffset() is not None:
                value = value.replace(tzinfo=None) - value.utcoffset()  # type: ignore[operator]
        except OverflowError as exc:
            raise BsonSerializationError(f"Cannot convert {value!r} to UTC: {exc}") from exc
        delta = value - _EPOCH
        millis = (delta.days * 86_400 + delta.seconds) * 1_000 + delta.microseconds // 1_000
        writer.write_date_time(millis)

    def decode(self, reader: BsonReader) -> datetime:
        millis = reader.read_date_time()
        try:
            value = _EPOCH + timedelta(milliseconds=millis)
        except OverflowError as exc:
            raise BsonSerializationError(
                f"Date value {millis} ms is outside the supported datetime range"
            ) from exc
        if self._tz_aware:
            return value.replace(tzinfo=timezone.utc)
        return value


class ObjectIdCodec(Codec[ObjectId]):
    encoder_class = ObjectId

    def encode(self, writer: BsonWriter, value: ObjectId) -> None:
        writer.write_object_id(value)

    def decode(self, reader: BsonReader) -> ObjectId:
        return reader.read_object_id()


class TimestampCodec(Codec[Timestamp]):
    encoder_class = Timestamp

    def encode(self, writer: BsonWriter, value: Timestamp) -> None:
        writer.write_timestamp(BsonTimestamp(value.time, value.inc))

    def decode(self, reader: BsonReader) -> Timestamp:
        ts = reader.read_timestamp()
        return Timestamp(ts.time, ts.inc)


# ---------------------------------------------------------------------------
# Regular expressions and code
# ---------------------------------------------------------------------------


def _flags_to_options(flags: int) -> str:
    return "".join(letter for flag, letter in _REGEX_FLAGS if flags & flag)


def _regex_pattern_text(pattern: str | bytes) -> str:
    if isinstance(pattern, bytes):
        try:
            return pattern.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BsonSerializationError(f"Regular expression pattern is not UTF-8: {exc}") from exc
    return pattern


class RegexCodec(Codec[Regex]):
    encoder_class = Regex

    def encode(self, writer: BsonWriter, value: Regex) -> None:
        writer.write_regular_expression(
            BsonRegularExpression(_regex_pattern_text(value.pattern), _flags_to_options(value.flags))
        )

    def decode(self, reader: BsonReader) -> Regex:
        regex = reader.read_regular_expression()
        return Regex(regex.pattern, regex.options)


class PatternCodec(Codec[re.Pattern]):
    """Compiled patterns encode as regular expressions and decode as ``Regex``."""

    encoder_class = re.Pattern

    def encode(self, writer: BsonWriter, value: re.Pattern) -> None:
        writer.write_regular_expression(
            BsonRegularExpression(_regex_pattern_text(value.pattern), _flags_to_options(value.flags))
        )

    def decode(self, reader: BsonReader) -> Regex:  # type: ignore[override]
        regex = reader.read_regular_expression()
        return Regex(regex.pattern, regex.options)


class CodeCodec(Codec[Code]):
    """JavaScript code without a scope.

    Code with a scope must be wrapped in ``CodeWScope`` so that the
    document codec can encode the scope's values.
    """

    encoder_class = Code

    def encode(self, writer: BsonWriter, value: Code) -> None:
        if value.scope is not None:
            raise BsonSerializationError("Code with a scope must be passed as CodeWScope")
        writer.write_javascript(str(value))

    def decode(self, reader: BsonReader) -> Code:
        return Code(reader.read_javascript())


class SymbolCodec(Codec[Symbol]):
    encoder_class = Symbol

    def encode(self, writer: BsonWriter, value: Symbol) -> None:
        writer.write_symbol(value.symbol)

    def decode(self, reader: BsonReader) -> Symbol:
        return Symbol(reader.read_symbol())


# ---------------------------------------------------------------------------
# Binary payloads
# ---------------------------------------------------------------------------


class BinaryCodec(Codec[Binary]):
    encoder_class = Binary

    def encode(self, writer: BsonWriter, value: Binary) -> None:
        writer.write_binary_data(BsonBinary(value.subtype, bytes(value.data)))

    def decode(self, reader: BsonReader) -> Binary:
        binary = reader.read_binary_data()
        return Binary(binary.subtype, binary.data)


class UUIDCodec(Codec[uuid.UUID]):
    """UUIDs as legacy (subtype 0x03) binary in the configured byte order."""

    encoder_class = uuid.UUID

    def __init__(self, representation: int = UuidRepresentation.PYTHON_LEGACY) -> None:
        self._representation = representation

    def encode(self, writer: BsonWriter, value: uuid.UUID) -> None:
        writer.write_binary_data(
            BsonBinary(BsonBinarySubType.UUID_LEGACY, uuid_to_bytes(value, self._representation))
        )

    def decode(self, reader: BsonReader) -> uuid.UUID:
        binary = reader.read_binary_data()
        if binary.subtype != BsonBinarySubType.UUID_LEGACY:
            raise BsonSerializationError(
                f"Expected binary subtype {BsonBinarySubType.UUID_LEGACY:#04x} for a UUID, "
                f"got {binary.subtype:#04x}"
            )
        return uuid_from_bytes(binary.data, self._representation)


# ---------------------------------------------------------------------------
# Sentinels and pass-through
# ---------------------------------------------------------------------------


class MinKeyCodec(Codec[MinKey]):
    encoder_class = MinKey

    def encode(self, writer: BsonWriter, value: MinKey) -> None:
        writer.write_min_key()

    def decode(self, reader: BsonReader) -> MinKey:
        reader.read_min_key()
        return MinKey()


class MaxKeyCodec(Codec[MaxKey]):
    encoder_class = MaxKey

    def encode(self, writer: BsonWriter, value: MaxKey) -> None:
        writer.write_max_key()

    def decode(self, reader: BsonReader) -> MaxKey:
        reader.read_max_key()
        return MaxKey()


class BsonValueCodec(Codec[BsonValue]):
    """Writes and reads structured ``BsonValue`` instances unchanged."""

    encoder_class = BsonValue

    def encode(self, writer: BsonWriter, value: BsonValue) -> None:
        writer.write_bson_value(value)

    def decode(self, reader: BsonReader) -> BsonValue:
        return reader.read_bson_value()


# ---------------------------------------------------------------------------
# Default registry
# ---------------------------------------------------------------------------


def default_registry(options: CodecOptions | None = None) -> CodecRegistry:
    """Return a registry populated with every built-in scalar codec.

    Parameters
    ----------
    options:
        Options for the codecs that take them (UUID byte order,
        timezone-aware datetimes).  Defaults to ``CodecOptions()``.
    """
    options = options or CodecOptions()
    registry = CodecRegistry("default")
    for codec in (
        StringCodec(),
        BooleanCodec(),
        IntegerCodec(),
        Int64Codec(),
        DoubleCodec(),
        Decimal128Codec(),
        DateTimeCodec(tz_aware=options.tz_aware),
        ObjectIdCodec(),
        TimestampCodec(),
        RegexCodec(),
        PatternCodec(),
        CodeCodec(),
        SymbolCodec(),
        BinaryCodec(),
        UUIDCodec(options.uuid_representation),
        MinKeyCodec(),
        MaxKeyCodec(),
        BsonValueCodec(),
    ):
        registry.register(codec)
    return registry
