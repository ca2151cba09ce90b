"""Structured BSON value tree.

Every value written by a ``BsonDocumentWriter`` or read by a
``BsonDocumentReader`` is an instance of one of the classes below.
Leaf values are frozen dataclasses; the two containers, ``BsonDocument``
and ``BsonArray``, are ordinary mutable ``dict``/``list`` subclasses so
that a tree can be built up incrementally.

Each class carries a class-level ``bson_type`` so that readers can
report the declared type of the current element without an
``isinstance`` chain.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from bson.decimal128 import Decimal128
from bson.objectid import ObjectId

from doccodec.bsonio.types import BsonType


class BsonValue:
    """Marker base class for the structured BSON value tree."""

    __slots__ = ()

    bson_type: ClassVar[BsonType]


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


class BsonDocument(dict, BsonValue):
    """Ordered mapping of field name to ``BsonValue``."""

    bson_type: ClassVar[BsonType] = BsonType.DOCUMENT

    def __repr__(self) -> str:
        return f"BsonDocument({dict.__repr__(self)})"


class BsonArray(list, BsonValue):
    """Ordered sequence of ``BsonValue``."""

    bson_type: ClassVar[BsonType] = BsonType.ARRAY

    def __repr__(self) -> str:
        return f"BsonArray({list.__repr__(self)})"


# ---------------------------------------------------------------------------
# Leaf values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BsonDouble(BsonValue):
    value: float

    bson_type: ClassVar[BsonType] = BsonType.DOUBLE


@dataclass(frozen=True, slots=True)
class BsonString(BsonValue):
    value: str

    bson_type: ClassVar[BsonType] = BsonType.STRING


@dataclass(frozen=True, slots=True)
class BsonBinary(BsonValue):
    """Raw bytes tagged with a one-byte subtype.

    Parameters
    ----------
    subtype:
        The binary subtype, see ``BsonBinarySubType``.
    data:
        The payload bytes.
    """

    subtype: int
    data: bytes

    bson_type: ClassVar[BsonType] = BsonType.BINARY


@dataclass(frozen=True, slots=True)
class BsonUndefined(BsonValue):
    bson_type: ClassVar[BsonType] = BsonType.UNDEFINED


@dataclass(frozen=True, slots=True)
class BsonObjectId(BsonValue):
    value: ObjectId

    bson_type: ClassVar[BsonType] = BsonType.OBJECT_ID


@dataclass(frozen=True, slots=True)
class BsonBoolean(BsonValue):
    value: bool

    bson_type: ClassVar[BsonType] = BsonType.BOOLEAN


@dataclass(frozen=True, slots=True)
class BsonDateTime(BsonValue):
    """UTC datetime as signed milliseconds since the Unix epoch."""

    value: int

    bson_type: ClassVar[BsonType] = BsonType.DATE_TIME


@dataclass(frozen=True, slots=True)
class BsonNull(BsonValue):
    bson_type: ClassVar[BsonType] = BsonType.NULL


@dataclass(frozen=True, slots=True)
class BsonRegularExpression(BsonValue):
    """Regular expression pattern with its option letters (e.g. ``"im"``)."""

    pattern: str
    options: str = ""

    bson_type: ClassVar[BsonType] = BsonType.REGULAR_EXPRESSION


@dataclass(frozen=True, slots=True)
class BsonDbPointer(BsonValue):
    """Deprecated cross-reference pointer: a namespace plus an ObjectId."""

    namespace: str
    id: ObjectId

    bson_type: ClassVar[BsonType] = BsonType.DB_POINTER


@dataclass(frozen=True, slots=True)
class BsonJavaScript(BsonValue):
    code: str

    bson_type: ClassVar[BsonType] = BsonType.JAVASCRIPT


@dataclass(frozen=True, slots=True)
class BsonSymbol(BsonValue):
    symbol: str

    bson_type: ClassVar[BsonType] = BsonType.SYMBOL


@dataclass(frozen=True, slots=True)
class BsonJavaScriptWithScope(BsonValue):
    """JavaScript code paired with a scope document of variable bindings."""

    code: str
    scope: BsonDocument

    bson_type: ClassVar[BsonType] = BsonType.JAVASCRIPT_WITH_SCOPE


@dataclass(frozen=True, slots=True)
class BsonInt32(BsonValue):
    value: int

    bson_type: ClassVar[BsonType] = BsonType.INT32


@dataclass(frozen=True, slots=True)
class BsonTimestamp(BsonValue):
    """Internal replication timestamp: seconds plus an ordinal."""

    time: int
    inc: int

    bson_type: ClassVar[BsonType] = BsonType.TIMESTAMP


@dataclass(frozen=True, slots=True)
class BsonInt64(BsonValue):
    value: int

    bson_type: ClassVar[BsonType] = BsonType.INT64


@dataclass(frozen=True, slots=True)
class BsonDecimal128(BsonValue):
    value: Decimal128

    bson_type: ClassVar[BsonType] = BsonType.DECIMAL128


@dataclass(frozen=True, slots=True)
class BsonMinKey(BsonValue):
    bson_type: ClassVar[BsonType] = BsonType.MIN_KEY


@dataclass(frozen=True, slots=True)
class BsonMaxKey(BsonValue):
    bson_type: ClassVar[BsonType] = BsonType.MAX_KEY
