"""BSON element type and binary subtype enumerations.

``BsonType`` values are the element type bytes from the BSON format so
that a type can be round-tripped through its numeric tag.  Only
``DOCUMENT`` and ``ARRAY`` are containers; every other type is a leaf.
"""
from __future__ import annotations

from enum import Enum, IntEnum


class BsonType(Enum):
    """Exhaustive enumeration of BSON element types."""

    END_OF_DOCUMENT = 0x00
    DOUBLE = 0x01
    STRING = 0x02
    DOCUMENT = 0x03
    ARRAY = 0x04
    BINARY = 0x05
    UNDEFINED = 0x06
    OBJECT_ID = 0x07
    BOOLEAN = 0x08
    DATE_TIME = 0x09
    NULL = 0x0A
    REGULAR_EXPRESSION = 0x0B
    DB_POINTER = 0x0C
    JAVASCRIPT = 0x0D
    SYMBOL = 0x0E
    JAVASCRIPT_WITH_SCOPE = 0x0F
    INT32 = 0x10
    TIMESTAMP = 0x11
    INT64 = 0x12
    DECIMAL128 = 0x13
    MIN_KEY = 0xFF
    MAX_KEY = 0x7F

    @property
    def is_container(self) -> bool:
        """Return True for types that open a nested context."""
        return self in (BsonType.DOCUMENT, BsonType.ARRAY)


class BsonBinarySubType(IntEnum):
    """Binary payload subtypes."""

    BINARY = 0x00
    FUNCTION = 0x01
    OLD_BINARY = 0x02
    UUID_LEGACY = 0x03
    UUID_STANDARD = 0x04
    MD5 = 0x05
    USER_DEFINED = 0x80
