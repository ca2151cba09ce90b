"""Declared BSON type to Python class mapping.

The document codec consults this map to decide which scalar codec reads
a value: ``registry.get(type_map.get(bson_type))``.  Container types and
the special kinds the document codec handles itself (documents, arrays,
binary, code with scope, DB pointers, null) are resolved before the map
is consulted.
"""
from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from bson.code import Code
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.max_key import MaxKey
from bson.min_key import MinKey
from bson.objectid import ObjectId
from bson.regex import Regex
from bson.timestamp import Timestamp

from doccodec.bsonio.types import BsonType
from doccodec.bsonio.values import BsonUndefined
from doccodec.codecs.registry import CodecNotFoundError
from doccodec.model.special import Binary, Symbol

_DEFAULTS: dict[BsonType, type] = {
    BsonType.DOUBLE: float,
    BsonType.STRING: str,
    BsonType.BINARY: Binary,
    BsonType.UNDEFINED: BsonUndefined,
    BsonType.OBJECT_ID: ObjectId,
    BsonType.BOOLEAN: bool,
    BsonType.DATE_TIME: datetime,
    BsonType.REGULAR_EXPRESSION: Regex,
    BsonType.JAVASCRIPT: Code,
    BsonType.SYMBOL: Symbol,
    BsonType.INT32: int,
    BsonType.TIMESTAMP: Timestamp,
    BsonType.INT64: Int64,
    BsonType.DECIMAL128: Decimal128,
    BsonType.MIN_KEY: MinKey,
    BsonType.MAX_KEY: MaxKey,
}


class UnmappedBsonTypeError(CodecNotFoundError):
    """Raised when a BSON type has no Python class in the type map."""

    def __init__(self, bson_type: BsonType) -> None:
        self.bson_type = bson_type
        self.python_type = None  # type: ignore[assignment]
        self.registry_name = "type-map"
        KeyError.__init__(self, f"No Python class is mapped to BSON type {bson_type.name}")


class BsonTypeClassMap:
    """Maps each declared BSON type to the Python class used to decode it.

    Parameters
    ----------
    overrides:
        Entries that replace (or extend) the defaults.
    """

    def __init__(self, overrides: Mapping[BsonType, type] | None = None) -> None:
        self._map: dict[BsonType, type] = dict(_DEFAULTS)
        if overrides:
            for bson_type, python_type in overrides.items():
                if not isinstance(bson_type, BsonType):
                    raise TypeError(f"Type map keys must be BsonType members, got {bson_type!r}")
                self._map[bson_type] = python_type

    def get(self, bson_type: BsonType) -> type:
        """Return the class mapped to ``bson_type``.

        Raises
        ------
        UnmappedBsonTypeError
            If nothing is mapped (a ``CodecNotFoundError`` subclass).
        """
        try:
            return self._map[bson_type]
        except KeyError:
            raise UnmappedBsonTypeError(bson_type) from None

    def keys(self) -> list[BsonType]:
        return list(self._map)

    def __contains__(self, bson_type: object) -> bool:
        return bson_type in self._map

    def __len__(self) -> int:
        return len(self._map)

    def __repr__(self) -> str:
        return f"BsonTypeClassMap({len(self._map)} entries)"
