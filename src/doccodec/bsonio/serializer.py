"""Extended-JSON style serialization of ``BsonDocument`` trees.

Converts a structured BSON tree to and from a plain dict/list structure
that maps naturally to both JSON and YAML.  Every non-trivial leaf is
written in its canonical Extended JSON v2 form (``{"$numberInt": "1"}``,
``{"$oid": "..."}`` and so on) so that the declared type of each value
survives the trip.  The canonical leaf wrappers (numbers, binary,
ObjectId, dates, timestamps, decimals, min/max keys) are parsed by
``bson.json_util``, which also writes all of them except 32-bit integers
and doubles.  Code, symbols, regular expressions,
DB pointers and undefined are handled here so that no detail of the
tree is lost.

Usage
-----
::

    from doccodec.bsonio.serializer import BsonTreeSerializer

    serializer = BsonTreeSerializer()
    data = serializer.to_dict(tree)
    json_text = serializer.to_json(tree)
    tree2 = serializer.from_json(json_text)
    assert tree == tree2
"""
from __future__ import annotations

import json
import math
from collections.abc import Mapping

import yaml
from bson import json_util
from bson.binary import Binary as PyMongoBinary
from bson.binary import UuidRepresentation
from bson.codec_options import DatetimeConversion
from bson.datetime_ms import DatetimeMS
from bson.errors import BSONError
from bson.int64 import Int64
from bson.max_key import MaxKey
from bson.min_key import MinKey
from bson.objectid import ObjectId
from bson.timestamp import Timestamp

from doccodec.bsonio.errors import BsonSerializationError
from doccodec.bsonio.values import (
    BsonArray,
    BsonBinary,
    BsonBoolean,
    BsonDateTime,
    BsonDbPointer,
    BsonDecimal128,
    BsonDocument,
    BsonDouble,
    BsonInt32,
    BsonInt64,
    BsonJavaScript,
    BsonJavaScriptWithScope,
    BsonMaxKey,
    BsonMinKey,
    BsonNull,
    BsonObjectId,
    BsonRegularExpression,
    BsonString,
    BsonSymbol,
    BsonTimestamp,
    BsonUndefined,
    BsonValue,
)

# Binary payloads stay opaque (no UUID decoding) and dates stay in
# milliseconds so out-of-range values survive.
_JSON_OPTIONS = json_util.CANONICAL_JSON_OPTIONS.with_options(
    datetime_conversion=DatetimeConversion.DATETIME_MS,
    uuid_representation=UuidRepresentation.UNSPECIFIED,
)

# Canonical leaf wrappers parsed and written by bson.json_util.
_JSON_UTIL_WRAPPERS = frozenset(
    {
        "$numberInt",
        "$numberLong",
        "$numberDouble",
        "$binary",
        "$oid",
        "$date",
        "$timestamp",
        "$numberDecimal",
        "$minKey",
        "$maxKey",
    }
)


class BsonTreeSerializer:
    """Converts between ``BsonDocument`` trees and plain Python structures.

    Strings, booleans and null are written as their JSON natives; every
    other leaf uses a single-key ``"$"`` wrapper.  On the way back in, a
    dict is treated as a wrapper only when its keys match one of the
    known shapes exactly, so ordinary documents whose field names happen
    to start with ``$`` are preserved.
    """

    # ------------------------------------------------------------------
    # Serialization (tree -> dict)
    # ------------------------------------------------------------------

    def to_dict(self, document: BsonDocument) -> dict[str, object]:
        """Serialize a ``BsonDocument`` to a JSON-compatible dict."""
        return {name: self._value_to_plain(value) for name, value in document.items()}

    def _value_to_plain(self, value: BsonValue) -> object:
        if isinstance(value, BsonDocument):
            return self.to_dict(value)
        if isinstance(value, BsonArray):
            return [self._value_to_plain(v) for v in value]
        if isinstance(value, BsonString):
            return value.value
        if isinstance(value, BsonBoolean):
            return value.value
        if isinstance(value, BsonNull):
            return None
        if isinstance(value, BsonInt32):
            return {"$numberInt": str(value.value)}
        if isinstance(value, BsonDouble):
            return {"$numberDouble": _double_to_text(value.value)}
        if isinstance(value, BsonRegularExpression):
            return {"$regularExpression": {"pattern": value.pattern, "options": value.options}}
        if isinstance(value, BsonDbPointer):
            return {"$dbPointer": {"$ref": value.namespace, "$id": {"$oid": str(value.id)}}}
        if isinstance(value, BsonJavaScript):
            return {"$code": value.code}
        if isinstance(value, BsonJavaScriptWithScope):
            return {"$code": value.code, "$scope": self.to_dict(value.scope)}
        if isinstance(value, BsonSymbol):
            return {"$symbol": value.symbol}
        if isinstance(value, BsonUndefined):
            return {"$undefined": True}
        leaf = _to_json_util_leaf(value)
        if leaf is None:
            raise TypeError(f"Unknown BSON value type: {type(value)}")
        return _plain(json_util.default(leaf, json_options=_JSON_OPTIONS))

    # ------------------------------------------------------------------
    # Deserialization (dict -> tree)
    # ------------------------------------------------------------------

    def from_dict(self, data: dict[str, object]) -> BsonDocument:
        """Deserialize a ``BsonDocument`` from a plain dict."""
        if not isinstance(data, dict):
            raise BsonSerializationError(
                f"Expected a mapping at the document root, got {type(data).__name__}"
            )
        return BsonDocument((str(k), self._value_from_plain(v)) for k, v in data.items())

    def _value_from_plain(self, data: object) -> BsonValue:
        if data is None:
            return BsonNull()
        if isinstance(data, bool):
            return BsonBoolean(data)
        if isinstance(data, str):
            return BsonString(data)
        if isinstance(data, int):
            # Bare integers only appear in hand-written input.
            if -(2**31) <= data < 2**31:
                return BsonInt32(data)
            return BsonInt64(data)
        if isinstance(data, float):
            return BsonDouble(data)
        if isinstance(data, list):
            return BsonArray(self._value_from_plain(v) for v in data)
        if isinstance(data, dict):
            wrapped = self._wrapper_from_dict(data)
            if wrapped is not None:
                return wrapped
            return self.from_dict(data)
        raise BsonSerializationError(f"Unsupported value in serialized tree: {data!r}")

    def _wrapper_from_dict(self, d: dict[str, object]) -> BsonValue | None:
        keys = set(d)
        try:
            if len(keys) == 1 and keys <= _JSON_UTIL_WRAPPERS:
                return _leaf_from_json_util(d)
            if keys == {"$regularExpression"}:
                inner = d["$regularExpression"]
                return BsonRegularExpression(inner["pattern"], inner.get("options", ""))  # type: ignore[index, union-attr]
            if keys == {"$dbPointer"}:
                inner = d["$dbPointer"]
                return BsonDbPointer(inner["$ref"], ObjectId(inner["$id"]["$oid"]))  # type: ignore[index]
            if keys == {"$code"}:
                return BsonJavaScript(d["$code"])  # type: ignore[arg-type]
            if keys == {"$code", "$scope"}:
                return BsonJavaScriptWithScope(d["$code"], self.from_dict(d["$scope"]))  # type: ignore[arg-type]
            if keys == {"$symbol"}:
                return BsonSymbol(d["$symbol"])  # type: ignore[arg-type]
            if keys == {"$undefined"}:
                return BsonUndefined()
        except (KeyError, TypeError, ValueError, ArithmeticError, BSONError) as exc:
            raise BsonSerializationError(f"Malformed extended JSON value {d!r}: {exc}") from exc
        return None

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, document: BsonDocument, indent: int = 2) -> str:
        """Serialize a ``BsonDocument`` to a JSON string."""
        return json.dumps(self.to_dict(document), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> BsonDocument:
        """Deserialize a ``BsonDocument`` from a JSON string."""
        data: dict[str, object] = json.loads(text)
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, document: BsonDocument) -> str:
        """Serialize a ``BsonDocument`` to a YAML string."""
        return yaml.dump(
            self.to_dict(document), default_flow_style=False, allow_unicode=True, sort_keys=False
        )

    def from_yaml(self, text: str) -> BsonDocument:
        """Deserialize a ``BsonDocument`` from a YAML string."""
        data: dict[str, object] = yaml.safe_load(text)
        return self.from_dict(data)


def _double_to_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return repr(value)


def _plain(value: object) -> object:
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    return value


def _to_json_util_leaf(value: BsonValue) -> object | None:
    if isinstance(value, BsonInt64):
        return Int64(value.value)
    if isinstance(value, BsonBinary):
        return PyMongoBinary(bytes(value.data), value.subtype)
    if isinstance(value, BsonObjectId):
        return value.value
    if isinstance(value, BsonDateTime):
        return DatetimeMS(value.value)
    if isinstance(value, BsonTimestamp):
        return Timestamp(value.time, value.inc)
    if isinstance(value, BsonDecimal128):
        return value.value
    if isinstance(value, BsonMinKey):
        return MinKey()
    if isinstance(value, BsonMaxKey):
        return MaxKey()
    return None


def _leaf_from_json_util(d: dict[str, object]) -> BsonValue:
    # json.loads applies object_hook innermost first; do the same for the
    # one level of nesting a canonical leaf can have ($date).
    key, inner = next(iter(d.items()))
    if isinstance(inner, dict):
        inner = json_util.object_hook(inner, json_options=_JSON_OPTIONS)
    value = json_util.object_hook({key: inner}, json_options=_JSON_OPTIONS)

    if key == "$numberInt":
        return BsonInt32(int(value))
    if key == "$numberLong":
        return BsonInt64(int(value))
    if key == "$numberDouble":
        return BsonDouble(float(value))
    if key == "$binary":
        if isinstance(value, PyMongoBinary):
            return BsonBinary(value.subtype, bytes(value))
        return BsonBinary(0, bytes(value))
    if key == "$oid":
        return BsonObjectId(value)
    if key == "$date":
        return BsonDateTime(int(value))
    if key == "$timestamp":
        return BsonTimestamp(value.time, value.inc)
    if key == "$numberDecimal":
        return BsonDecimal128(value)
    if key == "$minKey":
        return BsonMinKey()
    return BsonMaxKey()
