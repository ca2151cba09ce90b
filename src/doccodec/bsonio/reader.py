"""Token-level BSON reader interface and a tree-backed implementation.

The reading protocol mirrors the writer.  Inside a document the caller
loops on ``read_bson_type()`` until it returns ``END_OF_DOCUMENT``,
calling ``read_name()`` and then exactly one typed read (or a nested
``read_start_document`` / ``read_start_array``) per element.  Arrays
use the same loop without ``read_name()``.

``read_javascript_with_scope`` returns the code and leaves the reader
positioned on the scope, which is then read as an ordinary document.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from bson.decimal128 import Decimal128
from bson.objectid import ObjectId

from doccodec.bsonio.errors import BsonInvalidOperationError, BsonSerializationError
from doccodec.bsonio.types import BsonType
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


class BsonReader(ABC):
    """Abstract token-oriented BSON reader."""

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def current_bson_type(self) -> BsonType:
        """Declared type of the element the reader is positioned on."""

    @abstractmethod
    def read_bson_type(self) -> BsonType:
        """Advance to the next element and return its declared type.

        Returns ``BsonType.END_OF_DOCUMENT`` when the enclosing document
        or array has no more elements.
        """

    @abstractmethod
    def read_name(self) -> str: ...

    @abstractmethod
    def read_start_document(self) -> None: ...

    @abstractmethod
    def read_end_document(self) -> None: ...

    @abstractmethod
    def read_start_array(self) -> None: ...

    @abstractmethod
    def read_end_array(self) -> None: ...

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def read_double(self) -> float: ...

    @abstractmethod
    def read_string(self) -> str: ...

    @abstractmethod
    def read_binary_data(self) -> BsonBinary: ...

    @abstractmethod
    def read_undefined(self) -> None: ...

    @abstractmethod
    def read_object_id(self) -> ObjectId: ...

    @abstractmethod
    def read_boolean(self) -> bool: ...

    @abstractmethod
    def read_date_time(self) -> int: ...

    @abstractmethod
    def read_null(self) -> None: ...

    @abstractmethod
    def read_regular_expression(self) -> BsonRegularExpression: ...

    @abstractmethod
    def read_db_pointer(self) -> BsonDbPointer: ...

    @abstractmethod
    def read_javascript(self) -> str: ...

    @abstractmethod
    def read_symbol(self) -> str: ...

    @abstractmethod
    def read_javascript_with_scope(self) -> str: ...

    @abstractmethod
    def read_int32(self) -> int: ...

    @abstractmethod
    def read_timestamp(self) -> BsonTimestamp: ...

    @abstractmethod
    def read_int64(self) -> int: ...

    @abstractmethod
    def read_decimal128(self) -> Decimal128: ...

    @abstractmethod
    def read_min_key(self) -> None: ...

    @abstractmethod
    def read_max_key(self) -> None: ...

    # ------------------------------------------------------------------
    # Structured values
    # ------------------------------------------------------------------

    def read_bson_value(self) -> BsonValue:
        """Read the current element as a ``BsonValue``, recursing into containers."""
        bson_type = self.current_bson_type
        if bson_type is BsonType.DOCUMENT:
            document = BsonDocument()
            self.read_start_document()
            while self.read_bson_type() is not BsonType.END_OF_DOCUMENT:
                name = self.read_name()
                document[name] = self.read_bson_value()
            self.read_end_document()
            return document
        if bson_type is BsonType.ARRAY:
            array = BsonArray()
            self.read_start_array()
            while self.read_bson_type() is not BsonType.END_OF_DOCUMENT:
                array.append(self.read_bson_value())
            self.read_end_array()
            return array
        if bson_type is BsonType.JAVASCRIPT_WITH_SCOPE:
            code = self.read_javascript_with_scope()
            scope = self.read_bson_value()
            return BsonJavaScriptWithScope(code, scope)  # type: ignore[arg-type]
        if bson_type is BsonType.DOUBLE:
            return BsonDouble(self.read_double())
        if bson_type is BsonType.STRING:
            return BsonString(self.read_string())
        if bson_type is BsonType.BINARY:
            return self.read_binary_data()
        if bson_type is BsonType.UNDEFINED:
            self.read_undefined()
            return BsonUndefined()
        if bson_type is BsonType.OBJECT_ID:
            return BsonObjectId(self.read_object_id())
        if bson_type is BsonType.BOOLEAN:
            return BsonBoolean(self.read_boolean())
        if bson_type is BsonType.DATE_TIME:
            return BsonDateTime(self.read_date_time())
        if bson_type is BsonType.NULL:
            self.read_null()
            return BsonNull()
        if bson_type is BsonType.REGULAR_EXPRESSION:
            return self.read_regular_expression()
        if bson_type is BsonType.DB_POINTER:
            return self.read_db_pointer()
        if bson_type is BsonType.JAVASCRIPT:
            return BsonJavaScript(self.read_javascript())
        if bson_type is BsonType.SYMBOL:
            return BsonSymbol(self.read_symbol())
        if bson_type is BsonType.INT32:
            return BsonInt32(self.read_int32())
        if bson_type is BsonType.TIMESTAMP:
            return self.read_timestamp()
        if bson_type is BsonType.INT64:
            return BsonInt64(self.read_int64())
        if bson_type is BsonType.DECIMAL128:
            return BsonDecimal128(self.read_decimal128())
        if bson_type is BsonType.MIN_KEY:
            self.read_min_key()
            return BsonMinKey()
        if bson_type is BsonType.MAX_KEY:
            self.read_max_key()
            return BsonMaxKey()
        raise BsonInvalidOperationError(f"Cannot read a value of type {bson_type.name}")


# ---------------------------------------------------------------------------
# Tree-backed reader
# ---------------------------------------------------------------------------


class _State(Enum):
    INITIAL = auto()
    TYPE = auto()
    NAME = auto()
    VALUE = auto()
    SCOPE_DOCUMENT = auto()
    END_OF_DOCUMENT = auto()
    END_OF_ARRAY = auto()
    DONE = auto()


@dataclass
class _Context:
    is_array: bool
    items: Iterator[Any]


class BsonDocumentReader(BsonReader):
    """Reads tokens from a ``BsonDocument`` tree.

    Parameters
    ----------
    document:
        The root document.  The reader starts positioned on it, so the
        first call is normally ``read_start_document``.
    """

    def __init__(self, document: BsonDocument) -> None:
        self._stack: list[_Context] = []
        self._state = _State.INITIAL
        self._current_name: str | None = None
        self._current_value: BsonValue = document
        self._current_type = BsonType.DOCUMENT

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def current_bson_type(self) -> BsonType:
        return self._current_type

    def read_bson_type(self) -> BsonType:
        if self._state is not _State.TYPE or not self._stack:
            self._invalid("read_bson_type")
        context = self._stack[-1]
        try:
            item = next(context.items)
        except StopIteration:
            self._current_type = BsonType.END_OF_DOCUMENT
            self._state = _State.END_OF_ARRAY if context.is_array else _State.END_OF_DOCUMENT
            return self._current_type
        if context.is_array:
            self._current_name = None
            self._current_value = item
            self._state = _State.VALUE
        else:
            self._current_name, self._current_value = item
            self._state = _State.NAME
        if not isinstance(self._current_value, BsonValue):
            raise BsonSerializationError(
                f"Tree leaf {self._current_value!r} is not a BsonValue"
            )
        self._current_type = self._current_value.bson_type
        return self._current_type

    def read_name(self) -> str:
        if self._state is not _State.NAME:
            self._invalid("read_name")
        self._state = _State.VALUE
        return self._current_name  # type: ignore[return-value]

    def read_start_document(self) -> None:
        if self._state not in (_State.INITIAL, _State.VALUE, _State.SCOPE_DOCUMENT):
            self._invalid("read_start_document")
        if self._current_type is not BsonType.DOCUMENT:
            self._type_mismatch(BsonType.DOCUMENT)
        self._stack.append(_Context(False, iter(self._current_value.items())))  # type: ignore[attr-defined]
        self._state = _State.TYPE

    def read_end_document(self) -> None:
        if self._state is not _State.END_OF_DOCUMENT:
            self._invalid("read_end_document")
        self._stack.pop()
        self._state = _State.TYPE if self._stack else _State.DONE

    def read_start_array(self) -> None:
        if self._state is not _State.VALUE:
            self._invalid("read_start_array")
        if self._current_type is not BsonType.ARRAY:
            self._type_mismatch(BsonType.ARRAY)
        self._stack.append(_Context(True, iter(self._current_value)))  # type: ignore[call-overload]
        self._state = _State.TYPE

    def read_end_array(self) -> None:
        if self._state is not _State.END_OF_ARRAY:
            self._invalid("read_end_array")
        self._stack.pop()
        self._state = _State.TYPE

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def read_double(self) -> float:
        return self._read(BsonType.DOUBLE).value  # type: ignore[attr-defined]

    def read_string(self) -> str:
        return self._read(BsonType.STRING).value  # type: ignore[attr-defined]

    def read_binary_data(self) -> BsonBinary:
        return self._read(BsonType.BINARY)  # type: ignore[return-value]

    def read_undefined(self) -> None:
        self._read(BsonType.UNDEFINED)

    def read_object_id(self) -> ObjectId:
        return self._read(BsonType.OBJECT_ID).value  # type: ignore[attr-defined]

    def read_boolean(self) -> bool:
        return self._read(BsonType.BOOLEAN).value  # type: ignore[attr-defined]

    def read_date_time(self) -> int:
        return self._read(BsonType.DATE_TIME).value  # type: ignore[attr-defined]

    def read_null(self) -> None:
        self._read(BsonType.NULL)

    def read_regular_expression(self) -> BsonRegularExpression:
        return self._read(BsonType.REGULAR_EXPRESSION)  # type: ignore[return-value]

    def read_db_pointer(self) -> BsonDbPointer:
        return self._read(BsonType.DB_POINTER)  # type: ignore[return-value]

    def read_javascript(self) -> str:
        return self._read(BsonType.JAVASCRIPT).code  # type: ignore[attr-defined]

    def read_symbol(self) -> str:
        return self._read(BsonType.SYMBOL).symbol  # type: ignore[attr-defined]

    def read_javascript_with_scope(self) -> str:
        value = self._read(BsonType.JAVASCRIPT_WITH_SCOPE)
        # Reposition on the scope so it can be read as a document.
        self._current_value = value.scope  # type: ignore[attr-defined]
        self._current_type = BsonType.DOCUMENT
        self._state = _State.SCOPE_DOCUMENT
        return value.code  # type: ignore[attr-defined]

    def read_int32(self) -> int:
        return self._read(BsonType.INT32).value  # type: ignore[attr-defined]

    def read_timestamp(self) -> BsonTimestamp:
        return self._read(BsonType.TIMESTAMP)  # type: ignore[return-value]

    def read_int64(self) -> int:
        return self._read(BsonType.INT64).value  # type: ignore[attr-defined]

    def read_decimal128(self) -> Decimal128:
        return self._read(BsonType.DECIMAL128).value  # type: ignore[attr-defined]

    def read_min_key(self) -> None:
        self._read(BsonType.MIN_KEY)

    def read_max_key(self) -> None:
        self._read(BsonType.MAX_KEY)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read(self, expected: BsonType) -> BsonValue:
        if self._state is not _State.VALUE:
            self._invalid(f"read of {expected.name}")
        if self._current_type is not expected:
            self._type_mismatch(expected)
        self._state = _State.TYPE
        return self._current_value

    def _type_mismatch(self, expected: BsonType) -> None:
        raise BsonInvalidOperationError(
            f"Expected {expected.name} but the current type is {self._current_type.name}"
        )

    def _invalid(self, operation: str) -> None:
        raise BsonInvalidOperationError(
            f"{operation} cannot be called when the reader state is {self._state.name}"
        )
