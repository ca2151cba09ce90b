"""Token-level BSON writer interface and a tree-backed implementation.

``BsonWriter`` is the emitting side of the token protocol: a document is
written as ``write_start_document``, then alternating ``write_name`` /
value calls, then ``write_end_document``.  Arrays are the same without
names.  ``write_javascript_with_scope`` is special: the next document
written becomes the scope of the code value.

``BsonDocumentWriter`` builds a ``BsonDocument`` tree from those calls.
It validates the call sequence and the primitive value ranges so that a
misbehaving encoder fails immediately rather than producing a corrupt
tree.

Usage
-----
::

    from doccodec.bsonio import BsonDocument, BsonDocumentWriter

    target = BsonDocument()
    writer = BsonDocumentWriter(target)
    writer.write_start_document()
    writer.write_name("answer")
    writer.write_int32(42)
    writer.write_end_document()
    assert target == {"answer": BsonInt32(42)}
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto

from bson.decimal128 import Decimal128
from bson.objectid import ObjectId

from doccodec.bsonio.errors import BsonInvalidOperationError, BsonSerializationError
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

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class BsonWriter(ABC):
    """Abstract token-oriented BSON writer."""

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @abstractmethod
    def write_start_document(self) -> None: ...

    @abstractmethod
    def write_end_document(self) -> None: ...

    @abstractmethod
    def write_start_array(self) -> None: ...

    @abstractmethod
    def write_end_array(self) -> None: ...

    @abstractmethod
    def write_name(self, name: str) -> None: ...

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def write_double(self, value: float) -> None: ...

    @abstractmethod
    def write_string(self, value: str) -> None: ...

    @abstractmethod
    def write_binary_data(self, binary: BsonBinary) -> None: ...

    @abstractmethod
    def write_undefined(self) -> None: ...

    @abstractmethod
    def write_object_id(self, value: ObjectId) -> None: ...

    @abstractmethod
    def write_boolean(self, value: bool) -> None: ...

    @abstractmethod
    def write_date_time(self, millis: int) -> None: ...

    @abstractmethod
    def write_null(self) -> None: ...

    @abstractmethod
    def write_regular_expression(self, regex: BsonRegularExpression) -> None: ...

    @abstractmethod
    def write_db_pointer(self, pointer: BsonDbPointer) -> None: ...

    @abstractmethod
    def write_javascript(self, code: str) -> None: ...

    @abstractmethod
    def write_symbol(self, symbol: str) -> None: ...

    @abstractmethod
    def write_javascript_with_scope(self, code: str) -> None:
        """Write the code half of a code-with-scope value.

        The caller must follow up by writing the scope as a document.
        """

    @abstractmethod
    def write_int32(self, value: int) -> None: ...

    @abstractmethod
    def write_timestamp(self, timestamp: BsonTimestamp) -> None: ...

    @abstractmethod
    def write_int64(self, value: int) -> None: ...

    @abstractmethod
    def write_decimal128(self, value: Decimal128) -> None: ...

    @abstractmethod
    def write_min_key(self) -> None: ...

    @abstractmethod
    def write_max_key(self) -> None: ...

    # ------------------------------------------------------------------
    # Structured values
    # ------------------------------------------------------------------

    def write_bson_value(self, value: BsonValue) -> None:
        """Emit the tokens for an already-structured ``BsonValue``.

        Containers are written recursively.  This is how values stored
        as ``BsonValue`` instances inside a document pass through an
        encoder untouched.

        Raises
        ------
        BsonSerializationError
            If ``value`` is not a ``BsonValue``.
        """
        if isinstance(value, BsonDocument):
            self.write_start_document()
            for name, item in value.items():
                self.write_name(name)
                self.write_bson_value(item)
            self.write_end_document()
        elif isinstance(value, BsonArray):
            self.write_start_array()
            for item in value:
                self.write_bson_value(item)
            self.write_end_array()
        elif isinstance(value, BsonJavaScriptWithScope):
            self.write_javascript_with_scope(value.code)
            self.write_bson_value(value.scope)
        elif isinstance(value, BsonDouble):
            self.write_double(value.value)
        elif isinstance(value, BsonString):
            self.write_string(value.value)
        elif isinstance(value, BsonBinary):
            self.write_binary_data(value)
        elif isinstance(value, BsonUndefined):
            self.write_undefined()
        elif isinstance(value, BsonObjectId):
            self.write_object_id(value.value)
        elif isinstance(value, BsonBoolean):
            self.write_boolean(value.value)
        elif isinstance(value, BsonDateTime):
            self.write_date_time(value.value)
        elif isinstance(value, BsonNull):
            self.write_null()
        elif isinstance(value, BsonRegularExpression):
            self.write_regular_expression(value)
        elif isinstance(value, BsonDbPointer):
            self.write_db_pointer(value)
        elif isinstance(value, BsonJavaScript):
            self.write_javascript(value.code)
        elif isinstance(value, BsonSymbol):
            self.write_symbol(value.symbol)
        elif isinstance(value, BsonInt32):
            self.write_int32(value.value)
        elif isinstance(value, BsonTimestamp):
            self.write_timestamp(value)
        elif isinstance(value, BsonInt64):
            self.write_int64(value.value)
        elif isinstance(value, BsonDecimal128):
            self.write_decimal128(value.value)
        elif isinstance(value, BsonMinKey):
            self.write_min_key()
        elif isinstance(value, BsonMaxKey):
            self.write_max_key()
        else:
            raise BsonSerializationError(f"Not a BSON value: {type(value).__name__}")


# ---------------------------------------------------------------------------
# Tree-backed writer
# ---------------------------------------------------------------------------


class _Mode(Enum):
    TOP_LEVEL = auto()
    DOCUMENT = auto()
    ARRAY = auto()
    SCOPE_DOCUMENT = auto()


class _State(Enum):
    INITIAL = auto()
    NAME = auto()
    VALUE = auto()
    SCOPE_DOCUMENT = auto()
    DONE = auto()


@dataclass
class _Context:
    mode: _Mode
    container: BsonDocument | BsonArray
    name: str | None = None
    code: str | None = None


class BsonDocumentWriter(BsonWriter):
    """Writes tokens into a ``BsonDocument`` tree.

    Parameters
    ----------
    document:
        The target document.  The top-level fields written between the
        first ``write_start_document`` and its matching
        ``write_end_document`` are stored directly into it.
    """

    def __init__(self, document: BsonDocument) -> None:
        self._document = document
        self._stack: list[_Context] = []
        self._state = _State.INITIAL
        self._pending_code: str | None = None

    @property
    def document(self) -> BsonDocument:
        """The document being populated."""
        return self._document

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def write_start_document(self) -> None:
        if self._state is _State.INITIAL:
            self._stack.append(_Context(_Mode.TOP_LEVEL, self._document))
        elif self._state is _State.SCOPE_DOCUMENT:
            self._stack.append(
                _Context(_Mode.SCOPE_DOCUMENT, BsonDocument(), code=self._pending_code)
            )
            self._pending_code = None
        elif self._state is _State.VALUE:
            self._stack.append(_Context(_Mode.DOCUMENT, BsonDocument()))
        else:
            self._invalid("write_start_document")
        self._state = _State.NAME

    def write_end_document(self) -> None:
        if self._state is not _State.NAME or not self._stack:
            self._invalid("write_end_document")
        context = self._stack[-1]
        if context.mode is _Mode.ARRAY:
            self._invalid("write_end_document")
        self._stack.pop()
        if context.mode is _Mode.TOP_LEVEL:
            self._state = _State.DONE
        elif context.mode is _Mode.SCOPE_DOCUMENT:
            self._add(BsonJavaScriptWithScope(context.code or "", context.container))
        else:
            self._add(context.container)

    def write_start_array(self) -> None:
        if self._state is not _State.VALUE:
            self._invalid("write_start_array")
        self._stack.append(_Context(_Mode.ARRAY, BsonArray()))
        self._state = _State.VALUE

    def write_end_array(self) -> None:
        if self._state is not _State.VALUE or not self._stack:
            self._invalid("write_end_array")
        context = self._stack[-1]
        if context.mode is not _Mode.ARRAY:
            self._invalid("write_end_array")
        self._stack.pop()
        self._add(context.container)

    def write_name(self, name: str) -> None:
        if self._state is not _State.NAME:
            self._invalid("write_name")
        if not isinstance(name, str):
            raise BsonSerializationError(
                f"Field names must be str, not {type(name).__name__}"
            )
        self._stack[-1].name = name
        self._state = _State.VALUE

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def write_double(self, value: float) -> None:
        if not isinstance(value, float):
            raise BsonSerializationError(f"Expected float, got {type(value).__name__}")
        self._write(BsonDouble(value))

    def write_string(self, value: str) -> None:
        if not isinstance(value, str):
            raise BsonSerializationError(f"Expected str, got {type(value).__name__}")
        self._write(BsonString(value))

    def write_binary_data(self, binary: BsonBinary) -> None:
        if not 0 <= binary.subtype <= 0xFF:
            raise BsonSerializationError(f"Binary subtype out of range: {binary.subtype}")
        self._write(binary)

    def write_undefined(self) -> None:
        self._write(BsonUndefined())

    def write_object_id(self, value: ObjectId) -> None:
        if not isinstance(value, ObjectId):
            raise BsonSerializationError(f"Expected ObjectId, got {type(value).__name__}")
        self._write(BsonObjectId(value))

    def write_boolean(self, value: bool) -> None:
        self._write(BsonBoolean(bool(value)))

    def write_date_time(self, millis: int) -> None:
        self._write(BsonDateTime(_check_range(millis, INT64_MIN, INT64_MAX, "date_time")))

    def write_null(self) -> None:
        self._write(BsonNull())

    def write_regular_expression(self, regex: BsonRegularExpression) -> None:
        self._write(regex)

    def write_db_pointer(self, pointer: BsonDbPointer) -> None:
        self._write(pointer)

    def write_javascript(self, code: str) -> None:
        self._write(BsonJavaScript(code))

    def write_symbol(self, symbol: str) -> None:
        if not isinstance(symbol, str):
            raise BsonSerializationError(f"Expected str, got {type(symbol).__name__}")
        self._write(BsonSymbol(symbol))

    def write_javascript_with_scope(self, code: str) -> None:
        if self._state is not _State.VALUE:
            self._invalid("write_javascript_with_scope")
        self._pending_code = code
        self._state = _State.SCOPE_DOCUMENT

    def write_int32(self, value: int) -> None:
        self._write(BsonInt32(_check_range(value, INT32_MIN, INT32_MAX, "int32")))

    def write_timestamp(self, timestamp: BsonTimestamp) -> None:
        self._write(timestamp)

    def write_int64(self, value: int) -> None:
        self._write(BsonInt64(_check_range(value, INT64_MIN, INT64_MAX, "int64")))

    def write_decimal128(self, value: Decimal128) -> None:
        self._write(BsonDecimal128(value))

    def write_min_key(self) -> None:
        self._write(BsonMinKey())

    def write_max_key(self) -> None:
        self._write(BsonMaxKey())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _write(self, value: BsonValue) -> None:
        if self._state is not _State.VALUE:
            self._invalid(f"write of {value.bson_type.name}")
        self._add(value)

    def _add(self, value: BsonValue) -> None:
        """Attach a completed value to the innermost open container."""
        context = self._stack[-1]
        if context.mode is _Mode.ARRAY:
            context.container.append(value)
            self._state = _State.VALUE
        else:
            context.container[context.name] = value
            context.name = None
            self._state = _State.NAME

    def _invalid(self, operation: str) -> None:
        raise BsonInvalidOperationError(
            f"{operation} cannot be called when the writer state is {self._state.name}"
        )


def _check_range(value: int, low: int, high: int, kind: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise BsonSerializationError(f"Expected int for {kind}, got {type(value).__name__}")
    if value < low or value > high:
        raise BsonSerializationError(f"Value {value} is out of range for {kind}")
    return int(value)
