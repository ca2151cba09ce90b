"""BSON token I/O.

Exports the token-level reader/writer interfaces, the structured value
tree, the tree-backed reader and writer, token-layer errors, and the
Extended-JSON style tree serializer.
"""
from __future__ import annotations

from doccodec.bsonio.errors import (
    BsonError,
    BsonInvalidOperationError,
    BsonSerializationError,
)
from doccodec.bsonio.reader import BsonDocumentReader, BsonReader
from doccodec.bsonio.serializer import BsonTreeSerializer
from doccodec.bsonio.types import BsonBinarySubType, BsonType
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
from doccodec.bsonio.writer import BsonDocumentWriter, BsonWriter

__all__ = [
    # Types
    "BsonType",
    "BsonBinarySubType",
    # Reader / writer
    "BsonReader",
    "BsonWriter",
    "BsonDocumentReader",
    "BsonDocumentWriter",
    # Errors
    "BsonError",
    "BsonInvalidOperationError",
    "BsonSerializationError",
    # Value tree
    "BsonValue",
    "BsonDocument",
    "BsonArray",
    "BsonDouble",
    "BsonString",
    "BsonBinary",
    "BsonUndefined",
    "BsonObjectId",
    "BsonBoolean",
    "BsonDateTime",
    "BsonNull",
    "BsonRegularExpression",
    "BsonDbPointer",
    "BsonJavaScript",
    "BsonSymbol",
    "BsonJavaScriptWithScope",
    "BsonInt32",
    "BsonTimestamp",
    "BsonInt64",
    "BsonDecimal128",
    "BsonMinKey",
    "BsonMaxKey",
    # Serializer
    "BsonTreeSerializer",
]
