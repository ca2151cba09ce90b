"""Errors raised by BSON token readers and writers.

These are the failures a ``DocumentCodec`` translates into its own
``DocumentCodecError`` before they reach the caller.
"""
from __future__ import annotations


class BsonError(Exception):
    """Base class for all token-layer failures."""


class BsonInvalidOperationError(BsonError):
    """Raised when a reader or writer method is called in the wrong state.

    Examples are writing a value where a field name is expected, ending
    an array while a document is open, or reading an ``INT32`` while the
    current element is a string.
    """


class BsonSerializationError(BsonError):
    """Raised when a value cannot be represented as the requested BSON type."""
