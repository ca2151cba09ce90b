"""Value transformers.

A ``Transformer`` maps one value to another.  The binary transformers
turn a decoded ``BsonBinary`` payload into a richer Python value; the
same interface is used for the encode/decode hooks of
``doccodec.core.hooks.TransformHooks``.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any

from bson.binary import OLD_UUID_SUBTYPE, UuidRepresentation
from bson.binary import Binary as PyMongoBinary

from doccodec.bsonio.errors import BsonSerializationError
from doccodec.bsonio.values import BsonBinary
from doccodec.config import UUID_REPRESENTATIONS


class Transformer(ABC):
    """Single-method value transformation."""

    @abstractmethod
    def transform(self, value: Any) -> Any:
        """Return the transformed value."""


class BinaryToBytesTransformer(Transformer):
    """Unwraps a binary payload into plain ``bytes``."""

    def transform(self, value: BsonBinary) -> bytes:
        return bytes(value.data)


class BinaryToUUIDTransformer(Transformer):
    """Reads a 16-byte legacy binary payload as a ``uuid.UUID``.

    Parameters
    ----------
    representation:
        Legacy ``bson.binary.UuidRepresentation`` the payload was
        written in.
    """

    def __init__(self, representation: int = UuidRepresentation.PYTHON_LEGACY) -> None:
        self._representation = representation

    def transform(self, value: BsonBinary) -> uuid.UUID:
        return uuid_from_bytes(value.data, self._representation)


def uuid_to_bytes(value: uuid.UUID, representation: int) -> bytes:
    """Return the 16 payload bytes for ``value`` in ``representation`` order.

    Raises
    ------
    BsonSerializationError
        If ``representation`` is not a legacy representation.
    """
    _check_legacy(representation)
    return bytes(PyMongoBinary.from_uuid(value, representation))


def uuid_from_bytes(data: bytes, representation: int) -> uuid.UUID:
    """Inverse of :func:`uuid_to_bytes`.

    Raises
    ------
    BsonSerializationError
        If ``data`` is not exactly 16 bytes long or ``representation`` is
        not a legacy representation.
    """
    _check_legacy(representation)
    if len(data) != 16:
        raise BsonSerializationError(
            f"Expected a 16-byte UUID payload, got {len(data)} byte(s)"
        )
    try:
        return PyMongoBinary(bytes(data), OLD_UUID_SUBTYPE).as_uuid(representation)
    except ValueError as exc:
        raise BsonSerializationError(f"Cannot read UUID payload: {exc}") from exc


def _check_legacy(representation: int) -> None:
    if representation not in UUID_REPRESENTATIONS.values():
        raise BsonSerializationError(
            f"UUID representation {representation!r} is not a legacy byte order"
        )
