"""Scalar codecs.

Exports the ``Codec`` base class, the type-keyed ``CodecRegistry``, the
built-in codecs via ``default_registry``, the BSON type to class map, and
the binary value transformers.
"""
from __future__ import annotations

from doccodec.codecs.base import Codec
from doccodec.codecs.registry import (
    CodecAlreadyRegisteredError,
    CodecNotFoundError,
    CodecRegistry,
)
from doccodec.codecs.scalars import default_registry
from doccodec.codecs.transformers import (
    BinaryToBytesTransformer,
    BinaryToUUIDTransformer,
    Transformer,
    uuid_from_bytes,
    uuid_to_bytes,
)
from doccodec.codecs.type_map import BsonTypeClassMap, UnmappedBsonTypeError

__all__ = [
    "Codec",
    "CodecRegistry",
    "CodecNotFoundError",
    "CodecAlreadyRegisteredError",
    "default_registry",
    "BsonTypeClassMap",
    "UnmappedBsonTypeError",
    "Transformer",
    "BinaryToBytesTransformer",
    "BinaryToUUIDTransformer",
    "uuid_to_bytes",
    "uuid_from_bytes",
]
