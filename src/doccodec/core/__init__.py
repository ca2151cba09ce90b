"""Document codec core.

Exports ``DocumentCodec`` together with its collaborators: document
factories, identifier generators, transform hooks, and error types.
"""
from __future__ import annotations

from doccodec.core.document_codec import ID_FIELD_NAME, DocumentCodec
from doccodec.core.errors import DocumentCodecError, InvalidDocumentStateError, map_exception
from doccodec.core.factory import DefaultDocumentFactory, DocumentFactory, PathDocumentFactory
from doccodec.core.hooks import TransformHooks
from doccodec.core.ids import IdGenerator, ObjectIdGenerator

__all__ = [
    "ID_FIELD_NAME",
    "DocumentCodec",
    "DocumentCodecError",
    "InvalidDocumentStateError",
    "map_exception",
    "DocumentFactory",
    "DefaultDocumentFactory",
    "PathDocumentFactory",
    "TransformHooks",
    "IdGenerator",
    "ObjectIdGenerator",
]
