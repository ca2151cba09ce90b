"""doccodec: converts in-memory documents to and from BSON token streams.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import doccodec

    # Encode a document into a structured BSON tree
    tree = doccodec.encode({"_id": 1, "name": "widget", "tags": ["a", "b"]})

    # Decode it back into a Document
    document = doccodec.decode(tree)

    # Identifier helpers
    doccodec.generate_id({"name": "gadget"})
    doccodec.get_id(document)

    doccodec.__version__
    '0.1.0'
"""
from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from doccodec.bsonio.values import BsonDocument, BsonValue
    from doccodec.config import CodecOptions
    from doccodec.model.document import Document


def encode(document: Mapping[str, Any], options: "CodecOptions | None" = None) -> "BsonDocument":
    """Encode a document into a ``BsonDocument`` tree.

    Parameters
    ----------
    document:
        Any mapping from field name to value.  Its ``_id``, if present,
        becomes the first field of the result.
    options:
        Codec options; defaults to ``CodecOptions()``.

    Returns
    -------
    BsonDocument
        The encoded tree.

    Raises
    ------
    doccodec.core.DocumentCodecError
        If the document cannot be written.
    doccodec.codecs.CodecNotFoundError
        If a value has no registered codec.
    """
    from doccodec.bsonio.values import BsonDocument
    from doccodec.bsonio.writer import BsonDocumentWriter
    from doccodec.core.document_codec import DocumentCodec

    tree = BsonDocument()
    DocumentCodec(options=options).encode(BsonDocumentWriter(tree), document)
    return tree


def decode(tree: "BsonDocument", options: "CodecOptions | None" = None) -> "Document":
    """Decode a ``BsonDocument`` tree into a ``Document``.

    Parameters
    ----------
    tree:
        The structured BSON document to read.
    options:
        Codec options; defaults to ``CodecOptions()``.

    Returns
    -------
    Document
        The decoded document.

    Raises
    ------
    doccodec.core.DocumentCodecError
        If the tree cannot be read.
    """
    from doccodec.bsonio.reader import BsonDocumentReader
    from doccodec.core.document_codec import DocumentCodec

    return DocumentCodec(options=options).decode(BsonDocumentReader(tree))


def get_id(document: Mapping[str, Any]) -> "BsonValue":
    """Return the document's ``_id`` as a ``BsonValue``.

    Raises
    ------
    doccodec.core.InvalidDocumentStateError
        If the document has no ``_id``.
    """
    from doccodec.core.document_codec import DocumentCodec

    return DocumentCodec().get_document_id(document)


def generate_id(document: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Give ``document`` a new ``ObjectId`` under ``_id`` unless it has one.

    Returns
    -------
    MutableMapping
        The same document.
    """
    from doccodec.core.document_codec import DocumentCodec

    return DocumentCodec().generate_id_if_absent(document)


__all__ = [
    "__version__",
    "encode",
    "decode",
    "get_id",
    "generate_id",
]
