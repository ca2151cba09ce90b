"""Document codec.

``DocumentCodec`` converts between in-memory documents (any ``Mapping``
on the way in, ``Document`` on the way out) and a stream of BSON tokens.
It owns the recursive structure: embedded documents, arrays, references,
code with scope and binary payloads.  Every other leaf value is handed
to a scalar codec looked up in a ``CodecRegistry``.

Encoding writes the ``_id`` field first when the top-level document has
one; every other field follows in iteration order.  Decoding builds each
document through a ``DocumentFactory`` that is told the document's path,
and turns any embedded document holding both ``$ref`` and ``$id`` back
into a ``DBRef``.

Example
-------
::

    from doccodec.bsonio import BsonDocument, BsonDocumentReader, BsonDocumentWriter
    from doccodec.core import DocumentCodec

    codec = DocumentCodec()
    tree = BsonDocument()
    codec.encode(BsonDocumentWriter(tree), {"name": "widget", "_id": 1})
    document = codec.decode(BsonDocumentReader(tree))
"""
from __future__ import annotations

import array
import logging
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any

from doccodec.bsonio.reader import BsonReader
from doccodec.bsonio.types import BsonBinarySubType, BsonType
from doccodec.bsonio.values import BsonBinary, BsonDocument, BsonValue
from doccodec.bsonio.writer import BsonDocumentWriter, BsonWriter
from doccodec.codecs.registry import CodecRegistry
from doccodec.codecs.scalars import default_registry
from doccodec.codecs.transformers import BinaryToBytesTransformer, BinaryToUUIDTransformer
from doccodec.codecs.type_map import BsonTypeClassMap
from doccodec.config import CodecOptions
from doccodec.core.errors import PASSTHROUGH_ERRORS, InvalidDocumentStateError, map_exception
from doccodec.core.factory import DefaultDocumentFactory, DocumentFactory, Path
from doccodec.core.hooks import TransformHooks
from doccodec.core.ids import IdGenerator, ObjectIdGenerator
from doccodec.model.document import Document, DocumentList
from doccodec.model.special import Binary, CodeWScope, DBRef, Symbol

logger = logging.getLogger(__name__)

ID_FIELD_NAME = "_id"
REF_FIELD_NAME = "$ref"
REF_ID_FIELD_NAME = "$id"

# Iterables that are written as scalars, never as arrays.
_SCALAR_ITERABLES = (str, bytes, bytearray, memoryview, array.array)
_RAW_BYTES = (bytes, bytearray, memoryview)
_BYTES_SUBTYPES = (BsonBinarySubType.BINARY, BsonBinarySubType.OLD_BINARY)


class DocumentCodec:
    """Encodes and decodes documents through BSON token readers and writers.

    Parameters
    ----------
    registry:
        Scalar codec registry.  Defaults to ``default_registry(options)``.
    type_map:
        Declared BSON type to Python class map used to choose the decode
        codec.  Defaults to ``BsonTypeClassMap()``.
    db:
        Optional owning-context object attached to every decoded
        ``DBRef``.
    factory:
        Creates the container for each decoded document.  Defaults to
        ``DefaultDocumentFactory``.
    id_generator:
        Source of new ids for ``generate_id_if_absent``.  Defaults to
        ``ObjectIdGenerator``.
    hooks:
        Encode/decode transform hooks.  Defaults to an empty
        ``TransformHooks`` (identity).
    options:
        Codec options; used to build the default registry and to read
        legacy UUID payloads.
    """

    def __init__(
        self,
        registry: CodecRegistry | None = None,
        type_map: BsonTypeClassMap | None = None,
        *,
        db: Any = None,
        factory: DocumentFactory | None = None,
        id_generator: IdGenerator | None = None,
        hooks: TransformHooks | None = None,
        options: CodecOptions | None = None,
    ) -> None:
        self._options = options or CodecOptions()
        self._registry = registry if registry is not None else default_registry(self._options)
        self._type_map = type_map if type_map is not None else BsonTypeClassMap()
        self._db = db
        self._factory: DocumentFactory = factory if factory is not None else DefaultDocumentFactory()
        self._id_generator: IdGenerator = (
            id_generator if id_generator is not None else ObjectIdGenerator()
        )
        self._hooks = hooks if hooks is not None else TransformHooks()
        self._bytes_transformer = BinaryToBytesTransformer()
        self._uuid_transformer = BinaryToUUIDTransformer(self._options.uuid_representation)
        logger.debug(
            "Created DocumentCodec with registry %r, factory %r, options %r",
            self._registry.name,
            self._factory,
            self._options,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def encoder_class(self) -> type[Document]:
        return Document

    @property
    def db(self) -> Any:
        return self._db

    @property
    def registry(self) -> CodecRegistry:
        return self._registry

    @property
    def type_map(self) -> BsonTypeClassMap:
        return self._type_map

    @property
    def factory(self) -> DocumentFactory:
        return self._factory

    @property
    def hooks(self) -> TransformHooks:
        return self._hooks

    @property
    def options(self) -> CodecOptions:
        return self._options

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, writer: BsonWriter, document: Mapping[str, Any]) -> None:
        """Write ``document`` to ``writer`` as a top-level BSON document.

        The ``_id`` field, when present, is written first.  The input is
        not modified.

        Raises
        ------
        DocumentCodecError
            If the writer rejects a token (bad state, non-string field
            name, integer out of range, ...) or a scalar codec or hook
            fails.  The original exception is kept as ``cause``.
        CodecNotFoundError
            If a leaf value has no registered codec.
        """
        try:
            self._write_document(writer, document, top_level=True)
        except PASSTHROUGH_ERRORS:
            raise
        except Exception as exc:
            raise map_exception(exc) from exc

    def _write_document(
        self, writer: BsonWriter, document: Mapping[str, Any], top_level: bool
    ) -> None:
        writer.write_start_document()
        promote_id = top_level and ID_FIELD_NAME in document
        if promote_id:
            writer.write_name(ID_FIELD_NAME)
            self._write_value(writer, document[ID_FIELD_NAME])
        for name, value in document.items():
            if promote_id and name == ID_FIELD_NAME:
                continue
            writer.write_name(name)
            self._write_value(writer, value)
        writer.write_end_document()

    def _write_array(self, writer: BsonWriter, values: Iterable[Any]) -> None:
        writer.write_start_array()
        for value in values:
            self._write_value(writer, value)
        writer.write_end_array()

    def _write_value(self, writer: BsonWriter, value: Any) -> None:
        value = self._hooks.apply_encoding_hooks(value)
        if value is None:
            writer.write_null()
        elif isinstance(value, DBRef):
            writer.write_start_document()
            writer.write_name(REF_FIELD_NAME)
            writer.write_string(str(value.ref))
            writer.write_name(REF_ID_FIELD_NAME)
            self._write_value(writer, value.id)
            writer.write_end_document()
        elif isinstance(value, list):
            self._write_array(writer, value)
        elif isinstance(value, Mapping):
            self._write_document(writer, value, top_level=False)
        elif isinstance(value, Iterable) and not isinstance(value, _SCALAR_ITERABLES):
            self._write_array(writer, value)
        elif isinstance(value, CodeWScope):
            writer.write_javascript_with_scope(value.code)
            self._write_document(writer, value.scope, top_level=False)
        elif isinstance(value, _RAW_BYTES):
            writer.write_binary_data(BsonBinary(BsonBinarySubType.BINARY, bytes(value)))
        elif isinstance(value, array.array):
            self._write_array(writer, value.tolist())
        elif isinstance(value, Symbol):
            writer.write_symbol(value.symbol)
        else:
            self._registry.get(type(value)).encode(writer, value)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, reader: BsonReader) -> Document:
        """Read a top-level document from ``reader``.

        Raises
        ------
        DocumentCodecError
            If the token stream is malformed or a value cannot be read
            by its scalar codec.  The original exception is kept as
            ``cause``.
        CodecNotFoundError
            If a declared type has no mapped class or no registered codec.
        """
        try:
            return self._read_document(reader, ())
        except PASSTHROUGH_ERRORS:
            raise
        except Exception as exc:
            raise map_exception(exc) from exc

    def _read_document(self, reader: BsonReader, path: Path) -> Document:
        document = self._factory.get_instance(path)
        reader.read_start_document()
        while reader.read_bson_type() is not BsonType.END_OF_DOCUMENT:
            name = reader.read_name()
            document[name] = self._read_value(reader, path, name)
        reader.read_end_document()
        return document

    def _read_array(self, reader: BsonReader, path: Path) -> DocumentList:
        values = DocumentList()
        reader.read_start_array()
        while reader.read_bson_type() is not BsonType.END_OF_DOCUMENT:
            values.append(self._read_value(reader, path, None))
        reader.read_end_array()
        return values

    def _read_value(self, reader: BsonReader, path: Path, name: str | None) -> Any:
        bson_type = reader.current_bson_type
        if bson_type.is_container and name is not None:
            path = path + (name,)

        value: Any
        if bson_type is BsonType.DOCUMENT:
            value = self._verify_for_dbref(self._read_document(reader, path))
        elif bson_type is BsonType.ARRAY:
            value = self._read_array(reader, path)
        elif bson_type is BsonType.JAVASCRIPT_WITH_SCOPE:
            code = reader.read_javascript_with_scope()
            value = CodeWScope(code, self._read_document(reader, path))
        elif bson_type is BsonType.DB_POINTER:
            pointer = reader.read_db_pointer()
            value = DBRef(pointer.namespace, pointer.id, db=self._db)
        elif bson_type is BsonType.BINARY:
            value = self._read_binary(reader)
        elif bson_type is BsonType.NULL:
            reader.read_null()
            value = None
        else:
            value = self._registry.get(self._type_map.get(bson_type)).decode(reader)
        return self._hooks.apply_decoding_hooks(value)

    def _read_binary(self, reader: BsonReader) -> Any:
        binary = reader.read_binary_data()
        if binary.subtype in _BYTES_SUBTYPES:
            return self._bytes_transformer.transform(binary)
        if binary.subtype == BsonBinarySubType.UUID_LEGACY:
            return self._uuid_transformer.transform(binary)
        return Binary(binary.subtype, binary.data)

    def _verify_for_dbref(self, document: Document) -> Any:
        if REF_FIELD_NAME in document and REF_ID_FIELD_NAME in document:
            return DBRef(str(document[REF_FIELD_NAME]), document[REF_ID_FIELD_NAME], db=self._db)
        return document

    # ------------------------------------------------------------------
    # Identifier management
    # ------------------------------------------------------------------

    def document_has_id(self, document: Mapping[str, Any]) -> bool:
        return ID_FIELD_NAME in document

    def get_document_id(self, document: Mapping[str, Any]) -> BsonValue:
        """Return the document's ``_id`` as a ``BsonValue``.

        An ``_id`` already stored as a ``BsonValue`` is returned as-is;
        any other value is encoded with this codec's dispatch rules.

        Raises
        ------
        InvalidDocumentStateError
            If the document has no ``_id``.
        DocumentCodecError
            If the id cannot be encoded.
        """
        if not self.document_has_id(document):
            raise InvalidDocumentStateError("The document does not contain an _id")
        id_value = document[ID_FIELD_NAME]
        if isinstance(id_value, BsonValue):
            return id_value

        holder = BsonDocument()
        writer = BsonDocumentWriter(holder)
        try:
            writer.write_start_document()
            writer.write_name(ID_FIELD_NAME)
            self._write_value(writer, id_value)
            writer.write_end_document()
        except PASSTHROUGH_ERRORS:
            raise
        except Exception as exc:
            raise map_exception(exc) from exc
        return holder[ID_FIELD_NAME]

    def generate_id_if_absent(
        self, document: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        """Store a newly generated ``_id`` in ``document`` if it has none.

        Returns the same document, so the call can be chained.
        """
        if not self.document_has_id(document):
            new_id = self._id_generator.generate()
            document[ID_FIELD_NAME] = new_id
            logger.debug("Generated _id %r", new_id)
        return document

    def __repr__(self) -> str:
        return f"DocumentCodec(registry={self._registry.name!r}, factory={self._factory!r})"
