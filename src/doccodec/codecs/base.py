"""Base class for scalar codecs.

A codec converts one Python runtime type to and from BSON tokens.  The
``encoder_class`` class attribute is the key a ``CodecRegistry`` files
it under.

Example
-------
::

    class PointCodec(Codec[Point]):
        encoder_class = Point

        def encode(self, writer, value):
            writer.write_string(f"{value.x},{value.y}")

        def decode(self, reader):
            x, y = reader.read_string().split(",")
            return Point(int(x), int(y))
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Generic, TypeVar

if TYPE_CHECKING:
    from doccodec.bsonio.reader import BsonReader
    from doccodec.bsonio.writer import BsonWriter

T = TypeVar("T")


class Codec(ABC, Generic[T]):
    """Encoder/decoder for a single Python runtime type."""

    encoder_class: ClassVar[type]

    @abstractmethod
    def encode(self, writer: "BsonWriter", value: T) -> None:
        """Write ``value`` as the next value token(s) of ``writer``."""

    @abstractmethod
    def decode(self, reader: "BsonReader") -> T:
        """Read the value ``reader`` is positioned on."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(encoder_class={self.encoder_class.__name__})"
