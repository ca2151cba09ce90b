"""Special value kinds recognised by ``DocumentCodec``.

These are the values that do not map one-to-one onto a scalar codec:

``DBRef``
    A reference to another document by collection name and id.  Encoded
    as ``{"$ref": ..., "$id": ...}`` and recovered from that shape (or
    from a DB pointer) on decode.
``CodeWScope``
    JavaScript code paired with a scope document of variable bindings.
``Binary``
    A binary payload whose subtype has no richer Python representation.
``Symbol``
    Symbolic text, kept distinct from ordinary strings so that it
    survives a round trip.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DBRef:
    """Reference to a document in another collection.

    Parameters
    ----------
    ref:
        Name of the referenced collection (or namespace).
    id:
        The referenced document's ``_id`` value.
    db:
        Optional owning-context object the reference was decoded under.
        It is carried for resolution by higher layers and takes no part
        in equality or ``repr``.
    """

    ref: Any
    id: Any
    db: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class CodeWScope:
    """JavaScript code with a scope mapping."""

    code: str
    scope: Mapping[str, Any]


@dataclass(frozen=True)
class Binary:
    """Opaque binary payload tagged with its subtype."""

    subtype: int
    data: bytes

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Symbol:
    """Symbolic text value."""

    symbol: str

    def __str__(self) -> str:
        return self.symbol
