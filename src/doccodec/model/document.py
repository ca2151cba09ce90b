"""In-memory document containers.

``Document`` is the unit a ``DocumentCodec`` encodes and decodes: an
insertion-ordered mapping from field name to value.  ``DocumentList``
is the ordered container produced for decoded arrays.  Both are thin
``dict``/``list`` subclasses, so any code that accepts a plain mapping
or list accepts them too, and subclasses can be handed to a document
factory to customise what decode builds at a given path.
"""
from __future__ import annotations

from typing import Any


class Document(dict):
    """Ordered field-name to value mapping.

    Example
    -------
    ::

        doc = Document(name="widget", size=3)
        doc.put("_id", 1)
        assert doc.contains_field("_id")
        assert list(doc) == ["name", "size", "_id"]
    """

    def contains_field(self, name: str) -> bool:
        """Return True if ``name`` is a field of this document."""
        return name in self

    def put(self, name: str, value: Any) -> Any:
        """Set ``name`` to ``value`` and return the previous value, if any."""
        previous = self.get(name)
        self[name] = value
        return previous

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow plain-``dict`` copy of this document."""
        return dict(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict.__repr__(self)})"


class DocumentList(list):
    """Ordered list container for decoded arrays."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list.__repr__(self)})"
