"""Document factories.

While decoding, a ``DocumentCodec`` asks its factory for a fresh
container every time it starts reading a document.  The factory is
given the *path* of the document: the tuple of field names leading from
the root to it (``()`` for the root itself).  Array elements do not add
a path entry, so a document nested in ``{"items": [{...}]}`` is created
for the path ``("items",)``.

Usage
-----
::

    from doccodec.core.factory import PathDocumentFactory

    factory = (
        PathDocumentFactory(Order)
        .with_path_class("customer", Customer)
        .with_path_class("lines", OrderLine)
    )
    codec = DocumentCodec(factory=factory)
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from doccodec.model.document import Document

Path = tuple[str, ...]


@runtime_checkable
class DocumentFactory(Protocol):
    """Protocol for objects that create empty documents during decode."""

    def get_instance(self, path: Path) -> Document:
        """Return a new, empty document for the given path.

        Parameters
        ----------
        path:
            Field names from the root to the document being created.
            Empty for the root document.
        """
        ...  # pragma: no cover


class DefaultDocumentFactory:
    """Always creates a plain ``Document``."""

    def get_instance(self, path: Path) -> Document:
        return Document()

    def __repr__(self) -> str:
        return "DefaultDocumentFactory()"


def _check_document_class(cls: type) -> type[Document]:
    if not (isinstance(cls, type) and issubclass(cls, Document)):
        raise TypeError(f"Document classes must subclass Document, got {cls!r}")
    return cls


class PathDocumentFactory:
    """Chooses the document class by path.

    Parameters
    ----------
    document_class:
        Class used for the root document (default ``Document``).
    path_classes:
        Mapping from dotted path (e.g. ``"customer.address"``) to the class
        used for the document at that path.  Paths not listed get a plain
        ``Document``.

    Raises
    ------
    TypeError
        If any class is not a ``Document`` subclass.
    """

    def __init__(
        self,
        document_class: type[Document] = Document,
        path_classes: Mapping[str, type[Document]] | None = None,
    ) -> None:
        self._document_class = _check_document_class(document_class)
        self._path_classes: dict[str, type[Document]] = {
            path: _check_document_class(cls) for path, cls in (path_classes or {}).items()
        }

    @property
    def document_class(self) -> type[Document]:
        return self._document_class

    @property
    def path_classes(self) -> dict[str, type[Document]]:
        """A copy of the dotted path to class mapping."""
        return dict(self._path_classes)

    def with_path_class(self, path: str, cls: type[Document]) -> "PathDocumentFactory":
        """Return a new factory that also maps ``path`` to ``cls``."""
        path_classes = dict(self._path_classes)
        path_classes[path] = cls
        return PathDocumentFactory(self._document_class, path_classes)

    def get_instance(self, path: Path) -> Document:
        if not path:
            return self._document_class()
        return self._path_classes.get(".".join(path), Document)()

    def __repr__(self) -> str:
        return (
            f"PathDocumentFactory(document_class={self._document_class.__name__}, "
            f"paths={sorted(self._path_classes)})"
        )
