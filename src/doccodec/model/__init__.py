"""Document model.

Exports the document containers and the special value kinds.
"""
from __future__ import annotations

from doccodec.model.document import Document, DocumentList
from doccodec.model.special import Binary, CodeWScope, DBRef, Symbol

__all__ = [
    "Document",
    "DocumentList",
    "DBRef",
    "CodeWScope",
    "Binary",
    "Symbol",
]
