"""Shared test fixtures for doccodec.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from doccodec.bsonio import BsonDocument, BsonDocumentReader, BsonDocumentWriter
from doccodec.core import DocumentCodec
from doccodec.model import Document


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "doccodec"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def codec() -> DocumentCodec:
    """A document codec with every default collaborator."""
    return DocumentCodec()


@pytest.fixture()
def encode_tree(codec: DocumentCodec) -> Callable[[Mapping[str, Any]], BsonDocument]:
    """Encode a mapping with the default codec and return the tree."""

    def _encode(document: Mapping[str, Any]) -> BsonDocument:
        tree = BsonDocument()
        codec.encode(BsonDocumentWriter(tree), document)
        return tree

    return _encode


@pytest.fixture()
def roundtrip(
    codec: DocumentCodec, encode_tree: Callable[[Mapping[str, Any]], BsonDocument]
) -> Callable[[Mapping[str, Any]], Document]:
    """Encode then decode a mapping with the default codec."""

    def _roundtrip(document: Mapping[str, Any]) -> Document:
        return codec.decode(BsonDocumentReader(encode_tree(document)))

    return _roundtrip
