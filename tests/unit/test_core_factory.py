"""Unit tests for doccodec.core.factory: document factories."""
from __future__ import annotations

import pytest

from doccodec.core.factory import DefaultDocumentFactory, DocumentFactory, PathDocumentFactory
from doccodec.model import Document


class Order(Document):
    pass


class Customer(Document):
    pass


class Address(Document):
    pass


# ===========================================================================
# DefaultDocumentFactory
# ===========================================================================


class TestDefaultDocumentFactory:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(DefaultDocumentFactory(), DocumentFactory)

    @pytest.mark.parametrize("path", [(), ("a",), ("a", "b")])
    def test_always_plain_document(self, path: tuple[str, ...]) -> None:
        document = DefaultDocumentFactory().get_instance(path)
        assert type(document) is Document
        assert document == {}

    def test_new_instance_each_call(self) -> None:
        factory = DefaultDocumentFactory()
        assert factory.get_instance(()) is not factory.get_instance(())


# ===========================================================================
# PathDocumentFactory
# ===========================================================================


class TestPathDocumentFactory:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(PathDocumentFactory(), DocumentFactory)

    def test_root_uses_document_class(self) -> None:
        assert type(PathDocumentFactory(Order).get_instance(())) is Order

    def test_dotted_path_lookup(self) -> None:
        factory = PathDocumentFactory(
            Order, {"customer": Customer, "customer.address": Address}
        )
        assert type(factory.get_instance(("customer",))) is Customer
        assert type(factory.get_instance(("customer", "address"))) is Address

    def test_unlisted_path_falls_back_to_document(self) -> None:
        factory = PathDocumentFactory(Order, {"customer": Customer})
        assert type(factory.get_instance(("lines",))) is Document

    def test_root_class_not_used_for_nested_paths(self) -> None:
        assert type(PathDocumentFactory(Order).get_instance(("x",))) is Document

    def test_with_path_class_returns_new_factory(self) -> None:
        base = PathDocumentFactory(Order)
        extended = base.with_path_class("customer", Customer)
        assert extended is not base
        assert type(extended.get_instance(("customer",))) is Customer
        assert type(base.get_instance(("customer",))) is Document

    def test_path_classes_is_a_copy(self) -> None:
        factory = PathDocumentFactory(Order, {"customer": Customer})
        factory.path_classes["other"] = Address
        assert "other" not in factory.path_classes

    def test_rejects_non_document_root_class(self) -> None:
        with pytest.raises(TypeError):
            PathDocumentFactory(dict)  # type: ignore[arg-type]

    def test_rejects_non_document_path_class(self) -> None:
        with pytest.raises(TypeError):
            PathDocumentFactory(Document, {"a": list})  # type: ignore[dict-item]

    def test_with_path_class_validates(self) -> None:
        with pytest.raises(TypeError):
            PathDocumentFactory().with_path_class("a", str)  # type: ignore[arg-type]
