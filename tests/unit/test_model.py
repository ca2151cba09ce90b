"""Unit tests for doccodec.model: documents and special value kinds."""
from __future__ import annotations

import pytest

from doccodec.model import Binary, CodeWScope, DBRef, Document, DocumentList, Symbol


class TestDocument:
    def test_is_a_dict(self) -> None:
        assert isinstance(Document(), dict)

    def test_contains_field(self) -> None:
        document = Document(a=1)
        assert document.contains_field("a")
        assert not document.contains_field("b")

    def test_put_returns_previous_value(self) -> None:
        document = Document(a=1)
        assert document.put("a", 2) == 1
        assert document.put("b", 3) is None
        assert document == {"a": 2, "b": 3}

    def test_to_dict_is_plain_copy(self) -> None:
        document = Document(a=1)
        plain = document.to_dict()
        assert type(plain) is dict
        plain["b"] = 2
        assert "b" not in document

    def test_repr_names_subclass(self) -> None:
        class Order(Document):
            pass

        assert repr(Order(a=1)) == "Order({'a': 1})"

    def test_document_list_repr(self) -> None:
        assert repr(DocumentList([1])) == "DocumentList([1])"


class TestSpecialKinds:
    def test_dbref_equality_ignores_db(self) -> None:
        assert DBRef("c", 1, db=object()) == DBRef("c", 1)

    def test_dbref_repr_hides_db(self) -> None:
        assert "db=" not in repr(DBRef("c", 1, db="owner"))

    def test_dbref_frozen(self) -> None:
        ref = DBRef("c", 1)
        with pytest.raises((AttributeError, TypeError)):
            ref.ref = "d"  # type: ignore[misc]

    def test_code_w_scope_equality(self) -> None:
        assert CodeWScope("f", {"x": 1}) == CodeWScope("f", Document(x=1))

    def test_binary_len(self) -> None:
        assert len(Binary(0x80, b"abc")) == 3

    def test_symbol_str(self) -> None:
        assert str(Symbol("s")) == "s"
        assert Symbol("s") != "s"
