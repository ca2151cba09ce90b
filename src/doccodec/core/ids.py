"""Identifier generators used to fill in a missing ``_id``."""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from bson.objectid import ObjectId


@runtime_checkable
class IdGenerator(Protocol):
    """Anything with a no-argument ``generate`` method returning a fresh id."""

    def generate(self) -> Any:
        """Return a new, unique identifier."""
        ...  # pragma: no cover


class ObjectIdGenerator:
    """Generates a new ``bson.ObjectId`` on every call."""

    def generate(self) -> ObjectId:
        return ObjectId()

    def __repr__(self) -> str:
        return "ObjectIdGenerator()"
