"""Scalar codec registry for doccodec.

Maps Python runtime types to ``Codec`` instances.  Lookup walks the
type's MRO, so a codec registered for a base class also serves its
subclasses unless a more specific codec is registered.  Third-party
codecs can be contributed by declaring entry-points in their own
``pyproject.toml`` under the "doccodec.codecs" group.

Example
-------
Register a codec directly::

    from doccodec.codecs.registry import CodecRegistry

    registry = CodecRegistry("app")
    registry.register(PointCodec())

Or with the decorator, for codecs that take no constructor arguments::

    @registry.register_class
    class PointCodec(Codec[Point]):
        encoder_class = Point
        ...

Load all installed codecs via entry-points::

    registry.load_entrypoints("doccodec.codecs")

Retrieve the codec for a type::

    codec = registry.get(Point)
"""
from __future__ import annotations

import importlib.metadata
import logging
from typing import TypeVar

from doccodec.codecs.base import Codec

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type[Codec])


class CodecNotFoundError(KeyError):
    """Raised when no codec is registered for a type or any of its bases."""

    def __init__(self, python_type: type, registry_name: str) -> None:
        self.python_type = python_type
        self.registry_name = registry_name
        super().__init__(
            f"No codec for type {python_type.__qualname__!r} in the "
            f"{registry_name!r} registry. Register a codec for it or for one "
            "of its base classes."
        )


class CodecAlreadyRegisteredError(ValueError):
    """Raised when attempting to register a second codec for the same type."""

    def __init__(self, python_type: type, registry_name: str) -> None:
        self.python_type = python_type
        self.registry_name = registry_name
        super().__init__(
            f"A codec for {python_type.__qualname__!r} is already registered in the "
            f"{registry_name!r} registry. Deregister the existing codec first."
        )


class CodecRegistry:
    """Type-keyed registry of scalar codecs.

    Parameters
    ----------
    name:
        A human-readable name for this registry (used in error messages).
    """

    def __init__(self, name: str = "default") -> None:
        self._name = name
        self._codecs: dict[type, Codec] = {}

    @property
    def name(self) -> str:
        return self._name

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, codec: Codec) -> Codec:
        """Register ``codec`` under its ``encoder_class``.

        Parameters
        ----------
        codec:
            A ``Codec`` instance.

        Returns
        -------
        Codec
            The same codec, so the call can be used inline.

        Raises
        ------
        CodecAlreadyRegisteredError
            If a codec is already registered for the same type.
        TypeError
            If ``codec`` is not a ``Codec`` instance.
        """
        if not isinstance(codec, Codec):
            raise TypeError(f"Cannot register {codec!r}: it must be a Codec instance.")
        python_type = codec.encoder_class
        if python_type in self._codecs:
            raise CodecAlreadyRegisteredError(python_type, self._name)
        self._codecs[python_type] = codec
        logger.debug(
            "Registered codec %s for %s in registry %r",
            type(codec).__qualname__,
            python_type.__qualname__,
            self._name,
        )
        return codec

    def register_class(self, cls: C) -> C:
        """Class decorator: instantiate ``cls`` with no arguments and register it.

        Raises
        ------
        CodecAlreadyRegisteredError
            If a codec is already registered for ``cls.encoder_class``.
        TypeError
            If ``cls`` does not subclass ``Codec``.

        Example
        -------
        ::

            @registry.register_class
            class PointCodec(Codec[Point]):
                ...
        """
        if not (isinstance(cls, type) and issubclass(cls, Codec)):
            raise TypeError(f"Cannot register {cls!r}: it must be a subclass of Codec.")
        self.register(cls())
        return cls

    def deregister(self, python_type: type) -> None:
        """Remove the codec registered for exactly ``python_type``.

        Raises
        ------
        CodecNotFoundError
            If no codec is registered for that exact type.
        """
        if python_type not in self._codecs:
            raise CodecNotFoundError(python_type, self._name)
        del self._codecs[python_type]
        logger.debug(
            "Deregistered codec for %s from registry %r", python_type.__qualname__, self._name
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, python_type: type) -> Codec:
        """Return the codec for ``python_type``.

        The exact type is tried first, then each class in its MRO.

        Raises
        ------
        CodecNotFoundError
            If neither the type nor any base class has a codec.
        """
        for candidate in python_type.__mro__:
            codec = self._codecs.get(candidate)
            if codec is not None:
                return codec
        raise CodecNotFoundError(python_type, self._name)

    def list_codecs(self) -> list[Codec]:
        """Return all registered codecs ordered by their type's qualified name."""
        return [
            self._codecs[t] for t in sorted(self._codecs, key=lambda t: t.__qualname__)
        ]

    def __contains__(self, python_type: object) -> bool:
        """Support ``int in registry`` for exact-type membership."""
        return python_type in self._codecs

    def __len__(self) -> int:
        return len(self._codecs)

    def __repr__(self) -> str:
        names = [c.encoder_class.__qualname__ for c in self.list_codecs()]
        return f"CodecRegistry(name={self._name!r}, codecs={names})"

    # ------------------------------------------------------------------
    # Entry-point loading
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str) -> None:
        """Discover and register codec classes declared as package entry-points.

        Each entry-point value must be a ``Codec`` subclass that can be
        constructed without arguments.  Codecs whose type is already
        registered are skipped with a debug-level log entry, so repeated
        calls are idempotent.  Entry-points that fail to load are logged
        and skipped.

        Parameters
        ----------
        group:
            The entry-point group name, e.g. "doccodec.codecs".

        Example
        -------
        In a downstream package's ``pyproject.toml``::

            [project.entry-points."doccodec.codecs"]
            point = "my_package.codecs:PointCodec"
        """
        for ep in importlib.metadata.entry_points(group=group):
            try:
                cls = ep.load()
            except Exception:
                logger.exception(
                    "Failed to load entry-point %r from group %r; skipping.", ep.name, group
                )
                continue
            if not (isinstance(cls, type) and issubclass(cls, Codec)):
                logger.warning(
                    "Entry-point %r in group %r is not a Codec subclass; skipping.",
                    ep.name,
                    group,
                )
                continue
            if cls.encoder_class in self._codecs:
                logger.debug(
                    "Codec for %s already registered in %r; skipping entry-point %r.",
                    cls.encoder_class.__qualname__,
                    self._name,
                    ep.name,
                )
                continue
            try:
                self.register(cls())
            except TypeError:
                logger.warning(
                    "Entry-point %r loaded but could not be instantiated for "
                    "registry %r; skipping.",
                    ep.name,
                    self._name,
                )
