"""Per-class encode and decode transform hooks.

``TransformHooks`` holds, for each exact Python class, an ordered list of
transformations.  The document codec applies the encoding hooks to every
value before it is dispatched, and the decoding hooks to every value
after it has been read.  Lookup is by exact class: a hook registered for
``int`` does not fire for ``bool``.

A hook is either a ``Transformer`` or any one-argument callable.

Example
-------
::

    hooks = TransformHooks()
    hooks.add_encoding_hook(Decimal, lambda d: Decimal128(d))
    hooks.add_decoding_hook(Decimal128, lambda d: d.to_decimal())
    codec = DocumentCodec(hooks=hooks)
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Union

from doccodec.codecs.transformers import Transformer

logger = logging.getLogger(__name__)

Hook = Union[Transformer, Callable[[Any], Any]]


def _run(hook: Hook, value: Any) -> Any:
    if isinstance(hook, Transformer):
        return hook.transform(value)
    return hook(value)


class TransformHooks:
    """Ordered, class-keyed hook lists for encoding and decoding."""

    def __init__(self) -> None:
        self._encoding: dict[type, list[Hook]] = {}
        self._decoding: dict[type, list[Hook]] = {}

    def add_encoding_hook(self, cls: type, hook: Hook) -> None:
        """Append ``hook`` to the encoding hooks for exactly ``cls``."""
        self._encoding.setdefault(cls, []).append(_check_hook(hook))
        logger.debug("Added encoding hook %r for %s", hook, cls.__qualname__)

    def add_decoding_hook(self, cls: type, hook: Hook) -> None:
        """Append ``hook`` to the decoding hooks for exactly ``cls``."""
        self._decoding.setdefault(cls, []).append(_check_hook(hook))
        logger.debug("Added decoding hook %r for %s", hook, cls.__qualname__)

    def remove_encoding_hooks(self, cls: type) -> None:
        self._encoding.pop(cls, None)

    def remove_decoding_hooks(self, cls: type) -> None:
        self._decoding.pop(cls, None)

    def clear(self) -> None:
        """Remove every hook."""
        self._encoding.clear()
        self._decoding.clear()

    def has_hooks(self) -> bool:
        return bool(self._encoding or self._decoding)

    def apply_encoding_hooks(self, value: Any) -> Any:
        """Run the encoding hooks for ``type(value)`` in order.

        ``None`` and values of classes without hooks are returned as-is.
        """
        return self._apply(self._encoding, value)

    def apply_decoding_hooks(self, value: Any) -> Any:
        """Run the decoding hooks for ``type(value)`` in order."""
        return self._apply(self._decoding, value)

    @staticmethod
    def _apply(table: dict[type, list[Hook]], value: Any) -> Any:
        if value is None or not table:
            return value
        for hook in table.get(type(value), ()):
            value = _run(hook, value)
        return value

    def __repr__(self) -> str:
        return (
            f"TransformHooks(encoding={sorted(c.__qualname__ for c in self._encoding)}, "
            f"decoding={sorted(c.__qualname__ for c in self._decoding)})"
        )


def _check_hook(hook: Hook) -> Hook:
    if not (isinstance(hook, Transformer) or callable(hook)):
        raise TypeError(f"Hook must be a Transformer or a callable, got {hook!r}")
    return hook
