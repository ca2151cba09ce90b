"""Error types for document encoding and decoding.

Failures raised while a ``DocumentCodec`` drives a reader, a writer or a
scalar codec never escape directly: they are re-raised as
``DocumentCodecError`` with the original exception chained as
``__cause__``.  Registry lookup failures (``CodecNotFoundError``)
propagate unchanged so callers can tell "this value has no codec" apart
from "this value or token stream is malformed".
"""
from __future__ import annotations

from doccodec.bsonio.errors import BsonError
from doccodec.codecs.registry import CodecNotFoundError


class DocumentCodecError(Exception):
    """Raised when a document cannot be encoded or decoded.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def cause(self) -> BaseException | None:
        """The underlying exception, when this error wraps one."""
        return self.__cause__


class InvalidDocumentStateError(RuntimeError):
    """Raised when an operation needs document state that is missing.

    Currently only raised by ``DocumentCodec.get_document_id`` for a
    document without an ``_id`` field.
    """


# Raised through unchanged by the codec entry points.
PASSTHROUGH_ERRORS: tuple[type[BaseException], ...] = (CodecNotFoundError, DocumentCodecError)


def map_exception(exc: BaseException) -> BaseException:
    """Translate a failure into the codec's error type.

    ``BsonError`` instances become a ``DocumentCodecError`` carrying the
    same message.  Other exceptions (an ``OverflowError`` from a scalar
    codec, a ``TypeError`` from a hook, ...) become a ``DocumentCodecError``
    whose message names the original type.  ``CodecNotFoundError`` and an
    existing ``DocumentCodecError`` are returned unchanged.

    Example
    -------
    ::

        try:
            ...
        except PASSTHROUGH_ERRORS:
            raise
        except Exception as exc:
            raise map_exception(exc) from exc
    """
    if isinstance(exc, PASSTHROUGH_ERRORS):
        return exc
    if isinstance(exc, BsonError):
        return DocumentCodecError(str(exc))
    return DocumentCodecError(f"{type(exc).__name__}: {exc}")
