"""Codec configuration.

``CodecOptions`` collects the knobs that change how leaf values are
represented.  Options are plain frozen data, injected into a
``DocumentCodec`` (and the default codec registry) at construction time.

Options can be loaded from YAML::

    # doccodec.yaml
    doccodec:
      uuid_representation: java_legacy
      tz_aware: true

and then::

    from doccodec.config import load_options

    options = load_options("doccodec.yaml")
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml
from bson.binary import UuidRepresentation

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when codec options are malformed."""


# Legacy (subtype 0x03) byte orders accepted in configuration, keyed by
# their configuration name.  ``PYTHON_LEGACY`` keeps the UUID's bytes in
# natural order, ``JAVA_LEGACY`` reverses each 8-byte half and
# ``CSHARP_LEGACY`` uses .NET's ``Guid.ToByteArray`` order.
UUID_REPRESENTATIONS: dict[str, int] = {
    "python_legacy": UuidRepresentation.PYTHON_LEGACY,
    "java_legacy": UuidRepresentation.JAVA_LEGACY,
    "csharp_legacy": UuidRepresentation.CSHARP_LEGACY,
}


@dataclass(frozen=True)
class CodecOptions:
    """Options shared by the document codec and the built-in scalar codecs.

    Parameters
    ----------
    uuid_representation:
        A ``bson.binary.UuidRepresentation`` legacy constant: the byte
        order for UUIDs stored as subtype 0x03 binary (default
        ``PYTHON_LEGACY``).  See ``UUID_REPRESENTATIONS``.
    tz_aware:
        When True, decoded datetimes carry ``timezone.utc``; otherwise
        they are naive datetimes in UTC (default False).
    """

    uuid_representation: int = UuidRepresentation.PYTHON_LEGACY
    tz_aware: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CodecOptions":
        """Build options from a plain mapping, validating every key.

        Raises
        ------
        ConfigError
            On unknown keys or values of the wrong type.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown codec option(s): {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        if "uuid_representation" in data:
            raw = data["uuid_representation"]
            if isinstance(raw, int) and not isinstance(raw, bool):
                representation = raw if raw in UUID_REPRESENTATIONS.values() else None
            else:
                representation = UUID_REPRESENTATIONS.get(str(raw).lower())
            if representation is None:
                choices = ", ".join(UUID_REPRESENTATIONS)
                raise ConfigError(
                    f"Invalid uuid_representation {raw!r}; expected one of: {choices}"
                )
            kwargs["uuid_representation"] = representation
        if "tz_aware" in data:
            raw = data["tz_aware"]
            if not isinstance(raw, bool):
                raise ConfigError(f"tz_aware must be a boolean, got {raw!r}")
            kwargs["tz_aware"] = raw
        return cls(**kwargs)


def load_options(path: str | Path) -> CodecOptions:
    """Load ``CodecOptions`` from a YAML file.

    The options may sit at the top level of the file or under a
    ``doccodec`` key.  An empty file yields the defaults.

    Raises
    ------
    ConfigError
        If the file is not valid YAML or does not contain a mapping.
    OSError
        If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}") from exc
    if data is None:
        data = {}
    if isinstance(data, dict) and "doccodec" in data:
        data = data["doccodec"] or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping of codec options in {path}")
    options = CodecOptions.from_mapping(data)
    logger.debug("Loaded codec options from %s: %r", path, options)
    return options
