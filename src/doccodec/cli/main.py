"""CLI entry point for doccodec.

Invoked as::

    doccodec [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m doccodec.cli.main

Commands
--------
encode      Encode a JSON or YAML document into an Extended-JSON BSON tree
decode      Decode an Extended-JSON BSON tree back into a document
roundtrip   Encode then decode a document and check nothing changed
codecs      List the built-in scalar codecs
version     Show version information
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import yaml
from rich.console import Console
from rich.pretty import Pretty
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from doccodec.config import CodecOptions
    from doccodec.core.document_codec import DocumentCodec

console = Console()
err_console = Console(stderr=True)

_YAML_SUFFIXES = {".yaml", ".yml"}


def _read_source(path: str) -> str:
    """Read an input file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)


def _load_data(path: str) -> Any:
    """Parse a JSON or YAML file (chosen by suffix), exiting on error."""
    source = _read_source(path)
    try:
        if Path(path).suffix.lower() in _YAML_SUFFIXES:
            return yaml.safe_load(source)
        return json.loads(source)
    except (ValueError, yaml.YAMLError) as exc:
        err_console.print(f"[red]Parse error[/red] in {path}: {exc}")
        sys.exit(1)


def _load_document(path: str) -> dict[str, Any]:
    data = _load_data(path)
    if not isinstance(data, dict):
        err_console.print(f"[red]Error:[/red] {path} does not contain a document (mapping)")
        sys.exit(1)
    return data


def _options_or_exit(config: str | None) -> "CodecOptions":
    from doccodec.config import CodecOptions, ConfigError, load_options

    if config is None:
        return CodecOptions()
    try:
        return load_options(config)
    except (ConfigError, OSError) as exc:
        err_console.print(f"[red]Config error[/red] in {config}: {exc}")
        sys.exit(1)


def _make_codec(config: str | None) -> "DocumentCodec":
    from doccodec.core.document_codec import DocumentCodec

    return DocumentCodec(options=_options_or_exit(config))


def _codec_errors() -> tuple[type[Exception], ...]:
    from doccodec.bsonio.errors import BsonError
    from doccodec.codecs.registry import CodecNotFoundError
    from doccodec.core.errors import DocumentCodecError

    return (DocumentCodecError, CodecNotFoundError, BsonError, TypeError)


def _emit(text: str, lang: str, output: str | None, what: str) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]{what} written to[/green] {output}")
    else:
        console.print(Syntax(text, lang, line_numbers=True))


config_option = click.option(
    "--config",
    "config",
    type=click.Path(exists=False),
    default=None,
    help="YAML file with codec options",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="doccodec")
def cli() -> None:
    """Document codec toolkit: encode and decode documents as BSON token trees."""


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from doccodec import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]doccodec[/bold]", f"v{__version__}")
    table.add_row("pymongo", _pymongo_version())
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


def _pymongo_version() -> str:
    import importlib.metadata

    try:
        return importlib.metadata.version("pymongo")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


# ---------------------------------------------------------------------------
# codecs command
# ---------------------------------------------------------------------------


@cli.command(name="codecs")
@config_option
def codecs_command(config: str | None) -> None:
    """List the scalar codecs in the default registry."""
    from doccodec.codecs.scalars import default_registry
    from doccodec.codecs.type_map import BsonTypeClassMap

    registry = default_registry(_options_or_exit(config))
    type_map = BsonTypeClassMap()
    bson_types: dict[type, list[str]] = {}
    for bson_type in type_map.keys():
        bson_types.setdefault(type_map.get(bson_type), []).append(bson_type.name)

    table = Table(title=f"Codecs: {registry.name}", show_lines=False)
    table.add_column("Python type", style="bold")
    table.add_column("Codec")
    table.add_column("Decodes BSON type")
    for codec in registry.list_codecs():
        python_type = codec.encoder_class
        table.add_row(
            f"{python_type.__module__}.{python_type.__qualname__}",
            type(codec).__name__,
            ", ".join(bson_types.get(python_type, [])) or "[dim]-[/dim]",
        )
    console.print(table)
    console.print(f"\n[bold]{len(registry)}[/bold] codec(s)")


# ---------------------------------------------------------------------------
# encode command
# ---------------------------------------------------------------------------


@cli.command(name="encode")
@click.argument("file", type=click.Path(exists=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Output format of the encoded tree",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
@config_option
def encode_command(file: str, output_format: str, output: str | None, config: str | None) -> None:
    """Encode a document into an Extended-JSON BSON tree.

    FILE is a .json, .yaml or .yml file holding one document.
    """
    from doccodec.bsonio import BsonDocument, BsonDocumentWriter, BsonTreeSerializer

    document = _load_document(file)
    codec = _make_codec(config)
    tree = BsonDocument()
    try:
        codec.encode(BsonDocumentWriter(tree), document)
    except _codec_errors() as exc:
        err_console.print(f"[red]Encode error[/red] in {file}: {exc}")
        sys.exit(1)

    serializer = BsonTreeSerializer()
    if output_format.lower() == "json":
        _emit(serializer.to_json(tree, indent=2), "json", output, "Encoded tree")
    else:
        _emit(serializer.to_yaml(tree), "yaml", output, "Encoded tree")


# ---------------------------------------------------------------------------
# decode command
# ---------------------------------------------------------------------------


@cli.command(name="decode")
@click.argument("file", type=click.Path(exists=False))
@config_option
def decode_command(file: str, config: str | None) -> None:
    """Decode an Extended-JSON BSON tree and print the resulting document.

    FILE is a .json, .yaml or .yml file as written by ``encode``.
    """
    from doccodec.bsonio import BsonDocumentReader, BsonTreeSerializer

    data = _load_document(file)
    codec = _make_codec(config)
    try:
        tree = BsonTreeSerializer().from_dict(data)
        document = codec.decode(BsonDocumentReader(tree))
    except _codec_errors() as exc:
        err_console.print(f"[red]Decode error[/red] in {file}: {exc}")
        sys.exit(1)
    console.print(Pretty(document))


# ---------------------------------------------------------------------------
# roundtrip command
# ---------------------------------------------------------------------------


@cli.command(name="roundtrip")
@click.argument("file", type=click.Path(exists=False))
@config_option
def roundtrip_command(file: str, config: str | None) -> None:
    """Encode then decode a document and report whether it survived unchanged.

    FILE is a .json, .yaml or .yml file holding one document.  Exits with
    status 1 when the decoded document differs from the input.
    """
    from doccodec.bsonio import BsonDocument, BsonDocumentReader, BsonDocumentWriter

    document = _load_document(file)
    codec = _make_codec(config)
    tree = BsonDocument()
    try:
        codec.encode(BsonDocumentWriter(tree), document)
        decoded = codec.decode(BsonDocumentReader(tree))
    except _codec_errors() as exc:
        err_console.print(f"[red]Round-trip error[/red] in {file}: {exc}")
        sys.exit(1)

    if decoded == document:
        console.print(f"[green]OK[/green] {file} round-trips unchanged ({len(decoded)} field(s))")
        return

    console.print(f"[red]MISMATCH[/red] {file} changed during the round trip")
    table = Table(show_lines=True)
    table.add_column("Field", style="bold")
    table.add_column("Input")
    table.add_column("Decoded")
    for name in dict.fromkeys([*document, *decoded]):
        before = document.get(name, "<missing>")
        after = decoded.get(name, "<missing>")
        if before != after:
            table.add_row(name, repr(before), repr(after))
    console.print(table)
    sys.exit(1)


if __name__ == "__main__":
    cli()
