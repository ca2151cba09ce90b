"""Unit tests for doccodec.cli.main: the click application."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from doccodec.bsonio import BsonDocument, BsonInt32, BsonString, BsonTreeSerializer
from doccodec.cli.main import cli


def _make_runner() -> CliRunner:
    return CliRunner()


def _write(path: Path, data: object) -> str:
    if path.suffix in {".yaml", ".yml"}:
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


# ===========================================================================
# version / --version
# ===========================================================================


class TestVersion:
    def test_version_command(self, expected_version: str) -> None:
        result = _make_runner().invoke(cli, ["version"])
        assert result.exit_code == 0
        assert expected_version in result.output
        assert "doccodec" in result.output

    def test_help_lists_commands(self) -> None:
        result = _make_runner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("encode", "decode", "roundtrip", "codecs", "version"):
            assert name in result.output


# ===========================================================================
# codecs
# ===========================================================================


class TestCodecsCommand:
    def test_lists_codecs(self) -> None:
        result = _make_runner().invoke(cli, ["codecs"])
        assert result.exit_code == 0
        assert "StringCodec" in result.output
        assert "UUIDCodec" in result.output
        assert "codec(s)" in result.output

    def test_bad_config_exits_1(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("colour: blue\n", encoding="utf-8")
        result = _make_runner().invoke(cli, ["codecs", "--config", str(config)])
        assert result.exit_code == 1


# ===========================================================================
# encode
# ===========================================================================


class TestEncodeCommand:
    def test_encode_json_to_file(self, tmp_path: Path) -> None:
        source = _write(tmp_path / "doc.json", {"name": "widget", "_id": 1})
        out = tmp_path / "tree.json"
        result = _make_runner().invoke(cli, ["encode", source, "--output", str(out)])
        assert result.exit_code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert list(data) == ["_id", "name"]
        assert data["_id"] == {"$numberInt": "1"}
        assert data["name"] == "widget"

    def test_encode_yaml_input_yaml_output(self, tmp_path: Path) -> None:
        source = _write(tmp_path / "doc.yaml", {"n": 2**40})
        out = tmp_path / "tree.yaml"
        result = _make_runner().invoke(
            cli, ["encode", source, "--format", "yaml", "-o", str(out)]
        )
        assert result.exit_code == 0
        data = yaml.safe_load(out.read_text(encoding="utf-8"))
        assert data == {"n": {"$numberLong": str(2**40)}}

    def test_encode_to_stdout(self, tmp_path: Path) -> None:
        source = _write(tmp_path / "doc.json", {"name": "widget"})
        result = _make_runner().invoke(cli, ["encode", source])
        assert result.exit_code == 0
        assert "widget" in result.output

    def test_missing_file_exits_1(self, tmp_path: Path) -> None:
        result = _make_runner().invoke(cli, ["encode", str(tmp_path / "nope.json")])
        assert result.exit_code == 1

    def test_invalid_json_exits_1(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.json"
        path.write_text("{not json", encoding="utf-8")
        result = _make_runner().invoke(cli, ["encode", str(path)])
        assert result.exit_code == 1

    def test_non_mapping_exits_1(self, tmp_path: Path) -> None:
        source = _write(tmp_path / "doc.json", [1, 2])
        result = _make_runner().invoke(cli, ["encode", source])
        assert result.exit_code == 1

    def test_out_of_range_value_exits_1(self, tmp_path: Path) -> None:
        source = _write(tmp_path / "doc.json", {"n": 2**70})
        result = _make_runner().invoke(cli, ["encode", source])
        assert result.exit_code == 1


# ===========================================================================
# decode
# ===========================================================================


class TestDecodeCommand:
    def test_decode_tree(self, tmp_path: Path) -> None:
        tree = BsonDocument(_id=BsonInt32(1), name=BsonString("widget"))
        path = tmp_path / "tree.json"
        path.write_text(BsonTreeSerializer().to_json(tree), encoding="utf-8")
        result = _make_runner().invoke(cli, ["decode", str(path)])
        assert result.exit_code == 0
        assert "widget" in result.output

    def test_decode_reference(self, tmp_path: Path) -> None:
        source = _write(
            tmp_path / "tree.json",
            {"r": {"$ref": "coll", "$id": {"$numberInt": "42"}}},
        )
        result = _make_runner().invoke(cli, ["decode", source])
        assert result.exit_code == 0
        assert "DBRef" in result.output

    def test_malformed_wrapper_exits_1(self, tmp_path: Path) -> None:
        source = _write(tmp_path / "tree.json", {"n": {"$numberInt": "x"}})
        result = _make_runner().invoke(cli, ["decode", source])
        assert result.exit_code == 1

    def test_malformed_uuid_exits_1(self, tmp_path: Path) -> None:
        source = _write(
            tmp_path / "tree.json",
            {"u": {"$binary": {"base64": "AAAA", "subType": "03"}}},
        )
        result = _make_runner().invoke(cli, ["decode", source])
        assert result.exit_code == 1


# ===========================================================================
# roundtrip
# ===========================================================================


class TestRoundtripCommand:
    def test_plain_document_round_trips(self, tmp_path: Path) -> None:
        source = _write(
            tmp_path / "doc.json",
            {"a": 1, "b": [1, 2.5, {"c": None}], "s": "x", "_id": 9},
        )
        result = _make_runner().invoke(cli, ["roundtrip", source])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_reference_shape_reports_mismatch(self, tmp_path: Path) -> None:
        source = _write(tmp_path / "doc.json", {"r": {"$ref": "coll", "$id": 1}})
        result = _make_runner().invoke(cli, ["roundtrip", source])
        assert result.exit_code == 1
        assert "MISMATCH" in result.output

    @pytest.mark.parametrize("representation", ["python_legacy", "java_legacy"])
    def test_with_config(self, tmp_path: Path, representation: str) -> None:
        config = tmp_path / "options.yaml"
        config.write_text(f"uuid_representation: {representation}\n", encoding="utf-8")
        source = _write(tmp_path / "doc.json", {"a": "b"})
        result = _make_runner().invoke(cli, ["roundtrip", source, "--config", str(config)])
        assert result.exit_code == 0
