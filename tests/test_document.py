"""Tests for the path-based YamlDocument facade."""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import pytest

from yamlrt.document import PathSyntaxError
from yamlrt.document import YamlDocument
from yamlrt.document import parse_path
from yamlrt.nodes import CommentedMap
from yamlrt.nodes import CommentedSeq
from yamlrt.nodes import StructuralAccessError

CONFIG = textwrap.dedent(
    """
    # Application settings
    server:
      host: localhost
      port: 8080  # http
      debug: "true"
      ratio: "1.5"
      retries: "3"
    Services:
      - ServiceName: orders
        Port: 9001
      - ServiceName: billing
        Port: 9002
    empty:
    """,
).lstrip()


@pytest.fixture
def document() -> YamlDocument:
    return YamlDocument.loads(CONFIG)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("a", ["a"]),
        ("a.b.c", ["a", "b", "c"]),
        ("Services[0].Port", ["Services", 0, "Port"]),
        ("matrix[1][-1]", ["matrix", 1, -1]),
        ("[0]", [0]),
        (["a", 0, "b.c"], ["a", 0, "b.c"]),
    ],
)
def test_parse_path(path: str | list[str | int], expected: list[str | int]) -> None:
    assert parse_path(path) == expected


@pytest.mark.parametrize("path", ["", ".a", "a.", "a..b", "a[x]", "a[0]b", "a[1"])
def test_parse_path_rejects_malformed(path: str) -> None:
    with pytest.raises(PathSyntaxError, match="path"):
        parse_path(path)


def test_path_syntax_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse_path([])


def test_get_and_exists(document: YamlDocument) -> None:
    assert document.get("server.host") == "localhost"
    assert document.get("Services[1].ServiceName") == "billing"
    assert document.get("Services[-1].Port") == 9002
    assert document.get("server.missing", "fallback") == "fallback"
    assert document.get("server.host.deeper") is None
    assert document.exists("empty")
    assert not document.exists("Services[5]")


def test_typed_getters_coerce_strings(document: YamlDocument) -> None:
    assert document.get_int("server.port") == 8080
    assert document.get_int("server.retries") == 3
    assert document.get_float("server.ratio") == 1.5
    assert document.get_float("server.port") == 8080.0
    assert document.get_bool("server.debug") is True
    assert document.get_str("server.port") == "8080"


def test_typed_getters_defaults(document: YamlDocument) -> None:
    assert document.get_int("server.nope", 7) == 7
    assert document.get_str("empty", "unset") == "unset"
    assert document.get_bool("server.nope") is None


def test_typed_getters_reject_wrong_values(document: YamlDocument) -> None:
    with pytest.raises(ValueError, match="not an integer"):
        document.get_int("server.host")
    with pytest.raises(ValueError, match="not a number"):
        document.get_float("server.host")
    with pytest.raises(ValueError, match="not a boolean"):
        document.get_bool("server.port")
    with pytest.raises(ValueError, match="expected a scalar"):
        document.get_str("server")


def test_collection_getters(document: YamlDocument) -> None:
    services = document.get_list("Services")
    assert isinstance(services, CommentedSeq)
    assert len(services) == 2
    server = document.get_map("server")
    assert isinstance(server, CommentedMap)
    assert document.get_list("missing") is None
    with pytest.raises(ValueError, match="expected a sequence"):
        document.get_list("server")
    with pytest.raises(ValueError, match="expected a mapping"):
        document.get_map("Services")


def test_set_existing_value_keeps_comment(document: YamlDocument) -> None:
    document.set("server.port", 9090)
    assert "  port: 9090  # http\n" in document.dumps()


def test_set_creates_intermediate_mappings() -> None:
    document = YamlDocument.create()
    document.set("a.b.c", 1)
    document.set("a.items[0]", "first")
    assert document.root.to_plain() == {"a": {"b": {"c": 1}, "items": ["first"]}}
    assert document.dumps() == "a:\n  b:\n    c: 1\n  items:\n    - first\n"


def test_set_index_equal_to_length_appends(document: YamlDocument) -> None:
    document.set("Services[2]", {"ServiceName": "audit", "Port": 9003})
    assert document.get("Services[2].ServiceName") == "audit"
    with pytest.raises(StructuralAccessError):
        document.set("Services[9]", {})


def test_set_through_scalar_raises(document: YamlDocument) -> None:
    with pytest.raises(StructuralAccessError, match="cannot assign into str"):
        document.set("server.host.name", "x")
    with pytest.raises(StructuralAccessError):
        document.set("server[0]", "x")


def test_remove_returns_value_and_comments(document: YamlDocument) -> None:
    removed = document.remove("server.port")
    assert removed == 8080
    assert "# http" not in document.dumps()
    first = document.remove("Services[0]")
    assert isinstance(first, CommentedMap)
    assert document.get("Services[0].ServiceName") == "billing"
    with pytest.raises(StructuralAccessError):
        document.remove("server.port")


def test_comment_helpers(document: YamlDocument) -> None:
    assert document.get_comment("server.port") == "http"
    assert document.get_comment("server.host") is None
    assert document.get_comment("nowhere.at.all") is None

    document.set_comment("server.host", "bind address")
    document.add_pre_comment("Services[1]", "secondary")
    document.add_blank_line_before("empty")

    text = document.dumps()
    assert "  host: localhost  # bind address\n" in text
    assert "  # secondary\n  - ServiceName: billing\n" in text
    assert "    Port: 9002\n\nempty:\n" in text


def test_set_comment_on_missing_key_raises(document: YamlDocument) -> None:
    with pytest.raises(StructuralAccessError):
        document.set_comment("server.nope", "x")


def test_dumps_with_forced_marker(document: YamlDocument) -> None:
    assert document.dumps(force_document_marker=True).startswith("---\n# Application")


def test_load_and_save(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    source = tmp_path / "app.yaml"
    source.write_bytes(b"name: app\r\nport: 80  # http\r\n")

    with caplog.at_level(logging.INFO, logger="yamlrt.document"):
        document = YamlDocument.load(source)
        document.set("port", 81)
        document.save()

    assert document.path == source
    assert source.read_bytes() == b"name: app\r\nport: 81  # http\r\n"
    assert any("saved" in record.getMessage() for record in caplog.records)


def test_save_to_new_path(tmp_path: Path) -> None:
    document = YamlDocument.loads("a: 1\n")
    target = tmp_path / "out.yaml"
    document.save(target)
    assert target.read_text(encoding="utf-8") == "a: 1\n"
    assert document.path == target


def test_save_without_path_raises() -> None:
    with pytest.raises(ValueError, match="no path"):
        YamlDocument.create().save()


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        YamlDocument.load(tmp_path / "missing.yaml")
