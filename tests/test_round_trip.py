"""Unmodified documents must serialize back to exactly the input text."""

from __future__ import annotations

import pathlib
import textwrap

import pytest

import yamlrt


def _fixture_text(name: str) -> str:
    root = pathlib.Path(__file__).resolve().parent.parent
    return (root / "examples" / name).read_text(encoding="utf-8")


ROUND_TRIP_CASES = [
    "ServerName: TestServer\nPort: 8080\n",
    "Key:\n",
    'Key: ""\n',
    "msg: 'a # b'  # real comment\n",
    "ports: [8080, 8443]\n",
    "labels: {app: nginx, env: prod}\n",
    "mixed: [1, [2, 3], {a: b}]\n",
    "quoted: [\"hello, world\", 'key: value']\n",
    "Services:\n- Name: A\n  Value: 1\n",
    "a: 1\n\n\n",
    "a: 1",
    "a: 1\r\nb:\r\n  c: 2\r\n",
    "---\na: 1\n",
    "# lead\n\n---\n# first\na: 1\n",
    "# only a comment\n",
    '"quoted key": 1\n\'single\': 2\n',
    "version: 1.10\nratio: .5\nbig: 1.0e+20\n",
    "url: http://example.com:8080/path  # endpoint\n",
    "escaped: \"tab\\there\"\n",
    "apostrophe: it's fine  # trailing\n",
    "host:     localhost\nport:     80\n",
    "key  : v\n",
    "parent  :\n  child: 1\n",
    "--- # doc\na: 1\n",
    "# lead\n---   # doc\nb: 2\n",
    "ports: [8080,8443]\n",
    "labels: { app:  nginx , env: prod }\n",
    "items:\n-   spaced\n-   name: x\n    port: 1\n",
]


@pytest.mark.parametrize("text", ROUND_TRIP_CASES)
def test_round_trip_is_identity(text: str) -> None:
    assert yamlrt.dumps(yamlrt.loads(text)) == text


@pytest.mark.parametrize("name", ["services.yaml", "wide_indent.yaml"])
def test_fixture_round_trip(name: str) -> None:
    text = _fixture_text(name)
    assert yamlrt.dumps(yamlrt.loads(text)) == text


def test_nested_equal_indent_round_trip() -> None:
    text = textwrap.dedent(
        """
        outer:
          list:
          - a
          - b  # bee
          inner:
            deep:
            - x: 1
              y: 2
            - z
          tail: end
        """,
    ).lstrip()
    assert yamlrt.dumps(yamlrt.loads(text)) == text


def test_comment_layout_round_trip() -> None:
    text = textwrap.dedent(
        """
        # Header comment

        server:   # the server block
          host: localhost    # aligned
          port: 80           # aligned
            # oddly indented note
          tls: true

        # trailing
        """,
    ).lstrip()
    assert yamlrt.dumps(yamlrt.loads(text)) == text


def test_editing_one_value_changes_one_line() -> None:
    text = _fixture_text("services.yaml")
    root = yamlrt.loads(text)
    database = root["Database"]
    assert isinstance(database, yamlrt.CommentedMap)
    database["Port"] = 6543

    before = text.splitlines()
    after = yamlrt.dumps(root).splitlines()
    assert len(before) == len(after)
    changed = [(old, new) for old, new in zip(before, after, strict=True) if old != new]
    assert changed == [
        (
            "  Port: 5432         # PostgreSQL default",
            "  Port: 6543         # PostgreSQL default",
        ),
    ]


def test_reparse_after_edits_is_stable() -> None:
    root = yamlrt.loads(_fixture_text("services.yaml"))
    services = root["Services"]
    assert isinstance(services, yamlrt.CommentedSeq)
    services.append({"ServiceName": "Audit", "Port": 9003, "Tags": ["ops"]})
    first = yamlrt.dumps(root)
    second = yamlrt.dumps(yamlrt.loads(first))
    assert first == second
    assert yamlrt.loads(first).to_plain() == root.to_plain()


def test_round_trip_helper() -> None:
    text = _fixture_text("services.yaml")
    assert yamlrt.round_trip(text) == text
