"""Tests for scalar typing, flow collections and comment splitting."""

from __future__ import annotations

import math

import pytest

from yamlrt.nodes import CommentedMap
from yamlrt.nodes import CommentedSeq
from yamlrt.scalars import format_flow
from yamlrt.scalars import format_float
from yamlrt.scalars import format_key
from yamlrt.scalars import format_scalar
from yamlrt.scalars import parse_scalar
from yamlrt.scalars import split_inline_comment
from yamlrt.scalars import unquote


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", None),
        ("null", None),
        ("~", None),
        ("true", True),
        ("False", False),
        ("42", 42),
        ("-7", -7),
        ("3.14", 3.14),
        ("1.5e3", 1500.0),
        ("'quoted'", "quoted"),
        ('"double"', "double"),
        ("plain text", "plain text"),
        ("1A1", "1A1"),
        ("1E", "1E"),
        ("7C", "7C"),
        ("NO", "NO"),
        ("YES", "YES"),
        ("http://example.com:80/x", "http://example.com:80/x"),
    ],
)
def test_parse_scalar_typing(text: str, expected: object) -> None:
    value = parse_scalar(text)
    assert value == expected
    assert type(value) is type(expected)


def test_parse_scalar_special_floats() -> None:
    assert parse_scalar(".inf") == math.inf
    assert parse_scalar("-.inf") == -math.inf
    assert math.isnan(parse_scalar(".nan"))  # type: ignore[arg-type]


def test_out_of_range_integer_stays_string() -> None:
    assert parse_scalar("99999999999999999999") == "99999999999999999999"


def test_unquote_escapes() -> None:
    assert unquote('"line\\nbreak"') == "line\nbreak"
    assert unquote('"say \\"hi\\""') == 'say "hi"'
    assert unquote("'it''s'") == "it's"
    assert unquote("plain") == "plain"


def test_flow_sequence_types_items() -> None:
    seq = parse_scalar("[8080, 8443, 9000]")
    assert isinstance(seq, CommentedSeq)
    assert seq.flow_style
    assert seq == [8080, 8443, 9000]


def test_flow_mapping() -> None:
    mapping = parse_scalar("{app: nginx, env: prod}")
    assert isinstance(mapping, CommentedMap)
    assert mapping.flow_style
    assert mapping == {"app": "nginx", "env": "prod"}


def test_nested_flow_collections() -> None:
    seq = parse_scalar("[1, [2, 3], {a: b}]")
    assert isinstance(seq, CommentedSeq)
    assert seq.to_plain() == [1, [2, 3], {"a": "b"}]


def test_flow_items_respect_quotes() -> None:
    seq = parse_scalar("[\"hello, world\", 'key: value']")
    assert seq == ["hello, world", "key: value"]
    rendered = format_flow(seq)  # type: ignore[arg-type]
    assert rendered == "[\"hello, world\", 'key: value']"


def test_flow_mapping_key_without_value() -> None:
    assert parse_scalar("{a, b: 1}") == {"a": None, "b": 1}


def test_empty_flow_collections() -> None:
    assert parse_scalar("[]") == []
    assert parse_scalar("{}") == {}


@pytest.mark.parametrize(
    ("text", "value", "comment"),
    [
        ("8080  # server port", "8080", "# server port"),
        ("'a # b'  # real comment", "'a # b'", "# real comment"),
        ('"x # y"', '"x # y"', None),
        ("value#not-a-comment", "value#not-a-comment", None),
        ("it's here # note", "it's here", "# note"),
        ("# only", "", "# only"),
    ],
)
def test_split_inline_comment(text: str, value: str, comment: str | None) -> None:
    got_value, got_comment, offset = split_inline_comment(text)
    assert got_value == value
    assert got_comment == comment
    if comment is not None:
        assert offset is not None
        assert text[offset:] == comment


def test_format_scalar_quotes_ambiguous_strings() -> None:
    assert format_scalar("8080") == '"8080"'
    assert format_scalar("true") == '"true"'
    assert format_scalar("") == '""'
    assert format_scalar("a: b") == '"a: b"'
    assert format_scalar(" padded") == '" padded"'
    assert format_scalar("line\nbreak") == '"line\\nbreak"'
    assert format_scalar("plain") == "plain"


def test_format_scalar_non_strings() -> None:
    assert format_scalar(None) == "null"
    assert format_scalar(True) == "true"
    assert format_scalar(12) == "12"
    assert format_scalar(1.5) == "1.5"


def test_format_float_always_reparses_as_float() -> None:
    assert format_float(1e20) == "1.0e+20"
    assert format_float(math.inf) == ".inf"
    assert format_float(-math.inf) == "-.inf"
    assert format_float(math.nan) == ".nan"
    assert isinstance(parse_scalar(format_float(1e20)), float)


def test_format_scalar_flow_quotes_indicators() -> None:
    assert format_scalar("a,b") == "a,b"
    assert format_scalar("a,b", flow=True) == '"a,b"'


def test_format_key() -> None:
    assert format_key("name") == "name"
    assert format_key("a: b") == '"a: b"'
    assert format_key("") == '""'


def test_format_flow_of_built_collections() -> None:
    seq = CommentedSeq([1, "two", None, {"k": "v"}], flow_style=True)
    assert format_flow(seq) == "[1, two, null, {k: v}]"
