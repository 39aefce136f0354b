"""Scalar typing, flow collections and inline-comment splitting."""

from __future__ import annotations

import math
import re
from collections.abc import Iterator
from typing import Final

from yamlrt.nodes import INT64_MAX
from yamlrt.nodes import INT64_MIN
from yamlrt.nodes import CommentedMap
from yamlrt.nodes import CommentedSeq
from yamlrt.nodes import Node
from yamlrt.nodes import Scalar

_INT_RE: Final = re.compile(r"[-+]?\d+")
_FLOAT_RE: Final = re.compile(r"[-+]?(?:\d+\.\d*|\.\d+)(?:[eE][-+]?\d+)?")
_SPECIAL_FLOATS: Final = {
    ".inf": math.inf,
    "+.inf": math.inf,
    "-.inf": -math.inf,
    ".nan": math.nan,
}
_ESCAPES: Final = {"\\": "\\", '"': '"', "n": "\n", "t": "\t", "r": "\r"}
_ESCAPE_RE: Final = re.compile(r"\\(.)", re.DOTALL)

# A quote only opens a quoted run at the start of a token.
_QUOTE_OPENERS: Final = " \t[{,:"
_SPECIAL_START: Final = frozenset("\"'{[*&!%@`|>")
_FLOW_INDICATORS: Final = frozenset(",[]{}")
_MIN_QUOTED_LEN: Final = 2


# Reading --------------------------------------------------------------------
def parse_scalar(text: str) -> Node:
    """Type a scalar (or single-line flow collection) from its source text.

    Precedence: null, boolean, flow collection, integer, float, quoted
    string, plain string.

    Returns:
        The typed value.
    """
    value = text.strip()
    if not value or value in {"null", "~"}:
        return None
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if value.startswith("[") and value.endswith("]"):
        return parse_flow_sequence(value)
    if value.startswith("{") and value.endswith("}"):
        return parse_flow_mapping(value)
    number = _parse_number(value)
    if number is not None:
        return number
    if is_quoted(value):
        return unquote(value)
    return value


def _parse_number(value: str) -> int | float | None:
    if _INT_RE.fullmatch(value):
        number = int(value)
        if INT64_MIN <= number <= INT64_MAX:
            return number
        return None
    if _FLOAT_RE.fullmatch(value):
        return float(value)
    return _SPECIAL_FLOATS.get(value.lower())


def is_quoted(value: str) -> bool:
    return (
        len(value) >= _MIN_QUOTED_LEN
        and value[0] in {'"', "'"}
        and value[-1] == value[0]
    )


def unquote(value: str) -> str:
    """Strip matching quotes and undo the escapes :func:`format_scalar` adds.

    Returns:
        The unquoted string, or ``value`` unchanged when it is not quoted.
    """
    if not is_quoted(value):
        return value
    body = value[1:-1]
    if value[0] == "'":
        return body.replace("''", "'")
    return _ESCAPE_RE.sub(
        lambda match: _ESCAPES.get(match.group(1), match.group(0)),
        body,
    )


def parse_flow_sequence(text: str) -> CommentedSeq:
    seq = CommentedSeq(flow_style=True)
    for raw in split_flow_items(text[1:-1]):
        item = raw.strip()
        if not item:
            continue
        value = parse_scalar(item)
        seq.append(value)
        record_source(seq, len(seq) - 1, value, item)
    seq.record_flow_source(text)
    return seq


def parse_flow_mapping(text: str) -> CommentedMap:
    mapping = CommentedMap(flow_style=True)
    for raw in split_flow_items(text[1:-1]):
        pair = raw.strip()
        if not pair:
            continue
        colon = find_flow_colon(pair)
        if colon == -1:
            raw_key, raw_value = pair, ""
        else:
            raw_key, raw_value = pair[:colon].strip(), pair[colon + 1 :].strip()
        key = unquote(raw_key)
        value = parse_scalar(raw_value) if raw_value else None
        mapping.put(key, value)
        if key != raw_key:
            mapping.record_key_source(key, raw_key)
        if raw_value:
            record_source(mapping, key, value, raw_value)
    mapping.record_flow_source(text)
    return mapping


def record_source(
    container: CommentedMap | CommentedSeq,
    key: str | int,
    value: Node,
    text: str,
) -> None:
    """Remember the text a scalar was read from so unchanged values keep it."""
    if isinstance(value, (CommentedMap, CommentedSeq)):
        return
    container.record_scalar_source(key, value, text)  # type: ignore[arg-type]


# Scanning -------------------------------------------------------------------
def iter_unquoted(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(index, char)`` for every character outside a quoted run.

    Single and double quotes toggle independently and do not nest. A quote
    opens only at the start of a token, so an apostrophe inside a word stays
    literal; backslash escapes are honoured inside double quotes.
    """
    quote: str | None = None
    escaped = False
    for idx, ch in enumerate(text):
        if quote is not None:
            if escaped:
                escaped = False
            elif ch == "\\" and quote == '"':
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in {'"', "'"} and (idx == 0 or text[idx - 1] in _QUOTE_OPENERS):
            quote = ch
            continue
        yield idx, ch


def split_inline_comment(text: str) -> tuple[str, str | None, int | None]:
    """Split ``text`` into its value and a trailing ``#`` comment.

    Returns:
        ``(value, comment, offset)`` where ``offset`` is the index of ``#``
        in ``text``; ``comment`` and ``offset`` are ``None`` when there is
        no comment.
    """
    for idx, ch in iter_unquoted(text):
        if ch == "#" and (idx == 0 or text[idx - 1].isspace()):
            return text[:idx].strip(), text[idx:].rstrip(), idx
    return text.strip(), None, None


def split_flow_items(content: str) -> list[str]:
    items: list[str] = []
    depth = 0
    start = 0
    for idx, ch in iter_unquoted(content):
        if ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
        elif ch == "," and depth == 0:
            items.append(content[start:idx])
            start = idx + 1
    tail = content[start:]
    if tail.strip():
        items.append(tail)
    return items


def find_flow_colon(text: str) -> int:
    depth = 0
    for idx, ch in iter_unquoted(text):
        if ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
        elif ch == ":" and depth == 0:
            return idx
    return -1


def flow_depth(text: str) -> int:
    """Return how many brackets/braces are left open at the end of ``text``."""
    depth = 0
    for _, ch in iter_unquoted(text):
        if ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
    return depth


# Writing --------------------------------------------------------------------
def needs_quoting(text: str) -> bool:
    """Tell whether a plain rendering of ``text`` would be ambiguous.

    Returns:
        True when the string must be double-quoted in block context.
    """
    if not text:
        return True
    if any(ch in text for ch in ":#\n\t\r"):
        return True
    if text != text.strip():
        return True
    if text in {"true", "false", "null"}:
        return True
    if text[0] in _SPECIAL_START or text == "-" or text.startswith("- "):
        return True
    reread = parse_scalar(text)
    return not (isinstance(reread, str) and reread == text)


def needs_flow_quoting(text: str) -> bool:
    return needs_quoting(text) or any(ch in _FLOW_INDICATORS for ch in text)


def escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )


def format_float(value: float) -> str:
    if math.isnan(value):
        return ".nan"
    if math.isinf(value):
        return ".inf" if value > 0 else "-.inf"
    rendered = repr(value)
    if "." in rendered:
        return rendered
    if "e" in rendered:
        mantissa, exponent = rendered.split("e")
        return f"{mantissa}.0e{exponent}"
    return f"{rendered}.0"


def format_scalar(value: Scalar, *, flow: bool = False) -> str:
    """Render a scalar in its canonical form.

    Returns:
        The YAML text for ``value``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    quote = needs_flow_quoting(value) if flow else needs_quoting(value)
    return f'"{escape(value)}"' if quote else value


def format_key(key: str, *, flow: bool = False) -> str:
    special = (
        not key
        or key != key.strip()
        or any(ch in ":#" for ch in key)
        or key[0] in _SPECIAL_START
        or key.startswith("- ")
        or (flow and any(ch in _FLOW_INDICATORS for ch in key))
    )
    return f'"{escape(key)}"' if special else key


def format_flow(node: CommentedMap | CommentedSeq) -> str:
    """Render a collection on a single line in flow style.

    Returns:
        The ``[...]`` or ``{...}`` text; the text it was read from while
        the collection is unchanged.
    """
    source = node.flow_source()
    if source is not None:
        return source
    if isinstance(node, CommentedSeq):
        parts = [_format_flow_value(node, idx, item) for idx, item in enumerate(node)]
        return "[" + ", ".join(parts) + "]"
    pairs: list[str] = []
    for key, value in node.items():
        key_text = node.key_source(key) or format_key(key, flow=True)
        pairs.append(f"{key_text}: {_format_flow_value(node, key, value)}")
    return "{" + ", ".join(pairs) + "}"


def _format_flow_value(
    container: CommentedMap | CommentedSeq,
    key: str | int,
    value: Node,
) -> str:
    if isinstance(value, (CommentedMap, CommentedSeq)):
        return format_flow(value)
    source = container.scalar_source(key)  # type: ignore[arg-type]
    if source is not None:
        return source
    return format_scalar(value, flow=True)
