"""Indentation-driven parser that keeps comments and layout."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Final
from typing import Literal

from yamlrt import DEFAULT_INDENT
from yamlrt import TAB_WIDTH
from yamlrt.comments import CommentToken
from yamlrt.nodes import CommentedMap
from yamlrt.nodes import CommentedSeq
from yamlrt.nodes import Node
from yamlrt.nodes import RootMap
from yamlrt.scalars import flow_depth
from yamlrt.scalars import is_quoted
from yamlrt.scalars import parse_scalar
from yamlrt.scalars import record_source
from yamlrt.scalars import split_inline_comment
from yamlrt.scalars import unquote

logger = logging.getLogger(__name__)

_KEY_VALUE_RE: Final = re.compile(
    r"""
    (?P<indent>[ \t]*)
    (?P<key>
        "(?:[^"\\]|\\.)*"
      | '(?:[^']|'')*'
      | [^\s:\#\[\]{}"'][^\#]*?
    )
    [ \t]*:(?:[ \t]+(?P<rest>.*))?$
    """,
    re.VERBOSE,
)
_SEQ_ITEM_RE: Final = re.compile(r"(?P<indent>[ \t]*)-(?:[ \t]+(?P<rest>.*))?$")
_MARKER_RE: Final = re.compile(r"(?:---|\.\.\.)(?:\s.*)?$")

LineKind = Literal["blank", "comment", "marker", "content"]


@dataclass(slots=True)
class Line:
    number: int
    text: str
    indent: int
    offset: int
    kind: LineKind


def parse(text: str, /) -> RootMap:
    """Parse YAML text into a :class:`RootMap` that remembers its formatting.

    The parser does not reject input: lines it cannot place are skipped and
    unrecognized values are kept as plain strings.

    Returns:
        The root mapping of the document.
    """
    return _Parser(text).parse()


def _measure_indent(raw: str) -> tuple[int, int]:
    width = 0
    offset = 0
    for ch in raw:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += TAB_WIDTH
        else:
            break
        offset += 1
    return width, offset


def _classify(number: int, raw: str) -> Line:
    indent, offset = _measure_indent(raw)
    stripped = raw.strip()
    kind: LineKind
    if not stripped:
        kind = "blank"
    elif stripped.startswith("#"):
        kind = "comment"
    elif _MARKER_RE.match(raw):
        kind = "marker"
    else:
        kind = "content"
    return Line(number=number, text=raw, indent=indent, offset=offset, kind=kind)


def _is_seq_item(line: Line) -> bool:
    return _SEQ_ITEM_RE.match(line.text) is not None


def _gap(start: int, match: re.Match[str]) -> str | None:
    """Return the whitespace between ``start`` and the ``rest`` group if unusual."""
    if not match.group("rest"):
        return None
    gap = match.string[start : match.start("rest")]
    return None if gap == " " else gap


class _Parser:
    def __init__(self, text: str) -> None:
        super().__init__()
        self.line_ending = "\r\n" if "\r\n" in text else "\n"
        normalized = text.replace("\r\n", "\n")
        self.trailing_newline = normalized.endswith("\n")
        raw_lines = normalized.split("\n") if normalized else []
        if self.trailing_newline:
            raw_lines.pop()
        self.lines: list[Line] = [
            _classify(idx + 1, raw) for idx, raw in enumerate(raw_lines)
        ]
        self.index = 0
        self.pending: list[CommentToken] = []
        self.detected_indent = DEFAULT_INDENT

    # Public -----------------------------------------------------------------
    def parse(self) -> RootMap:
        root = RootMap()
        root.line_ending = self.line_ending
        root.has_trailing_newline = self.trailing_newline
        root.has_document_marker = self._detect_document_marker()
        self.detected_indent = self._detect_indent()
        root.detected_indent = self.detected_indent
        logger.debug(
            "%d lines, indent %d, document marker %s",
            len(self.lines),
            self.detected_indent,
            root.has_document_marker,
        )
        if root.has_document_marker:
            root.comment.container_eol = self._skip_preamble()
            root.comment.container_pre.extend(self._take_pending())
        while self.index < len(self.lines):
            self._parse_mapping(root, 0)
            if self.index < len(self.lines):
                line = self.lines[self.index]
                logger.debug(
                    "line %d outside the root mapping, skipped: %r",
                    line.number,
                    line.text,
                )
                self.index += 1
        root.comment.end.extend(self._take_pending())
        return root

    # Preprocessing ----------------------------------------------------------
    def _detect_document_marker(self) -> bool:
        for line in self.lines:
            if line.kind == "marker" and line.text.startswith("---"):
                return True
            if line.kind == "content":
                break
        return False

    def _skip_preamble(self) -> CommentToken | None:
        """Buffer the comments above ``---`` and step past the marker.

        Returns:
            The comment after ``---`` on the marker line, if there is one.
        """
        while not self.lines[self.index].text.startswith("---"):
            self._buffer_trivia(self.lines[self.index])
        marker = self.lines[self.index]
        self.index += 1
        _, comment, offset = split_inline_comment(marker.text[len("---") :])
        if comment is None or offset is None:
            return None
        column = len("---") + offset
        return CommentToken(comment, line=marker.number, column=column)

    def _detect_indent(self) -> int:
        for line in self.lines:
            if line.kind == "content" and line.indent > 0:
                return line.indent
        return DEFAULT_INDENT

    # Block structure --------------------------------------------------------
    def _parse_mapping(self, mapping: CommentedMap, expected_indent: int) -> None:
        while self.index < len(self.lines):
            line = self.lines[self.index]
            if self._buffer_trivia(line):
                continue
            if line.indent < expected_indent:
                return
            if _is_seq_item(line) and line.indent <= expected_indent:
                return
            match = _KEY_VALUE_RE.match(line.text)
            if match is not None and line.indent == expected_indent:
                self.index += 1
                self._read_entry(mapping, match, expected_indent, line)
                continue
            logger.debug(
                "line %d not a key at indent %d, skipped: %r",
                line.number,
                expected_indent,
                line.text,
            )
            self.index += 1

    def _parse_sequence(self, seq: CommentedSeq, list_indent: int) -> None:
        while self.index < len(self.lines):
            line = self.lines[self.index]
            if self._buffer_trivia(line):
                continue
            if line.indent < list_indent:
                return
            match = _SEQ_ITEM_RE.match(line.text)
            if match is None or line.indent != list_indent:
                return
            position = len(seq)
            tokens = self._take_pending()
            self.index += 1
            value, source, eol = self._parse_list_item(match, line)
            seq.append(value)
            if tokens or eol is not None:
                slot = seq.comment.get_or_create_slot(position)
                slot.key_pre.extend(tokens)
                slot.key_eol = eol
            if source is not None:
                record_source(seq, position, value, source)
            gap = _gap(match.end("indent") + 1, match)
            if gap is not None:
                seq.record_dash_gap(position, gap)

    def _parse_list_item(
        self,
        match: re.Match[str],
        line: Line,
    ) -> tuple[Node, str | None, CommentToken | None]:
        rest = match.group("rest") or ""
        content, comment, offset = split_inline_comment(rest)
        eol: CommentToken | None = None
        if comment is not None and offset is not None:
            column = match.start("rest") + offset
            eol = CommentToken(comment, line=line.number, column=column)

        entry = _KEY_VALUE_RE.match(content)
        if entry is not None:
            # Keys of a compact item line up with the first one.
            content_indent = line.indent + match.start("rest") - line.offset
            item = CommentedMap()
            self._read_entry(item, entry, content_indent, line, eol=eol)
            self._parse_compact_mapping(item, content_indent, line.indent)
            return item, None, None
        if content:
            value, source = self._resolve_value(content, line.indent)
            return value, source, eol
        return self._parse_nested_item(line.indent + 1), None, eol

    def _parse_compact_mapping(
        self,
        mapping: CommentedMap,
        content_indent: int,
        dash_indent: int,
    ) -> None:
        """Read the keys that follow ``- first: value`` inside the same item."""
        while self.index < len(self.lines):
            line = self.lines[self.index]
            if self._buffer_trivia(line):
                continue
            if _is_seq_item(line) and line.indent <= dash_indent:
                return
            if line.indent < content_indent:
                return
            match = _KEY_VALUE_RE.match(line.text)
            if match is None or line.indent != content_indent:
                return
            self.index += 1
            self._read_entry(mapping, match, content_indent, line)

    def _read_entry(
        self,
        mapping: CommentedMap,
        match: re.Match[str],
        key_indent: int,
        line: Line,
        *,
        eol: CommentToken | None = None,
    ) -> None:
        raw_key = match.group("key").strip()
        key = unquote(raw_key) if is_quoted(raw_key) else raw_key
        rest = match.group("rest") or ""
        value_text, comment, offset = split_inline_comment(rest)
        if comment is not None and offset is not None:
            column = match.start("rest") + offset
            eol = CommentToken(comment, line=line.number, column=column)

        tokens = self._take_pending()
        if tokens or eol is not None:
            slot = mapping.comment.get_or_create_slot(key)
            slot.key_pre.extend(tokens)
            slot.value_eol = eol

        value, source = self._resolve_value(value_text, key_indent)
        mapping.put(key, value)
        if raw_key != key:
            mapping.record_key_source(key, raw_key)
        key_end = match.end("key")
        colon = match.string[key_end : match.string.index(":", key_end) + 1]
        gap = _gap(key_end + len(colon), match) if value_text else None
        if colon != ":" or gap is not None:
            mapping.record_separator(key, colon, gap or " ")
        if source is not None:
            record_source(mapping, key, value, source)

    def _resolve_value(self, text: str, key_indent: int) -> tuple[Node, str | None]:
        if not text:
            return self._parse_block_value(key_indent), None
        if text[0] in "[{" and flow_depth(text) > 0:
            value = parse_scalar(self._collect_flow(text, key_indent))
            if isinstance(value, (CommentedMap, CommentedSeq)):
                # Written back on a single line.
                value.record_flow_source(None)
            return value, None
        return parse_scalar(text), text

    def _parse_block_value(self, key_indent: int) -> Node:
        upcoming = self._peek_content()
        if upcoming is None:
            return None
        if _is_seq_item(upcoming):
            # A sequence at the key's own column still belongs to the key.
            if upcoming.indent >= key_indent:
                return self._parse_sequence_at(upcoming.indent)
            return None
        if upcoming.indent > key_indent:
            return self._parse_mapping_at(upcoming.indent)
        return None

    def _parse_nested_item(self, min_indent: int) -> Node:
        upcoming = self._peek_content()
        if upcoming is None or upcoming.indent < min_indent:
            return None
        if _is_seq_item(upcoming):
            return self._parse_sequence_at(upcoming.indent)
        return self._parse_mapping_at(upcoming.indent)

    def _parse_sequence_at(self, indent: int) -> CommentedSeq:
        seq = CommentedSeq()
        seq.original_indent = indent
        self._parse_sequence(seq, indent)
        return seq

    def _parse_mapping_at(self, indent: int) -> CommentedMap:
        mapping = CommentedMap()
        mapping.original_indent = indent
        self._parse_mapping(mapping, indent)
        return mapping

    def _collect_flow(self, text: str, key_indent: int) -> str:
        """Join a flow collection that continues over several lines."""
        parts = [text]
        depth = flow_depth(text)
        while depth > 0 and self.index < len(self.lines):
            line = self.lines[self.index]
            fragment, _, _ = split_inline_comment(line.text)
            closing = fragment[:1] in {"]", "}"}
            if line.kind == "content" and line.indent <= key_indent and not closing:
                logger.debug("line %d: unterminated flow collection", line.number)
                break
            self.index += 1
            if fragment:
                parts.append(fragment)
                depth += flow_depth(fragment)
        return " ".join(parts)

    # Helpers ----------------------------------------------------------------
    def _buffer_trivia(self, line: Line) -> bool:
        if line.kind == "blank":
            self.pending.append(CommentToken.blank_line(line.number))
        elif line.kind == "comment":
            self.pending.append(
                CommentToken(line.text.strip(), line=line.number, column=line.offset),
            )
        elif line.kind != "marker":
            return False
        self.index += 1
        return True

    def _take_pending(self) -> list[CommentToken]:
        tokens = self.pending
        self.pending = []
        return tokens

    def _peek_content(self) -> Line | None:
        for line in self.lines[self.index :]:
            if line.kind == "content":
                return line
        return None
