"""Serialize a parsed tree back to text, restoring comments and layout."""

from __future__ import annotations

from dataclasses import dataclass

from yamlrt.comments import CommentSlot
from yamlrt.comments import CommentToken
from yamlrt.nodes import CommentedMap
from yamlrt.nodes import CommentedSeq
from yamlrt.nodes import Node
from yamlrt.nodes import RootMap
from yamlrt.scalars import format_flow
from yamlrt.scalars import format_key
from yamlrt.scalars import format_scalar


@dataclass(frozen=True, slots=True)
class WriteOptions:
    """Overrides applied on top of the layout facts recorded on the root.

    ``None`` means "as parsed".
    """

    force_document_marker: bool = False
    trailing_newline: bool | None = None
    line_ending: str | None = None


def write(root: RootMap, options: WriteOptions | None = None, /) -> str:
    """Render ``root`` as YAML text.

    An unmodified tree produced by :func:`yamlrt.parser.parse` renders back
    to the exact input text.

    Returns:
        The document text.
    """
    return _Writer(root, options or WriteOptions()).render()


class _Writer:
    def __init__(self, root: RootMap, options: WriteOptions) -> None:
        super().__init__()
        self._root = root
        self._options = options
        self._step = root.detected_indent
        self._parts: list[str] = []

    def render(self) -> str:
        root = self._root
        # Root-level leading comments sit above the document marker.
        for token in root.comment.container_pre:
            self._write_token(token, 0)
        if self._options.force_document_marker or root.has_document_marker:
            self._parts.append("---")
            self._append_eol(root.comment.container_eol, len("---"))
            self._parts.append("\n")
        self._write_mapping(root, 0)
        for token in root.comment.end:
            self._write_token(token, 0)

        text = "".join(self._parts)
        trailing = self._options.trailing_newline
        if trailing is None:
            trailing = root.has_trailing_newline
        if not trailing and text.endswith("\n"):
            text = text[:-1]
        ending = self._options.line_ending or root.line_ending
        if ending != "\n":
            text = text.replace("\n", ending)
        return text

    # Block mappings ---------------------------------------------------------
    def _write_mapping(self, mapping: CommentedMap, indent: int) -> None:
        for key, value in mapping.items():
            slot = mapping.slot(key)
            if slot is not None:
                for token in slot.key_pre:
                    self._write_token(token, indent)
            key_text = mapping.key_source(key) or format_key(key)
            colon, _ = mapping.separator(key)
            self._parts.append(" " * indent + key_text + colon)
            self._write_value(
                mapping,
                key,
                value,
                indent,
                indent + len(key_text) + len(colon),
                slot,
                slot.value_eol if slot is not None else None,
            )

    def _write_value(  # noqa: PLR0913, PLR0917
        self,
        container: CommentedMap,
        key: str,
        value: Node,
        indent: int,
        key_end: int,
        slot: CommentSlot | None,
        eol: CommentToken | None,
    ) -> None:
        _, gap = container.separator(key)
        if isinstance(value, (CommentedMap, CommentedSeq)):
            if value.flow_style or not value:
                rendered = format_flow(value)
                self._parts.append(gap + rendered)
                self._append_eol(eol, key_end + len(gap) + len(rendered))
                self._parts.append("\n")
                return
            self._append_eol(eol or value.comment.container_eol, key_end)
            self._parts.append("\n")
            if slot is not None:
                for token in slot.value_pre:
                    self._write_token(token, indent + self._step)
            if isinstance(value, CommentedMap):
                self._write_nested_mapping(value, self._nested_indent(value, indent))
            else:
                self._write_nested_sequence(value, self._seq_indent(value, indent))
            return
        source = container.scalar_source(key)
        if value is None and source is None:
            self._append_eol(eol, key_end)
            self._parts.append("\n")
            return
        text = source if source is not None else format_scalar(value)
        self._parts.append(gap + text)
        self._append_eol(eol, key_end + len(gap) + len(text))
        self._parts.append("\n")

    def _write_nested_mapping(self, mapping: CommentedMap, indent: int) -> None:
        for token in mapping.comment.container_pre:
            self._write_token(token, indent)
        self._write_mapping(mapping, indent)
        for token in mapping.comment.end:
            self._write_token(token, indent)

    # Block sequences --------------------------------------------------------
    def _write_nested_sequence(self, seq: CommentedSeq, indent: int) -> None:
        for token in seq.comment.container_pre:
            self._write_token(token, indent)
        self._write_sequence(seq, indent)
        for token in seq.comment.end:
            self._write_token(token, indent)

    def _write_sequence(self, seq: CommentedSeq, indent: int) -> None:
        dash = " " * indent + "-"
        for position, item in enumerate(seq):
            slot = seq.slot(position)
            if slot is not None:
                for token in slot.key_pre:
                    self._write_token(token, indent)
            eol = slot.key_eol if slot is not None else None
            gap = seq.dash_gap(position)
            content_column = indent + 1 + len(gap)

            if isinstance(item, (CommentedMap, CommentedSeq)):
                if item.flow_style or not item:
                    rendered = format_flow(item)
                    self._parts.append(dash + gap + rendered)
                    self._append_eol(eol, content_column + len(rendered))
                    self._parts.append("\n")
                elif isinstance(item, CommentedMap) and item.original_indent is None:
                    self._write_compact_item(item, indent, gap, eol)
                else:
                    # Block collection below a bare dash.
                    self._parts.append(dash)
                    self._append_eol(eol, indent + 1)
                    self._parts.append("\n")
                    child = self._nested_indent(item, indent)
                    if isinstance(item, CommentedMap):
                        self._write_nested_mapping(item, child)
                    else:
                        self._write_nested_sequence(item, child)
                continue

            source = seq.scalar_source(position)
            if item is None and source is None:
                self._parts.append(dash)
                self._append_eol(eol, indent + 1)
            else:
                text = source if source is not None else format_scalar(item)
                self._parts.append(dash + gap + text)
                self._append_eol(eol, content_column + len(text))
            self._parts.append("\n")

    def _write_compact_item(
        self,
        mapping: CommentedMap,
        dash_indent: int,
        dash_gap: str,
        item_eol: CommentToken | None,
    ) -> None:
        """Write ``- first: value`` with the other keys aligned under ``first``."""
        content_indent = dash_indent + 1 + len(dash_gap)
        for token in mapping.comment.container_pre:
            self._write_token(token, dash_indent)
        for position, (key, value) in enumerate(mapping.items()):
            slot = mapping.slot(key)
            key_text = mapping.key_source(key) or format_key(key)
            colon, _ = mapping.separator(key)
            eol = slot.value_eol if slot is not None else None
            if position == 0:
                if slot is not None:
                    for token in slot.key_pre:
                        self._write_token(token, dash_indent)
                lead = " " * dash_indent + "-" + dash_gap
                eol = eol or item_eol
            else:
                if slot is not None:
                    for token in slot.key_pre:
                        self._write_token(token, content_indent)
                lead = " " * content_indent
            self._parts.append(lead + key_text + colon)
            key_end = content_indent + len(key_text) + len(colon)
            self._write_value(mapping, key, value, content_indent, key_end, slot, eol)
        for token in mapping.comment.end:
            self._write_token(token, content_indent)

    # Layout helpers ---------------------------------------------------------
    def _nested_indent(
        self,
        node: CommentedMap | CommentedSeq,
        parent_indent: int,
    ) -> int:
        recorded = node.original_indent
        if recorded is not None and recorded > parent_indent:
            return recorded
        return parent_indent + self._step

    def _seq_indent(self, seq: CommentedSeq, key_indent: int) -> int:
        recorded = seq.original_indent
        if recorded is not None and recorded >= key_indent:
            return recorded
        return key_indent + self._step

    def _write_token(self, token: CommentToken, default_indent: int) -> None:
        if token.is_blank_line():
            self._parts.append("\n")
            return
        column = token.column if token.column is not None else default_indent
        self._parts.append(" " * column + token.value + "\n")

    def _append_eol(self, token: CommentToken | None, current_column: int) -> None:
        """Place an inline comment at its recorded column, or two spaces out."""
        if token is None or token.is_blank_line():
            return
        target = token.column
        if target is not None and target > current_column:
            self._parts.append(" " * (target - current_column))
        else:
            self._parts.append("  ")
        self._parts.append(token.value)
