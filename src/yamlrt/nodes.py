"""Mapping and sequence containers that carry comments and layout facts."""

from __future__ import annotations

from collections.abc import ItemsView
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import KeysView
from collections.abc import ValuesView
from typing import Any
from typing import Final

from yamlrt import DEFAULT_INDENT
from yamlrt.comments import Comment
from yamlrt.comments import CommentSlot
from yamlrt.comments import CommentToken
from yamlrt.comments import shift_keys_down
from yamlrt.comments import shift_keys_up

Scalar = None | bool | int | float | str

INT64_MIN: Final = -(2**63)
INT64_MAX: Final = 2**63 - 1


class StructuralAccessError(LookupError):
    """Raised when a key or index does not exist in the targeted container."""


def _same_scalar(left: object, right: object) -> bool:
    return type(left) is type(right) and left == right


def _same_tree(left: object, right: object) -> bool:
    if isinstance(left, dict) and isinstance(right, dict):
        return list(left) == list(right) and all(
            _same_tree(left[key], right[key]) for key in left
        )
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            _same_tree(a, b) for a, b in zip(left, right, strict=True)
        )
    return _same_scalar(left, right)


def _unchanged_flow(source: tuple[str, Any] | None, current: Any) -> str | None:
    if source is None:
        return None
    text, snapshot = source
    return text if _same_tree(current, snapshot) else None


class CommentedMap:
    """Ordered string-keyed mapping with attached comments.

    Values are restricted to :data:`Node`; plain ``dict``/``list`` values are
    converted on insertion. All mutation goes through :meth:`put` and
    :meth:`remove` so the comment slots never refer to a missing key.
    """

    def __init__(
        self,
        items: dict[str, Any] | None = None,
        *,
        flow_style: bool = False,
    ) -> None:
        super().__init__()
        self._items: dict[str, Node] = {}
        self._scalar_source: dict[str, tuple[Scalar, str]] = {}
        self._key_source: dict[str, str] = {}
        self._separator: dict[str, tuple[str, str]] = {}
        self._flow_source: tuple[str, Any] | None = None
        self.comment = Comment()
        self.flow_style = flow_style
        self.original_indent: int | None = None
        if items:
            for key, value in items.items():
                self.put(key, value)

    # Read access ------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __getitem__(self, key: str) -> Node:
        try:
            return self._items[key]
        except KeyError as exc:
            msg = f"no such key: {key!r}"
            raise StructuralAccessError(msg) from exc

    def get(self, key: str, default: Any = None) -> Any:
        return self._items.get(key, default)

    def keys(self) -> KeysView[str]:
        return self._items.keys()

    def values(self) -> ValuesView[Node]:
        return self._items.values()

    def items(self) -> ItemsView[str, Node]:
        return self._items.items()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CommentedMap):
            return self._items == other._items
        if isinstance(other, dict):
            return self._items == other
        return False

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        style = ", flow_style=True" if self.flow_style else ""
        return f"{type(self).__name__}({self._items!r}{style})"

    # Mutation ---------------------------------------------------------------
    def put(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value``; new keys are appended at the end."""
        self._items[key] = to_node(value)

    def __setitem__(self, key: str, value: Any) -> None:
        self.put(key, value)

    def remove(self, key: str) -> Node:
        """Delete ``key`` together with its comments.

        Returns:
            The removed value.

        Raises:
            StructuralAccessError: If ``key`` is not present.
        """
        self._require(key)
        self.comment.drop_slot(key)
        self._scalar_source.pop(key, None)
        self._key_source.pop(key, None)
        self._separator.pop(key, None)
        return self._items.pop(key)

    def __delitem__(self, key: str) -> None:
        self.remove(key)

    def clear(self) -> None:
        self._items.clear()
        self._scalar_source.clear()
        self._key_source.clear()
        self._separator.clear()
        self.comment = Comment()

    # Comments ---------------------------------------------------------------
    def set_inline_comment(self, key: str, text: str | None) -> None:
        """Attach (or with ``None`` clear) the comment after ``key``'s value."""
        self._require(key)
        token = CommentToken.comment(text) if text is not None else None
        self.comment.get_or_create_slot(key).value_eol = token

    def get_inline_comment(self, key: str) -> str | None:
        slot = self.comment.get_slot(key)
        if slot is None or slot.value_eol is None:
            return None
        return slot.value_eol.content

    def add_pre_comment(self, key: str, text: str) -> None:
        self._require(key)
        slot = self.comment.get_or_create_slot(key)
        slot.key_pre.append(CommentToken.comment(text))

    def add_blank_line_before(self, key: str) -> None:
        self._require(key)
        self.comment.get_or_create_slot(key).key_pre.append(CommentToken.blank_line())

    def slot(self, key: str) -> CommentSlot | None:
        return self.comment.get_slot(key)

    # Source form ------------------------------------------------------------
    def record_scalar_source(self, key: str, value: Scalar, text: str) -> None:
        self._scalar_source[key] = (value, text)

    def scalar_source(self, key: str) -> str | None:
        """Return the text ``key``'s scalar was read from, if still unchanged."""
        recorded = self._scalar_source.get(key)
        if recorded is None or key not in self._items:
            return None
        value, text = recorded
        return text if _same_scalar(self._items[key], value) else None

    def record_key_source(self, key: str, text: str) -> None:
        self._key_source[key] = text

    def key_source(self, key: str) -> str | None:
        return self._key_source.get(key)

    def record_separator(self, key: str, colon: str, gap: str) -> None:
        self._separator[key] = (colon, gap)

    def separator(self, key: str) -> tuple[str, str]:
        """Return the text through ``:`` and the whitespace before the value.

        Keys read from ``host  :   x`` give ``("  :", "   ")``; other keys
        give ``(":", " ")``.
        """
        return self._separator.get(key, (":", " "))

    def record_flow_source(self, text: str | None) -> None:
        self._flow_source = None if text is None else (text, self.to_plain())

    def flow_source(self) -> str | None:
        """Return the flow text this mapping was read from, if still unchanged."""
        return _unchanged_flow(self._flow_source, self.to_plain())

    # Conversion -------------------------------------------------------------
    def to_plain(self) -> dict[str, Any]:
        return {key: _to_plain(value) for key, value in self._items.items()}

    def _require(self, key: str) -> None:
        if key not in self._items:
            msg = f"no such key: {key!r}"
            raise StructuralAccessError(msg)


class RootMap(CommentedMap):
    """Top-level mapping of a document, with document-wide layout facts."""

    def __init__(self, items: dict[str, Any] | None = None) -> None:
        super().__init__(items)
        self.detected_indent: int = DEFAULT_INDENT
        self.has_document_marker = False
        self.has_trailing_newline = True
        self.line_ending = "\n"


class CommentedSeq:
    """List of nodes whose comment slots follow elements across inserts/removals."""

    def __init__(
        self,
        items: Iterable[Any] | None = None,
        *,
        flow_style: bool = False,
    ) -> None:
        super().__init__()
        self._items: list[Node] = []
        self._scalar_source: dict[str | int, tuple[Scalar, str]] = {}
        self._dash_gap: dict[str | int, str] = {}
        self._flow_source: tuple[str, Any] | None = None
        self.comment = Comment()
        self.flow_style = flow_style
        self.original_indent: int | None = None
        if items is not None:
            for item in items:
                self.append(item)

    # Read access ------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._items)

    def __contains__(self, value: object) -> bool:
        return value in self._items

    def __getitem__(self, index: int) -> Node:
        return self._items[self._normalize(index)]

    def get(self, index: int, default: Any = None) -> Any:
        if -len(self._items) <= index < len(self._items):
            return self._items[index]
        return default

    def index(self, value: object) -> int:
        return self._items.index(value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CommentedSeq):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return False

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        style = ", flow_style=True" if self.flow_style else ""
        return f"{type(self).__name__}({self._items!r}{style})"

    # Mutation ---------------------------------------------------------------
    def __setitem__(self, index: int, value: Any) -> None:
        self._items[self._normalize(index)] = to_node(value)

    def insert(self, index: int, value: Any) -> None:
        """Insert ``value`` before ``index``; ``index == len(self)`` appends.

        Raises:
            StructuralAccessError: If ``index`` is outside ``0..len(self)``.
        """
        size = len(self._items)
        position = index + size if index < 0 else index
        if not 0 <= position <= size:
            msg = f"insert index {index} out of range for sequence of {size}"
            raise StructuralAccessError(msg)
        node = to_node(value)
        self.comment.shift_slots_up(position)
        self._scalar_source = shift_keys_up(self._scalar_source, position)
        self._dash_gap = shift_keys_up(self._dash_gap, position)
        self._items.insert(position, node)

    def append(self, value: Any) -> None:
        self.insert(len(self._items), value)

    def extend(self, values: Iterable[Any]) -> None:
        for value in values:
            self.append(value)

    def remove(self, index: int) -> Node:
        """Delete the element at ``index`` together with its comments.

        Returns:
            The removed value.
        """
        position = self._normalize(index)
        self.comment.shift_slots_down(position)
        self._scalar_source = shift_keys_down(self._scalar_source, position)
        self._dash_gap = shift_keys_down(self._dash_gap, position)
        return self._items.pop(position)

    def pop(self, index: int = -1) -> Node:
        return self.remove(index)

    def __delitem__(self, index: int) -> None:
        self.remove(index)

    def clear(self) -> None:
        self._items.clear()
        self._scalar_source.clear()
        self._dash_gap.clear()
        self.comment = Comment()

    # Comments ---------------------------------------------------------------
    def set_inline_comment(self, index: int, text: str | None) -> None:
        """Attach (or with ``None`` clear) the comment on an item's dash line."""
        position = self._normalize(index)
        token = CommentToken.comment(text) if text is not None else None
        self.comment.get_or_create_slot(position).key_eol = token

    def get_inline_comment(self, index: int) -> str | None:
        slot = self.comment.get_slot(self._normalize(index))
        if slot is None or slot.key_eol is None:
            return None
        return slot.key_eol.content

    def add_pre_comment(self, index: int, text: str) -> None:
        slot = self.comment.get_or_create_slot(self._normalize(index))
        slot.key_pre.append(CommentToken.comment(text))

    def add_blank_line_before(self, index: int) -> None:
        slot = self.comment.get_or_create_slot(self._normalize(index))
        slot.key_pre.append(CommentToken.blank_line())

    def slot(self, index: int) -> CommentSlot | None:
        return self.comment.get_slot(index)

    # Source form ------------------------------------------------------------
    def record_scalar_source(self, index: int, value: Scalar, text: str) -> None:
        self._scalar_source[index] = (value, text)

    def scalar_source(self, index: int) -> str | None:
        recorded = self._scalar_source.get(index)
        if recorded is None or not 0 <= index < len(self._items):
            return None
        value, text = recorded
        return text if _same_scalar(self._items[index], value) else None

    def record_dash_gap(self, index: int, gap: str) -> None:
        self._dash_gap[index] = gap

    def dash_gap(self, index: int) -> str:
        """Return the whitespace between an item's ``-`` and its content."""
        return self._dash_gap.get(index, " ")

    def record_flow_source(self, text: str | None) -> None:
        self._flow_source = None if text is None else (text, self.to_plain())

    def flow_source(self) -> str | None:
        """Return the flow text this sequence was read from, if still unchanged."""
        return _unchanged_flow(self._flow_source, self.to_plain())

    # Conversion -------------------------------------------------------------
    def to_plain(self) -> list[Any]:
        return [_to_plain(item) for item in self._items]

    def _normalize(self, index: int) -> int:
        size = len(self._items)
        position = index + size if index < 0 else index
        if not 0 <= position < size:
            msg = f"index {index} out of range for sequence of {size}"
            raise StructuralAccessError(msg)
        return position


Node = Scalar | CommentedMap | CommentedSeq


def to_node(value: Any) -> Node:
    """Convert a plain Python value into a tree node.

    Containers that are already nodes are returned unchanged.

    Returns:
        The node for ``value``.

    Raises:
        TypeError: If ``value`` (or anything nested in it) is not a supported
            scalar, mapping or sequence, or is an integer outside the signed
            64-bit range.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if not INT64_MIN <= value <= INT64_MAX:
            msg = f"integer {value} does not fit in a signed 64-bit value"
            raise TypeError(msg)
        return value
    if value is None or isinstance(value, (bool, float, str)):
        return value
    if isinstance(value, (CommentedMap, CommentedSeq)):
        return value
    if isinstance(value, dict):
        mapping = CommentedMap()
        for key, item in value.items():
            if not isinstance(key, str):
                msg = f"mapping keys must be strings, got {type(key).__name__}"
                raise TypeError(msg)
            mapping.put(key, item)
        return mapping
    if isinstance(value, (list, tuple)):
        return CommentedSeq(value)
    msg = f"unsupported value type: {type(value).__name__}"
    raise TypeError(msg)


def _to_plain(value: Node) -> Any:
    if isinstance(value, (CommentedMap, CommentedSeq)):
        return value.to_plain()
    return value
