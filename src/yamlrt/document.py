"""Path-based editing facade over a parsed document."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from typing import Final

from yamlrt.nodes import CommentedMap
from yamlrt.nodes import CommentedSeq
from yamlrt.nodes import Node
from yamlrt.nodes import RootMap
from yamlrt.nodes import StructuralAccessError
from yamlrt.parser import parse
from yamlrt.scalars import format_float
from yamlrt.writer import WriteOptions
from yamlrt.writer import write

logger = logging.getLogger(__name__)

PathSegment = str | int
PathLike = str | Sequence[PathSegment]

_SEGMENT_RE: Final = re.compile(
    r"\.(?P<dotted>[^.\[\]]+)|(?P<bare>[^.\[\]]+)|\[(?P<index>-?\d+)\]",
)
_TRUE_STRINGS: Final = frozenset({"true", "yes", "on"})
_FALSE_STRINGS: Final = frozenset({"false", "no", "off"})
_MISSING: Final = object()


class PathSyntaxError(ValueError):
    """Raised when a path string such as ``"a.b[0]"`` cannot be parsed."""


def parse_path(path: PathLike) -> list[PathSegment]:
    """Split ``path`` into key and index segments.

    ``"servers[0].port"`` becomes ``["servers", 0, "port"]``. A sequence of
    segments is accepted as-is.

    Returns:
        The list of segments.

    Raises:
        PathSyntaxError: If the path is empty or malformed.
    """
    if isinstance(path, str):
        segments = _split_path(path)
    else:
        segments = list(path)
    if not segments:
        msg = "path must contain at least one segment"
        raise PathSyntaxError(msg)
    return segments


def _split_path(path: str) -> list[PathSegment]:
    segments: list[PathSegment] = []
    position = 0
    while position < len(path):
        match = _SEGMENT_RE.match(path, position)
        if (
            match is None
            or (match.group("bare") is not None and position > 0)
            or (match.group("dotted") is not None and position == 0)
        ):
            msg = f"invalid path {path!r} at offset {position}"
            raise PathSyntaxError(msg)
        index = match.group("index")
        if index is not None:
            segments.append(int(index))
        else:
            segments.append(match.group("dotted") or match.group("bare"))
        position = match.end()
    return segments


def _format_path(segments: Sequence[PathSegment]) -> str:
    parts: list[str] = []
    for segment in segments:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        else:
            parts.append(f".{segment}" if parts else segment)
    return "".join(parts)


def _step(node: Node, segment: PathSegment, segments: Sequence[PathSegment]) -> Node:
    if isinstance(segment, int):
        if not isinstance(node, CommentedSeq):
            msg = f"{_format_path(segments)}: index {segment} applied to a non-sequence"
            raise StructuralAccessError(msg)
        return node[segment]
    if not isinstance(node, CommentedMap):
        msg = f"{_format_path(segments)}: key {segment!r} applied to a non-mapping"
        raise StructuralAccessError(msg)
    return node[segment]


class YamlDocument:
    """A parsed YAML document edited through dotted paths.

    The tree stays available as :attr:`root` for direct manipulation; every
    path helper is a thin layer over the container methods.
    """

    def __init__(self, root: RootMap | None = None, path: Path | None = None) -> None:
        super().__init__()
        self.root = root if root is not None else RootMap()
        self.path = path

    # Construction -----------------------------------------------------------
    @classmethod
    def loads(cls, text: str) -> YamlDocument:
        return cls(parse(text))

    @classmethod
    def load(cls, path: str | Path) -> YamlDocument:
        """Read and parse ``path`` as UTF-8.

        Returns:
            The loaded document, remembering ``path`` for :meth:`save`.
        """
        target = Path(path)
        with target.open(encoding="utf-8", newline="") as handle:
            text = handle.read()
        logger.info("loaded %s (%d bytes)", target, len(text))
        return cls(parse(text), target)

    @classmethod
    def create(cls) -> YamlDocument:
        return cls()

    # Output -----------------------------------------------------------------
    def dumps(self, *, force_document_marker: bool = False) -> str:
        options = WriteOptions(force_document_marker=force_document_marker)
        return write(self.root, options)

    def save(self, path: str | Path | None = None) -> None:
        """Write the document to ``path`` or to the file it was loaded from.

        Raises:
            ValueError: If no path is given and the document has none.
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            msg = "document has no path; pass one to save()"
            raise ValueError(msg)
        text = self.dumps()
        with target.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        self.path = target
        logger.info("saved %s (%d bytes)", target, len(text))

    # Path access ------------------------------------------------------------
    def get(self, path: PathLike, default: Any = None) -> Any:
        """Return the node at ``path``, or ``default`` when it does not exist."""
        try:
            return self._lookup(parse_path(path))
        except StructuralAccessError:
            return default

    def exists(self, path: PathLike) -> bool:
        return self.get(path, _MISSING) is not _MISSING

    def set(self, path: PathLike, value: Any) -> None:
        """Assign ``value`` at ``path``.

        Missing intermediate keys are created as mappings (or as sequences
        when the next segment is an index). An index equal to the sequence
        length appends.

        Raises:
            StructuralAccessError: If a segment targets the wrong container
                kind or an index is out of range.
        """
        segments = parse_path(path)
        node: Node = self.root
        for position, segment in enumerate(segments[:-1]):
            if isinstance(node, CommentedMap) and isinstance(segment, str):
                if segment not in node:
                    upcoming = segments[position + 1]
                    node.put(
                        segment,
                        CommentedSeq() if isinstance(upcoming, int) else CommentedMap(),
                    )
            node = _step(node, segment, segments[: position + 1])

        last = segments[-1]
        if isinstance(node, CommentedSeq) and isinstance(last, int):
            if last == len(node):
                node.append(value)
            else:
                node[last] = value
        elif isinstance(node, CommentedMap) and isinstance(last, str):
            node.put(last, value)
        else:
            msg = f"{_format_path(segments)}: cannot assign into {type(node).__name__}"
            raise StructuralAccessError(msg)
        logger.debug("set %s", _format_path(segments))

    def remove(self, path: PathLike) -> Node:
        """Delete the node at ``path`` along with its comments.

        Returns:
            The removed value.
        """
        parent, last = self._parent(path)
        removed = parent.remove(last)  # type: ignore[arg-type]
        logger.debug("removed %s", path)
        return removed

    # Typed getters ----------------------------------------------------------
    def get_str(self, path: PathLike, default: str | None = None) -> str | None:
        value = self._scalar_at(path)
        if value is _MISSING:
            return default
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            return format_float(value)
        return str(value)

    def get_int(self, path: PathLike, default: int | None = None) -> int | None:
        """Return the value at ``path`` as an ``int``.

        Strings such as ``"42"`` are converted; floats only when integral.

        Raises:
            ValueError: If the value cannot be read as an integer.
        """
        value = self._scalar_at(path)
        if value is _MISSING:
            return default
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError as exc:
                msg = f"{path}: {value!r} is not an integer"
                raise ValueError(msg) from exc
        msg = f"{path}: {value!r} is not an integer"
        raise ValueError(msg)

    def get_float(self, path: PathLike, default: float | None = None) -> float | None:
        value = self._scalar_at(path)
        if value is _MISSING:
            return default
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError as exc:
                msg = f"{path}: {value!r} is not a number"
                raise ValueError(msg) from exc
        msg = f"{path}: {value!r} is not a number"
        raise ValueError(msg)

    def get_bool(self, path: PathLike, default: bool | None = None) -> bool | None:
        value = self._scalar_at(path)
        if value is _MISSING:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        msg = f"{path}: {value!r} is not a boolean"
        raise ValueError(msg)

    def get_list(
        self,
        path: PathLike,
        default: CommentedSeq | None = None,
    ) -> CommentedSeq | None:
        value = self.get(path, _MISSING)
        if value is _MISSING or value is None:
            return default
        if not isinstance(value, CommentedSeq):
            msg = f"{path}: expected a sequence, got {type(value).__name__}"
            raise ValueError(msg)
        return value

    def get_map(
        self,
        path: PathLike,
        default: CommentedMap | None = None,
    ) -> CommentedMap | None:
        value = self.get(path, _MISSING)
        if value is _MISSING or value is None:
            return default
        if not isinstance(value, CommentedMap):
            msg = f"{path}: expected a mapping, got {type(value).__name__}"
            raise ValueError(msg)
        return value

    # Comments ---------------------------------------------------------------
    def set_comment(self, path: PathLike, text: str | None) -> None:
        """Set (or with ``None`` clear) the inline comment of the entry at ``path``."""
        parent, last = self._parent(path)
        parent.set_inline_comment(last, text)  # type: ignore[arg-type]

    def get_comment(self, path: PathLike) -> str | None:
        if not self.exists(path):
            return None
        parent, last = self._parent(path)
        return parent.get_inline_comment(last)  # type: ignore[arg-type]

    def add_pre_comment(self, path: PathLike, text: str) -> None:
        parent, last = self._parent(path)
        parent.add_pre_comment(last, text)  # type: ignore[arg-type]

    def add_blank_line_before(self, path: PathLike) -> None:
        parent, last = self._parent(path)
        parent.add_blank_line_before(last)  # type: ignore[arg-type]

    # Internals --------------------------------------------------------------
    def _lookup(self, segments: Sequence[PathSegment]) -> Node:
        node: Node = self.root
        for position, segment in enumerate(segments):
            node = _step(node, segment, segments[: position + 1])
        return node

    def _parent(
        self,
        path: PathLike,
    ) -> tuple[CommentedMap | CommentedSeq, PathSegment]:
        segments = parse_path(path)
        parent = self._lookup(segments[:-1])
        last = segments[-1]
        if isinstance(parent, CommentedMap) and isinstance(last, str):
            return parent, last
        if isinstance(parent, CommentedSeq) and isinstance(last, int):
            return parent, last
        msg = f"{_format_path(segments)}: no entry {last!r} in {type(parent).__name__}"
        raise StructuralAccessError(msg)

    def _scalar_at(self, path: PathLike) -> Any:
        value = self.get(path, _MISSING)
        if value is None:
            return _MISSING
        if isinstance(value, (CommentedMap, CommentedSeq)):
            msg = f"{path}: expected a scalar, got {type(value).__name__}"
            raise ValueError(msg)
        return value
