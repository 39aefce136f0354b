"""Round-trip YAML: edit configuration files without losing comments or layout."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__version__: Final = "0.1.0"

DEFAULT_INDENT: Final = 2
TAB_WIDTH: Final = 4

try:
    from beartype.claw import beartype_this_package

    beartype_this_package()
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pass

from yamlrt.comments import Comment  # noqa: E402
from yamlrt.comments import CommentSlot  # noqa: E402
from yamlrt.comments import CommentToken  # noqa: E402
from yamlrt.document import PathSyntaxError  # noqa: E402
from yamlrt.document import YamlDocument  # noqa: E402
from yamlrt.nodes import CommentedMap  # noqa: E402
from yamlrt.nodes import CommentedSeq  # noqa: E402
from yamlrt.nodes import Node  # noqa: E402
from yamlrt.nodes import RootMap  # noqa: E402
from yamlrt.nodes import Scalar  # noqa: E402
from yamlrt.nodes import StructuralAccessError  # noqa: E402
from yamlrt.nodes import to_node  # noqa: E402
from yamlrt.parser import parse  # noqa: E402
from yamlrt.writer import WriteOptions  # noqa: E402
from yamlrt.writer import write  # noqa: E402

__all__ = [
    "DEFAULT_INDENT",
    "TAB_WIDTH",
    "Comment",
    "CommentSlot",
    "CommentToken",
    "CommentedMap",
    "CommentedSeq",
    "Node",
    "PathSyntaxError",
    "RootMap",
    "Scalar",
    "StructuralAccessError",
    "WriteOptions",
    "YamlDocument",
    "__version__",
    "dump",
    "dumps",
    "load",
    "loads",
    "round_trip",
    "to_node",
]


def loads(text: str, /) -> RootMap:
    """Parse YAML text into a tree that remembers its comments and layout.

    Returns:
        The root mapping of the document.
    """
    return parse(text)


def dumps(root: RootMap, /, *, force_document_marker: bool = False) -> str:
    """Serialize a tree produced by :func:`loads` (or built by hand).

    Returns:
        YAML text; identical to the input when nothing was modified.
    """
    return write(root, WriteOptions(force_document_marker=force_document_marker))


def load(path: str | Path, /) -> RootMap:
    """Read and parse a UTF-8 YAML file.

    Returns:
        The root mapping of the document.
    """
    with Path(path).open(encoding="utf-8", newline="") as handle:
        return parse(handle.read())


def dump(root: RootMap, path: str | Path, /) -> None:
    """Write ``root`` to ``path`` as UTF-8, keeping its recorded line endings."""
    with Path(path).open("w", encoding="utf-8", newline="") as handle:
        handle.write(write(root))


def round_trip(text: str, /) -> str:
    """Parse and immediately re-serialize ``text``.

    Returns:
        The re-serialized text; equal to ``text`` for supported documents.
    """
    return write(parse(text))
