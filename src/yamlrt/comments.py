"""Comment and blank-line metadata attached to mappings and sequences."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import TypeVar

SlotKey = str | int

_V = TypeVar("_V")


@dataclass(slots=True)
class CommentToken:
    """A single comment line or blank-line marker.

    ``value`` holds the full comment text including the leading ``#``; an
    empty ``value`` marks a blank line. ``column`` is where the ``#`` sat in
    the source and is ``None`` for tokens created in code.
    """

    value: str
    line: int | None = None
    column: int | None = None

    @classmethod
    def blank_line(cls, line: int | None = None) -> CommentToken:
        return cls("", line=line)

    @classmethod
    def comment(cls, text: str, column: int | None = None) -> CommentToken:
        """Build a comment token, adding the ``# `` prefix when missing.

        Returns:
            The new token.
        """
        stripped = text.strip()
        if not stripped.startswith("#"):
            stripped = f"# {stripped}" if stripped else "#"
        return cls(stripped, column=column)

    def is_blank_line(self) -> bool:
        return not self.value

    @property
    def content(self) -> str:
        """Comment text without the ``#`` marker and surrounding spaces."""
        return self.value.removeprefix("#").strip()


@dataclass(slots=True)
class CommentSlot:
    key_pre: list[CommentToken] = field(default_factory=list)
    key_eol: CommentToken | None = None
    value_eol: CommentToken | None = None
    value_pre: list[CommentToken] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.key_pre or self.key_eol or self.value_eol or self.value_pre)


@dataclass(slots=True)
class Comment:
    """Comments owned by one container.

    ``slots`` is keyed by mapping key or sequence index. Sequence indices are
    kept in step with the elements through :meth:`shift_slots_up` and
    :meth:`shift_slots_down`.
    """

    container_pre: list[CommentToken] = field(default_factory=list)
    container_eol: CommentToken | None = None
    end: list[CommentToken] = field(default_factory=list)
    slots: dict[SlotKey, CommentSlot] = field(default_factory=dict)

    def get_slot(self, key: SlotKey) -> CommentSlot | None:
        return self.slots.get(key)

    def get_or_create_slot(self, key: SlotKey) -> CommentSlot:
        slot = self.slots.get(key)
        if slot is None:
            slot = self.slots[key] = CommentSlot()
        return slot

    def drop_slot(self, key: SlotKey) -> CommentSlot | None:
        return self.slots.pop(key, None)

    def add_container_pre(self, token: CommentToken) -> None:
        self.container_pre.append(token)

    def add_end(self, token: CommentToken) -> None:
        self.end.append(token)

    def shift_slots_up(self, from_index: int) -> None:
        """Re-key integer slots at or after ``from_index`` one position up."""
        self.slots = shift_keys_up(self.slots, from_index)

    def shift_slots_down(self, from_index: int) -> None:
        """Drop the slot at ``from_index`` and move later slots one down."""
        self.slots = shift_keys_down(self.slots, from_index)


def shift_keys_up(table: dict[SlotKey, _V], from_index: int) -> dict[SlotKey, _V]:
    """Return a copy of ``table`` with integer keys ``>= from_index`` incremented.

    String keys are carried over untouched.

    Returns:
        The re-keyed table.
    """
    shifted: dict[SlotKey, _V] = {}
    for key, value in table.items():
        if isinstance(key, int) and key >= from_index:
            shifted[key + 1] = value
        else:
            shifted[key] = value
    return shifted


def shift_keys_down(table: dict[SlotKey, _V], from_index: int) -> dict[SlotKey, _V]:
    """Return a copy of ``table`` without ``from_index`` and later keys decremented.

    Returns:
        The re-keyed table.
    """
    shifted: dict[SlotKey, _V] = {}
    for key, value in table.items():
        if not isinstance(key, int):
            shifted[key] = value
        elif key > from_index:
            shifted[key - 1] = value
        elif key < from_index:
            shifted[key] = value
    return shifted
