"""Tests for comment tokens, slots and slot re-keying."""

from __future__ import annotations

from yamlrt.comments import Comment
from yamlrt.comments import CommentSlot
from yamlrt.comments import CommentToken
from yamlrt.comments import shift_keys_down
from yamlrt.comments import shift_keys_up


def test_comment_factory_adds_marker() -> None:
    token = CommentToken.comment("server port")
    assert token.value == "# server port"
    assert token.content == "server port"
    assert token.column is None


def test_comment_factory_keeps_existing_marker() -> None:
    token = CommentToken.comment("#tight", column=4)
    assert token.value == "#tight"
    assert token.column == 4


def test_blank_line_token() -> None:
    token = CommentToken.blank_line(7)
    assert token.is_blank_line()
    assert token.line == 7
    assert not CommentToken.comment("x").is_blank_line()


def test_slot_is_empty() -> None:
    slot = CommentSlot()
    assert slot.is_empty()
    slot.value_pre.append(CommentToken.blank_line())
    assert not slot.is_empty()


def test_get_or_create_slot_reuses_existing() -> None:
    comment = Comment()
    first = comment.get_or_create_slot("key")
    assert comment.get_or_create_slot("key") is first
    assert comment.get_slot("other") is None
    assert comment.drop_slot("key") is first
    assert comment.get_slot("key") is None


def test_container_level_tokens() -> None:
    comment = Comment()
    comment.add_container_pre(CommentToken.comment("head"))
    comment.add_end(CommentToken.comment("tail"))
    assert [t.value for t in comment.container_pre] == ["# head"]
    assert [t.value for t in comment.end] == ["# tail"]


def test_shift_keys_up_moves_indices_at_and_after() -> None:
    shifted = shift_keys_up({0: "a", 1: "b", 2: "c", "name": "d"}, 1)
    assert shifted == {0: "a", 2: "b", 3: "c", "name": "d"}


def test_shift_keys_down_drops_removed_index() -> None:
    shifted = shift_keys_down({0: "a", 1: "b", 2: "c"}, 1)
    assert shifted == {0: "a", 1: "c"}


def test_shift_slots_on_comment() -> None:
    comment = Comment()
    comment.get_or_create_slot(0).key_eol = CommentToken.comment("first")
    comment.get_or_create_slot(1).key_eol = CommentToken.comment("second")

    comment.shift_slots_up(0)
    assert comment.get_slot(0) is None
    assert comment.get_slot(2).key_eol.value == "# second"  # type: ignore[union-attr]

    comment.shift_slots_down(1)
    assert comment.get_slot(1).key_eol.value == "# second"  # type: ignore[union-attr]
    assert set(comment.slots) == {1}
