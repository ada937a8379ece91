from __future__ import annotations

import pytest

from fencelight.buffer import (
    Buffer,
    BufferValidationError,
    ChangeSet,
    OffsetRange,
    TextDocument,
    map_range,
    merge_ranges,
    subtract_ranges,
)


def make_buffer(text: str = "l1\nl2\nl3\nl4", height: int | None = None) -> Buffer:
    return Buffer.from_text(text, name="test", height=height)


def test_document_lines_and_offsets() -> None:
    doc = TextDocument.from_text("ab\ncd\n")

    assert doc.line_count == 3
    assert doc.length == 6
    assert doc.line(2).start == 3
    assert doc.line(2).end == 5
    assert doc.line_at(5).number == 2
    assert doc.line_at(6).text == ""
    assert doc.slice(3, 5) == "cd"
    with pytest.raises(IndexError):
        doc.line(4)


def test_change_set_maps_positions_around_replacement() -> None:
    changes = ChangeSet.single(2, 4, "XYZ", deleted="cd")

    assert changes.map_pos(1) == 1
    assert changes.map_pos(2, assoc=-1) == 2
    assert changes.map_pos(3) == 5
    assert changes.map_pos(4) == 5
    assert changes.map_pos(10) == 11


def test_change_set_insertion_respects_assoc() -> None:
    changes = ChangeSet.single(3, 3, "ab")

    assert changes.map_pos(3, assoc=-1) == 3
    assert changes.map_pos(3, assoc=1) == 5
    assert changes.map_pos(4) == 6


def test_change_set_overlap_rules() -> None:
    replace = ChangeSet.single(2, 4, "")
    assert not replace.overlaps(0, 2)
    assert replace.overlaps(0, 3)
    assert not replace.overlaps(4, 6)

    insert = ChangeSet.single(3, 3, "x")
    assert not insert.overlaps(0, 3)
    assert not insert.overlaps(3, 5)
    assert insert.overlaps(2, 5)


def test_change_set_rejects_overlapping_spans() -> None:
    with pytest.raises(ValueError):
        ChangeSet.from_replacements([(0, 4, "", ""), (2, 6, "", "")])


def test_multi_span_changes_accumulate_shift() -> None:
    changes = ChangeSet.from_replacements([(5, 6, "b", ""), (0, 1, "a", "XX")])

    assert [span.from_b for span in changes] == [0, 6]
    assert changes.map_pos(8) == 8


def test_merge_and_subtract_ranges() -> None:
    merged = merge_ranges([OffsetRange(5, 8), OffsetRange(0, 2), OffsetRange(2, 3)])
    assert merged == [OffsetRange(0, 3), OffsetRange(5, 8)]

    assert subtract_ranges([OffsetRange(0, 10)], [OffsetRange(3, 5)]) == [
        OffsetRange(0, 2),
        OffsetRange(6, 10),
    ]
    assert subtract_ranges([OffsetRange(0, 10)], [OffsetRange(0, 10)]) == []


def test_map_range_grows_with_insertions() -> None:
    changes = ChangeSet.single(4, 4, "abc")

    assert map_range(OffsetRange(0, 4), changes) == OffsetRange(0, 7)
    assert map_range(OffsetRange(5, 9), changes) == OffsetRange(8, 12)


def test_buffer_visible_range_follows_viewport() -> None:
    buffer = make_buffer(height=2)
    assert buffer.visible_ranges == (OffsetRange(0, 5),)

    buffer.scroll_by(1)
    assert buffer.visible_ranges == (OffsetRange(3, 8),)

    buffer.scroll_by(10)
    assert buffer.viewport.first_line == 4
    assert buffer.visible_ranges == (OffsetRange(9, 11),)


def test_buffer_edit_produces_change_set_and_version() -> None:
    buffer = make_buffer()

    delta = buffer.replace_range(3, 5, "LINE", label="test")

    assert buffer.text == "l1\nLINE\nl3\nl4"
    assert delta.version == 1
    (span,) = delta.changes.spans
    assert (span.from_a, span.to_a, span.from_b, span.to_b) == (3, 5, 3, 7)
    assert span.deleted == "l2"


def test_buffer_apply_edits_uses_pre_edit_offsets() -> None:
    buffer = make_buffer()

    buffer.apply_edits([(0, 2, "A"), (6, 8, "C")], label="multi")

    assert buffer.text == "A\nl2\nC\nl4"


def test_buffer_rejects_out_of_range_edit() -> None:
    buffer = make_buffer()

    with pytest.raises(BufferValidationError):
        buffer.delete_range(0, 99)
    assert buffer.document.version == 0


def test_buffer_insert_and_delete_helpers() -> None:
    buffer = make_buffer("abc")

    buffer.insert_text(3, "def")
    delta = buffer.delete_range(0, 1)

    assert buffer.text == "bcdef"
    assert delta.label == "delete_range"
    assert delta.version == 2
