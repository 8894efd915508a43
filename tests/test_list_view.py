# tests/test_list_view.py

from __future__ import annotations

import pytest

from todoterm.tasks.task_models import Task
from todoterm.view.list_view import clamp_index, compute_scroll_offset, layout, wrap_text


def _task(tid: int, text: str = "task", category: str = "") -> Task:
    return Task(id=tid, text=text, category=category, created_at=tid, updated_at=tid)


def test_wrap_breaks_at_last_space() -> None:
    assert wrap_text("the quick brown fox", 10) == ["the quick", "brown fox"]


def test_wrap_hard_breaks_long_words() -> None:
    assert wrap_text("abcdefghij", 4) == ["abcd", "efgh", "ij"]


def test_wrap_space_exactly_at_boundary() -> None:
    assert wrap_text("abcd efgh", 4) == ["abcd", "efgh"]


def test_wrap_short_and_empty_text() -> None:
    assert wrap_text("hello", 80) == ["hello"]
    assert wrap_text("", 10) == [""]
    assert wrap_text("abc", 0) == ["a", "b", "c"]


@pytest.mark.parametrize(("index", "length", "expected"), [(10, 5, 4), (-3, 5, 0), (2, 5, 2), (7, 0, 0)])
def test_clamp_index(index: int, length: int, expected: int) -> None:
    assert clamp_index(index, length) == expected


def test_scroll_offset_drops_whole_tasks() -> None:
    assert compute_scroll_offset([1] * 10, 7, 5) == 3
    assert compute_scroll_offset([1] * 10, 2, 5) == 0
    assert compute_scroll_offset([2, 2, 2, 2], 3, 5) == 1
    assert compute_scroll_offset([], 3, 5) == 0


def test_layout_keeps_selected_first_line_visible() -> None:
    tasks = [_task(i) for i in range(1, 11)]

    vp = layout(tasks, "All", 7, viewport_height=5, width=40)

    assert vp.scroll_offset == 3
    assert [r.position for r in vp.rows] == [3, 4, 5, 6, 7]
    sel = vp.selected_row
    assert sel is not None
    assert sel.task.id == 8
    assert 0 <= sel.start_line < 5


def test_layout_clamps_selection_after_filter() -> None:
    tasks = [_task(i, category="Work" if i <= 5 else "Home") for i in range(1, 11)]

    vp = layout(tasks, "Work", 10, viewport_height=20, width=40)

    assert vp.total == 5
    assert vp.selected_index == 4
    assert vp.selected_row.task.id == 5


def test_layout_tall_task_is_clipped_at_bottom_only() -> None:
    tasks = [_task(1, "a"), _task(2, "b"), _task(3, " ".join(["word"] * 8))]

    vp = layout(tasks, None, 2, viewport_height=5, width=4)

    assert vp.scroll_offset == 0
    sel = vp.selected_row
    assert sel.start_line == 2
    assert sel.line_count == 8
    assert sel.start_line + sel.line_count > 5


def test_layout_empty_partition() -> None:
    vp = layout([], "All", 3, viewport_height=10, width=40)

    assert vp.rows == ()
    assert vp.total == 0
    assert vp.selected_index == 0
    assert vp.selected_row is None


def test_layout_filter_with_no_matches() -> None:
    vp = layout([_task(1, category="Work")], "Home", 0, viewport_height=10, width=40)
    assert vp.total == 0
    assert vp.rows == ()
