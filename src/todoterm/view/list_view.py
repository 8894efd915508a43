# src/todoterm/view/list_view.py

"""
List view model: which tasks are visible, on which lines, for a given
filter / selection / viewport size.

Drawing is left to the UI layer; everything here is plain data so it can be
tested without a terminal.

Key invariants:
- the selection is always clamped into the filtered list (0 when it is empty),
- the selected task's first line is always inside the viewport; long tasks
  may be clipped at the bottom edge, never above the top,
- scrolling advances task by task, never line by line.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..tasks.task_models import Task


@dataclass(slots=True, frozen=True)
class ViewRow:
    task: Task
    position: int  # index in the filtered list
    start_line: int  # first display line, relative to the viewport top
    lines: tuple[str, ...]
    selected: bool

    @property
    def line_count(self) -> int:
        return len(self.lines)


@dataclass(slots=True, frozen=True)
class ListViewport:
    rows: tuple[ViewRow, ...]
    selected_index: int
    scroll_offset: int  # filtered index of the first visible task
    total: int  # size of the filtered list

    @property
    def selected_row(self) -> ViewRow | None:
        for row in self.rows:
            if row.selected:
                return row
        return None


def filter_tasks(tasks: Sequence[Task], category_filter: str | None) -> list[Task]:
    """Keep tasks matching the filter, preserving store order."""
    return [t for t in tasks if t.matches(category_filter)]


def clamp_index(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return min(max(int(index), 0), length - 1)


def wrap_text(text: str, width: int) -> list[str]:
    """
    Greedy word wrap.

    Breaks at the last whitespace at or before the width boundary; hard-breaks
    at the boundary when the segment has no whitespace. Always returns at least one line.
    """
    width = max(1, int(width))
    if not text:
        return [""]

    lines: list[str] = []
    n = len(text)
    pos = 0
    while pos < n:
        end = min(pos + width, n)
        if end < n:
            cut = end
            while cut > pos and not text[cut].isspace():
                cut -= 1
            if cut > pos:
                end = cut
                lines.append(text[pos:end].rstrip())
            else:
                lines.append(text[pos:end])
        else:
            lines.append(text[pos:end])

        pos = end
        while pos < n and text[pos].isspace():
            pos += 1

    return lines or [""]


def compute_scroll_offset(line_counts: Sequence[int], selected: int, viewport_height: int) -> int:
    """
    First filtered index to draw so the selected task starts inside the viewport.

    Greedy forward scan from the top: drop whole tasks until the selected task's
    start line is below viewport_height (or it is the first task drawn).
    """
    if not line_counts:
        return 0
    selected = clamp_index(selected, len(line_counts))
    offset = 0
    start = sum(line_counts[:selected])
    while offset < selected and start >= viewport_height:
        start -= line_counts[offset]
        offset += 1
    return offset


def layout(
    tasks: Sequence[Task],
    category_filter: str | None,
    selected_index: int,
    viewport_height: int,
    width: int,
) -> ListViewport:
    """Compute the visible window of a partition."""
    filtered = filter_tasks(tasks, category_filter)
    selected = clamp_index(selected_index, len(filtered))
    if not filtered:
        return ListViewport(rows=(), selected_index=0, scroll_offset=0, total=0)

    wrapped = [tuple(wrap_text(t.text, width)) for t in filtered]
    offset = compute_scroll_offset([len(w) for w in wrapped], selected, viewport_height)

    rows: list[ViewRow] = []
    line = 0
    for position in range(offset, len(filtered)):
        if line >= viewport_height:
            break
        rows.append(
            ViewRow(
                task=filtered[position],
                position=position,
                start_line=line,
                lines=wrapped[position],
                selected=(position == selected),
            )
        )
        line += len(wrapped[position])

    return ListViewport(
        rows=tuple(rows),
        selected_index=selected,
        scroll_offset=offset,
        total=len(filtered),
    )
