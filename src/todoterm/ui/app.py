# src/todoterm/ui/app.py

"""
Interactive terminal UI (Textual).

The app is a thin painter over TaskBoard: every key maps to a board
transition or mutation, then the list is redrawn from the board's viewport.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widget import Widget
from textual.widgets import Footer, Static

from ..core.errors import StorageUnavailable, ValidationError
from ..core.state import AppState
from ..tasks.task_models import ALL_CATEGORIES
from ..view.columns import date_label, fit, reminder_label
from ..view.navigation import TaskBoard, View
from .screens import CategoryPickerScreen, PromptScreen, ReminderInput, ReminderScreen

logger = logging.getLogger(__name__)

NUMBER_WIDTH = 5
REMINDER_WIDTH = 18
CATEGORY_WIDTH = 14
DATE_WIDTH = 17
FIXED_WIDTH = NUMBER_WIDTH + REMINDER_WIDTH + CATEGORY_WIDTH + DATE_WIDTH + 3
MIN_TEXT_WIDTH = 10

KEYS_HELP = "Keys: c=complete, d=delete, n=add, e=edit, s=category, r=reminder, #=filter, Tab=switch, q=exit"
NAV_HELP = "Nav: Up/Down, PgUp/PgDn, Home/End, Goto ':<num>'"


def text_width(total_width: int) -> int:
    return max(MIN_TEXT_WIDTH, total_width - FIXED_WIDTH)


class TaskList(Widget):
    """Draws the board's viewport; wrapped continuation lines only carry text."""

    DEFAULT_CSS = """
    TaskList {
        height: 1fr;
        color: #00dd00;
    }
    """

    def __init__(self, board: TaskBoard) -> None:
        super().__init__(id="tasks")
        self._board = board

    def render(self) -> Text:
        height = self.size.height
        tw = text_width(self.size.width)
        vp = self._board.viewport(height, tw)

        out = Text(no_wrap=True, overflow="crop")
        if vp.total == 0:
            out.append("  (no tasks)", style="dim")
            return out

        printed = 0
        for row in vp.rows:
            style = "reverse" if row.selected else ""
            number = str(self._board.item_number(row.task))
            for i, line in enumerate(row.lines):
                if printed >= height:
                    break
                if i == 0:
                    cells = [
                        fit(number, NUMBER_WIDTH),
                        fit(line, tw),
                        fit(reminder_label(row.task), REMINDER_WIDTH),
                        fit(row.task.category, CATEGORY_WIDTH),
                        fit(date_label(row.task), DATE_WIDTH),
                    ]
                    content = " ".join(cells)
                else:
                    content = " " * (NUMBER_WIDTH + 1) + fit(line, tw)
                if printed:
                    out.append("\n")
                out.append(content, style=style)
                printed += 1
        return out


class TodoApp(App[int]):
    """Main TUI application."""

    CSS = """
    Screen {
        background: black;
    }

    #header {
        dock: top;
        height: 6;
        padding: 0 1;
        color: #00dd00;
        text-style: bold;
    }

    #columns {
        height: 1;
        padding: 0 1;
        color: #00dd00;
        text-style: bold underline;
    }

    #tasks {
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit_app", "Quit"),
        Binding("up", "cursor(-1)", "Up", show=False),
        Binding("down", "cursor(1)", "Down", show=False),
        Binding("home", "home", "Home", show=False),
        Binding("end", "end", "End", show=False),
        Binding("pageup", "page_up", "PgUp", show=False),
        Binding("pagedown", "page_down", "PgDn", show=False),
        Binding("tab", "switch_view", "Switch view", priority=True),
        Binding("n", "add", "Add"),
        Binding("e", "edit", "Edit"),
        Binding("c", "complete", "Complete"),
        Binding("d", "delete", "Delete"),
        Binding("s", "category", "Category"),
        Binding("r", "reminder", "Reminder"),
        Binding("number_sign", "filter", "Filter"),
        Binding("colon", "goto", "Goto"),
    ]

    def __init__(self, state: AppState) -> None:
        super().__init__()
        settings = state.settings
        self._state = state
        self._refresh_interval = float(getattr(settings, "refresh_interval_seconds", 5.0))
        self._title = str(getattr(settings, "app_name", "todoterm")).upper()
        self.board = TaskBoard(state.task_store, page_step=int(getattr(settings, "page_step", 10)))
        # Set in compose(). Not queried: the active screen may be a modal.
        self._header: Static | None = None
        self._columns: Static | None = None
        self._list: TaskList | None = None

    def compose(self) -> ComposeResult:
        self._header = Static(id="header")
        self._columns = Static(id="columns")
        self._list = TaskList(self.board)
        yield self._header
        yield self._columns
        yield self._list
        yield Footer()

    def on_mount(self) -> None:
        self._run(self.board.refresh)
        self.set_interval(self._refresh_interval, self._background_refresh)

    def on_resize(self, event: events.Resize) -> None:
        self._redraw()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        # Main-screen keys stay inert while a prompt is open.
        if action == "switch_view" and len(self.screen_stack) > 1:
            return False
        return True

    # ---- drawing ----

    def _redraw(self) -> None:
        if self._header is None or self._columns is None or self._list is None:
            return

        try:
            current, completed = self.board.counts()
        except StorageUnavailable as e:
            logger.error("Counting tasks failed: %s", e)
            current, completed = len(self.board.partition), 0

        header = "\n".join(
            [
                self._title,
                f"Current Tasks: {current} | Completed Tasks: {completed}",
                KEYS_HELP,
                NAV_HELP,
                f"Category Filter: {self.board.state.category_filter}",
            ]
        )
        self._header.update(Text(header))

        is_current = self.board.state.view is View.CURRENT
        tw = text_width(self._list.size.width)
        columns = " ".join(
            [
                fit("#", NUMBER_WIDTH),
                fit("Current Tasks" if is_current else "Completed Tasks", tw),
                fit("Reminder", REMINDER_WIDTH),
                fit("Category", CATEGORY_WIDTH),
                fit("Added on" if is_current else "Completed on", DATE_WIDTH),
            ]
        )
        self._columns.update(Text(columns))
        self._list.refresh()

    def _run(self, action: Callable[[], object]) -> None:
        """Run a board action and report failures without leaving the input loop."""
        try:
            action()
        except ValidationError as e:
            self.notify(str(e), title="Invalid input", severity="warning")
        except StorageUnavailable as e:
            logger.error("Store operation failed: %s", e)
            self.notify(str(e), title="Storage unavailable", severity="error", timeout=10)
        self._redraw()

    def _background_refresh(self) -> None:
        try:
            self.board.refresh()
        except StorageUnavailable as e:
            logger.warning("Background refresh failed: %s", e)
            return
        self._redraw()

    # ---- navigation ----

    def action_cursor(self, delta: int) -> None:
        self._run(lambda: self.board.move(delta))

    def action_home(self) -> None:
        self._run(self.board.home)

    def action_end(self) -> None:
        self._run(self.board.end)

    def action_page_up(self) -> None:
        self._run(self.board.page_up)

    def action_page_down(self) -> None:
        self._run(self.board.page_down)

    def action_switch_view(self) -> None:
        self._run(self.board.switch_view)

    def action_quit_app(self) -> None:
        self.exit(0)

    # ---- prompts ----

    def action_add(self) -> None:
        def done(text: str | None) -> None:
            if text and text.strip():
                self._run(lambda: self.board.add(text))

        self.push_screen(PromptScreen("Enter new task:"), done)

    def action_edit(self) -> None:
        task = self.board.selected_task()
        if task is None:
            return

        def done(text: str | None) -> None:
            if text and text.strip():
                self._run(lambda: self.board.edit_selected(text))

        self.push_screen(PromptScreen("Edit task:", value=task.text), done)

    def action_category(self) -> None:
        task = self.board.selected_task()
        if task is None:
            return
        number = self.board.item_number(task)
        label = f"Enter category for {self.board.state.view.value} item #{number} (blank clears):"

        def done(category: str | None) -> None:
            if category is not None:
                self._run(lambda: self.board.set_category_selected(category))

        self.push_screen(PromptScreen(label, value=task.category), done)

    def action_reminder(self) -> None:
        if self.board.selected_task() is None:
            return

        def done(form: ReminderInput | None) -> None:
            if form is not None:
                self._run(
                    lambda: self.board.set_reminder_selected(form.quantity, form.unit, form.repeat_hours)
                )

        self.push_screen(ReminderScreen(), done)

    def action_filter(self) -> None:
        try:
            categories = self.board.categories()
        except StorageUnavailable as e:
            self.notify(str(e), title="Storage unavailable", severity="error")
            return

        def done(category: str | None) -> None:
            if category is not None:
                self._run(lambda: self.board.set_filter(category))

        self.push_screen(
            CategoryPickerScreen(categories, current=self.board.state.category_filter or ALL_CATEGORIES),
            done,
        )

    def action_goto(self) -> None:
        def done(raw: str | None) -> None:
            raw = (raw or "").strip()
            if not raw:
                return
            try:
                number = int(raw)
            except ValueError:
                self.notify(f"Not an item number: {raw!r}", severity="warning")
                return
            self._run(lambda: self.board.goto(number))

        self.push_screen(PromptScreen("Goto item (blank=cancel):"), done)

    # ---- mutations without prompts ----

    def action_complete(self) -> None:
        self._run(self.board.complete_selected)

    def action_delete(self) -> None:
        self._run(self.board.delete_selected)


def run_interactive(state: AppState) -> int:
    """Run the UI until the user quits. Returns the process exit code."""
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        logger.error("Interactive mode needs a terminal (stdin/stdout are not TTYs)")
        print("todoterm: interactive mode needs a terminal; use --daemon for background mode.", file=sys.stderr)
        return 1
    app = TodoApp(state)
    result = app.run()
    return int(result or 0)
