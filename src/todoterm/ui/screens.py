# src/todoterm/ui/screens.py

"""Modal input screens used by the main app (text prompt, reminder form, category picker)."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, OptionList

MODAL_CSS = """
ModalScreen {
    align: center middle;
}

#dialog {
    width: 70%;
    height: auto;
    border: round #3b82f6;
    background: $surface;
    padding: 1 2;
}

#dialog Label {
    color: #3b82f6;
    text-style: bold;
}
"""


class PromptScreen(ModalScreen[str | None]):
    """One-line text prompt. Enter returns the text, Escape returns None."""

    DEFAULT_CSS = MODAL_CSS
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, title: str, value: str = "", placeholder: str = "") -> None:
        super().__init__()
        self._title = title
        self._value = value
        self._placeholder = placeholder

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label(Text(self._title))
            yield Input(value=self._value, placeholder=self._placeholder, id="prompt")

    def on_mount(self) -> None:
        self.query_one("#prompt", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


@dataclass(slots=True, frozen=True)
class ReminderInput:
    quantity: str
    unit: str
    repeat_hours: str


class ReminderScreen(ModalScreen[ReminderInput | None]):
    """
    Reminder form: quantity, unit (s/m/h/d) and optional repeat in hours.

    Enter moves to the next field; Enter on the last field submits.
    """

    DEFAULT_CSS = MODAL_CSS
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("Set reminder quantity (integer, 0 or blank clears):")
            yield Input(placeholder="e.g. 2", id="quantity")
            yield Label("Choose unit: (s)econds, (m)inutes, (h)ours, (d)ays")
            yield Input(value="h", id="unit")
            yield Label("Repeat every N hours (blank = no repeat):")
            yield Input(placeholder="e.g. 24", id="repeat")

    def on_mount(self) -> None:
        self.query_one("#quantity", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if event.input.id != "repeat":
            self.focus_next()
            return
        self.dismiss(
            ReminderInput(
                quantity=self.query_one("#quantity", Input).value,
                unit=self.query_one("#unit", Input).value,
                repeat_hours=self.query_one("#repeat", Input).value,
            )
        )

    def action_cancel(self) -> None:
        self.dismiss(None)


class CategoryPickerScreen(ModalScreen[str | None]):
    """Pick the active category filter ("All" first)."""

    DEFAULT_CSS = MODAL_CSS
    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("q", "cancel", "Cancel", show=False),
    ]

    def __init__(self, categories: list[str], current: str) -> None:
        super().__init__()
        self._categories = list(categories)
        self._current = current

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("Select a category to filter:")
            yield OptionList(*[Text(c or "(none)") for c in self._categories], id="categories")

    def on_mount(self) -> None:
        options = self.query_one("#categories", OptionList)
        if self._current in self._categories:
            options.highlighted = self._categories.index(self._current)
        options.focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.dismiss(self._categories[event.option_index])

    def action_cancel(self) -> None:
        self.dismiss(None)
