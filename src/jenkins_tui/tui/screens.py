"""Modal screens used by the Jenkins TUI."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no confirmation for operator actions that change the server."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }
    #confirm_box {
        width: 72;
        height: auto;
        padding: 1 2;
        border: solid $warning;
        background: $surface;
    }
    #confirm_actions {
        height: auto;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("y", "answer(True)", "Yes"),
        Binding("n", "answer(False)", "No"),
        Binding("escape", "answer(False)", "Cancel"),
    ]

    def __init__(self, *, message: str, ok_label: str = "Confirm") -> None:
        super().__init__()
        self.message = message
        self.ok_label = ok_label

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm_box"):
            yield Static(self.message)
            with Horizontal(id="confirm_actions"):
                yield Button(self.ok_label, variant="warning", id="confirm_ok")
                yield Button("Cancel", id="confirm_cancel")

    def on_mount(self) -> None:
        self.query_one("#confirm_cancel", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm_ok")

    def action_answer(self, answer: bool) -> None:
        self.dismiss(answer)
