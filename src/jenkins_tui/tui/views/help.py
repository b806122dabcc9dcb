"""Help overlay: live keybinding table plus a short usage guide."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from jenkins_tui import __version__
from jenkins_tui.tui.keymap import KeyMap


_USAGE = """\
Navigation:
• Use arrow keys to navigate in lists and logs
• Press Enter to select an item
• Press Esc to go back to the previous view

Views:
• Dashboard: Overview of Jenkins server status
• Job List: List of all Jenkins jobs
• Job Detail: Information about a specific job
• Build Log: Console output for a specific build

Filtering:
• Press / to filter jobs, builds or log lines
• Type your search term and press Enter
• Press Esc while typing to clear the filter

Tips:
• Press {refresh} to refresh data
• Logs colorize errors, warnings, commands and successes"""


class HelpView:
    def __init__(self, keys: KeyMap) -> None:
        self.keys = keys
        self.width = 0
        self.height = 0

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def _bindings_table(self) -> Table:
        table = Table(show_header=False, box=None, pad_edge=False, expand=True)
        groups = self.keys.full_help()
        for _ in groups:
            table.add_column(ratio=1)
        cells: list[Text] = []
        for title, bindings in groups:
            cell = Text(f"{title}\n", style="bold")
            for binding in bindings:
                cell.append(f"{binding.label:<10}", style="cyan")
                cell.append(f" {binding.description}\n")
            cells.append(cell)
        table.add_row(*cells)
        return table

    def render(self) -> RenderableType:
        section_width = max(20, self.width - 4) if self.width else None
        return Group(
            Text("Jenkins TUI Help", style="bold white on medium_purple3"),
            Text(""),
            Panel(self._bindings_table(), title="Keyboard Shortcuts", border_style="grey50", width=section_width),
            Panel(
                Text(_USAGE.format(refresh=self.keys.refresh.label)),
                title="Usage Guide",
                border_style="grey50",
                width=section_width,
            ),
            Panel(
                Text(f"Jenkins TUI is a terminal user interface for Jenkins.\nVersion: {__version__}"),
                title="About",
                border_style="grey50",
                width=section_width,
            ),
        )
