"""Job list view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from jenkins_tui.api.models import Job
from jenkins_tui.tui.formatting import clip, format_time_ago, status_style
from jenkins_tui.tui.views.listing import SelectableList


_CHROME_ROWS = 10


@dataclass(frozen=True, slots=True)
class JobRow:
    job: Job

    def filter_value(self) -> str:
        return self.job.name

    def description(self) -> str:
        parts = [self.job.status + (" (building)" if self.job.in_progress else "")]
        if self.job.last_build_at is not None:
            parts.append(f"Last build: {format_time_ago(self.job.last_build_at)}")
        if self.job.description:
            parts.append(self.job.description)
        return " | ".join(parts)


def render_filter_line(filter_text: str, editing: bool, *, shown: int, total: int) -> Text:
    if editing:
        line = Text("Filter: ", style="bold")
        line.append(filter_text)
        line.append("█", style="blink")
        return line
    if filter_text:
        return Text(f'Filter "{filter_text}": {shown} of {total} (esc to clear)', style="dim")
    return Text(f"{total} items (/ to filter)", style="dim")


class JobListView:
    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.list: SelectableList[JobRow] = SelectableList()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.list.set_height(height - _CHROME_ROWS)

    def with_jobs(self, jobs: Sequence[Job]) -> None:
        previous = self.selected()
        self.list.set_items([JobRow(job) for job in jobs])
        if previous is None:
            return
        for idx, row in enumerate(self.list.visible):
            if row.job.name == previous.name:
                self.list.cursor = idx
                self.list.move(0)
                break

    def selected(self) -> Job | None:
        row = self.list.selected()
        return row.job if row is not None else None

    def render(self) -> RenderableType:
        table = Table(expand=True, show_header=True, pad_edge=False)
        table.add_column(" ", width=1)
        table.add_column("Job", ratio=2)
        table.add_column("Details", ratio=3)

        rows = self.list.visible
        if not rows:
            message = "No jobs match the filter" if self.list.filter.active else "No jobs"
            table.add_row("", Text(message, style="dim"), "")
        else:
            start, end = self.list.window()
            detail_width = max(10, self.width // 2)
            for idx in range(start, end):
                row = rows[idx]
                selected = idx == self.list.cursor
                table.add_row(
                    ">" if selected else " ",
                    Text(row.filter_value(), style=status_style(row.job.status)),
                    clip(row.description(), detail_width),
                    style="reverse" if selected else "",
                )

        return Group(
            Text("Jenkins Jobs", style="bold white on dodger_blue2"),
            render_filter_line(
                self.list.filter.text,
                self.list.filter.editing,
                shown=len(rows),
                total=len(self.list.items),
            ),
            table,
        )
