"""Job detail view: job info, last build panel and the build list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from jenkins_tui.api.models import Build, BuildDetail, JobDetail
from jenkins_tui.tui.formatting import (
    clip,
    format_duration,
    format_time_ago,
    format_timestamp,
    status_style,
)
from jenkins_tui.tui.views.joblist import render_filter_line
from jenkins_tui.tui.views.listing import SelectableList


_CHROME_ROWS = 15


@dataclass(frozen=True, slots=True)
class BuildRow:
    build: Build

    def filter_value(self) -> str:
        return f"#{self.build.number}"

    def description(self) -> str:
        return self.build.url


class JobDetailView:
    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.job_name = ""
        self.job_url = ""
        self.description = ""
        self.buildable = False
        self.last_build: BuildDetail | None = None
        self.builds: SelectableList[BuildRow] = SelectableList()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.builds.set_height(height - _CHROME_ROWS)

    def clear(self, job_name: str) -> None:
        """Reset to an empty placeholder for a job whose detail is still loading."""

        self.with_job_detail(job_name, "", "")
        self.buildable = False
        self.with_builds(())
        self.builds.clear_filter()
        self.last_build = None

    def with_job_detail(self, name: str, description: str, url: str) -> None:
        self.job_name = name
        self.description = description
        self.job_url = url

    def with_builds(self, builds: Sequence[Build]) -> None:
        self.builds.set_items([BuildRow(build) for build in builds])

    def with_last_build(self, build: BuildDetail | None) -> None:
        self.last_build = build

    def with_detail(self, detail: JobDetail) -> None:
        """Replace job info and build list wholesale from one fetch result."""

        self.with_job_detail(detail.name, detail.description, detail.url)
        self.buildable = detail.buildable
        self.with_builds(detail.builds)
        self.last_build = None

    def selected_build(self) -> Build | None:
        row = self.builds.selected()
        return row.build if row is not None else None

    def _info_lines(self) -> list[Text]:
        lines = [Text(f"URL: {self.job_url or '-'}")]
        if self.description:
            lines.append(Text(f"Description: {self.description}"))
        if not self.buildable:
            lines.append(Text("Not buildable", style="dim"))

        build = self.last_build
        if build is None:
            return lines
        lines.append(Text(""))
        lines.append(Text(f"Last Build (#{build.number}):", style="bold"))
        status = Text("Status: ")
        status.append(build.status, style=status_style(build.status))
        lines.append(status)
        lines.append(
            Text(
                f"Started: {format_timestamp(build.started_at)} "
                f"({format_time_ago(build.started_at)})"
            )
        )
        lines.append(Text(f"Duration: {format_duration(build.duration_ms)}"))
        if build.description:
            lines.append(Text(f"Description: {build.description}"))
        if build.parameters:
            lines.append(Text(""))
            lines.append(Text("Parameters:", style="bold"))
            for key in sorted(build.parameters):
                lines.append(Text(f"- {key}: {build.parameters[key]}"))
        return lines

    def render(self) -> RenderableType:
        if self.width == 0:
            return Text("Loading...")

        table = Table(expand=True, show_header=True, pad_edge=False)
        table.add_column(" ", width=1)
        table.add_column("Build", width=12)
        table.add_column("URL")

        rows = self.builds.visible
        if not rows:
            message = "No builds match the filter" if self.builds.filter.active else "No builds"
            table.add_row("", Text(message, style="dim"), "")
        else:
            start, end = self.builds.window()
            for idx in range(start, end):
                row = rows[idx]
                selected = idx == self.builds.cursor
                table.add_row(
                    ">" if selected else " ",
                    f"Build {row.filter_value()}",
                    clip(row.description(), max(10, self.width - 20)),
                    style="reverse" if selected else "",
                )

        return Group(
            Text(f"Job: {self.job_name}", style="bold white on dodger_blue2"),
            Text(""),
            Panel(Group(*self._info_lines()), border_style="cyan", width=max(20, self.width - 4)),
            Text(f"Builds for {self.job_name}", style="bold"),
            render_filter_line(
                self.builds.filter.text,
                self.builds.filter.editing,
                shown=len(rows),
                total=len(self.builds.items),
            ),
            table,
        )
