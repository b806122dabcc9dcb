"""Dashboard view: server overview and job totals."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from jenkins_tui.api.models import Job
from jenkins_tui.tui.formatting import format_duration, format_timestamp, status_style
from jenkins_tui.tui.state import ServerSnapshot


_STATUS_ORDER = ("success", "failure", "unstable", "aborted", "disabled", "unknown")


class DashboardView:
    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.server = ServerSnapshot()
        self.jobs: tuple[Job, ...] = ()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def with_server(self, server: ServerSnapshot) -> None:
        self.server = server

    def with_jobs(self, jobs: Sequence[Job]) -> None:
        self.jobs = tuple(jobs)

    def _server_lines(self) -> list[Text]:
        server = self.server
        if not server.connected:
            return [Text("Not connected to Jenkins server")]
        uptime = (
            format_duration(server.uptime_seconds * 1000)
            if server.uptime_seconds is not None
            else "n/a"
        )
        return [
            Text(f"URL: {server.url}"),
            Text(f"Version: {server.version or 'n/a'}"),
            Text(f"Mode: {server.mode or 'n/a'}"),
            Text(f"Uptime: {uptime}"),
            Text(f"Nodes: {server.total_nodes} total, {server.free_nodes} free"),
        ]

    def _jobs_line(self) -> Text | None:
        if not self.jobs:
            return None
        counts = Counter(job.status for job in self.jobs)
        running = sum(1 for job in self.jobs if job.in_progress)
        line = Text(f"Jobs: {len(self.jobs)} total")
        for status in _STATUS_ORDER:
            if counts.get(status):
                line.append(" | ")
                line.append(f"{counts[status]} {status}", style=status_style(status))
        if running:
            line.append(" | ")
            line.append(f"{running} building", style=status_style("running"))
        return line

    def render(self) -> RenderableType:
        header = Text("Server Information ")
        if self.server.connected:
            header.append("● Connected", style="bold green")
        else:
            header.append("● Disconnected", style="bold red")

        body: list[RenderableType] = [header, *self._server_lines()]
        jobs_line = self._jobs_line()
        if jobs_line is not None:
            body.extend([Text(""), jobs_line])

        panel_width = max(40, self.width // 2) if self.width else None
        return Group(
            Text("Jenkins TUI Dashboard", style="bold white on dodger_blue2"),
            Text(""),
            Panel(Group(*body), border_style="cyan", width=panel_width),
            Text(f"Last updated: {format_timestamp(self.server.updated_at)}", style="dim"),
        )
