"""Build log view: a scrollable, colorized console viewport."""

from __future__ import annotations

from typing import Literal

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from jenkins_tui.config.schema import DEFAULT_MAX_LOG_LINES
from jenkins_tui.tui.views.joblist import render_filter_line
from jenkins_tui.tui.views.listing import FilterState


LineKind = Literal["error", "warning", "command", "success", "plain"]

_WIDTH_ALLOWANCE = 4
_HEIGHT_ALLOWANCE = 10

_LINE_STYLES: dict[LineKind, str] = {
    "error": "red",
    "warning": "dark_orange",
    "command": "dodger_blue1",
    "success": "green",
    "plain": "",
}


def classify_line(line: str) -> LineKind:
    """Classify a console line; earlier classes win when several match."""

    lowered = line.lower()
    if "error" in lowered or "exception" in lowered or "failed" in lowered:
        return "error"
    if "warning" in lowered:
        return "warning"
    if line.startswith(("+", ">")):
        return "command"
    if "success" in lowered or "passed" in lowered or "completed" in lowered:
        return "success"
    return "plain"


class BuildLogView:
    def __init__(self, *, max_log_lines: int = DEFAULT_MAX_LOG_LINES) -> None:
        self.max_log_lines = max(1, max_log_lines)
        self.width = 0
        self.height = 0
        self.viewport_width = 0
        self.viewport_height = 1
        self.ready = False
        self.job_name = ""
        self.build_number: int | None = None
        self.log = ""
        self.loading = False
        self.truncated = 0
        self.filter = FilterState()
        self.offset = 0
        self._lines: tuple[tuple[str, LineKind], ...] = ()
        self._visible: tuple[tuple[str, LineKind], ...] = ()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.viewport_width = max(1, width - _WIDTH_ALLOWANCE)
        self.viewport_height = max(1, height - _HEIGHT_ALLOWANCE)
        self.ready = True
        self._clamp()

    def with_job_and_build(self, job_name: str, build_number: int) -> None:
        self.job_name = job_name
        self.build_number = build_number

    def begin_loading(self, job_name: str, build_number: int) -> None:
        self.with_job_and_build(job_name, build_number)
        self.with_log("")
        self.loading = True

    def with_log(self, log: str) -> None:
        """Replace the log text and classify every line once."""

        self.log = log
        self.loading = False
        lines = log.splitlines()
        self.truncated = max(0, len(lines) - self.max_log_lines)
        if self.truncated:
            lines = lines[self.truncated :]
        self._lines = tuple((line, classify_line(line)) for line in lines)
        self.offset = 0
        self._apply_filter()

    @property
    def lines(self) -> tuple[tuple[str, LineKind], ...]:
        return self._visible

    def scroll(self, delta: int) -> None:
        self.offset += delta
        self._clamp()

    def page(self, direction: int) -> None:
        self.scroll(direction * self.viewport_height)

    def top(self) -> None:
        self.offset = 0

    def bottom(self) -> None:
        self.offset = len(self._visible)
        self._clamp()

    def begin_filter(self) -> None:
        self.filter.editing = True

    def type_filter(self, text: str) -> None:
        self.filter.text += text
        self._apply_filter()

    def backspace_filter(self) -> None:
        self.filter.text = self.filter.text[:-1]
        self._apply_filter()

    def accept_filter(self) -> None:
        self.filter.editing = False

    def clear_filter(self) -> None:
        self.filter = FilterState()
        self._apply_filter()

    def _apply_filter(self) -> None:
        needle = self.filter.text.lower()
        if needle:
            self._visible = tuple(item for item in self._lines if needle in item[0].lower())
        else:
            self._visible = self._lines
        self._clamp()

    def _clamp(self) -> None:
        self.offset = max(0, min(self.offset, len(self._visible) - self.viewport_height))

    def _body(self) -> Text:
        if self.loading:
            return Text("Loading build log...", style="dim")
        if not self._lines:
            return Text("No log data available for this build.", style="dim")
        if not self._visible:
            return Text("No log lines match the filter.", style="dim")

        body = Text(no_wrap=True, overflow="ellipsis")
        window = self._visible[self.offset : self.offset + self.viewport_height]
        for idx, (line, kind) in enumerate(window):
            if idx:
                body.append("\n")
            body.append(line, style=_LINE_STYLES[kind])
        return body

    def render(self) -> RenderableType:
        if not self.ready:
            return Text("Loading...")

        number = f"#{self.build_number}" if self.build_number is not None else ""
        sections: list[RenderableType] = [
            Text(f"Build Log: {self.job_name} {number}".rstrip(), style="bold white on dodger_blue2"),
        ]
        if self.truncated:
            sections.append(Text(f"{self.truncated} earlier lines not shown", style="dim"))
        sections.append(
            Panel(
                self._body(),
                border_style="grey50",
                width=self.viewport_width,
                height=self.viewport_height + 2,
            )
        )
        shown_end = min(len(self._visible), self.offset + self.viewport_height)
        sections.append(
            render_filter_line(
                self.filter.text,
                self.filter.editing,
                shown=len(self._visible),
                total=len(self._lines),
            )
        )
        sections.append(
            Text(
                f"lines {self.offset + 1 if self._visible else 0}-{shown_end} of {len(self._visible)} "
                "| ↑/↓ scroll | pgup/pgdn page | esc back",
                style="dim",
            )
        )
        return Group(*sections)
