"""Shared formatting helpers and status styles for the views."""

from __future__ import annotations

from datetime import datetime
import time


_STATUS_STYLES: dict[str, str] = {
    "success": "bold green",
    "failure": "bold red",
    "failed": "bold red",
    "unstable": "yellow",
    "aborted": "dark_orange",
    "running": "bold cyan",
    "waiting": "grey62",
    "disabled": "grey50",
}


def status_style(status: str) -> str:
    return _STATUS_STYLES.get(status.lower(), "grey62")


def clip(value: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(value) <= width:
        return value
    if width <= 3:
        return value[:width]
    return f"{value[: width - 3]}..."


def _plural(count: int, unit: str) -> str:
    if count == 1:
        return f"1 {unit} ago"
    return f"{count} {unit}s ago"


def format_time_ago(epoch_seconds: float | None, *, now: float | None = None) -> str:
    """Render an epoch timestamp as a coarse "N units ago" string."""

    if epoch_seconds is None:
        return "unknown"
    current = time.time() if now is None else now
    seconds = max(0, int(current - epoch_seconds))
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 7:
        return _plural(days, "day")
    if days < 30:
        return _plural(days // 7, "week")
    return _plural(days // 30, "month")


def format_duration(duration_ms: int | float | None) -> str:
    if duration_ms is None:
        return "n/a"
    total = int(duration_ms // 1000)
    if total < 1:
        return "Less than a second"
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_timestamp(epoch_seconds: float | None) -> str:
    if epoch_seconds is None:
        return "n/a"
    return datetime.fromtimestamp(epoch_seconds).strftime("%Y-%m-%d %H:%M:%S")
