"""Immutable application state owned by the controller."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from jenkins_tui.api.models import BuildDetail, Job, JobDetail, ServerInfo


class View(Enum):
    DASHBOARD = "dashboard"
    JOB_LIST = "job_list"
    JOB_DETAIL = "job_detail"
    BUILD_LOG = "build_log"
    HELP = "help"


FETCH_KINDS = ("connect", "jobs", "job_detail", "build_detail", "build_log")


@dataclass(frozen=True, slots=True)
class ServerSnapshot:
    """Dashboard payload; every field comes from one successful connect or none does."""

    connected: bool = False
    url: str = ""
    version: str = ""
    mode: str = ""
    uptime_seconds: float | None = None
    total_nodes: int = 0
    free_nodes: int = 0
    updated_at: float | None = None

    @classmethod
    def from_server_info(cls, info: ServerInfo, *, updated_at: float | None) -> "ServerSnapshot":
        return cls(
            connected=True,
            url=info.url,
            version=info.version,
            mode=info.mode,
            uptime_seconds=info.uptime_seconds,
            total_nodes=info.total_nodes,
            free_nodes=info.free_nodes,
            updated_at=updated_at,
        )


@dataclass(frozen=True, slots=True)
class FetchTokens:
    """Latest request token issued per fetch kind."""

    issued: tuple[tuple[str, int], ...] = tuple((kind, 0) for kind in FETCH_KINDS)

    def get(self, kind: str) -> int:
        return dict(self.issued)[kind]

    def bump(self, kind: str) -> tuple["FetchTokens", int]:
        current = dict(self.issued)
        current[kind] += 1
        return FetchTokens(issued=tuple(current.items())), current[kind]


@dataclass(frozen=True, slots=True)
class BuildLogSnapshot:
    job_name: str
    build_number: int
    text: str


@dataclass(frozen=True, slots=True)
class ApplicationState:
    """Everything the controller knows; replaced wholesale on every event."""

    view: View = View.DASHBOARD
    overlay_return: View | None = None
    width: int = 0
    height: int = 0
    connected: bool = False
    error_message: str = ""
    error_kind: str | None = None
    status_message: str = "Welcome to Jenkins TUI"
    selected_job: str | None = None
    selected_build: int | None = None
    server: ServerSnapshot = field(default_factory=ServerSnapshot)
    jobs: tuple[Job, ...] = ()
    job_detail: JobDetail | None = None
    last_build: BuildDetail | None = None
    build_log: BuildLogSnapshot | None = None
    tokens: FetchTokens = field(default_factory=FetchTokens)
    quitting: bool = False

    def with_error(self, kind: str, message: str) -> "ApplicationState":
        return replace(self, error_kind=kind, error_message=message)

    def clear_error(self, kind: str) -> "ApplicationState":
        """Drop the error line if it was set by an operation of the same kind."""

        if self.error_kind != kind:
            return self
        return replace(self, error_kind=None, error_message="")
