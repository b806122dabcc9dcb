"""Events delivered to the controller and commands it hands back to the runner."""

from __future__ import annotations

from dataclasses import dataclass

from jenkins_tui.api.models import BuildDetail, Job, JobDetail, ServerInfo


# Events


@dataclass(frozen=True, slots=True)
class KeyPressed:
    key: str
    character: str | None = None


@dataclass(frozen=True, slots=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class RefreshTick:
    """Periodic timer; `due` is the facade's should-refresh answer at fire time."""

    due: bool


@dataclass(frozen=True, slots=True)
class ConnectResult:
    token: int
    info: ServerInfo | None = None
    error: str | None = None
    received_at: float | None = None


@dataclass(frozen=True, slots=True)
class JobsResult:
    token: int
    jobs: tuple[Job, ...] = ()
    error: str | None = None


@dataclass(frozen=True, slots=True)
class JobDetailResult:
    token: int
    job_name: str
    detail: JobDetail | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class BuildDetailResult:
    token: int
    job_name: str
    build_number: int
    detail: BuildDetail | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class BuildLogResult:
    token: int
    job_name: str
    build_number: int
    text: str = ""
    error: str | None = None


# Operator actions


@dataclass(frozen=True, slots=True)
class TriggerBuild:
    job_name: str

    @property
    def prompt(self) -> str:
        return f"Trigger a new build of {self.job_name}?"

    @property
    def done_message(self) -> str:
        return f"Build triggered for {self.job_name}"

    @property
    def failure_prefix(self) -> str:
        return "Failed to trigger build"


@dataclass(frozen=True, slots=True)
class StopBuild:
    job_name: str
    build_number: int

    @property
    def prompt(self) -> str:
        return f"Stop build #{self.build_number} of {self.job_name}?"

    @property
    def done_message(self) -> str:
        return f"Stop requested for {self.job_name} #{self.build_number}"

    @property
    def failure_prefix(self) -> str:
        return "Failed to stop build"


@dataclass(frozen=True, slots=True)
class DeleteJob:
    job_name: str

    @property
    def prompt(self) -> str:
        return f"Delete job {self.job_name}? This cannot be undone."

    @property
    def done_message(self) -> str:
        return f"Deleted job {self.job_name}"

    @property
    def failure_prefix(self) -> str:
        return "Failed to delete job"


Action = TriggerBuild | StopBuild | DeleteJob


@dataclass(frozen=True, slots=True)
class ActionConfirmed:
    action: Action


@dataclass(frozen=True, slots=True)
class ActionResult:
    action: Action
    error: str | None = None


Event = (
    KeyPressed
    | Resized
    | RefreshTick
    | ConnectResult
    | JobsResult
    | JobDetailResult
    | BuildDetailResult
    | BuildLogResult
    | ActionConfirmed
    | ActionResult
)


# Commands


@dataclass(frozen=True, slots=True)
class Quit:
    pass


@dataclass(frozen=True, slots=True)
class ScheduleTick:
    delay: float


@dataclass(frozen=True, slots=True)
class Connect:
    token: int


@dataclass(frozen=True, slots=True)
class FetchJobs:
    token: int


@dataclass(frozen=True, slots=True)
class FetchJobDetail:
    token: int
    job_name: str


@dataclass(frozen=True, slots=True)
class FetchBuildDetail:
    token: int
    job_name: str
    build_number: int


@dataclass(frozen=True, slots=True)
class FetchBuildLog:
    token: int
    job_name: str
    build_number: int


@dataclass(frozen=True, slots=True)
class ConfirmAction:
    action: Action


@dataclass(frozen=True, slots=True)
class RunAction:
    action: Action


Command = (
    Quit
    | ScheduleTick
    | Connect
    | FetchJobs
    | FetchJobDetail
    | FetchBuildDetail
    | FetchBuildLog
    | ConfirmAction
    | RunAction
)
