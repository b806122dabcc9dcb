"""Domain models returned by the Jenkins client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


JobStatus = Literal[
    "success",
    "failure",
    "unstable",
    "aborted",
    "disabled",
    "running",
    "waiting",
    "unknown",
]

BuildStatus = Literal["success", "failed", "aborted", "running", "waiting", "unknown"]

_COLOR_STATUS: dict[str, JobStatus] = {
    "blue": "success",
    "red": "failure",
    "yellow": "unstable",
    "grey": "disabled",
    "disabled": "disabled",
    "aborted": "aborted",
}

_RESULT_STATUS: dict[str, BuildStatus] = {
    "SUCCESS": "success",
    "FAILURE": "failed",
    "ABORTED": "aborted",
    "UNSTABLE": "failed",
    "NOT_BUILT": "waiting",
}

_ANIME_SUFFIX = "_anime"


def status_from_color(color: str | None) -> tuple[JobStatus, bool]:
    """Map a Jenkins color token to `(status, in_progress)`."""

    if not color:
        return "unknown", False
    base = color
    in_progress = False
    if color.endswith(_ANIME_SUFFIX):
        base = color[: -len(_ANIME_SUFFIX)]
        in_progress = True
    status = _COLOR_STATUS.get(base)
    if status is None:
        return "unknown", False
    return status, in_progress


def status_from_result(result: str | None, building: bool) -> BuildStatus:
    """Map a build `result` string to a status; a running build wins over any result."""

    if building:
        return "running"
    if result is None:
        return "unknown"
    return _RESULT_STATUS.get(result, "unknown")


@dataclass(frozen=True, slots=True)
class Node:
    """One Jenkins agent (including the built-in node)."""

    name: str
    online: bool
    idle: bool
    num_executors: int = 0

    @property
    def free(self) -> bool:
        return self.online and self.idle


@dataclass(frozen=True, slots=True)
class ServerInfo:
    """Result of a successful liveness check."""

    url: str
    version: str
    mode: str
    username: str = ""
    nodes: tuple[Node, ...] = ()
    uptime_seconds: float | None = None

    @property
    def total_nodes(self) -> int:
        return len(self.nodes)

    @property
    def free_nodes(self) -> int:
        return sum(1 for node in self.nodes if node.free)


@dataclass(frozen=True, slots=True)
class Job:
    """One row of the job list."""

    name: str
    url: str
    color: str
    description: str
    status: JobStatus
    in_progress: bool
    last_build_at: float | None = None


@dataclass(frozen=True, slots=True)
class Build:
    """Cheap build reference nested inside a job detail."""

    number: int
    url: str


@dataclass(frozen=True, slots=True)
class JobParameter:
    """A build parameter definition declared on a job."""

    name: str
    type: str
    default_value: str
    description: str
    choices: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class JobDetail:
    """Detailed job payload with its build history."""

    name: str
    url: str
    description: str
    buildable: bool
    builds: tuple[Build, ...] = ()
    last_build: Build | None = None
    parameters: tuple[JobParameter, ...] = ()


@dataclass(frozen=True, slots=True)
class BuildDetail:
    """Detailed payload for a single build."""

    number: int
    url: str
    started_at: float | None
    duration_ms: int
    building: bool
    result: str | None
    description: str
    parameters: dict[str, str] = field(default_factory=dict)

    @property
    def status(self) -> BuildStatus:
        return status_from_result(self.result, self.building)
