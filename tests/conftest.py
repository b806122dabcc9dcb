from __future__ import annotations

from io import StringIO
import logging

import pytest
from rich.console import Console, RenderableType

from jenkins_tui.api.models import Build, BuildDetail, Job, JobDetail, Node, ServerInfo


@pytest.fixture
def logger() -> logging.Logger:
    log = logging.getLogger("jenkins_tui.tests")
    log.addHandler(logging.NullHandler())
    log.propagate = False
    return log


def render_text(renderable: RenderableType, *, width: int = 100) -> str:
    console = Console(file=StringIO(), width=width, color_system=None, force_terminal=False)
    console.print(renderable)
    return console.file.getvalue()


def make_job(name: str, status: str = "success", *, description: str = "") -> Job:
    return Job(
        name=name,
        url=f"http://jenkins.local/job/{name}/",
        color="blue",
        description=description,
        status=status,
        in_progress=False,
    )


def make_detail(name: str, numbers: tuple[int, ...] = (3, 2, 1)) -> JobDetail:
    builds = tuple(Build(number=n, url=f"http://jenkins.local/job/{name}/{n}/") for n in numbers)
    return JobDetail(
        name=name,
        url=f"http://jenkins.local/job/{name}/",
        description=f"{name} pipeline",
        buildable=True,
        builds=builds,
        last_build=builds[0] if builds else None,
    )


def make_build(number: int, *, result: str | None = "SUCCESS", building: bool = False) -> BuildDetail:
    return BuildDetail(
        number=number,
        url=f"http://jenkins.local/job/api/{number}/",
        started_at=1_700_000_000.0,
        duration_ms=65_000,
        building=building,
        result=result,
        description="",
    )


def make_server_info() -> ServerInfo:
    return ServerInfo(
        url="http://jenkins.local",
        version="2.440.1",
        mode="NORMAL",
        nodes=(
            Node(name="built-in", online=True, idle=True, num_executors=2),
            Node(name="agent-1", online=True, idle=False, num_executors=4),
            Node(name="agent-2", online=False, idle=True, num_executors=4),
        ),
    )
