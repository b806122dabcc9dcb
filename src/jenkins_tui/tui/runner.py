"""Blocking execution of controller commands.

Each fetch or action command is performed synchronously against the service
facade and folded into the result event the controller expects. The Textual
app calls `perform` from worker threads; tests call it directly.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from jenkins_tui.errors import JenkinsError
from jenkins_tui.observability.logging import log_event
from jenkins_tui.service import JenkinsService
from jenkins_tui.tui.events import (
    ActionResult,
    BuildDetailResult,
    BuildLogResult,
    Command,
    Connect,
    ConnectResult,
    DeleteJob,
    Event,
    FetchBuildDetail,
    FetchBuildLog,
    FetchJobDetail,
    FetchJobs,
    JobDetailResult,
    JobsResult,
    RefreshTick,
    RunAction,
    StopBuild,
    TriggerBuild,
)


class CommandRunner:
    """Turns fetch/action commands into result events."""

    def __init__(
        self,
        service: JenkinsService,
        *,
        logger: logging.Logger,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.service = service
        self._logger = logger
        self._clock = clock

    def tick(self) -> RefreshTick:
        return RefreshTick(due=self.service.should_refresh())

    def perform(self, command: Command) -> Event:
        if isinstance(command, Connect):
            try:
                info = self.service.connect()
            except JenkinsError as exc:
                return ConnectResult(token=command.token, error=str(exc))
            return ConnectResult(token=command.token, info=info, received_at=self._clock())

        if isinstance(command, FetchJobs):
            try:
                jobs = self.service.list_jobs()
            except JenkinsError as exc:
                return JobsResult(token=command.token, error=str(exc))
            return JobsResult(token=command.token, jobs=tuple(jobs))

        if isinstance(command, FetchJobDetail):
            try:
                detail = self.service.get_job_detail(command.job_name)
            except JenkinsError as exc:
                return JobDetailResult(token=command.token, job_name=command.job_name, error=str(exc))
            return JobDetailResult(token=command.token, job_name=command.job_name, detail=detail)

        if isinstance(command, FetchBuildDetail):
            try:
                build = self.service.get_build_detail(command.job_name, command.build_number)
            except JenkinsError as exc:
                return BuildDetailResult(
                    token=command.token,
                    job_name=command.job_name,
                    build_number=command.build_number,
                    error=str(exc),
                )
            return BuildDetailResult(
                token=command.token,
                job_name=command.job_name,
                build_number=command.build_number,
                detail=build,
            )

        if isinstance(command, FetchBuildLog):
            try:
                text = self.service.get_build_log(command.job_name, command.build_number)
            except JenkinsError as exc:
                return BuildLogResult(
                    token=command.token,
                    job_name=command.job_name,
                    build_number=command.build_number,
                    error=str(exc),
                )
            return BuildLogResult(
                token=command.token,
                job_name=command.job_name,
                build_number=command.build_number,
                text=text,
            )

        if isinstance(command, RunAction):
            return self._run_action(command)

        raise TypeError(f"Command is not performed by the runner: {type(command).__name__}")

    def _run_action(self, command: RunAction) -> ActionResult:
        action = command.action
        try:
            if isinstance(action, TriggerBuild):
                self.service.trigger_build(action.job_name)
            elif isinstance(action, StopBuild):
                self.service.stop_build(action.job_name, action.build_number)
            elif isinstance(action, DeleteJob):
                self.service.delete_job(action.job_name)
            else:
                raise TypeError(f"Unsupported action type: {type(action).__name__}")
        except JenkinsError as exc:
            log_event(
                self._logger,
                "action_failed",
                level=logging.WARNING,
                action=type(action).__name__,
                job=action.job_name,
                error=str(exc),
            )
            return ActionResult(action=action, error=str(exc))
        return ActionResult(action=action)
