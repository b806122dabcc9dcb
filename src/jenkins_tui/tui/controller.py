"""Application state machine.

The controller consumes one event at a time (keys, resizes, timer ticks and
fetch results), replaces `ApplicationState` with a new snapshot, pushes the
relevant slices into the view components and returns the commands the runner
must execute next. It never blocks and never talks to the network itself.

Every fetch is stamped with a per-kind token. A result whose token is not the
latest one issued for its kind is dropped, so a slow response for an earlier
request can never overwrite the state produced by a later one.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any

from rich.console import Group, RenderableType
from rich.text import Text

from jenkins_tui.config.schema import DEFAULT_MAX_LOG_LINES
from jenkins_tui.observability.logging import log_event
from jenkins_tui.tui.events import (
    ActionConfirmed,
    ActionResult,
    BuildDetailResult,
    BuildLogResult,
    Command,
    ConfirmAction,
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
    KeyPressed,
    Quit,
    RefreshTick,
    Resized,
    RunAction,
    ScheduleTick,
    StopBuild,
    TriggerBuild,
)
from jenkins_tui.tui.keymap import KeyMap, normalize_key
from jenkins_tui.tui.state import (
    ApplicationState,
    BuildLogSnapshot,
    ServerSnapshot,
    View,
)
from jenkins_tui.tui.views.buildlog import BuildLogView
from jenkins_tui.tui.views.dashboard import DashboardView
from jenkins_tui.tui.views.help import HelpView
from jenkins_tui.tui.views.jobdetail import JobDetailView
from jenkins_tui.tui.views.joblist import JobListView


TICK_INTERVAL = 30.0

_VIEW_LABELS: dict[View, str] = {
    View.DASHBOARD: "Dashboard View",
    View.JOB_LIST: "Job List View",
    View.JOB_DETAIL: "Job Detail View",
    View.BUILD_LOG: "Build Log View",
    View.HELP: "Help View",
}


class Controller:
    """Owns the application state and the five view components."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        keys: KeyMap | None = None,
        max_log_lines: int = DEFAULT_MAX_LOG_LINES,
    ) -> None:
        self.keys = keys or KeyMap.from_settings()
        self._logger = logger
        self.state = ApplicationState()
        self.dashboard = DashboardView()
        self.job_list = JobListView()
        self.job_detail = JobDetailView()
        self.build_log = BuildLogView(max_log_lines=max_log_lines)
        self.help = HelpView(self.keys)

    # State helpers

    def _set(self, **changes: Any) -> None:
        self.state = replace(self.state, **changes)

    def _issue(self, kind: str) -> int:
        tokens, token = self.state.tokens.bump(kind)
        self._set(tokens=tokens)
        return token

    def _is_current(self, kind: str, token: int) -> bool:
        if token == self.state.tokens.get(kind):
            return True
        log_event(
            self._logger,
            "stale_result_dropped",
            level=logging.DEBUG,
            kind=kind,
            token=token,
            latest=self.state.tokens.get(kind),
        )
        return False

    def _navigate(self, view: View) -> None:
        self._set(view=view, overlay_return=None, status_message=_VIEW_LABELS[view])

    def _connect(self) -> Connect:
        return Connect(token=self._issue("connect"))

    def _fetch_jobs(self) -> list[Command]:
        return [FetchJobs(token=self._issue("jobs"))]

    def _fetch_job_detail(self, job_name: str) -> list[Command]:
        # A new job detail supersedes any last-build fetch still in flight.
        self._issue("build_detail")
        return [FetchJobDetail(token=self._issue("job_detail"), job_name=job_name)]

    def _fetch_build_detail(self, job_name: str, build_number: int) -> list[Command]:
        token = self._issue("build_detail")
        return [FetchBuildDetail(token=token, job_name=job_name, build_number=build_number)]

    def _fetch_build_log(self, job_name: str, build_number: int) -> list[Command]:
        token = self._issue("build_log")
        return [FetchBuildLog(token=token, job_name=job_name, build_number=build_number)]

    def _filter_target(self) -> Any:
        if self.state.view is View.JOB_LIST:
            return self.job_list.list
        if self.state.view is View.JOB_DETAIL:
            return self.job_detail.builds
        if self.state.view is View.BUILD_LOG:
            return self.build_log
        return None

    # Entry points

    def start(self) -> list[Command]:
        """Commands to run once at startup: connect and arm the refresh timer."""

        return [self._connect(), ScheduleTick(TICK_INTERVAL)]

    def handle(self, event: Event) -> list[Command]:
        """Apply one event and return the commands it produces."""

        if self.state.quitting:
            return []
        if isinstance(event, KeyPressed):
            return self._on_key(event)
        if isinstance(event, Resized):
            return self._on_resize(event)
        if isinstance(event, RefreshTick):
            return self._on_tick(event)
        if isinstance(event, ConnectResult):
            return self._on_connect(event)
        if isinstance(event, JobsResult):
            return self._on_jobs(event)
        if isinstance(event, JobDetailResult):
            return self._on_job_detail(event)
        if isinstance(event, BuildDetailResult):
            return self._on_build_detail(event)
        if isinstance(event, BuildLogResult):
            return self._on_build_log(event)
        if isinstance(event, ActionConfirmed):
            self._set(status_message="Working...")
            return [RunAction(event.action)]
        if isinstance(event, ActionResult):
            return self._on_action_result(event)
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    # Keyboard

    def _on_key(self, event: KeyPressed) -> list[Command]:
        key = normalize_key(event.key)
        keys = self.keys

        target = self._filter_target()
        if target is not None and target.filter.editing:
            return self._on_filter_key(target, key, event.character)

        if keys.quit.matches(key):
            self._set(quitting=True)
            return [Quit()]
        if keys.help.matches(key):
            self._toggle_help()
            return []
        if keys.dashboard.matches(key):
            self._navigate(View.DASHBOARD)
            return []
        if keys.jobs.matches(key):
            self._navigate(View.JOB_LIST)
            return self._fetch_jobs() if self.state.connected else []
        if keys.refresh.matches(key):
            self._set(status_message="Refreshing...")
            return [self._connect()]
        if keys.enter.matches(key):
            return self._on_enter()
        if keys.back.matches(key):
            self._on_back()
            return []
        if keys.filter.matches(key):
            if target is not None:
                target.begin_filter()
            return []
        if keys.trigger.matches(key) or keys.stop.matches(key) or keys.delete.matches(key):
            return self._on_action_key(key)

        self._on_navigation_key(key)
        return []

    def _on_filter_key(self, target: Any, key: str, character: str | None) -> list[Command]:
        if key == "ctrl+c":
            self._set(quitting=True)
            return [Quit()]
        if key == "esc":
            target.clear_filter()
        elif key == "enter":
            target.accept_filter()
        elif key == "backspace":
            target.backspace_filter()
        elif character is not None and len(character) == 1 and character.isprintable():
            target.type_filter(character)
        return []

    def _toggle_help(self) -> None:
        if self.state.view is View.HELP:
            self._navigate(self.state.overlay_return or View.DASHBOARD)
            return
        self._set(
            view=View.HELP,
            overlay_return=self.state.view,
            status_message=_VIEW_LABELS[View.HELP],
        )

    def _on_enter(self) -> list[Command]:
        view = self.state.view
        if view is View.JOB_LIST:
            job = self.job_list.selected()
            if job is None:
                return []
            if job.name != self.state.selected_job:
                self.job_detail.clear(job.name)
            self._set(
                selected_job=job.name,
                view=View.JOB_DETAIL,
                status_message=f"Job: {job.name}",
            )
            return self._fetch_job_detail(job.name) if self.state.connected else []

        if view is View.JOB_DETAIL:
            build = self.job_detail.selected_build()
            if build is None:
                return []
            self._set(
                selected_build=build.number,
                view=View.BUILD_LOG,
                status_message=f"Build #{build.number} Logs",
            )
            job_name = self.state.selected_job or ""
            # The view never keeps another build's text, even when no fetch follows.
            self._set(build_log=None)
            self.build_log.begin_loading(job_name, build.number)
            commands = self._fetch_build_log(job_name, build.number)
            if self.state.connected and job_name:
                return commands
            self.build_log.loading = False
            return []

        return []

    def _on_back(self) -> None:
        view = self.state.view
        if view is View.JOB_DETAIL:
            self._navigate(View.JOB_LIST)
        elif view is View.BUILD_LOG:
            self._navigate(View.JOB_DETAIL)
        elif view is View.HELP:
            self._navigate(self.state.overlay_return or View.DASHBOARD)
        elif view is View.JOB_LIST and self.job_list.list.filter.active:
            self.job_list.list.clear_filter()

    def _on_action_key(self, key: str) -> list[Command]:
        view = self.state.view
        job_name = self.state.selected_job
        if view is View.JOB_DETAIL and job_name:
            if self.keys.trigger.matches(key):
                return [ConfirmAction(TriggerBuild(job_name))]
            build = self.job_detail.selected_build()
            if self.keys.stop.matches(key) and build is not None:
                return [ConfirmAction(StopBuild(job_name, build.number))]
        if view is View.JOB_LIST and self.keys.delete.matches(key):
            job = self.job_list.selected()
            if job is not None:
                return [ConfirmAction(DeleteJob(job.name))]
        return []

    def _on_navigation_key(self, key: str) -> None:
        keys = self.keys
        view = self.state.view
        if view is View.BUILD_LOG:
            log = self.build_log
            if keys.up.matches(key):
                log.scroll(-1)
            elif keys.down.matches(key):
                log.scroll(1)
            elif keys.page_up.matches(key):
                log.page(-1)
            elif keys.page_down.matches(key):
                log.page(1)
            elif keys.top.matches(key):
                log.top()
            elif keys.bottom.matches(key):
                log.bottom()
            return

        if view is View.JOB_LIST:
            rows = self.job_list.list
        elif view is View.JOB_DETAIL:
            rows = self.job_detail.builds
        else:
            return
        if keys.up.matches(key):
            rows.move(-1)
        elif keys.down.matches(key):
            rows.move(1)
        elif keys.page_up.matches(key):
            rows.page(-1)
        elif keys.page_down.matches(key):
            rows.page(1)
        elif keys.top.matches(key):
            rows.top()
        elif keys.bottom.matches(key):
            rows.bottom()

    # Timers and layout

    def _on_resize(self, event: Resized) -> list[Command]:
        self._set(width=event.width, height=event.height)
        for view in (self.dashboard, self.job_list, self.job_detail, self.build_log, self.help):
            view.resize(event.width, event.height)
        return []

    def _on_tick(self, event: RefreshTick) -> list[Command]:
        commands: list[Command] = []
        if event.due:
            commands.append(self._connect())
        commands.append(ScheduleTick(TICK_INTERVAL))
        return commands

    # Fetch results

    def _on_connect(self, event: ConnectResult) -> list[Command]:
        if not self._is_current("connect", event.token):
            return []
        if event.info is None:
            self._set(connected=False, server=ServerSnapshot(), status_message="Connection failed")
            self.state = self.state.with_error("connect", f"Connection error: {event.error}")
            self.dashboard.with_server(self.state.server)
            return []

        snapshot = ServerSnapshot.from_server_info(event.info, updated_at=event.received_at)
        self._set(connected=True, server=snapshot, status_message="Connected to Jenkins")
        self.state = self.state.clear_error("connect")
        self.dashboard.with_server(snapshot)
        return self._fetch_jobs()

    def _on_jobs(self, event: JobsResult) -> list[Command]:
        if not self._is_current("jobs", event.token):
            return []
        if event.error is not None:
            self.state = self.state.with_error("jobs", f"Failed to fetch jobs: {event.error}")
            return []
        self._set(jobs=event.jobs)
        self.state = self.state.clear_error("jobs")
        self.job_list.with_jobs(event.jobs)
        self.dashboard.with_jobs(event.jobs)
        return []

    def _on_job_detail(self, event: JobDetailResult) -> list[Command]:
        if not self._is_current("job_detail", event.token):
            return []
        if event.detail is None:
            self.state = self.state.with_error(
                "job_detail", f"Failed to fetch job details: {event.error}"
            )
            return []

        detail = event.detail
        self._set(job_detail=detail, last_build=None)
        self.state = self.state.clear_error("job_detail")
        self.job_detail.with_detail(detail)
        if detail.last_build is None:
            return []
        self._set(selected_build=detail.last_build.number)
        return self._fetch_build_detail(event.job_name, detail.last_build.number)

    def _on_build_detail(self, event: BuildDetailResult) -> list[Command]:
        if not self._is_current("build_detail", event.token):
            return []
        if event.job_name != self.state.selected_job:
            return []
        if event.detail is None:
            self.state = self.state.with_error(
                "build_detail", f"Failed to fetch build details: {event.error}"
            )
            return []
        self._set(last_build=event.detail)
        self.state = self.state.clear_error("build_detail")
        self.job_detail.with_last_build(event.detail)
        return []

    def _on_build_log(self, event: BuildLogResult) -> list[Command]:
        if not self._is_current("build_log", event.token):
            return []
        if event.error is not None:
            self.build_log.loading = False
            self.state = self.state.with_error(
                "build_log", f"Failed to fetch build log: {event.error}"
            )
            return []
        self._set(build_log=BuildLogSnapshot(event.job_name, event.build_number, event.text))
        self.state = self.state.clear_error("build_log")
        self.build_log.with_job_and_build(event.job_name, event.build_number)
        self.build_log.with_log(event.text)
        return []

    def _on_action_result(self, event: ActionResult) -> list[Command]:
        action = event.action
        if event.error is not None:
            self._set(status_message=action.failure_prefix)
            self.state = self.state.with_error("action", f"{action.failure_prefix}: {event.error}")
            return []

        self._set(status_message=action.done_message)
        self.state = self.state.clear_error("action")
        if not self.state.connected:
            return []
        if isinstance(action, DeleteJob):
            return self._fetch_jobs()
        if action.job_name == self.state.selected_job:
            return self._fetch_job_detail(action.job_name)
        return []

    # Rendering

    def active_view(self) -> Any:
        return {
            View.DASHBOARD: self.dashboard,
            View.JOB_LIST: self.job_list,
            View.JOB_DETAIL: self.job_detail,
            View.BUILD_LOG: self.build_log,
            View.HELP: self.help,
        }[self.state.view]

    def render_content(self) -> RenderableType:
        return self.active_view().render()

    def render_status(self) -> Text:
        return Text(self.state.status_message, style="grey50")

    def render_hints(self) -> Text:
        hints = Text()
        for idx, binding in enumerate(self.keys.short_help()):
            if idx:
                hints.append(" • ", style="grey35")
            hints.append(binding.label, style="grey62")
            hints.append(f" {binding.description}", style="grey42")
        return hints

    def render_error(self) -> Text:
        return Text(self.state.error_message, style="bold red")

    def render(self) -> RenderableType:
        """Full screen: content, status line, key hints and the error line."""

        sections: list[RenderableType] = [
            self.render_content(),
            Text(""),
            self.render_status(),
            Text(""),
            self.render_hints(),
        ]
        if self.state.error_message:
            sections.append(self.render_error())
        return Group(*sections)
