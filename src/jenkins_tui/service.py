"""Connection-aware facade over the Jenkins client used by the UI."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, TypeVar

from jenkins_tui.api.client import JenkinsClient
from jenkins_tui.api.models import BuildDetail, Job, JobDetail, ServerInfo
from jenkins_tui.config.schema import DEFAULT_REFRESH_INTERVAL
from jenkins_tui.errors import JenkinsConnectionError, JenkinsError
from jenkins_tui.observability.logging import log_event


T = TypeVar("T")

MIN_REFRESH_INTERVAL = 1.0


def normalize_refresh_interval(seconds: float | int | None) -> float:
    """Apply the default for unset/non-positive values and a one second floor."""

    if seconds is None or seconds <= 0:
        seconds = DEFAULT_REFRESH_INTERVAL
    return max(MIN_REFRESH_INTERVAL, float(seconds))


class JenkinsService:
    """High-level server operations with connection state and last-error tracking.

    Calls are serialized under one lock so that at most one request is in
    flight from the facade at a time. Every operation other than `connect`
    fails fast with `JenkinsConnectionError` until a connect has succeeded,
    without touching the network.
    """

    def __init__(
        self,
        client: JenkinsClient,
        *,
        logger: logging.Logger,
        refresh_interval: float | int | None = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._logger = logger
        self._clock = clock
        self._lock = threading.Lock()
        self.refresh_interval = normalize_refresh_interval(refresh_interval)
        self._connected = False
        self._server_info: ServerInfo | None = None
        self._last_error: JenkinsError | None = None
        self._last_refresh: float | None = None

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def server_info(self) -> ServerInfo | None:
        return self._server_info

    @property
    def last_error(self) -> JenkinsError | None:
        return self._last_error

    @property
    def last_refresh(self) -> float | None:
        return self._last_refresh

    def connect(self) -> ServerInfo:
        """Run a liveness check plus a best-effort node listing."""

        with self._lock:
            try:
                info = self._client.get_server_info()
            except JenkinsError as exc:
                self._connected = False
                self._server_info = None
                self._last_error = exc
                log_event(self._logger, "connect_failed", level=logging.WARNING, error=str(exc))
                raise

            self._last_error = None
            try:
                nodes = self._client.get_nodes()
            except JenkinsError as exc:
                self._last_error = exc
                log_event(self._logger, "node_listing_failed", level=logging.WARNING, error=str(exc))
            else:
                info = ServerInfo(
                    url=info.url,
                    version=info.version,
                    mode=info.mode,
                    username=info.username,
                    nodes=tuple(nodes),
                    uptime_seconds=info.uptime_seconds,
                )

            self._connected = True
            self._server_info = info
            self._last_refresh = self._clock()
            log_event(
                self._logger,
                "connected",
                url=info.url,
                version=info.version,
                nodes=info.total_nodes,
            )
            return info

    def should_refresh(self) -> bool:
        """True once the refresh interval has elapsed since the last successful connect."""

        if self._last_refresh is None:
            return True
        return (self._clock() - self._last_refresh) > self.refresh_interval

    def _call(self, operation: str, fn: Callable[[], T]) -> T:
        with self._lock:
            if not self._connected:
                error = JenkinsConnectionError("not connected to Jenkins server")
                self._last_error = error
                raise error
            try:
                result = fn()
            except JenkinsError as exc:
                self._last_error = exc
                log_event(
                    self._logger,
                    "request_failed",
                    level=logging.WARNING,
                    operation=operation,
                    error=str(exc),
                )
                raise
            self._last_error = None
            return result

    def list_jobs(self) -> list[Job]:
        return self._call("list_jobs", self._client.get_jobs)

    def get_job_detail(self, job_name: str) -> JobDetail:
        return self._call("get_job_detail", lambda: self._client.get_job_detail(job_name))

    def get_build_detail(self, job_name: str, build_number: int) -> BuildDetail:
        return self._call(
            "get_build_detail",
            lambda: self._client.get_build_detail(job_name, build_number),
        )

    def get_build_log(self, job_name: str, build_number: int) -> str:
        return self._call(
            "get_build_log",
            lambda: self._client.get_build_log(job_name, build_number),
        )

    def trigger_build(self, job_name: str, parameters: dict[str, str] | None = None) -> None:
        self._call("trigger_build", lambda: self._client.trigger_build(job_name, parameters))

    def stop_build(self, job_name: str, build_number: int) -> None:
        self._call("stop_build", lambda: self._client.stop_build(job_name, build_number))

    def delete_job(self, job_name: str) -> None:
        self._call("delete_job", lambda: self._client.delete_job(job_name))

    def close(self) -> None:
        self._client.close()
