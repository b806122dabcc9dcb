"""HTTP client for the Jenkins JSON API."""

from __future__ import annotations

import logging
import threading
from typing import Any
from urllib.parse import quote

import httpx

from jenkins_tui.api.models import (
    Build,
    BuildDetail,
    Job,
    JobDetail,
    JobParameter,
    Node,
    ServerInfo,
    status_from_color,
)
from jenkins_tui.config.schema import ServerConfig
from jenkins_tui.errors import ConfigError, JenkinsConnectionError, NotFoundError
from jenkins_tui.observability.logging import log_event


DEFAULT_TIMEOUT_SECONDS = 30.0

_JOBS_TREE = "jobs[name,url,color,description,lastBuild[number,timestamp]]"
_NODES_TREE = "computer[displayName,offline,idle,numExecutors]"


def _job_path(job_name: str) -> str:
    return f"/job/{quote(job_name, safe='')}"


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_int(value: Any, *, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _millis_to_seconds(value: Any) -> float | None:
    if not isinstance(value, (int, float)) or value <= 0:
        return None
    return value / 1000.0


def _build_ref(payload: Any) -> Build | None:
    if not isinstance(payload, dict) or "number" not in payload:
        return None
    return Build(number=_as_int(payload.get("number")), url=_as_str(payload.get("url")))


def _parameter_definitions(payload: dict[str, Any]) -> tuple[JobParameter, ...]:
    definitions: list[JobParameter] = []
    for prop in payload.get("property") or []:
        if not isinstance(prop, dict):
            continue
        for raw in prop.get("parameterDefinitions") or []:
            if not isinstance(raw, dict) or not raw.get("name"):
                continue
            default = raw.get("defaultParameterValue")
            default_value = default.get("value") if isinstance(default, dict) else None
            definitions.append(
                JobParameter(
                    name=str(raw["name"]),
                    type=_as_str(raw.get("type")),
                    default_value=_as_str(default_value),
                    description=_as_str(raw.get("description")),
                    choices=tuple(str(choice) for choice in raw.get("choices") or []),
                )
            )
    return tuple(definitions)


def _build_parameters(payload: dict[str, Any]) -> dict[str, str]:
    parameters: dict[str, str] = {}
    for action in payload.get("actions") or []:
        if not isinstance(action, dict):
            continue
        for param in action.get("parameters") or []:
            if isinstance(param, dict) and param.get("name"):
                parameters[str(param["name"])] = _as_str(param.get("value"))
    return parameters


def _create_http_client(
    server: ServerConfig,
    *,
    timeout: float,
    transport: httpx.BaseTransport | None,
) -> httpx.Client:
    proxy: str | None = None
    if server.proxy:
        try:
            parsed = httpx.URL(server.proxy)
        except httpx.InvalidURL as exc:
            raise ConfigError(f"invalid proxy URL: {server.proxy}") from exc
        if not parsed.scheme or not parsed.host:
            raise ConfigError(f"invalid proxy URL: {server.proxy}")
        proxy = server.proxy

    return httpx.Client(
        base_url=server.url.rstrip("/"),
        auth=httpx.BasicAuth(server.username, server.token),
        timeout=httpx.Timeout(timeout),
        verify=not server.insecure_skip_verify,
        proxy=proxy,
        transport=transport,
        follow_redirects=True,
    )


class JenkinsClient:
    """Thin synchronous wrapper around the Jenkins REST endpoints.

    Every public call holds one lock for its whole duration, so concurrent
    callers queue up instead of racing on the shared connection pool.
    """

    def __init__(
        self,
        server: ServerConfig,
        *,
        logger: logging.Logger,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not server.url:
            raise ConfigError(f"server {server.name!r} has no url")
        self.server = server
        self._logger = logger
        self._lock = threading.Lock()
        self._http = _create_http_client(server, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
        not_found: bool = True,
    ) -> httpx.Response:
        with self._lock:
            try:
                response = self._http.request(method, path, params=params, data=data)
            except httpx.HTTPError as exc:
                raise JenkinsConnectionError(f"failed to {action}: {exc}") from exc

        if response.status_code == 404 and not_found:
            raise NotFoundError(f"failed to {action}: {path} not found")
        if response.status_code >= 400:
            raise JenkinsConnectionError(
                f"failed to {action}: unexpected status code {response.status_code}"
            )
        return response

    def _get_json(self, path: str, *, action: str, params: dict[str, str] | None = None, not_found: bool = True) -> dict[str, Any]:
        response = self._request("GET", path, action=action, params=params, not_found=not_found)
        try:
            payload = response.json()
        except ValueError as exc:
            raise JenkinsConnectionError(f"failed to parse response: {exc}") from exc
        if not isinstance(payload, dict):
            raise JenkinsConnectionError("failed to parse response: expected a JSON object")
        return payload

    def get_server_info(self) -> ServerInfo:
        """Check liveness and read the server version and mode."""

        response = self._request("GET", "/api/json", action="connect to Jenkins", not_found=False)
        try:
            payload = response.json()
        except ValueError as exc:
            raise JenkinsConnectionError(f"failed to parse response: {exc}") from exc
        if not isinstance(payload, dict):
            payload = {}
        return ServerInfo(
            url=self.server.url,
            version=response.headers.get("X-Jenkins", _as_str(payload.get("version"))),
            mode=_as_str(payload.get("mode")),
            username=self.server.username,
        )

    def get_nodes(self) -> list[Node]:
        payload = self._get_json(
            "/computer/api/json",
            action="list nodes",
            params={"tree": _NODES_TREE},
            not_found=False,
        )
        nodes: list[Node] = []
        for raw in payload.get("computer") or []:
            if not isinstance(raw, dict):
                continue
            nodes.append(
                Node(
                    name=_as_str(raw.get("displayName")),
                    online=not bool(raw.get("offline")),
                    idle=bool(raw.get("idle")),
                    num_executors=_as_int(raw.get("numExecutors")),
                )
            )
        return nodes

    def get_jobs(self) -> list[Job]:
        """List top-level jobs in server order."""

        payload = self._get_json(
            "/api/json",
            action="get jobs",
            params={"tree": _JOBS_TREE},
            not_found=False,
        )
        jobs: list[Job] = []
        for raw in payload.get("jobs") or []:
            if not isinstance(raw, dict):
                continue
            color = _as_str(raw.get("color"))
            status, in_progress = status_from_color(color)
            last_build = raw.get("lastBuild")
            jobs.append(
                Job(
                    name=_as_str(raw.get("name")),
                    url=_as_str(raw.get("url")),
                    color=color,
                    description=_as_str(raw.get("description")),
                    status=status,
                    in_progress=in_progress,
                    last_build_at=(
                        _millis_to_seconds(last_build.get("timestamp"))
                        if isinstance(last_build, dict)
                        else None
                    ),
                )
            )
        return jobs

    def get_job_detail(self, job_name: str) -> JobDetail:
        payload = self._get_json(
            f"{_job_path(job_name)}/api/json",
            action="get job details",
            params={"depth": "1"},
        )
        builds = tuple(
            build
            for build in (_build_ref(raw) for raw in payload.get("builds") or [])
            if build is not None
        )
        return JobDetail(
            name=_as_str(payload.get("name")) or job_name,
            url=_as_str(payload.get("url")),
            description=_as_str(payload.get("description")),
            buildable=bool(payload.get("buildable")),
            builds=builds,
            last_build=_build_ref(payload.get("lastBuild")),
            parameters=_parameter_definitions(payload),
        )

    def get_build_detail(self, job_name: str, build_number: int) -> BuildDetail:
        payload = self._get_json(
            f"{_job_path(job_name)}/{build_number}/api/json",
            action="get build details",
        )
        result = payload.get("result")
        return BuildDetail(
            number=_as_int(payload.get("number"), default=build_number),
            url=_as_str(payload.get("url")),
            started_at=_millis_to_seconds(payload.get("timestamp")),
            duration_ms=_as_int(payload.get("duration")),
            building=bool(payload.get("building")),
            result=str(result) if result is not None else None,
            description=_as_str(payload.get("description")),
            parameters=_build_parameters(payload),
        )

    def get_build_log(self, job_name: str, build_number: int) -> str:
        response = self._request(
            "GET",
            f"{_job_path(job_name)}/{build_number}/consoleText",
            action="get build log",
        )
        return response.text

    def trigger_build(self, job_name: str, parameters: dict[str, str] | None = None) -> None:
        """Queue a build, using `buildWithParameters` when parameters are given."""

        if parameters:
            path = f"{_job_path(job_name)}/buildWithParameters"
            self._request("POST", path, action="trigger build", data=dict(parameters))
        else:
            self._request("POST", f"{_job_path(job_name)}/build", action="trigger build")
        log_event(self._logger, "build_triggered", job=job_name, parameter_count=len(parameters or {}))

    def stop_build(self, job_name: str, build_number: int) -> None:
        self._request("POST", f"{_job_path(job_name)}/{build_number}/stop", action="stop build")
        log_event(self._logger, "build_stopped", job=job_name, build=build_number)

    def delete_job(self, job_name: str) -> None:
        self._request("POST", f"{_job_path(job_name)}/doDelete", action="delete job")
        log_event(self._logger, "job_deleted", job=job_name)
