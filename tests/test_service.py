from __future__ import annotations

import httpx
import pytest

from conftest import make_server_info
from jenkins_tui.api.models import ServerInfo
from jenkins_tui.errors import JenkinsConnectionError
from jenkins_tui.service import JenkinsService, normalize_refresh_interval


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeClient:
    """Records calls and replays canned answers."""

    def __init__(self, *, fail_connect: bool = False, fail_nodes: bool = False) -> None:
        self.calls: list[str] = []
        self.fail_connect = fail_connect
        self.fail_nodes = fail_nodes

    def get_server_info(self):
        self.calls.append("get_server_info")
        if self.fail_connect:
            raise JenkinsConnectionError("failed to connect to Jenkins: refused")
        return ServerInfo(url="http://jenkins.local", version="2.440.1", mode="NORMAL")

    def get_nodes(self):
        self.calls.append("get_nodes")
        if self.fail_nodes:
            raise JenkinsConnectionError("failed to list nodes")
        return list(make_server_info().nodes)

    def get_jobs(self):
        self.calls.append("get_jobs")
        return []

    def close(self) -> None:
        self.calls.append("close")


def test_operations_fail_fast_until_connected(logger) -> None:
    client = FakeClient()
    service = JenkinsService(client, logger=logger)

    with pytest.raises(JenkinsConnectionError, match="not connected"):
        service.list_jobs()
    with pytest.raises(JenkinsConnectionError):
        service.get_build_log("api", 1)
    with pytest.raises(JenkinsConnectionError):
        service.trigger_build("api")

    assert client.calls == []
    assert isinstance(service.last_error, JenkinsConnectionError)


def test_connect_counts_nodes(logger) -> None:
    service = JenkinsService(FakeClient(), logger=logger)

    info = service.connect()

    assert service.connected
    assert info.total_nodes == 3
    assert info.free_nodes == 1
    assert service.server_info is info
    assert service.last_error is None


def test_node_listing_failure_still_connects(logger) -> None:
    service = JenkinsService(FakeClient(fail_nodes=True), logger=logger)

    info = service.connect()

    assert service.connected
    assert info.total_nodes == 0
    assert service.last_error is not None


def test_connect_failure_marks_disconnected(logger) -> None:
    client = FakeClient()
    service = JenkinsService(client, logger=logger)
    service.connect()

    client.fail_connect = True
    with pytest.raises(JenkinsConnectionError):
        service.connect()

    assert not service.connected
    assert service.server_info is None
    with pytest.raises(JenkinsConnectionError, match="not connected"):
        service.list_jobs()


def test_success_clears_last_error(logger) -> None:
    service = JenkinsService(FakeClient(), logger=logger)
    with pytest.raises(JenkinsConnectionError):
        service.list_jobs()

    service.connect()
    assert service.list_jobs() == []
    assert service.last_error is None


def test_should_refresh_follows_interval(logger) -> None:
    clock = FakeClock()
    service = JenkinsService(FakeClient(), logger=logger, refresh_interval=30, clock=clock)

    assert service.should_refresh()
    service.connect()
    assert service.last_refresh == 1000.0
    assert not service.should_refresh()

    clock.now += 30
    assert not service.should_refresh()
    clock.now += 0.5
    assert service.should_refresh()


def test_should_refresh_does_not_wait_for_in_flight_call(logger) -> None:
    service = JenkinsService(FakeClient(), logger=logger, refresh_interval=30, clock=FakeClock())

    with service._lock:
        assert service.should_refresh()


@pytest.mark.parametrize(
    ("configured", "expected"),
    [(None, 30.0), (0, 30.0), (-5, 30.0), (0.2, 1.0), (1, 1.0), (45, 45.0)],
)
def test_normalize_refresh_interval(configured, expected) -> None:
    assert normalize_refresh_interval(configured) == expected


def test_service_over_real_client(logger) -> None:
    from jenkins_tui.api.client import JenkinsClient
    from jenkins_tui.config.schema import ServerConfig

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/computer/api/json":
            return httpx.Response(200, json={"computer": []})
        if request.url.params.get("tree", "").startswith("jobs"):
            return httpx.Response(200, json={"jobs": [{"name": "api", "color": "blue"}]})
        return httpx.Response(200, headers={"X-Jenkins": "2.1"}, json={"mode": "NORMAL"})

    client = JenkinsClient(
        ServerConfig(name="t", url="http://jenkins.local"),
        logger=logger,
        transport=httpx.MockTransport(handler),
    )
    service = JenkinsService(client, logger=logger)

    assert service.connect().version == "2.1"
    assert [job.name for job in service.list_jobs()] == ["api"]
    service.close()
