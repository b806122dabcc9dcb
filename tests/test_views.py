from __future__ import annotations

from conftest import make_build, make_detail, make_job, make_server_info, render_text
from jenkins_tui.api.models import Node, ServerInfo
from jenkins_tui.config.schema import KeyBindingSettings
from jenkins_tui.tui.keymap import KeyMap
from jenkins_tui.tui.state import ServerSnapshot
from jenkins_tui.tui.views.dashboard import DashboardView
from jenkins_tui.tui.views.help import HelpView
from jenkins_tui.tui.views.jobdetail import JobDetailView
from jenkins_tui.tui.views.joblist import JobListView


def test_dashboard_disconnected() -> None:
    view = DashboardView()
    view.resize(100, 40)

    text = render_text(view.render())

    assert "● Disconnected" in text
    assert "Not connected to Jenkins server" in text


def test_dashboard_shows_server_and_job_totals() -> None:
    view = DashboardView()
    view.resize(100, 40)
    view.with_server(ServerSnapshot.from_server_info(make_server_info(), updated_at=None))
    view.with_jobs([make_job("a"), make_job("b"), make_job("c", "failure")])

    text = render_text(view.render())

    assert "● Connected" in text
    assert "Version: 2.440.1" in text
    assert "Nodes: 3 total, 1 free" in text
    assert "Jobs: 3 total" in text
    assert "2 success" in text
    assert "1 failure" in text


def test_dashboard_counts_online_idle_nodes_as_free() -> None:
    info = ServerInfo(
        url="http://jenkins.local",
        version="2.440.1",
        mode="NORMAL",
        nodes=(
            Node(name="built-in", online=True, idle=True, num_executors=2),
            Node(name="agent-1", online=True, idle=True, num_executors=4),
            Node(name="agent-2", online=True, idle=False, num_executors=4),
        ),
    )
    view = DashboardView()
    view.resize(100, 40)
    view.with_server(ServerSnapshot.from_server_info(info, updated_at=None))

    text = render_text(view.render())

    assert "Nodes: 3 total, 2 free" in text


def test_job_list_empty_and_filtered_messages() -> None:
    view = JobListView()
    view.resize(100, 30)
    assert "No jobs" in render_text(view.render())

    view.with_jobs([make_job("api"), make_job("web")])
    view.list.type_filter("zzz")
    assert "No jobs match the filter" in render_text(view.render())


def test_job_list_keeps_selection_across_reload() -> None:
    view = JobListView()
    view.resize(100, 30)
    view.with_jobs([make_job("api"), make_job("db"), make_job("web")])
    view.list.move(2)

    view.with_jobs([make_job("new"), make_job("api"), make_job("db"), make_job("web")])

    selected = view.selected()
    assert selected is not None and selected.name == "web"


def test_job_list_height_allowance() -> None:
    view = JobListView()
    view.resize(100, 30)

    assert view.list.height == 20


def test_job_detail_loading_before_resize() -> None:
    view = JobDetailView()
    view.with_detail(make_detail("api"))

    assert render_text(view.render()).strip() == "Loading..."


def test_job_detail_renders_last_build() -> None:
    view = JobDetailView()
    view.resize(100, 40)
    view.with_detail(make_detail("api"))
    view.with_last_build(make_build(3, result="FAILURE"))

    text = render_text(view.render())

    assert "Job: api" in text
    assert "Last Build (#3):" in text
    assert "Status: failed" in text
    assert "Duration: 1m 5s" in text
    assert "Builds for api" in text
    assert "Build #2" in text
    assert view.builds.height == 25


def test_job_detail_new_detail_drops_stale_last_build() -> None:
    view = JobDetailView()
    view.resize(100, 40)
    view.with_detail(make_detail("api"))
    view.with_last_build(make_build(3))

    view.with_detail(make_detail("web", (1,)))

    assert view.last_build is None
    assert view.selected_build() is not None
    assert view.selected_build().number == 1


def test_help_lists_configured_bindings() -> None:
    view = HelpView(KeyMap.from_settings())
    view.resize(120, 60)

    text = render_text(view.render(), width=120)

    assert "Jenkins TUI Help" in text
    assert "Keyboard Shortcuts" in text
    assert "ctrl+c" in text
    assert "build job" in text


def test_help_usage_names_configured_refresh_key() -> None:
    view = HelpView(KeyMap.from_settings(KeyBindingSettings(refresh="R")))
    view.resize(120, 60)

    text = render_text(view.render(), width=120)

    assert "Press R to refresh data" in text
    assert "Press r to refresh data" not in text
