from __future__ import annotations

import pytest

from jenkins_tui.api.models import Node, ServerInfo, status_from_color, status_from_result


@pytest.mark.parametrize(
    ("color", "expected"),
    [
        ("blue", ("success", False)),
        ("blue_anime", ("success", True)),
        ("red", ("failure", False)),
        ("red_anime", ("failure", True)),
        ("yellow", ("unstable", False)),
        ("grey", ("disabled", False)),
        ("disabled", ("disabled", False)),
        ("aborted", ("aborted", False)),
        ("notbuilt", ("unknown", False)),
        ("", ("unknown", False)),
        (None, ("unknown", False)),
    ],
)
def test_status_from_color(color, expected) -> None:
    assert status_from_color(color) == expected


@pytest.mark.parametrize(
    ("result", "building", "expected"),
    [
        ("SUCCESS", False, "success"),
        ("FAILURE", False, "failed"),
        ("UNSTABLE", False, "failed"),
        ("ABORTED", False, "aborted"),
        ("NOT_BUILT", False, "waiting"),
        ("SOMETHING", False, "unknown"),
        (None, False, "unknown"),
        ("SUCCESS", True, "running"),
        (None, True, "running"),
    ],
)
def test_status_from_result(result, building, expected) -> None:
    assert status_from_result(result, building) == expected


def test_free_nodes_require_online_and_idle() -> None:
    info = ServerInfo(
        url="http://jenkins.local",
        version="2.0",
        mode="NORMAL",
        nodes=(
            Node(name="a", online=True, idle=True),
            Node(name="b", online=True, idle=False),
            Node(name="c", online=False, idle=True),
        ),
    )

    assert info.total_nodes == 3
    assert info.free_nodes == 1
