from __future__ import annotations

import pytest
import yaml

from jenkins_tui.config.loader import ConfigManager, config_from_dict
from jenkins_tui.config.schema import DEFAULT_SERVER_URL, ServerConfig
from jenkins_tui.errors import ConfigError


def test_load_creates_default_config(tmp_path) -> None:
    path = tmp_path / "nested" / "config.yaml"
    manager = ConfigManager(path)

    config = manager.load()

    assert path.exists()
    assert config.current == "default"
    assert manager.current_server() == ServerConfig(name="default", url=DEFAULT_SERVER_URL)
    assert config.ui.refresh_interval == 30
    assert config.ui.max_log_lines == 1000
    saved = yaml.safe_load(path.read_text())
    assert saved["keybindings"]["quit"] == "q"
    assert saved["ui"]["refreshInterval"] == 30
    assert saved["jenkins_servers"][0]["insecureSkipVerify"] is False


def test_save_and_reload_round_trip(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    manager = ConfigManager(path)
    manager.load()
    manager.add_server(ServerConfig(name="ci", url="https://ci.example.com", username="bob", token="t"))
    manager.set_current_server("ci")

    reloaded = ConfigManager(path)
    reloaded.load()

    server = reloaded.current_server()
    assert server is not None
    assert (server.name, server.url, server.username) == ("ci", "https://ci.example.com", "bob")


def test_add_server_replaces_same_name(tmp_path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml")
    manager.load()

    manager.add_server(ServerConfig(name="default", url="http://other:8080"))

    assert manager.config is not None
    assert len(manager.config.jenkins_servers) == 1
    assert manager.config.jenkins_servers[0].url == "http://other:8080"


def test_remove_current_server_falls_back(tmp_path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml")
    manager.load()
    manager.add_server(ServerConfig(name="ci"))

    manager.remove_server("default")

    assert manager.config is not None
    assert manager.config.current == "ci"
    with pytest.raises(ConfigError):
        manager.remove_server("missing")


def test_set_unknown_server_is_rejected(tmp_path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml")
    manager.load()

    with pytest.raises(ConfigError, match="not found"):
        manager.set_current_server("nope")


def test_unknown_current_falls_back_to_first_server() -> None:
    config = config_from_dict({"current": "gone", "jenkins_servers": [{"name": "a"}, {"name": "b"}]})
    manager = ConfigManager()
    manager.config = config

    server = manager.current_server()
    assert server is not None and server.name == "a"


def test_invalid_yaml_is_config_error(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("jenkins_servers: [unclosed\n")

    with pytest.raises(ConfigError, match="parse"):
        ConfigManager(path).load()


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"jenkins_servers": {}},
        {"jenkins_servers": [{"url": "http://x"}]},
        {"ui": "compact"},
    ],
)
def test_bad_shapes_are_config_errors(payload) -> None:
    with pytest.raises(ConfigError):
        config_from_dict(payload)


def test_unknown_keys_are_ignored() -> None:
    config = config_from_dict(
        {
            "current": "a",
            "jenkins_servers": [{"name": "a", "url": "http://a", "colour": "blue"}],
            "ui": {"refresh_interval": 10, "unused": True},
        }
    )

    assert config.jenkins_servers[0].url == "http://a"
    assert config.ui.refresh_interval == 10


ORIGINAL_FORMAT = """\
current: ci
jenkins_servers:
  - name: default
    url: http://localhost:8080
    username: ""
    token: ""
    proxy: ""
    insecureSkipVerify: false
  - name: ci
    url: https://ci.example.com
    username: bob
    token: abc123
    proxy: http://proxy.local:3128
    insecureSkipVerify: true
ui:
  theme: dark
  refreshInterval: 5
  maxLogLines: 250
  compactMode: true
keybindings:
  quit: x
  help: "?"
  dashboard: d
  jobs: j
  builds: b
  nodes: n
"""


def test_loads_camel_case_config_file(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(ORIGINAL_FORMAT)
    manager = ConfigManager(path)

    config = manager.load()

    server = manager.current_server()
    assert server is not None
    assert (server.name, server.username, server.token) == ("ci", "bob", "abc123")
    assert server.proxy == "http://proxy.local:3128"
    assert server.insecure_skip_verify is True
    assert config.ui.refresh_interval == 5
    assert config.ui.max_log_lines == 250
    assert config.ui.compact_mode is True
    assert config.keybindings.quit == "x"


def test_save_keeps_camel_case_keys(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(ORIGINAL_FORMAT)
    manager = ConfigManager(path)
    manager.load()

    manager.save()

    saved = yaml.safe_load(path.read_text())
    assert saved["current"] == "ci"
    assert saved["ui"] == {
        "theme": "dark",
        "refreshInterval": 5,
        "maxLogLines": 250,
        "compactMode": True,
    }
    assert saved["jenkins_servers"][1]["insecureSkipVerify"] is True
    assert "insecure_skip_verify" not in saved["jenkins_servers"][1]

    reloaded = ConfigManager(path)
    assert reloaded.load() == manager.config


def test_empty_file_loads_without_servers(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("")
    manager = ConfigManager(path)

    config = manager.load()

    assert config.jenkins_servers == []
    assert manager.current_server() is None
