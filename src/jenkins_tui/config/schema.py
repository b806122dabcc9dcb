"""Dataclass-based configuration schema for jenkins_tui."""

from dataclasses import dataclass, field


DEFAULT_SERVER_URL = "http://localhost:8080"
DEFAULT_REFRESH_INTERVAL = 30
DEFAULT_MAX_LOG_LINES = 1000


@dataclass(slots=True)
class ServerConfig:
    """Connection options for one Jenkins server."""

    name: str
    url: str = DEFAULT_SERVER_URL
    username: str = ""
    token: str = ""
    proxy: str = ""
    insecure_skip_verify: bool = False


@dataclass(slots=True)
class UISettings:
    """Presentation options."""

    theme: str = "default"
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    max_log_lines: int = DEFAULT_MAX_LOG_LINES
    compact_mode: bool = False


@dataclass(slots=True)
class KeyBindingSettings:
    """Overrides for the global command keys."""

    quit: str = "q"
    help: str = "?"
    dashboard: str = "d"
    jobs: str = "j"
    refresh: str = "r"


@dataclass(slots=True)
class AppConfig:
    """Top-level persisted configuration."""

    current: str = "default"
    jenkins_servers: list[ServerConfig] = field(
        default_factory=lambda: [ServerConfig(name="default")]
    )
    ui: UISettings = field(default_factory=UISettings)
    keybindings: KeyBindingSettings = field(default_factory=KeyBindingSettings)
