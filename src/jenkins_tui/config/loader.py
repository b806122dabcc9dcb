"""Load, persist and edit the YAML configuration file."""

from __future__ import annotations

from dataclasses import asdict, fields
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

import yaml

from jenkins_tui.config.schema import (
    AppConfig,
    KeyBindingSettings,
    ServerConfig,
    UISettings,
)
from jenkins_tui.errors import ConfigError
from jenkins_tui.observability.logging import log_event


DEFAULT_CONFIG_PATH = Path("~/.jenkins-tui/config.yaml").expanduser()


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


# On-disk key for each field whose name differs from the file format.
_FILE_KEYS: dict[str, str] = {
    "insecure_skip_verify": "insecureSkipVerify",
    "refresh_interval": "refreshInterval",
    "max_log_lines": "maxLogLines",
    "compact_mode": "compactMode",
}
_FIELD_NAMES = {value: key for key, value in _FILE_KEYS.items()}


def _known_fields(cls: type, payload: Any, section: str) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Config section '{section}' must be a mapping.")
    names = {item.name for item in fields(cls)}
    values: dict[str, Any] = {}
    for key, value in payload.items():
        name = _FIELD_NAMES.get(key, key)
        if name in names:
            values[name] = value
    return values


def _to_file_keys(values: dict[str, Any]) -> dict[str, Any]:
    return {_FILE_KEYS.get(key, key): value for key, value in values.items()}


def config_to_dict(config: AppConfig) -> dict[str, Any]:
    """Plain mapping in the on-disk key spelling (camelCase inside sections)."""

    payload = asdict(config)
    return {
        "current": payload["current"],
        "jenkins_servers": [_to_file_keys(server) for server in payload["jenkins_servers"]],
        "ui": _to_file_keys(payload["ui"]),
        "keybindings": payload["keybindings"],
    }


def config_from_dict(payload: dict[str, Any]) -> AppConfig:
    """Reconstruct an AppConfig from a plain dictionary."""

    if not isinstance(payload, dict):
        raise ConfigError("Config file must contain a mapping.")

    raw_servers = payload.get("jenkins_servers", [])
    if not isinstance(raw_servers, list):
        raise ConfigError("Config section 'jenkins_servers' must be a list.")
    servers: list[ServerConfig] = []
    for raw in raw_servers:
        values = _known_fields(ServerConfig, raw, "jenkins_servers")
        if not values.get("name"):
            raise ConfigError("Every entry in 'jenkins_servers' needs a name.")
        servers.append(ServerConfig(**values))

    try:
        return AppConfig(
            current=str(payload.get("current", "")),
            jenkins_servers=servers,
            ui=UISettings(**_known_fields(UISettings, payload.get("ui"), "ui")),
            keybindings=KeyBindingSettings(
                **_known_fields(KeyBindingSettings, payload.get("keybindings"), "keybindings")
            ),
        )
    except TypeError as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc


class ConfigManager:
    """Owns the config file on disk and the loaded AppConfig."""

    def __init__(self, path: Path = DEFAULT_CONFIG_PATH, *, logger: logging.Logger | None = None) -> None:
        self.path = path
        self.config: AppConfig | None = None
        self._logger = logger

    def _log(self, event: str, **fields: Any) -> None:
        if self._logger is not None:
            log_event(self._logger, event, **fields)

    def load(self) -> AppConfig:
        """Read the config file, creating a default one when it does not exist."""

        if not self.path.exists():
            self.config = AppConfig()
            self.save()
            self._log("config_created", path=str(self.path))
            return self.config

        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle)
        except OSError as exc:
            raise ConfigError(f"failed to read config file: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"failed to parse config file: {exc}") from exc

        self.config = config_from_dict(payload if payload is not None else {})
        return self.config

    def save(self) -> None:
        """Persist the loaded config atomically."""

        config = self._require_config()
        try:
            _atomic_write_text(
                self.path,
                yaml.safe_dump(config_to_dict(config), default_flow_style=False, sort_keys=False),
            )
        except OSError as exc:
            raise ConfigError(f"failed to write config file: {exc}") from exc
        self._log("config_saved", path=str(self.path))

    def current_server(self) -> ServerConfig | None:
        """Return the selected server, falling back to the first configured one."""

        if self.config is None:
            return None
        for server in self.config.jenkins_servers:
            if server.name == self.config.current:
                return server
        if self.config.jenkins_servers:
            return self.config.jenkins_servers[0]
        return None

    def set_current_server(self, name: str) -> None:
        config = self._require_config()
        if not any(server.name == name for server in config.jenkins_servers):
            raise ConfigError(f"server {name!r} not found")
        config.current = name
        self.save()

    def add_server(self, server: ServerConfig) -> None:
        """Add a server, replacing an existing entry with the same name."""

        config = self._require_config()
        for idx, existing in enumerate(config.jenkins_servers):
            if existing.name == server.name:
                config.jenkins_servers[idx] = server
                self.save()
                return
        config.jenkins_servers.append(server)
        self.save()

    def remove_server(self, name: str) -> None:
        config = self._require_config()
        remaining = [server for server in config.jenkins_servers if server.name != name]
        if len(remaining) == len(config.jenkins_servers):
            raise ConfigError(f"server {name!r} not found")
        config.jenkins_servers = remaining
        if config.current == name and remaining:
            config.current = remaining[0].name
        self.save()

    def _require_config(self) -> AppConfig:
        if self.config is None:
            raise ConfigError("config not loaded")
        return self.config
