"""Tyro CLI application entrypoint."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import sys
from typing import Annotated

import tyro

from jenkins_tui.api.client import JenkinsClient
from jenkins_tui.config.loader import DEFAULT_CONFIG_PATH, ConfigManager
from jenkins_tui.config.schema import ServerConfig
from jenkins_tui.errors import ConfigError, JenkinsError
from jenkins_tui.observability.logging import DEFAULT_LOG_FILE, configure_logging, log_event
from jenkins_tui.service import JenkinsService
from jenkins_tui.tui.app import run_tui


@dataclass(slots=True)
class TuiCommand:
    """Terminal client for browsing a Jenkins server."""

    config: Annotated[Path, tyro.conf.arg(prefix_name=False)] = DEFAULT_CONFIG_PATH
    server: Annotated[str | None, tyro.conf.arg(prefix_name=False)] = None
    log_level: Annotated[str, tyro.conf.arg(prefix_name=False)] = "INFO"
    log_file: Annotated[Path, tyro.conf.arg(prefix_name=False)] = DEFAULT_LOG_FILE


def _select_server(manager: ConfigManager, name: str | None) -> ServerConfig:
    if name is not None:
        config = manager.config
        servers = config.jenkins_servers if config is not None else []
        for server in servers:
            if server.name == name:
                return server
        raise ConfigError(f"server {name!r} not found in {manager.path}")
    server = manager.current_server()
    if server is None:
        raise ConfigError(f"no Jenkins servers configured in {manager.path}")
    return server


def execute(command: TuiCommand) -> None:
    """Load config, build the client stack and run the TUI."""

    logger = configure_logging(command.log_level, command.log_file)
    manager = ConfigManager(command.config.expanduser(), logger=logger)
    try:
        config = manager.load()
        server = _select_server(manager, command.server)
        client = JenkinsClient(server, logger=logger)
    except JenkinsError as exc:
        log_event(logger, "startup_failed", level=logging.ERROR, error=str(exc))
        print(f"jenkins-tui: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    service = JenkinsService(client, logger=logger, refresh_interval=config.ui.refresh_interval)
    log_event(logger, "startup", server=server.name, url=server.url)
    try:
        run_tui(service, config, logger=logger)
    finally:
        service.close()
        log_event(logger, "shutdown")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the TUI."""

    command = tyro.cli(TuiCommand, args=argv)
    execute(command)
