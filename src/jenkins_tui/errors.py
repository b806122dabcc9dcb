"""Error taxonomy shared by the client, the service facade and the CLI."""

from __future__ import annotations


class JenkinsError(Exception):
    """Base class for every error raised by jenkins_tui."""


class JenkinsConnectionError(JenkinsError):
    """The server could not be reached, rejected the credentials or answered unexpectedly."""


class NotFoundError(JenkinsError):
    """The server is reachable but the requested job or build does not exist."""


class ConfigError(JenkinsError):
    """The persisted configuration is unreadable or unusable."""
