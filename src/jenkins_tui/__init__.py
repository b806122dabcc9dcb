"""Jenkins TUI package entrypoint."""

__version__ = "0.1.0"


def main() -> None:
    """Run the Jenkins TUI CLI."""
    from jenkins_tui.cli.app import main as _cli_main

    _cli_main()
