"""Main Textual app for the Jenkins TUI."""

from __future__ import annotations

from functools import partial
import logging
import sys

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import Static

from jenkins_tui.config.schema import AppConfig
from jenkins_tui.service import JenkinsService
from jenkins_tui.tui.controller import Controller
from jenkins_tui.tui.events import (
    Action,
    ActionConfirmed,
    Command,
    ConfirmAction,
    Event,
    KeyPressed,
    Quit,
    Resized,
    ScheduleTick,
)
from jenkins_tui.tui.keymap import KeyMap
from jenkins_tui.tui.runner import CommandRunner
from jenkins_tui.tui.screens import ConfirmScreen


class ControllerEvent(Message):
    """Carries a result event from a worker thread back to the UI thread."""

    def __init__(self, event: Event) -> None:
        super().__init__()
        self.event = event


class JenkinsTuiApp(App[None]):
    """Thin Textual shell: forwards input to the controller and executes its commands."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #main {
        height: 1fr;
        padding: 0 1;
    }

    #status_line {
        height: 1;
        padding: 0 1;
    }

    #hints {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    #error_line {
        height: auto;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "interrupt", "Quit", show=False, priority=True),
    ]

    def __init__(self, *, controller: Controller, runner: CommandRunner) -> None:
        super().__init__()
        self.controller = controller
        self.runner = runner

    def compose(self) -> ComposeResult:
        yield Static(id="main")
        yield Static(id="status_line")
        yield Static(id="hints")
        yield Static(id="error_line")

    def on_mount(self) -> None:
        self.dispatch(Resized(self.size.width, self.size.height))
        self._execute(self.controller.start())

    def on_resize(self, event: events.Resize) -> None:
        self.dispatch(Resized(event.size.width, event.size.height))

    def on_key(self, event: events.Key) -> None:
        if len(self.screen_stack) > 1:
            return
        event.stop()
        event.prevent_default()
        self.dispatch(KeyPressed(event.key, event.character))

    def on_controller_event(self, message: ControllerEvent) -> None:
        self.dispatch(message.event)

    def action_interrupt(self) -> None:
        self.dispatch(KeyPressed("ctrl+c"))

    def dispatch(self, event: Event) -> None:
        commands = self.controller.handle(event)
        self._refresh_screen()
        self._execute(commands)

    def _refresh_screen(self) -> None:
        if len(self.screen_stack) > 1:
            screen = self.screen_stack[0]
        else:
            screen = self.screen
        screen.query_one("#main", Static).update(self.controller.render_content())
        screen.query_one("#status_line", Static).update(self.controller.render_status())
        screen.query_one("#hints", Static).update(self.controller.render_hints())
        screen.query_one("#error_line", Static).update(self.controller.render_error())

    def _execute(self, commands: list[Command]) -> None:
        for command in commands:
            if isinstance(command, Quit):
                self.exit()
                return
            if isinstance(command, ScheduleTick):
                self.set_timer(command.delay, self._tick)
            elif isinstance(command, ConfirmAction):
                self._confirm(command.action)
            else:
                self.run_worker(partial(self._perform, command), thread=True, group="jenkins")

    def _perform(self, command: Command) -> None:
        self.post_message(ControllerEvent(self.runner.perform(command)))

    def _tick(self) -> None:
        self.dispatch(self.runner.tick())

    def _confirm(self, action: Action) -> None:
        def _apply(confirmed: bool | None) -> None:
            if confirmed:
                self.dispatch(ActionConfirmed(action))

        self.push_screen(ConfirmScreen(message=action.prompt), _apply)


def build_app(service: JenkinsService, config: AppConfig, *, logger: logging.Logger) -> JenkinsTuiApp:
    controller = Controller(
        logger=logger,
        keys=KeyMap.from_settings(config.keybindings),
        max_log_lines=config.ui.max_log_lines,
    )
    return JenkinsTuiApp(controller=controller, runner=CommandRunner(service, logger=logger))


def run_tui(service: JenkinsService, config: AppConfig, *, logger: logging.Logger) -> None:
    """Run the interactive Jenkins TUI until the user quits."""

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("jenkins-tui requires an interactive terminal")

    app = build_app(service, config, logger=logger)
    app.run()
