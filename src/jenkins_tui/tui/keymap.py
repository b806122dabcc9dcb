"""Key bindings recognized by the controller."""

from __future__ import annotations

from dataclasses import dataclass

from jenkins_tui.config.schema import KeyBindingSettings


_KEY_ALIASES: dict[str, str] = {
    "question_mark": "?",
    "slash": "/",
    "escape": "esc",
    "space": " ",
    "page_up": "pageup",
    "page_down": "pagedown",
}


def normalize_key(key: str) -> str:
    """Translate terminal key names into the spelling used by bindings."""

    return _KEY_ALIASES.get(key, key)


@dataclass(frozen=True, slots=True)
class KeyBinding:
    keys: tuple[str, ...]
    label: str
    description: str

    def matches(self, key: str) -> bool:
        return key in self.keys


@dataclass(frozen=True, slots=True)
class KeyMap:
    """Global and navigation bindings."""

    up: KeyBinding
    down: KeyBinding
    page_up: KeyBinding
    page_down: KeyBinding
    top: KeyBinding
    bottom: KeyBinding
    help: KeyBinding
    quit: KeyBinding
    enter: KeyBinding
    back: KeyBinding
    dashboard: KeyBinding
    jobs: KeyBinding
    refresh: KeyBinding
    filter: KeyBinding
    trigger: KeyBinding
    stop: KeyBinding
    delete: KeyBinding

    @classmethod
    def from_settings(cls, settings: KeyBindingSettings | None = None) -> "KeyMap":
        """Build the key map, letting config override the global command keys."""

        settings = settings or KeyBindingSettings()
        return cls(
            up=KeyBinding(("up", "k"), "↑/k", "up"),
            down=KeyBinding(("down",), "↓", "down"),
            page_up=KeyBinding(("pageup",), "pgup", "page up"),
            page_down=KeyBinding(("pagedown",), "pgdn", "page down"),
            top=KeyBinding(("home", "g"), "g/home", "top"),
            bottom=KeyBinding(("end", "G"), "G/end", "bottom"),
            help=KeyBinding((settings.help,), settings.help, "help"),
            quit=KeyBinding((settings.quit, "ctrl+c"), f"{settings.quit}/ctrl+c", "quit"),
            enter=KeyBinding(("enter",), "enter", "select"),
            back=KeyBinding(("esc",), "esc", "back"),
            dashboard=KeyBinding((settings.dashboard,), settings.dashboard, "dashboard"),
            jobs=KeyBinding((settings.jobs,), settings.jobs, "jobs"),
            refresh=KeyBinding((settings.refresh,), settings.refresh, "refresh"),
            filter=KeyBinding(("/",), "/", "filter"),
            trigger=KeyBinding(("b",), "b", "build job"),
            stop=KeyBinding(("s",), "s", "stop build"),
            delete=KeyBinding(("x",), "x", "delete job"),
        )

    def short_help(self) -> list[KeyBinding]:
        return [self.help, self.quit, self.enter, self.back, self.dashboard, self.jobs, self.refresh]

    def full_help(self) -> list[tuple[str, list[KeyBinding]]]:
        return [
            ("Navigation", [self.up, self.down, self.page_up, self.page_down, self.top, self.bottom]),
            ("General", [self.enter, self.back, self.filter, self.help, self.quit]),
            ("Views", [self.dashboard, self.jobs, self.refresh]),
            ("Actions", [self.trigger, self.stop, self.delete]),
        ]
