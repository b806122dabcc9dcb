"""Selectable, filterable list state shared by the job and build lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Protocol, Sequence, TypeVar


class ListItem(Protocol):
    """Row capability needed by a list: a key to filter on and a detail line."""

    def filter_value(self) -> str: ...

    def description(self) -> str: ...


T = TypeVar("T", bound=ListItem)


@dataclass(slots=True)
class FilterState:
    text: str = ""
    editing: bool = False

    @property
    def active(self) -> bool:
        return bool(self.text)


class SelectableList(Generic[T]):
    """Cursor, scroll window and substring filter over a list of rows.

    The cursor indexes into the filtered rows. All scroll bookkeeping happens
    when the cursor or the viewport changes, never while rendering.
    """

    def __init__(self) -> None:
        self._items: tuple[T, ...] = ()
        self._visible: tuple[T, ...] = ()
        self.filter = FilterState()
        self.cursor = 0
        self.offset = 0
        self.height = 1

    @property
    def items(self) -> tuple[T, ...]:
        return self._items

    @property
    def visible(self) -> tuple[T, ...]:
        return self._visible

    def set_items(self, items: Sequence[T]) -> None:
        self._items = tuple(items)
        self._apply_filter()

    def set_height(self, height: int) -> None:
        self.height = max(1, height)
        self._ensure_visible()

    def selected(self) -> T | None:
        if not self._visible:
            return None
        return self._visible[self.cursor]

    def move(self, delta: int) -> None:
        if not self._visible:
            return
        self.cursor = max(0, min(len(self._visible) - 1, self.cursor + delta))
        self._ensure_visible()

    def page(self, direction: int) -> None:
        self.move(direction * self.height)

    def top(self) -> None:
        self.cursor = 0
        self._ensure_visible()

    def bottom(self) -> None:
        self.cursor = max(0, len(self._visible) - 1)
        self._ensure_visible()

    def window(self) -> tuple[int, int]:
        """Return the `[start, end)` slice of visible rows inside the viewport."""

        return self.offset, min(len(self._visible), self.offset + self.height)

    def begin_filter(self) -> None:
        self.filter.editing = True

    def type_filter(self, text: str) -> None:
        self.filter.text += text
        self._apply_filter()

    def backspace_filter(self) -> None:
        self.filter.text = self.filter.text[:-1]
        self._apply_filter()

    def accept_filter(self) -> None:
        self.filter.editing = False

    def clear_filter(self) -> None:
        self.filter = FilterState()
        self._apply_filter()

    def _apply_filter(self) -> None:
        needle = self.filter.text.lower()
        if needle:
            self._visible = tuple(
                item for item in self._items if needle in item.filter_value().lower()
            )
        else:
            self._visible = self._items
        self.cursor = max(0, min(self.cursor, len(self._visible) - 1))
        self._ensure_visible()

    def _ensure_visible(self) -> None:
        if self.cursor < self.offset:
            self.offset = self.cursor
        if self.cursor >= self.offset + self.height:
            self.offset = self.cursor - self.height + 1
        self.offset = max(0, min(self.offset, max(0, len(self._visible) - self.height)))
