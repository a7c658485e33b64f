"""Single-line input bars pinned to the bottom of the frame."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

import grapheme

from lazyfocus.tui.effects import Emit
from lazyfocus.tui.events import Event, KeyPress
from lazyfocus.tui.geometry import TextBlock, fit_line
from lazyfocus.tui.keymap import KeyMap
from lazyfocus.tui.registry import PanelKind
from lazyfocus.tui.styles import DEFAULT_STYLES, Styles

_CURSOR = "\x1b[7m \x1b[27m"


@dataclass(frozen=True)
class SearchChanged:
    text: str


@dataclass(frozen=True)
class SearchConfirmed:
    text: str


@dataclass(frozen=True)
class SearchCleared:
    pass


@dataclass(frozen=True)
class CommandSubmitted:
    text: str


@dataclass(frozen=True)
class CommandCancelled:
    pass


def _is_text(key: str) -> bool:
    if grapheme.length(key) != 1:
        return False
    return not any(ord(ch) < 32 or ord(ch) == 0x7F or 0x80 <= ord(ch) <= 0x9F for ch in key)


def edit_text(value: str, key: str, keymap: KeyMap) -> str | None:
    """Apply an editing key to *value*; ``None`` when *key* is not an edit."""
    if keymap.matches(key, "deleteBackward"):
        return grapheme.slice(value, 0, max(0, grapheme.length(value) - 1))
    if key == "space":
        return value + " "
    if _is_text(key):
        return value + key
    return None


def _bar_line(styles: Styles, prompt: str, value: str, placeholder: str, width: int) -> TextBlock:
    if width <= 0:
        return []
    body = value + _CURSOR if value or not placeholder else _CURSOR + styles.hint(placeholder)
    return [styles.bar(fit_line(" " + prompt + body, width))]


@dataclass(frozen=True)
class SearchBar:
    """Filter input; every edit is reported so the list can narrow live."""

    kind: ClassVar[PanelKind] = PanelKind.SEARCH

    styles: Styles = DEFAULT_STYLES
    keymap: KeyMap = field(default_factory=KeyMap)
    prompt: str = "/ "
    placeholder: str = "type to filter"
    value: str = ""
    visible: bool = False
    width: int = 0
    height: int = 0

    def is_visible(self) -> bool:
        return self.visible

    def set_size(self, width: int, height: int) -> SearchBar:
        return replace(self, width=width, height=height)

    def show(self, context: Any = None) -> SearchBar:
        return replace(self, value=context if isinstance(context, str) else "", visible=True)

    def hide(self) -> SearchBar:
        return replace(self, visible=False)

    def update(self, event: Event) -> tuple[SearchBar, Any]:
        if not self.visible or not isinstance(event, KeyPress):
            return self, None
        key = event.key
        if self.keymap.matches(key, "submit"):
            return self.hide(), Emit(SearchConfirmed(self.value), origin=self.kind)
        if key == "escape":
            return replace(self, value="", visible=False), Emit(SearchCleared(), origin=self.kind)

        edited = edit_text(self.value, key, self.keymap)
        if edited is None or edited == self.value:
            return self, None
        return replace(self, value=edited), Emit(SearchChanged(edited), origin=self.kind)

    def view(self) -> TextBlock:
        if not self.visible:
            return []
        return _bar_line(self.styles, self.prompt, self.value, self.placeholder, self.width)


@dataclass(frozen=True)
class CommandBar:
    """Command line with a recallable history of submitted commands.

    ``history_index`` is ``None`` while editing a fresh line and otherwise
    points into ``history`` (oldest first).
    """

    kind: ClassVar[PanelKind] = PanelKind.COMMAND

    styles: Styles = DEFAULT_STYLES
    keymap: KeyMap = field(default_factory=KeyMap)
    prompt: str = ":"
    placeholder: str = ""
    max_history: int = 100
    value: str = ""
    history: tuple[str, ...] = ()
    history_index: int | None = None
    visible: bool = False
    width: int = 0
    height: int = 0

    def is_visible(self) -> bool:
        return self.visible

    def set_size(self, width: int, height: int) -> CommandBar:
        return replace(self, width=width, height=height)

    def show(self, context: Any = None) -> CommandBar:
        value = context if isinstance(context, str) else ""
        return replace(self, value=value, history_index=None, visible=True)

    def hide(self) -> CommandBar:
        return replace(self, visible=False, history_index=None)

    def update(self, event: Event) -> tuple[CommandBar, Any]:
        if not self.visible or not isinstance(event, KeyPress):
            return self, None
        key = event.key

        if self.keymap.matches(key, "submit"):
            text = self.value.strip()
            if not text:
                return self._closed(), Emit(CommandCancelled(), origin=self.kind)
            history = self.history
            if not history or history[-1] != text:
                history = (*history, text)[-self.max_history :]
            done = replace(self._closed(), history=history)
            return done, Emit(CommandSubmitted(text), origin=self.kind)

        if key == "escape":
            return self._closed(), Emit(CommandCancelled(), origin=self.kind)

        if self.keymap.matches(key, "historyPrev"):
            return self._recall(-1), None
        if self.keymap.matches(key, "historyNext"):
            return self._recall(1), None

        edited = edit_text(self.value, key, self.keymap)
        if edited is None:
            return self, None
        return replace(self, value=edited, history_index=None), None

    def _closed(self) -> CommandBar:
        return replace(self, value="", history_index=None, visible=False)

    def _recall(self, step: int) -> CommandBar:
        if not self.history:
            return self
        if self.history_index is None:
            if step > 0:
                return self
            index = len(self.history) - 1
        else:
            index = self.history_index + step
        if index < 0:
            index = 0
        if index >= len(self.history):
            return replace(self, value="", history_index=None)
        return replace(self, value=self.history[index], history_index=index)

    def view(self) -> TextBlock:
        if not self.visible:
            return []
        return _bar_line(self.styles, self.prompt, self.value, self.placeholder, self.width)


__all__ = [
    "CommandBar",
    "CommandCancelled",
    "CommandSubmitted",
    "SearchBar",
    "SearchChanged",
    "SearchCleared",
    "SearchConfirmed",
    "edit_text",
]
