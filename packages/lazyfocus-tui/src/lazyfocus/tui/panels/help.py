"""Help modal listing the key bindings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

from lazyfocus.tui.events import Event, KeyPress
from lazyfocus.tui.geometry import TextBlock, fit_line
from lazyfocus.tui.keymap import KeyMap
from lazyfocus.tui.panels.box import frame_box, modal_width
from lazyfocus.tui.registry import PanelKind
from lazyfocus.tui.styles import DEFAULT_STYLES, Styles

_KEY_COLUMN = 10


@dataclass(frozen=True)
class HelpPanel:
    kind: ClassVar[PanelKind] = PanelKind.HELP

    styles: Styles = DEFAULT_STYLES
    keymap: KeyMap = field(default_factory=KeyMap)
    title: str = "Keyboard Shortcuts"
    extra: tuple[tuple[str, str], ...] = ()
    visible: bool = False
    width: int = 0
    height: int = 0

    def is_visible(self) -> bool:
        return self.visible

    def set_size(self, width: int, height: int) -> HelpPanel:
        return replace(self, width=width, height=height)

    def show(self, context: Any = None) -> HelpPanel:
        return replace(self, visible=True)

    def hide(self) -> HelpPanel:
        return replace(self, visible=False)

    def update(self, event: Event) -> tuple[HelpPanel, Any]:
        if not self.visible or not isinstance(event, KeyPress):
            return self, None
        if self.keymap.matches(event.key, "help") or self.keymap.matches(event.key, "cancel"):
            return self.hide(), None
        return self, None

    def view(self) -> TextBlock:
        if not self.visible:
            return []

        width = modal_width(self.width, 60)
        inner = width - 4
        body: TextBlock = []
        for keys, desc in [*self.keymap.help_entries(), *self.extra]:
            key_cell = self.styles.key(fit_line(keys, _KEY_COLUMN))
            body.append(f"  {key_cell} {desc}")
        body = [fit_line(line, inner) for line in body]
        return frame_box(body, width, self.styles, title=self.title)
