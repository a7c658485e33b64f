"""Error modal shown when deferred work fails."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

from lazyfocus.tui.effects import Emit
from lazyfocus.tui.events import Event, KeyPress
from lazyfocus.tui.geometry import TextBlock
from lazyfocus.tui.keymap import KeyMap
from lazyfocus.tui.panels.box import center_line, frame_box, modal_width
from lazyfocus.tui.registry import PanelKind
from lazyfocus.tui.styles import DEFAULT_STYLES, Styles
from lazyfocus.tui.utils import wrap_text


@dataclass(frozen=True)
class ErrorDismissed:
    pass


def describe_error(error: Any) -> str:
    if isinstance(error, BaseException):
        text = str(error)
        return text if text else type(error).__name__
    return str(error) if error is not None else "Unknown error"


@dataclass(frozen=True)
class ErrorPanel:
    kind: ClassVar[PanelKind] = PanelKind.ERROR

    styles: Styles = DEFAULT_STYLES
    keymap: KeyMap = field(default_factory=KeyMap)
    message: str = ""
    visible: bool = False
    width: int = 0
    height: int = 0

    def is_visible(self) -> bool:
        return self.visible

    def set_size(self, width: int, height: int) -> ErrorPanel:
        return replace(self, width=width, height=height)

    def show(self, context: Any = None) -> ErrorPanel:
        return replace(self, message=describe_error(context), visible=True)

    def hide(self) -> ErrorPanel:
        return replace(self, visible=False)

    def update(self, event: Event) -> tuple[ErrorPanel, Any]:
        if not self.visible or not isinstance(event, KeyPress):
            return self, None
        if self.keymap.matches(event.key, "cancel") or self.keymap.matches(event.key, "submit"):
            return self.hide(), Emit(ErrorDismissed(), origin=self.kind)
        return self, None

    def view(self) -> TextBlock:
        if not self.visible:
            return []

        width = modal_width(self.width, 60)
        inner = width - 4
        body: TextBlock = [""]
        body.extend(wrap_text(self.message, inner))
        body.append("")
        body.append(center_line(self.styles.hint("[Esc/Enter] Dismiss"), inner))
        return frame_box(body, width, self.styles, title=self.styles.error("Error"))
