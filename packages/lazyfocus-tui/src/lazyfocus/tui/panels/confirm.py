"""Blocking confirmation modal."""

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
class ConfirmRequest:
    """What to ask, plus an opaque context handed back on confirmation."""

    title: str
    message: str
    context: Any = None


@dataclass(frozen=True)
class Confirmed:
    context: Any = None


@dataclass(frozen=True)
class Cancelled:
    pass


@dataclass(frozen=True)
class ConfirmPanel:
    kind: ClassVar[PanelKind] = PanelKind.CONFIRM

    styles: Styles = DEFAULT_STYLES
    keymap: KeyMap = field(default_factory=KeyMap)
    title: str = ""
    message: str = ""
    context: Any = None
    visible: bool = False
    width: int = 0
    height: int = 0

    def is_visible(self) -> bool:
        return self.visible

    def set_size(self, width: int, height: int) -> ConfirmPanel:
        return replace(self, width=width, height=height)

    def show(self, context: Any = None) -> ConfirmPanel:
        if isinstance(context, ConfirmRequest):
            return replace(
                self,
                title=context.title,
                message=context.message,
                context=context.context,
                visible=True,
            )
        return replace(self, title="Confirm", message="Are you sure?", context=context, visible=True)

    def hide(self) -> ConfirmPanel:
        return replace(self, visible=False)

    def update(self, event: Event) -> tuple[ConfirmPanel, Any]:
        if not self.visible or not isinstance(event, KeyPress):
            return self, None
        if self.keymap.matches(event.key, "confirm"):
            return self.hide(), Emit(Confirmed(self.context), origin=self.kind)
        if self.keymap.matches(event.key, "cancel"):
            return self.hide(), Emit(Cancelled(), origin=self.kind)
        return self, None

    def view(self) -> TextBlock:
        if not self.visible:
            return []

        width = modal_width(self.width, 50)
        inner = width - 4
        body: TextBlock = [center_line(self.styles.warning(self.title), inner), ""]
        for line in wrap_text(self.message, inner):
            body.append(center_line(line, inner))
        body.append("")
        body.append(center_line(self.styles.hint("[y/Enter] Confirm  [n/Esc] Cancel"), inner))
        return frame_box(body, width, self.styles)
