"""Layer registry: the fixed-priority set of panels and the focus arbiter.

Panels never change rank; only their visibility toggles.  The input owner
is recomputed from visibility on every call to :meth:`LayerRegistry.owner`,
so a panel that hides itself hands focus to the next visible panel on the
very next event.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Iterable, Iterator, Protocol, runtime_checkable

from lazyfocus.tui.events import Event
from lazyfocus.tui.geometry import TextBlock

logger = logging.getLogger(__name__)

__all__ = [
    "BOTTOM_BAR_KINDS",
    "BaseView",
    "LayerRegistry",
    "Panel",
    "PanelKind",
    "Placement",
    "PRIORITY_ORDER",
    "placement_for",
]


class PanelKind(str, enum.Enum):
    ERROR = "error"
    CONFIRM = "confirm"
    EDIT = "edit"
    DETAIL = "detail"
    QUICK_ADD = "quick_add"
    HELP = "help"
    SEARCH = "search"
    COMMAND = "command"

    @property
    def rank(self) -> int:
        """Higher rank wins input; the base view sits below every panel."""
        return len(PRIORITY_ORDER) - PRIORITY_ORDER.index(self)


# Highest priority first.
PRIORITY_ORDER: tuple[PanelKind, ...] = (
    PanelKind.ERROR,
    PanelKind.CONFIRM,
    PanelKind.EDIT,
    PanelKind.DETAIL,
    PanelKind.QUICK_ADD,
    PanelKind.HELP,
    PanelKind.SEARCH,
    PanelKind.COMMAND,
)


class Placement(enum.Enum):
    CENTERED = "centered"
    BOTTOM_BAR = "bottom_bar"


BOTTOM_BAR_KINDS: frozenset[PanelKind] = frozenset({PanelKind.SEARCH, PanelKind.COMMAND})


def placement_for(kind: PanelKind) -> Placement:
    if kind in BOTTOM_BAR_KINDS:
        return Placement.BOTTOM_BAR
    return Placement.CENTERED


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class Panel(Protocol):
    """A UI unit that can become the visible, focused overlay.

    Every method returns a new snapshot instead of mutating in place.
    """

    @property
    def kind(self) -> PanelKind: ...

    def is_visible(self) -> bool: ...

    def set_size(self, width: int, height: int) -> Panel: ...

    def update(self, event: Event) -> tuple[Panel, Any]: ...

    def view(self) -> TextBlock: ...

    def show(self, context: Any = None) -> Panel: ...

    def hide(self) -> Panel: ...


class BaseView(Protocol):
    """The always-present view underneath every panel."""

    def set_size(self, width: int, height: int) -> BaseView: ...

    def update(self, event: Event) -> tuple[BaseView, Any]: ...

    def view(self) -> TextBlock: ...


# ---------------------------------------------------------------------------
# LayerRegistry
# ---------------------------------------------------------------------------


class LayerRegistry:
    """Holds the current snapshot of every registered panel."""

    def __init__(self, panels: Iterable[Panel] = ()) -> None:
        self._panels: dict[PanelKind, Panel] = {}
        for panel in panels:
            self.register(panel)

    def register(self, panel: Panel) -> None:
        kind = PanelKind(panel.kind)
        if kind in self._panels:
            raise ValueError(f"panel already registered: {kind.value}")
        self._panels[kind] = panel
        logger.debug("registered %s panel (rank %d)", kind.value, kind.rank)

    def get(self, kind: PanelKind) -> Panel:
        return self._panels[kind]

    def replace(self, panel: Panel) -> None:
        """Store a new snapshot for an already registered kind."""
        kind = PanelKind(panel.kind)
        if kind not in self._panels:
            raise KeyError(kind)
        self._panels[kind] = panel

    def __contains__(self, kind: object) -> bool:
        return kind in self._panels

    def __len__(self) -> int:
        return len(self._panels)

    def panels(self) -> Iterator[Panel]:
        """Registered panels, highest priority first."""
        for kind in PRIORITY_ORDER:
            panel = self._panels.get(kind)
            if panel is not None:
                yield panel

    def owner(self) -> Panel | None:
        """Return the panel that receives input, or ``None`` for the base view."""
        for panel in self.panels():
            if panel.is_visible():
                return panel
        return None

    def owner_kind(self) -> PanelKind | None:
        owner = self.owner()
        return None if owner is None else PanelKind(owner.kind)

    def visible_panels(self) -> list[Panel]:
        """Visible panels, lowest priority first (the order they are drawn in)."""
        return [p for p in reversed(list(self.panels())) if p.is_visible()]

    def is_visible(self, kind: PanelKind) -> bool:
        panel = self._panels.get(kind)
        return panel is not None and panel.is_visible()

    def resize(self, width: int, height: int) -> None:
        for kind, panel in list(self._panels.items()):
            self._panels[kind] = panel.set_size(width, height)
