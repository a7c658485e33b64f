"""Events delivered to the orchestrator, one at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from lazyfocus.tui.registry import PanelKind


@dataclass(frozen=True)
class KeyPress:
    """A single key, already normalised to a key id (``"a"``, ``"enter"``, ``"ctrl+c"``)."""

    key: str


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class DomainResult:
    """The outcome of deferred work, or a payload emitted by a panel.

    ``origin`` names the panel whose effect produced it, when known.
    ``error`` is set when the work raised instead of returning.
    """

    payload: Any = None
    origin: PanelKind | None = None
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


Event = Union[KeyPress, Resize, DomainResult]
