"""Follow-up effects returned from ``update`` alongside the new panel state.

``Open``, ``Close``, ``Emit``, ``Quit`` and ``Batch`` are interpreted by the
orchestrator.  ``Task`` is deferred work: it runs off the event loop's
critical path and its outcome comes back as a ``DomainResult`` event.  Any
other object is opaque and handed to the orchestrator's ``on_effect`` hook.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

if TYPE_CHECKING:
    from lazyfocus.tui.registry import PanelKind


@dataclass(frozen=True)
class Task:
    """Deferred work: a plain callable (run in an executor) or a coroutine function."""

    work: Callable[[], Any] | Callable[[], Awaitable[Any]]
    origin: PanelKind | None = None
    name: str = ""


@dataclass(frozen=True)
class Emit:
    """Queue ``payload`` as a ``DomainResult`` after the current event."""

    payload: Any
    origin: PanelKind | None = None


@dataclass(frozen=True)
class Open:
    kind: PanelKind
    context: Any = None


@dataclass(frozen=True)
class Close:
    kind: PanelKind


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Batch:
    effects: tuple[Any, ...]


Effect = Union[Task, Emit, Open, Close, Quit, Batch, Any]


def batch(*effects: Effect | None) -> Effect | None:
    """Combine effects, dropping ``None`` and flattening nested batches."""
    flat: list[Any] = []
    for effect in effects:
        if effect is None:
            continue
        if isinstance(effect, Batch):
            flat.extend(effect.effects)
        else:
            flat.append(effect)
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return Batch(tuple(flat))
