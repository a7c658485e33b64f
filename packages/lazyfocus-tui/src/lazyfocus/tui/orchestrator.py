"""Event loop driver: focus routing, effect handling and frame rendering.

One event is handled start to finish before the next one is taken:

1. ``Resize`` updates the shared viewport and resizes every component.
2. ``KeyPress`` goes to the highest-priority visible panel, or -- when no
   panel is visible -- to the global bindings and then the base view.
3. ``DomainResult`` follows the configured :class:`ResultPolicy`; failed
   results open the error panel when one is registered.

The effect returned by the recipient is applied, deferred ``Task`` effects
are handed to the asyncio loop, and a fresh frame is rendered.
"""

from __future__ import annotations

import asyncio
import collections
import inspect
import logging
import os
import time
from typing import Any, AsyncIterable, Callable, Iterable, Protocol

from lazyfocus.tui.compositor import CompositionRequest, Compositor
from lazyfocus.tui.config import ResultPolicy, TuiConfig
from lazyfocus.tui.effects import Batch, Close, Emit, Open, Quit, Task
from lazyfocus.tui.events import DomainResult, Event, KeyPress, Resize
from lazyfocus.tui.geometry import TextBlock, Viewport, fit_block
from lazyfocus.tui.keymap import AppAction, KeyMap
from lazyfocus.tui.registry import (
    BaseView,
    LayerRegistry,
    Panel,
    PanelKind,
    placement_for,
)
from lazyfocus.tui.styles import DEFAULT_STYLES, Styles

logger = logging.getLogger(__name__)

__all__ = ["Orchestrator", "RenderSink"]


class RenderSink(Protocol):
    """Receives one composited frame per render tick."""

    def write_frame(self, frame: TextBlock) -> None: ...


# Panels the base view's key bindings can open directly.
_OPEN_BINDINGS: tuple[tuple[AppAction, PanelKind], ...] = (
    ("help", PanelKind.HELP),
    ("quickAdd", PanelKind.QUICK_ADD),
    ("search", PanelKind.SEARCH),
    ("command", PanelKind.COMMAND),
)

_END_OF_INPUT = object()


class Orchestrator:
    """Owns the base view, the layer registry and the compositor."""

    def __init__(
        self,
        base: BaseView,
        panels: Iterable[Panel] = (),
        *,
        styles: Styles = DEFAULT_STYLES,
        config: TuiConfig | None = None,
        keymap: KeyMap | None = None,
        sink: RenderSink | None = None,
        on_effect: Callable[[Any], None] | None = None,
    ) -> None:
        self.base: BaseView = base
        self.registry = LayerRegistry(panels)
        self.styles = styles
        self.config = config if config is not None else TuiConfig()
        self.keymap = keymap if keymap is not None else KeyMap()
        self.sink = sink
        self.on_effect = on_effect

        self.viewport = Viewport()
        self.compositor = Compositor(styles.backdrop, self.viewport)

        self._pending: collections.deque[Event] = collections.deque()
        self._queue: asyncio.Queue[Any] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._quit = False
        self._last_owner: PanelKind | None = None
        self._last_frame: TextBlock = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def quit_requested(self) -> bool:
        return self._quit

    @property
    def last_frame(self) -> TextBlock:
        return self._last_frame

    @property
    def in_flight(self) -> int:
        """Number of deferred tasks that have not reported back yet."""
        return len(self._tasks)

    def request_quit(self) -> None:
        self._quit = True
        if self._queue is not None:
            self._queue.put_nowait(_END_OF_INPUT)

    def post(self, event: Event) -> None:
        """Queue *event* behind the one currently being handled."""
        if self._queue is not None:
            self._queue.put_nowait(event)
        else:
            self._pending.append(event)

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def dispatch(self, event: Event) -> list[Task]:
        """Handle exactly one event.

        Returns the deferred ``Task`` effects it produced; the caller decides
        how to run them (:meth:`run` schedules them on the loop).
        """
        effect, origin = self._route(event)
        tasks: list[Task] = []
        self._apply(effect, origin, tasks)

        owner = self.registry.owner_kind()
        if owner != self._last_owner:
            logger.debug(
                "input owner %s -> %s",
                self._last_owner.value if self._last_owner else "base",
                owner.value if owner else "base",
            )
            self._last_owner = owner
        return tasks

    def process(self, event: Event) -> list[Task]:
        """Handle *event* plus anything it emits, then render one frame."""
        tasks = self.dispatch(event)
        while self._pending and not self._quit:
            tasks.extend(self.dispatch(self._pending.popleft()))
        self.refresh()
        return tasks

    def _route(self, event: Event) -> tuple[Any, PanelKind | None]:
        if isinstance(event, Resize):
            self._resize(event.width, event.height)
            return None, None

        if isinstance(event, KeyPress):
            if self.keymap.matches(event.key, "forceQuit"):
                return Quit(), None
            owner = self.registry.owner()
            if owner is None:
                return self._route_base_key(event)
            return self._update_panel(owner, event)

        if isinstance(event, DomainResult):
            return self._route_result(event)

        logger.debug("ignoring unknown event %r", event)
        return None, None

    def _resize(self, width: int, height: int) -> None:
        self.viewport.width = width
        self.viewport.height = height
        self.base = self.base.set_size(width, height)
        self.registry.resize(width, height)
        logger.debug("resized to %dx%d", width, height)

    def _route_base_key(self, event: KeyPress) -> tuple[Any, PanelKind | None]:
        key = event.key
        if self.keymap.matches(key, "quit"):
            return Quit(), None
        if self.keymap.matches(key, "debug"):
            self.write_debug_dump()
            return None, None
        for action, kind in _OPEN_BINDINGS:
            if self.keymap.matches(key, action) and kind in self.registry:
                return Open(kind), None
        return self._update_base(event)

    def _route_result(self, result: DomainResult) -> tuple[Any, PanelKind | None]:
        if result.failed and PanelKind.ERROR in self.registry:
            return Open(PanelKind.ERROR, result.error), result.origin

        policy = self.config.result_policy
        if policy is ResultPolicy.BASE_VIEW:
            return self._update_base(result)

        if (
            policy is ResultPolicy.DROP_IF_HIDDEN
            and result.origin is not None
            and not self.registry.is_visible(result.origin)
        ):
            logger.debug("dropping result for hidden %s panel", result.origin.value)
            return None, None

        owner = self.registry.owner()
        if owner is None:
            return self._update_base(result)
        return self._update_panel(owner, result)

    def _update_panel(self, panel: Panel, event: Event) -> tuple[Any, PanelKind]:
        new_panel, effect = panel.update(event)
        self.registry.replace(new_panel)
        return effect, PanelKind(panel.kind)

    def _update_base(self, event: Event) -> tuple[Any, None]:
        self.base, effect = self.base.update(event)
        return effect, None

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def _apply(self, effect: Any, origin: PanelKind | None, tasks: list[Task]) -> None:
        if effect is None:
            return
        if isinstance(effect, Batch):
            for inner in effect.effects:
                self._apply(inner, origin, tasks)
        elif isinstance(effect, Open):
            self._set_visible(effect.kind, True, effect.context)
        elif isinstance(effect, Close):
            self._set_visible(effect.kind, False)
        elif isinstance(effect, Emit):
            self.post(DomainResult(effect.payload, origin=effect.origin or origin))
        elif isinstance(effect, Quit):
            self.request_quit()
        elif isinstance(effect, Task):
            if effect.origin is None and origin is not None:
                effect = Task(effect.work, origin=origin, name=effect.name)
            tasks.append(effect)
        elif self.on_effect is not None:
            self.on_effect(effect)
        else:
            logger.debug("no handler for effect %r", effect)

    def _set_visible(self, kind: PanelKind, visible: bool, context: Any = None) -> None:
        if kind not in self.registry:
            logger.warning("no %s panel registered", getattr(kind, "value", kind))
            return
        panel = self.registry.get(kind)
        self.registry.replace(panel.show(context) if visible else panel.hide())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> TextBlock:
        """Composite the base view and every visible panel into a frame."""
        vp = self.viewport
        if vp.is_degenerate:
            return []

        frame = fit_block(self.base.view(), vp)
        for panel in self.registry.visible_panels():
            block = panel.view()
            if not block:
                continue
            request = CompositionRequest(
                base=frame,
                overlay=block,
                dim=self.config.dim_backdrop,
                placement=placement_for(panel.kind),
            )
            frame = self.compositor.apply(request)
        return fit_block(frame, vp)

    def refresh(self) -> TextBlock:
        """Render a frame and hand it to the sink."""
        frame = self.render()
        self._last_frame = frame
        if self.sink is not None:
            self.sink.write_frame(frame)
        return frame

    # ------------------------------------------------------------------
    # asyncio loop
    # ------------------------------------------------------------------

    async def run(self, source: AsyncIterable[Event] | None = None) -> None:
        """Drain events until quit, or until *source* ends and all work settles."""
        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        while self._pending:
            self._queue.put_nowait(self._pending.popleft())

        pump = loop.create_task(self._pump(source)) if source is not None else None
        source_done = source is None
        self.refresh()
        try:
            while not self._quit:
                if source_done and not self._tasks and self._queue.empty():
                    break
                event = await self._queue.get()
                if event is _END_OF_INPUT:
                    source_done = True
                    continue
                for task in self.dispatch(event):
                    self._schedule(task)
                self.refresh()
        finally:
            if pump is not None:
                pump.cancel()
            for handle in list(self._tasks):
                handle.cancel()
            self._tasks.clear()
            self._queue = None

    async def _pump(self, source: AsyncIterable[Event]) -> None:
        try:
            async for event in source:
                self.post(event)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("event source failed")
        self.post(_END_OF_INPUT)  # type: ignore[arg-type]

    def _schedule(self, task: Task) -> None:
        handle = asyncio.get_running_loop().create_task(
            self._execute(task), name=task.name or None
        )
        self._tasks.add(handle)
        handle.add_done_callback(self._tasks.discard)

    async def _execute(self, task: Task) -> None:
        label = task.name or getattr(task.work, "__name__", "task")
        try:
            if inspect.iscoroutinefunction(task.work):
                payload = await task.work()
            else:
                loop = asyncio.get_running_loop()
                payload = await loop.run_in_executor(None, task.work)
                if inspect.isawaitable(payload):
                    payload = await payload
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "task %s from %s failed: %s",
                label,
                task.origin.value if task.origin else "base",
                exc,
            )
            result = DomainResult(origin=task.origin, error=exc)
        else:
            result = DomainResult(payload, origin=task.origin)

        # Leave the in-flight set before reporting so the loop can settle.
        current = asyncio.current_task()
        if current is not None:
            self._tasks.discard(current)  # type: ignore[arg-type]
        self.post(result)

    # ------------------------------------------------------------------
    # Debug dump
    # ------------------------------------------------------------------

    def write_debug_dump(self) -> str | None:
        """Write the current render state to ``config.debug_dir``.

        Returns the path written, or ``None`` if it could not be written.
        """
        try:
            os.makedirs(self.config.debug_dir, exist_ok=True)
            ts = int(time.time() * 1000)
            dump_path = os.path.join(self.config.debug_dir, f"render-{ts}.txt")
            with open(dump_path, "w", encoding="utf-8") as f:
                f.write(f"viewport: {self.viewport.width}x{self.viewport.height}\n")
                owner = self.registry.owner_kind()
                f.write(f"owner: {owner.value if owner else 'base'}\n")
                f.write(f"in_flight: {len(self._tasks)}\n")
                f.write(f"\npanels ({len(self.registry)}):\n")
                for panel in self.registry.panels():
                    kind = PanelKind(panel.kind)
                    f.write(f"  {kind.value:<10} rank={kind.rank} visible={panel.is_visible()}\n")
                f.write(f"\nlast_frame ({len(self._last_frame)}):\n")
                for i, line in enumerate(self._last_frame):
                    f.write(f"  [{i:3d}] {line!r}\n")
        except OSError:
            logger.debug("could not write debug dump", exc_info=True)
            return None
        return dump_path
