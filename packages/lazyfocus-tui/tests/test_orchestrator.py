"""Tests for lazyfocus.tui.orchestrator -- routing, effects and rendering.

Covers key routing by focus, global bindings, result policies, effect
interpretation, frame composition and the asyncio loop, using the
VirtualSink test helper and stub components.
"""

from __future__ import annotations

import asyncio
import logging
import os

import pytest

from lazyfocus.tui.config import ResultPolicy, TuiConfig
from lazyfocus.tui.effects import Batch, Close, Emit, Open, Task
from lazyfocus.tui.events import DomainResult, KeyPress, Resize
from lazyfocus.tui.orchestrator import Orchestrator
from lazyfocus.tui.registry import PanelKind
from lazyfocus.tui.styles import PLAIN_STYLES
from lazyfocus.tui.utils import visible_width

from .virtual_sink import StubBase, StubPanel, VirtualSink


def make(
    base: StubBase | None = None,
    *panels: StubPanel,
    policy: ResultPolicy = ResultPolicy.BASE_VIEW,
    size: tuple[int, int] = (20, 6),
    **kwargs,
) -> Orchestrator:
    config = kwargs.pop("config", TuiConfig(result_policy=policy))
    sink = kwargs.pop("sink", VirtualSink())
    orch = Orchestrator(
        base if base is not None else StubBase(),
        panels,
        styles=PLAIN_STYLES,
        config=config,
        sink=sink,
        **kwargs,
    )
    orch.process(Resize(*size))
    return orch


def key(name: str) -> KeyPress:
    return KeyPress(name)


async def feed(*events):
    for event in events:
        yield event


# ---------------------------------------------------------------------------
# Key routing
# ---------------------------------------------------------------------------


class TestKeyRouting:
    def test_base_receives_keys_without_panels(self) -> None:
        orch = make()
        orch.process(key("x"))
        assert orch.base.received == (key("x"),)

    def test_visible_panel_takes_keys(self) -> None:
        orch = make(None, StubPanel(PanelKind.HELP, visible=True))
        orch.process(key("x"))
        assert orch.base.received == ()
        assert orch.registry.get(PanelKind.HELP).received == (key("x"),)

    def test_highest_visible_panel_wins(self) -> None:
        orch = make(
            None,
            StubPanel(PanelKind.SEARCH, visible=True),
            StubPanel(PanelKind.CONFIRM, visible=True),
        )
        orch.process(key("x"))
        assert orch.registry.get(PanelKind.CONFIRM).received == (key("x"),)
        assert orch.registry.get(PanelKind.SEARCH).received == ()

    def test_hidden_panels_receive_nothing(self) -> None:
        orch = make(None, StubPanel(PanelKind.HELP))
        orch.process(key("x"))
        assert orch.registry.get(PanelKind.HELP).received == ()
        assert orch.base.received == (key("x"),)


class TestQuit:
    def test_q_quits_from_base(self) -> None:
        orch = make()
        orch.process(key("q"))
        assert orch.quit_requested is True

    def test_q_goes_to_panel_when_one_is_open(self) -> None:
        orch = make(None, StubPanel(PanelKind.SEARCH, visible=True))
        orch.process(key("q"))
        assert orch.quit_requested is False
        assert orch.registry.get(PanelKind.SEARCH).received == (key("q"),)

    def test_ctrl_c_always_quits(self) -> None:
        orch = make(None, StubPanel(PanelKind.CONFIRM, visible=True))
        orch.process(key("ctrl+c"))
        assert orch.quit_requested is True
        assert orch.registry.get(PanelKind.CONFIRM).received == ()


class TestOpenBindings:
    def test_question_mark_opens_help(self) -> None:
        orch = make(None, StubPanel(PanelKind.HELP))
        orch.process(key("?"))
        assert orch.registry.is_visible(PanelKind.HELP)
        assert orch.base.received == ()

    def test_slash_opens_search_and_colon_opens_command(self) -> None:
        orch = make(None, StubPanel(PanelKind.SEARCH), StubPanel(PanelKind.COMMAND))
        orch.process(key("/"))
        assert orch.registry.owner_kind() is PanelKind.SEARCH

        orch = make(None, StubPanel(PanelKind.SEARCH), StubPanel(PanelKind.COMMAND))
        orch.process(key(":"))
        assert orch.registry.owner_kind() is PanelKind.COMMAND

    def test_unregistered_binding_falls_through_to_base(self) -> None:
        orch = make()
        orch.process(key("a"))
        assert orch.base.received == (key("a"),)


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


class TestEffects:
    def test_open_with_context(self) -> None:
        base = StubBase(on_key=(("d", Open(PanelKind.CONFIRM, "task-1")),))
        orch = make(base, StubPanel(PanelKind.CONFIRM))
        orch.process(key("d"))
        panel = orch.registry.get(PanelKind.CONFIRM)
        assert panel.visible is True
        assert panel.context == "task-1"

    def test_close(self) -> None:
        panel = StubPanel(PanelKind.DETAIL, visible=True, on_key=(("x", Close(PanelKind.DETAIL)),))
        orch = make(None, panel)
        orch.process(key("x"))
        assert orch.registry.owner() is None

    def test_open_unregistered_kind_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        base = StubBase(on_key=(("e", Open(PanelKind.EDIT)),))
        orch = make(base)
        with caplog.at_level(logging.WARNING):
            orch.process(key("e"))
        assert "no edit panel registered" in caplog.text

    def test_open_unknown_kind_is_logged_and_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        base = StubBase(on_key=(("o", Open("bogus")),))
        orch = make(base, StubPanel(PanelKind.HELP))
        with caplog.at_level(logging.WARNING):
            orch.process(key("o"))
        assert "no bogus panel registered" in caplog.text
        assert orch.registry.owner() is None
        assert orch.quit_requested is False

    def test_emit_routes_result_after_current_event(self) -> None:
        panel = StubPanel(PanelKind.CONFIRM, visible=True, on_key=(("y", Emit("done")),))
        orch = make(None, panel)
        orch.process(key("y"))
        assert orch.base.received == (DomainResult("done", origin=PanelKind.CONFIRM),)

    def test_batch_applied_in_order(self) -> None:
        effect = Batch((Close(PanelKind.HELP), Open(PanelKind.DETAIL, 7)))
        panel = StubPanel(PanelKind.HELP, visible=True, on_key=(("x", effect),))
        orch = make(None, panel, StubPanel(PanelKind.DETAIL))
        orch.process(key("x"))
        assert orch.registry.owner_kind() is PanelKind.DETAIL
        assert orch.registry.get(PanelKind.DETAIL).context == 7

    def test_task_tagged_with_origin(self) -> None:
        def work() -> int:
            return 1

        panel = StubPanel(PanelKind.EDIT, visible=True, on_key=(("s", Task(work)),))
        orch = make(None, panel)
        tasks = orch.process(key("s"))
        assert len(tasks) == 1
        assert tasks[0].origin is PanelKind.EDIT
        assert tasks[0].work is work

    def test_unknown_effect_goes_to_hook(self) -> None:
        seen = []
        base = StubBase(on_key=(("x", "custom"),))
        orch = make(base, on_effect=seen.append)
        orch.process(key("x"))
        assert seen == ["custom"]


# ---------------------------------------------------------------------------
# Result policies
# ---------------------------------------------------------------------------


class TestResultPolicy:
    def test_base_view_policy_ignores_open_panels(self) -> None:
        orch = make(None, StubPanel(PanelKind.HELP, visible=True))
        result = DomainResult("x", origin=PanelKind.HELP)
        orch.process(result)
        assert orch.base.received == (result,)
        assert orch.registry.get(PanelKind.HELP).received == ()

    def test_owner_policy_routes_to_focused_panel(self) -> None:
        orch = make(None, StubPanel(PanelKind.HELP, visible=True), policy=ResultPolicy.OWNER)
        result = DomainResult("x")
        orch.process(result)
        assert orch.registry.get(PanelKind.HELP).received == (result,)
        assert orch.base.received == ()

    def test_owner_policy_without_panels_goes_to_base(self) -> None:
        orch = make(policy=ResultPolicy.OWNER)
        result = DomainResult("x")
        orch.process(result)
        assert orch.base.received == (result,)

    def test_drop_if_hidden_drops_stale_result(self) -> None:
        orch = make(
            None,
            StubPanel(PanelKind.EDIT),
            StubPanel(PanelKind.HELP, visible=True),
            policy=ResultPolicy.DROP_IF_HIDDEN,
        )
        orch.process(DomainResult("late", origin=PanelKind.EDIT))
        assert orch.base.received == ()
        assert orch.registry.get(PanelKind.HELP).received == ()

    def test_drop_if_hidden_delivers_when_origin_visible(self) -> None:
        orch = make(
            None,
            StubPanel(PanelKind.EDIT, visible=True),
            policy=ResultPolicy.DROP_IF_HIDDEN,
        )
        result = DomainResult("saved", origin=PanelKind.EDIT)
        orch.process(result)
        assert orch.registry.get(PanelKind.EDIT).received == (result,)

    def test_failure_opens_error_panel(self) -> None:
        orch = make(None, StubPanel(PanelKind.ERROR), StubPanel(PanelKind.HELP, visible=True))
        error = RuntimeError("boom")
        orch.process(DomainResult(origin=PanelKind.HELP, error=error))
        assert orch.registry.owner_kind() is PanelKind.ERROR
        assert orch.registry.get(PanelKind.ERROR).context is error
        assert orch.base.received == ()

    def test_failure_without_error_panel_follows_policy(self) -> None:
        orch = make()
        result = DomainResult(error=RuntimeError("boom"))
        orch.process(result)
        assert orch.base.received == (result,)


# ---------------------------------------------------------------------------
# Resize and rendering
# ---------------------------------------------------------------------------


class TestResize:
    def test_resize_reaches_base_and_panels(self) -> None:
        orch = make(None, StubPanel(PanelKind.HELP), size=(40, 12))
        assert (orch.base.width, orch.base.height) == (40, 12)
        assert orch.registry.get(PanelKind.HELP).width == 40
        assert (orch.viewport.width, orch.viewport.height) == (40, 12)

    def test_compositor_shares_viewport(self) -> None:
        orch = make(size=(33, 7))
        assert orch.compositor.viewport is orch.viewport

    def test_resize_is_not_routed_to_base(self) -> None:
        orch = make()
        assert orch.base.received == ()


class TestRender:
    def test_frame_has_viewport_dimensions(self) -> None:
        orch = make(StubBase(fill="x"))
        frame = orch.last_frame
        assert len(frame) == 6
        assert all(visible_width(line) == 20 for line in frame)

    def test_centred_panel_is_composited(self) -> None:
        orch = make(None, StubPanel(PanelKind.HELP, visible=True, lines=("[ok]",)))
        frame = orch.render()
        assert frame[2] == "." * 8 + "[ok]" + "." * 8
        assert frame[0] == "." * 20

    def test_bottom_bar_replaces_last_row(self) -> None:
        orch = make(None, StubPanel(PanelKind.SEARCH, visible=True, lines=("/ foo",)))
        frame = orch.render()
        assert frame[-1] == "/ foo" + " " * 15
        assert frame[:-1] == ["." * 20] * 5

    def test_modal_drawn_over_bar(self) -> None:
        orch = make(
            None,
            StubPanel(PanelKind.SEARCH, visible=True, lines=("/ foo",)),
            StubPanel(PanelKind.CONFIRM, visible=True, lines=("[ok]",)),
        )
        frame = orch.render()
        assert frame[2] == "." * 8 + "[ok]" + "." * 8
        assert frame[5].startswith("/ foo")

    def test_oversized_base_is_clipped(self) -> None:
        class Tall(StubBase):
            def view(self) -> list[str]:
                return ["y" * 50] * 40

        orch = make(Tall())
        assert orch.last_frame == ["y" * 20] * 6

    def test_degenerate_viewport_renders_nothing(self) -> None:
        orch = make(size=(0, 0))
        assert orch.render() == []

    def test_sink_receives_each_frame(self) -> None:
        sink = VirtualSink()
        orch = make(sink=sink)
        orch.process(key("x"))
        assert len(sink.frames) == 2
        assert sink.last == orch.last_frame


# ---------------------------------------------------------------------------
# Debug dump
# ---------------------------------------------------------------------------


class TestDebugDump:
    def test_writes_render_state(self, tmp_path) -> None:
        orch = make(
            None,
            StubPanel(PanelKind.HELP, visible=True),
            config=TuiConfig(debug_dir=str(tmp_path)),
        )
        path = orch.write_debug_dump()
        assert path is not None
        assert os.path.dirname(path) == str(tmp_path)
        with open(path, encoding="utf-8") as f:
            content = f.read()
        assert "viewport: 20x6" in content
        assert "owner: help" in content

    def test_debug_key_from_base(self, tmp_path) -> None:
        orch = make(config=TuiConfig(debug_dir=str(tmp_path / "dumps")))
        orch.process(key("ctrl+shift+alt+d"))
        files = os.listdir(tmp_path / "dumps")
        assert len(files) == 1
        assert files[0].startswith("render-")

    def test_unwritable_dir_returns_none(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x")
        orch = make(config=TuiConfig(debug_dir=str(blocker / "sub")))
        assert orch.write_debug_dump() is None


# ---------------------------------------------------------------------------
# asyncio loop
# ---------------------------------------------------------------------------


class TestRun:
    @pytest.mark.asyncio
    async def test_stops_on_quit(self) -> None:
        orch = make()
        await orch.run(feed(key("x"), key("q"), key("z")))
        assert orch.quit_requested is True
        assert orch.base.received == (key("x"),)

    @pytest.mark.asyncio
    async def test_ends_when_source_exhausted(self) -> None:
        orch = make()
        await orch.run(feed(key("x")))
        assert orch.quit_requested is False
        assert orch.base.received == (key("x"),)

    @pytest.mark.asyncio
    async def test_pending_events_are_drained(self) -> None:
        orch = make()
        orch.post(key("x"))
        await orch.run()
        assert orch.base.received == (key("x"),)

    @pytest.mark.asyncio
    async def test_coroutine_task_result_returns_as_event(self) -> None:
        async def load() -> int:
            await asyncio.sleep(0)
            return 42

        orch = make(StubBase(on_key=(("r", Task(load)),)))
        await orch.run(feed(key("r")))
        assert orch.base.received == (key("r"), DomainResult(42))
        assert orch.in_flight == 0

    @pytest.mark.asyncio
    async def test_blocking_task_runs_in_executor(self) -> None:
        def load() -> str:
            return "sync"

        orch = make(StubBase(on_key=(("r", Task(load)),)))
        await orch.run(feed(key("r")))
        assert orch.base.received[-1] == DomainResult("sync")

    @pytest.mark.asyncio
    async def test_failed_task_opens_error_panel(self, caplog: pytest.LogCaptureFixture) -> None:
        async def save() -> None:
            raise OSError("disk full")

        panel = StubPanel(PanelKind.EDIT, visible=True, on_key=(("s", Task(save, name="save")),))
        orch = make(None, panel, StubPanel(PanelKind.ERROR))
        with caplog.at_level(logging.WARNING):
            await orch.run(feed(key("s")))
        error_panel = orch.registry.get(PanelKind.ERROR)
        assert error_panel.visible is True
        assert str(error_panel.context) == "disk full"
        assert "task save from edit failed" in caplog.text

    @pytest.mark.asyncio
    async def test_failing_source_ends_loop(self, caplog: pytest.LogCaptureFixture) -> None:
        async def broken():
            yield key("x")
            raise RuntimeError("stdin closed")

        orch = make()
        with caplog.at_level(logging.ERROR):
            await asyncio.wait_for(orch.run(broken()), 1.0)
        assert orch.base.received == (key("x"),)
        assert "event source failed" in caplog.text
        assert "stdin closed" in caplog.text
