"""Tests for lazyfocus.tui.keymap -- action bindings."""

from __future__ import annotations

from lazyfocus.tui.keymap import DEFAULT_KEYMAP, KeyMap


class TestDefaults:
    def test_global_bindings(self) -> None:
        km = KeyMap()
        assert km.matches("q", "quit")
        assert km.matches("ctrl+c", "forceQuit")
        assert km.matches("?", "help")
        assert km.matches("/", "search")
        assert km.matches(":", "command")

    def test_confirm_and_cancel_keys(self) -> None:
        km = KeyMap()
        for k in ("y", "Y", "enter"):
            assert km.matches(k, "confirm")
        for k in ("n", "N", "escape"):
            assert km.matches(k, "cancel")

    def test_no_match(self) -> None:
        assert not KeyMap().matches("z", "quit")

    def test_every_default_action_has_keys(self) -> None:
        km = KeyMap()
        for action in DEFAULT_KEYMAP:
            assert km.get_keys(action)


class TestOverrides:
    def test_override_replaces_default(self) -> None:
        km = KeyMap({"quit": ["x", "ctrl+q"]})
        assert km.matches("x", "quit")
        assert km.matches("ctrl+q", "quit")
        assert not km.matches("q", "quit")

    def test_other_actions_keep_defaults(self) -> None:
        km = KeyMap({"quit": "x"})
        assert km.matches("?", "help")

    def test_defaults_not_mutated(self) -> None:
        KeyMap({"confirm": "ok"})
        assert DEFAULT_KEYMAP["confirm"] == ["y", "Y", "enter"]


class TestHelpEntries:
    def test_rows_join_keys(self) -> None:
        rows = dict((desc, keys) for keys, desc in KeyMap().help_entries())
        assert rows["quit"] == "q"
        assert rows["confirm"] == "y/Y/enter"

    def test_unbound_action_omitted(self) -> None:
        rows = [desc for _, desc in KeyMap({"quickAdd": []}).help_entries()]
        assert "quick add" not in rows
