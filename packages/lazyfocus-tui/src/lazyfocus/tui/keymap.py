"""Application key bindings."""

from __future__ import annotations

from typing import Literal, Mapping

KeyId = str

AppAction = Literal[
    # Global
    "quit",
    "forceQuit",
    "help",
    "debug",
    # Panels opened from the base view
    "quickAdd",
    "search",
    "command",
    # Inside panels
    "confirm",
    "cancel",
    "submit",
    "historyPrev",
    "historyNext",
    "deleteBackward",
]

KeyMapConfig = Mapping[AppAction, "KeyId | list[KeyId]"]

DEFAULT_KEYMAP: dict[AppAction, KeyId | list[KeyId]] = {
    # Global
    "quit": "q",
    "forceQuit": "ctrl+c",
    "help": "?",
    "debug": "ctrl+shift+alt+d",
    # Panels opened from the base view
    "quickAdd": "a",
    "search": "/",
    "command": ":",
    # Inside panels
    "confirm": ["y", "Y", "enter"],
    "cancel": ["n", "N", "escape"],
    "submit": "enter",
    "historyPrev": "up",
    "historyNext": "down",
    "deleteBackward": "backspace",
}

ACTION_HELP: dict[AppAction, str] = {
    "quit": "quit",
    "help": "toggle help",
    "quickAdd": "quick add",
    "search": "search",
    "command": "command line",
    "confirm": "confirm",
    "cancel": "cancel / close",
}


class KeyMap:
    """Maps actions to key ids, starting from :data:`DEFAULT_KEYMAP`."""

    def __init__(self, config: KeyMapConfig | None = None) -> None:
        self._action_to_keys: dict[AppAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeyMapConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_KEYMAP.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        for action, keys in config.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, key: KeyId, action: AppAction) -> bool:
        """Check if *key* is bound to *action*."""
        return key in self._action_to_keys.get(action, ())

    def get_keys(self, action: AppAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def help_entries(self) -> list[tuple[str, str]]:
        """``(keys, description)`` rows for the help panel."""
        rows: list[tuple[str, str]] = []
        for action, desc in ACTION_HELP.items():
            keys = self.get_keys(action)
            if keys:
                rows.append(("/".join(keys), desc))
        return rows
