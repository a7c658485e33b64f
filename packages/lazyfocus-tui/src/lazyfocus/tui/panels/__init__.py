"""Built-in panels."""

from lazyfocus.tui.panels.bars import (
    CommandBar,
    CommandCancelled,
    CommandSubmitted,
    SearchBar,
    SearchChanged,
    SearchCleared,
    SearchConfirmed,
)
from lazyfocus.tui.panels.box import center_line, frame_box, modal_width
from lazyfocus.tui.panels.confirm import Cancelled, ConfirmPanel, ConfirmRequest, Confirmed
from lazyfocus.tui.panels.error import ErrorDismissed, ErrorPanel
from lazyfocus.tui.panels.help import HelpPanel

__all__ = [
    "Cancelled",
    "CommandBar",
    "CommandCancelled",
    "CommandSubmitted",
    "ConfirmPanel",
    "ConfirmRequest",
    "Confirmed",
    "ErrorDismissed",
    "ErrorPanel",
    "HelpPanel",
    "SearchBar",
    "SearchChanged",
    "SearchCleared",
    "SearchConfirmed",
    "center_line",
    "frame_box",
    "modal_width",
]
