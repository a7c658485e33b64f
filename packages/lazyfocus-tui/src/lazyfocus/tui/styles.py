"""Styling functions shared by the compositor and the built-in panels.

A ``Styles`` value is built once at startup and handed to every component
that draws; nothing mutates it afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from lazyfocus.tui.utils import RESET

StyleFn = Callable[[str], str]


# Codes after which a wrapping style must be reopened.
_REOPEN_AFTER = (RESET, "\x1b[m", "\x1b[22m")


def _identity(text: str) -> str:
    return text


def sgr(*params: int) -> StyleFn:
    """Build a style function that wraps text in the given SGR parameters.

    Inner resets, including the ``22`` that clears bold and dim, are followed
    by the opening code again so that the style survives styled runs
    embedded in the text.
    """
    open_code = "\x1b[" + ";".join(str(p) for p in params) + "m"

    def apply(text: str) -> str:
        body = text
        for code in _REOPEN_AFTER:
            body = body.replace(code, code + open_code)
        return open_code + body + RESET

    return apply


@dataclass(frozen=True)
class Styles:
    """The palette every component draws with."""

    backdrop: StyleFn = field(default_factory=lambda: sgr(2))
    border: StyleFn = field(default_factory=lambda: sgr(38, 5, 63))
    title: StyleFn = field(default_factory=lambda: sgr(1))
    warning: StyleFn = field(default_factory=lambda: sgr(1, 33))
    error: StyleFn = field(default_factory=lambda: sgr(1, 31))
    hint: StyleFn = field(default_factory=lambda: sgr(2, 37))
    key: StyleFn = field(default_factory=lambda: sgr(1, 36))
    bar: StyleFn = field(default_factory=lambda: sgr(97, 48, 5, 63))


DEFAULT_STYLES = Styles()

PLAIN_STYLES = Styles(
    backdrop=_identity,
    border=_identity,
    title=_identity,
    warning=_identity,
    error=_identity,
    hint=_identity,
    key=_identity,
    bar=_identity,
)
