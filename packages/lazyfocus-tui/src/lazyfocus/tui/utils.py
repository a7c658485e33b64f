"""Terminal text utilities: ANSI handling, width measurement, column cutting.

Provides functions for measuring visible terminal widths, tracking ANSI SGR
state, and cutting styled lines at display-column boundaries without ever
splitting an escape sequence or leaking styling across a splice point.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterator

import grapheme
import wcwidth as _wcwidth


# ---------------------------------------------------------------------------
# Regex patterns for ANSI / OSC / APC sequences
# ---------------------------------------------------------------------------

_STRIP_RE = re.compile(
    r"\x1b\[[0-9;]*[mGKHJ]"        # CSI
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"  # OSC
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"  # APC
)

RESET = "\x1b[0m"

TAB_WIDTH = 3

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------

def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Rules:
    1. Zero-width characters (control, combining marks, etc.) -> 0
    2. Emoji (multi-codepoint, contains VS16 U+FE0F, ZWJ sequences, etc.) -> 2
    3. Otherwise delegate to wcwidth for the first meaningful codepoint.
    """
    if not g:
        return 0

    if g == "\t":
        return TAB_WIDTH

    # Single codepoint fast path
    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    codepoints = list(g)

    for ch in codepoints:
        cp = ord(ch)
        if cp == 0xFE0F:  # VS16
            return 2
        if cp == 0x200D:  # ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # Skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # Regional indicators
            return 2

    first_cp = ord(codepoints[0])
    if first_cp >= 0x1F000:
        return 2
    if 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(codepoints[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(codepoints[0]), 0)


# ---------------------------------------------------------------------------
# visible_width / strip_ansi
# ---------------------------------------------------------------------------

def strip_ansi(text: str) -> str:
    """Remove every CSI, OSC and APC sequence from *text*."""
    if "\x1b" not in text:
        return text
    return _STRIP_RE.sub("", text)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    * Strips ANSI escape sequences.
    * Treats tabs as 3 spaces.
    * Uses a fast ASCII path when possible.
    * Caches results for non-ASCII strings.
    """
    if not text:
        return 0

    stripped = strip_ansi(text)
    if not stripped:
        return 0

    stripped = stripped.replace("\t", " " * TAB_WIDTH)

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = 0
    for g in grapheme.graphemes(stripped):
        total += grapheme_width(g)

    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# extract_ansi_code / tokenize
# ---------------------------------------------------------------------------

def extract_ansi_code(text: str, pos: int) -> tuple[str, int] | None:
    """Extract an ANSI escape sequence starting at *pos* in *text*.

    Returns ``(code, length)`` where *code* is the full escape sequence string
    and *length* is the number of characters consumed, or ``None`` if there is
    no complete escape sequence at *pos*.

    Handles:
    * CSI sequences: ``ESC[`` ... ``m`` / ``G`` / ``K`` / ``H`` / ``J``
    * OSC sequences: ``ESC]`` ... ``BEL`` / ``ST``
    * APC sequences: ``ESC_`` ... ``BEL`` / ``ST``
    """
    if pos >= len(text) or text[pos] != "\x1b":
        return None

    if pos + 1 >= len(text):
        return None

    next_ch = text[pos + 1]

    if next_ch == "[":
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if ch in "mGKHJ":
                code = text[pos : i + 1]
                return (code, len(code))
            if ch.isdigit() or ch == ";":
                i += 1
                continue
            break
        return None

    if next_ch in "]_":
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if ch == "\x07":  # BEL
                code = text[pos : i + 1]
                return (code, len(code))
            if ch == "\x1b" and i + 1 < len(text) and text[i + 1] == "\\":
                code = text[pos : i + 2]
                return (code, len(code))
            i += 1
        return None

    return None


def tokenize(text: str) -> Iterator[tuple[str, bool]]:
    """Yield ``(token, is_code)`` pairs: escape sequences and grapheme clusters.

    A lone or unterminated ``ESC`` is yielded as a zero-width grapheme so
    that it is never glued to a neighbouring sequence.
    """
    i = 0
    run_start = 0
    n = len(text)
    while i < n:
        if text[i] != "\x1b":
            i += 1
            continue
        extracted = extract_ansi_code(text, i)
        if run_start < i:
            for g in grapheme.graphemes(text[run_start:i]):
                yield (g, False)
        if extracted is None:
            yield (text[i], False)
            i += 1
        else:
            code, length = extracted
            yield (code, True)
            i += length
        run_start = i
    if run_start < n:
        for g in grapheme.graphemes(text[run_start:]):
            yield (g, False)


# ---------------------------------------------------------------------------
# AnsiCodeTracker
# ---------------------------------------------------------------------------

class AnsiCodeTracker:
    """Track active ANSI SGR (Select Graphic Rendition) state.

    Processes CSI SGR sequences (``ESC[...m``) and maintains which attributes
    are currently active so that they can be re-applied at the start of a
    cut segment.
    """

    def __init__(self) -> None:
        self.bold: str | None = None
        self.dim: str | None = None
        self.italic: str | None = None
        self.underline: str | None = None
        self.blink: str | None = None
        self.inverse: str | None = None
        self.hidden: str | None = None
        self.strikethrough: str | None = None
        self.fg_color: str | None = None
        self.bg_color: str | None = None
        self.hyperlink: str | None = None

    def process(self, code: str) -> None:
        """Update tracked state from an SGR sequence like ``\\x1b[1;31m``."""
        if code.startswith("\x1b]8;"):
            # OSC 8 hyperlink: an empty URI closes the link
            body = code[2:].rstrip("\x07").removesuffix("\x1b\\")
            uri = body.split(";", 2)[-1] if body.count(";") >= 2 else ""
            self.hyperlink = code if uri else None
            return

        if not code.startswith("\x1b[") or not code.endswith("m"):
            return

        params_str = code[2:-1]
        if not params_str:
            self.clear()
            return

        params = params_str.split(";")
        i = 0
        while i < len(params):
            p = params[i]
            val = int(p) if p else 0

            if val == 0:
                self.clear()
            elif val == 1:
                self.bold = "\x1b[1m"
            elif val == 2:
                self.dim = "\x1b[2m"
            elif val == 3:
                self.italic = "\x1b[3m"
            elif val == 4:
                self.underline = "\x1b[4m"
            elif val == 5:
                self.blink = "\x1b[5m"
            elif val == 7:
                self.inverse = "\x1b[7m"
            elif val == 8:
                self.hidden = "\x1b[8m"
            elif val == 9:
                self.strikethrough = "\x1b[9m"
            elif val == 22:
                self.bold = None
                self.dim = None
            elif val == 23:
                self.italic = None
            elif val == 24:
                self.underline = None
            elif val == 25:
                self.blink = None
            elif val == 27:
                self.inverse = None
            elif val == 28:
                self.hidden = None
            elif val == 29:
                self.strikethrough = None
            elif 30 <= val <= 37 or 90 <= val <= 97:
                self.fg_color = f"\x1b[{val}m"
            elif val == 38:
                color, consumed = _extended_color(params, i, 38)
                if color is not None:
                    self.fg_color = color
                i += consumed
            elif val == 39:
                self.fg_color = None
            elif 40 <= val <= 47 or 100 <= val <= 107:
                self.bg_color = f"\x1b[{val}m"
            elif val == 48:
                color, consumed = _extended_color(params, i, 48)
                if color is not None:
                    self.bg_color = color
                i += consumed
            elif val == 49:
                self.bg_color = None

            i += 1

    def clear(self) -> None:
        """Reset all SGR attributes to off (hyperlinks are not SGR state)."""
        self.bold = None
        self.dim = None
        self.italic = None
        self.underline = None
        self.blink = None
        self.inverse = None
        self.hidden = None
        self.strikethrough = None
        self.fg_color = None
        self.bg_color = None

    def _sgr_codes(self) -> list[str]:
        return [
            code
            for code in (
                self.bold,
                self.dim,
                self.italic,
                self.underline,
                self.blink,
                self.inverse,
                self.hidden,
                self.strikethrough,
                self.fg_color,
                self.bg_color,
            )
            if code is not None
        ]

    def get_active_codes(self) -> str:
        """Return a string of ANSI codes that reactivate the current state."""
        codes = self._sgr_codes()
        if self.hyperlink is not None:
            codes.append(self.hyperlink)
        return "".join(codes)

    def has_active_codes(self) -> bool:
        """Return ``True`` if any SGR attribute or hyperlink is active."""
        return bool(self._sgr_codes()) or self.hyperlink is not None

    def get_line_end_reset(self) -> str:
        """Return the codes that close every active attribute, else empty."""
        out = ""
        if self._sgr_codes():
            out += RESET
        if self.hyperlink is not None:
            out += "\x1b]8;;\x07"
        return out


def _extended_color(params: list[str], i: int, base: int) -> tuple[str | None, int]:
    """Parse a ``38;5;N`` / ``38;2;R;G;B`` run starting at ``params[i]``.

    Returns the normalised code and the number of extra params consumed.
    """
    if i + 1 >= len(params):
        return (None, 0)
    mode = int(params[i + 1]) if params[i + 1] else 0
    if mode == 5 and i + 2 < len(params):
        return (f"\x1b[{base};5;{params[i + 2]}m", 2)
    if mode == 2 and i + 4 < len(params):
        r, g, b = params[i + 2], params[i + 3], params[i + 4]
        return (f"\x1b[{base};2;{r};{g};{b}m", 4)
    return (None, 1)


# ---------------------------------------------------------------------------
# Column cutting
# ---------------------------------------------------------------------------

def cut(line: str, start: int, end: int | None = None) -> str:
    """Return display columns ``[start, end)`` of *line*, styling intact.

    The result opens with the SGR state active at *start* and ends with a
    reset when any styling is still active, so the segment can be spliced
    next to foreign text without bleeding colour in either direction.  Wide
    characters straddling a boundary are replaced by spaces for the columns
    that fall inside the range.  ``end=None`` means "to the end of the line".
    """
    start = max(0, start)
    if end is not None and end <= start:
        return ""

    tracker = AnsiCodeTracker()
    parts: list[str] = []
    col = 0
    opened = False

    for token, is_code in tokenize(line):
        if is_code:
            tracker.process(token)
            if opened:
                parts.append(token)
            continue

        w = grapheme_width(token)
        char_end = col + w

        if end is not None and col >= end:
            break

        if char_end <= start and w > 0:
            col = char_end
            continue
        if w == 0 and col < start:
            continue

        if not opened:
            prefix = tracker.get_active_codes()
            if prefix:
                parts.append(prefix)
            opened = True

        if col < start:
            # Wide character straddling the left edge
            right = char_end if end is None else min(char_end, end)
            parts.append(" " * (right - start))
        elif end is not None and char_end > end:
            parts.append(" " * (end - col))
        elif token == "\t":
            parts.append(" " * TAB_WIDTH)
        else:
            parts.append(token)
        col = char_end

    if not opened:
        return ""

    parts.append(tracker.get_line_end_reset())
    return "".join(parts)


def truncate(line: str, width: int) -> str:
    """Keep the first *width* display columns of *line* (no tail marker).

    Styled lines always come back closed with a reset.
    """
    if width <= 0:
        return ""
    if "\x1b" not in line and visible_width(line) <= width:
        return line.replace("\t", " " * TAB_WIDTH)
    return cut(line, 0, width)


def truncate_left(line: str, start: int) -> str:
    """Drop the first *start* display columns of *line*."""
    if start <= 0:
        return line
    return cut(line, start)


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    If the text is wider than *max_width*, it is truncated and *ellipsis* is
    appended (the ellipsis counts towards the width).  If *pad* is ``True``,
    the result is right-padded with spaces to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    ellipsis_width = visible_width(ellipsis)
    target_width = max_width - ellipsis_width
    if target_width <= 0:
        return truncate(ellipsis, max_width)

    result = truncate(text, target_width) + ellipsis

    if pad:
        result_width = visible_width(result)
        if result_width < max_width:
            result += " " * (max_width - result_width)

    return result


# ---------------------------------------------------------------------------
# wrap_text
# ---------------------------------------------------------------------------

def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap plain *text* to *width* columns.

    Embedded newlines start a new paragraph.  Words wider than *width* are
    hard-broken at column boundaries.
    """
    if width <= 0:
        return [text]

    result: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if visible_width(candidate) <= width:
                current = candidate
                continue
            if current:
                result.append(current)
            while visible_width(word) > width:
                result.append(cut(word, 0, width))
                word = cut(word, width)
            current = word
        result.append(current)
    return result
