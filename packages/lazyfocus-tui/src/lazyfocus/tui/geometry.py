"""Placement arithmetic for fitting text blocks inside a viewport.

Every function here is total: degenerate sizes clamp to zero instead of
raising, because a render pass must always produce something printable.
"""

from __future__ import annotations

from dataclasses import dataclass

from lazyfocus.tui.utils import truncate, visible_width

TextBlock = list[str]


@dataclass
class Viewport:
    """Terminal size in character cells.

    Written only by the resize handler; every render in a tick reads the
    same value.
    """

    width: int = 0
    height: int = 0

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0


def center(
    content_width: int,
    content_height: int,
    viewport_width: int,
    viewport_height: int,
) -> tuple[int, int]:
    """Return the ``(top, left)`` offset that centres content in the viewport.

    Uses floor division and clamps each offset to 0 when the content is
    larger than the viewport in that dimension.
    """
    top = max(0, (viewport_height - content_height) // 2)
    left = max(0, (viewport_width - content_width) // 2)
    return top, left


def pad_to_width(line: str, width: int) -> str:
    """Right-pad *line* with spaces until its display width equals *width*.

    Lines that are already at least *width* columns wide are returned as-is.
    """
    line_width = visible_width(line)
    if line_width >= width:
        return line
    return line + " " * (width - line_width)


def fit_line(line: str, width: int) -> str:
    """Cut or pad *line* to exactly *width* display columns."""
    if width <= 0:
        return ""
    return pad_to_width(truncate(line, width), width)


def block_width(block: TextBlock) -> int:
    """Width of the widest line in *block*."""
    return max((visible_width(line) for line in block), default=0)


def fit_block(block: TextBlock, viewport: Viewport) -> TextBlock:
    """Clamp and pad *block* to exactly the viewport's rows and columns."""
    if viewport.is_degenerate:
        return []
    rows = list(block[: viewport.height])
    rows.extend([""] * (viewport.height - len(rows)))
    return [fit_line(row, viewport.width) for row in rows]
