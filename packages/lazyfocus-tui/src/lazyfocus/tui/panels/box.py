"""Modal frame drawing shared by the centred panels."""

from __future__ import annotations

from lazyfocus.tui.geometry import TextBlock, fit_line
from lazyfocus.tui.styles import Styles
from lazyfocus.tui.utils import truncate_to_width, visible_width


def modal_width(viewport_width: int, preferred: int, minimum: int = 20) -> int:
    """Width of a modal: *preferred*, shrunk to leave a margin, never below *minimum*."""
    return max(minimum, min(preferred, viewport_width - 4))


def center_line(line: str, width: int) -> str:
    """Centre a single line inside *width* columns."""
    gap = width - visible_width(line)
    if gap <= 0:
        return fit_line(line, width)
    left = gap // 2
    return " " * left + line + " " * (gap - left)


def frame_box(
    body: TextBlock,
    width: int,
    styles: Styles,
    title: str = "",
    padding_x: int = 1,
) -> TextBlock:
    """Draw *body* inside a rounded border *width* columns wide.

    Body lines are cut or padded to the inner width; *title* is embedded in
    the top border when given.
    """
    inner = max(1, width - 2)
    content_width = max(1, inner - 2 * padding_x)
    pad = " " * padding_x

    if title:
        label = truncate_to_width(title, max(1, inner - 4))
        rest = max(0, inner - 3 - visible_width(label))
        top = styles.border("╭─ ") + styles.title(label) + styles.border(" " + "─" * rest + "╮")
    else:
        top = styles.border("╭" + "─" * inner + "╮")

    side = styles.border("│")
    lines = [top]
    for line in body:
        lines.append(side + pad + fit_line(line, content_width) + pad + side)
    lines.append(styles.border("╰" + "─" * inner + "╯"))
    return lines
