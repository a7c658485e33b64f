"""Overlay compositing: merge a base block and an overlay block into a frame.

The overlay is centred inside a viewport-sized block first.  Rows where the
overlay has no visible content keep the base row; other rows are rebuilt as
``base[:left] + overlay[left:right + 1] + base[right + 1:]`` using the
escape-aware cutting primitives from :mod:`lazyfocus.tui.utils`, so styled
text on either side of the splice keeps its own colours.
"""

from __future__ import annotations

from dataclasses import dataclass

from lazyfocus.tui.geometry import (
    TextBlock,
    Viewport,
    block_width,
    center,
    fit_line,
    pad_to_width,
)
from lazyfocus.tui.registry import Placement
from lazyfocus.tui.styles import DEFAULT_STYLES, StyleFn
from lazyfocus.tui.utils import (
    cut,
    grapheme_width,
    strip_ansi,
    tokenize,
    truncate,
    truncate_left,
)

__all__ = [
    "CompositionRequest",
    "Compositor",
    "find_content_bounds",
    "render_with_bottom_bar",
]


@dataclass(frozen=True)
class CompositionRequest:
    """One layer to draw: *overlay* over *base*, positioned by *placement*."""

    base: TextBlock
    overlay: TextBlock | None = None
    dim: bool = False
    placement: Placement = Placement.CENTERED


def find_content_bounds(line: str) -> tuple[int, int]:
    """Return the first and last non-space display columns of *line*.

    Escape sequences are ignored.  Returns ``(-1, -1)`` when the line is
    empty or contains only spaces.
    """
    left = -1
    right = -1
    col = 0
    for token, _is_code in tokenize(strip_ansi(line)):
        w = grapheme_width(token)
        if w == 0:
            continue
        if not token.isspace():
            if left == -1:
                left = col
            right = col + w - 1
        col += w
    return left, right


def render_with_bottom_bar(base: TextBlock, bar: TextBlock) -> TextBlock:
    """Replace the last rows of *base* with the rows of *bar*.

    Bars are fixed-height strips drawn at the bottom of the screen; no
    centring is involved.
    """
    if not base:
        return list(bar)
    if not bar:
        return list(base)
    keep = max(0, len(base) - len(bar))
    return list(base[:keep]) + list(bar[-len(base):])


class Compositor:
    """Positions overlays in the viewport and layers them over a base block."""

    def __init__(
        self,
        backdrop: StyleFn | None = None,
        viewport: Viewport | None = None,
    ) -> None:
        self._backdrop: StyleFn = backdrop if backdrop is not None else DEFAULT_STYLES.backdrop
        self.viewport: Viewport = viewport if viewport is not None else Viewport()

    def set_size(self, width: int, height: int) -> None:
        self.viewport.width = width
        self.viewport.height = height

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place(self, content: TextBlock) -> TextBlock:
        """Centre *content* in a viewport-sized block.

        A degenerate viewport returns *content* unchanged.  Content larger
        than the viewport is pinned to offset 0 in that dimension.
        """
        vp = self.viewport
        if vp.is_degenerate:
            return content

        content_width = block_width(content)
        top, left = center(content_width, len(content), vp.width, vp.height)

        blank = " " * vp.width
        margin = " " * left
        placed = [blank] * top
        for line in content:
            placed.append(pad_to_width(margin + pad_to_width(line, content_width), vp.width))
        while len(placed) < vp.height:
            placed.append(blank)
        return placed

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def apply(self, request: CompositionRequest) -> TextBlock:
        """Draw one layer as described by *request*."""
        if request.placement is Placement.BOTTOM_BAR:
            return render_with_bottom_bar(request.base, request.overlay or [])
        return self.compose(request.base, request.overlay or [], dim=request.dim)

    def compose(self, base: TextBlock, overlay: TextBlock, dim: bool = False) -> TextBlock:
        """Layer *overlay* on top of *base*, dimming the base if requested."""
        if not base and not overlay:
            return []
        if not base:
            return self.place(overlay)
        if not overlay:
            return self.apply_dim(base) if dim else base

        processed = self.apply_dim(base) if dim else base
        placed = self.place(overlay)

        vp = self.viewport
        if vp.is_degenerate:
            return placed

        result: TextBlock = []
        for row in range(vp.height):
            base_line = processed[row] if row < len(processed) else ""
            overlay_line = placed[row] if row < len(placed) else ""
            result.append(fit_line(self.composite_line_char_level(base_line, overlay_line), vp.width))
        return result

    def composite_line_char_level(self, base_line: str, overlay_line: str) -> str:
        """Splice the visible span of *overlay_line* into *base_line*."""
        width = self.viewport.width
        left, right = find_content_bounds(overlay_line)
        if left == -1:
            return pad_to_width(base_line, width)

        base_line = pad_to_width(base_line, width)

        parts: list[str] = []
        if left > 0:
            parts.append(truncate(base_line, left))
        parts.append(cut(overlay_line, left, right + 1))
        if right < width - 1:
            parts.append(truncate_left(base_line, right + 1))
        return "".join(parts)

    def apply_dim(self, block: TextBlock) -> TextBlock:
        """Render every line of *block* through the backdrop style."""
        return [self._backdrop(line) for line in block]
