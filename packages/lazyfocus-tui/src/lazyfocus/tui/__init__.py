"""lazyfocus-tui: layered overlay compositing and focus routing for the terminal."""

# Compositing
from lazyfocus.tui.compositor import (
    CompositionRequest,
    Compositor,
    find_content_bounds,
    render_with_bottom_bar,
)

# Configuration
from lazyfocus.tui.config import ResultPolicy, TuiConfig

# Effects and events
from lazyfocus.tui.effects import Batch, Close, Emit, Open, Quit, Task, batch
from lazyfocus.tui.events import DomainResult, Event, KeyPress, Resize

# Geometry
from lazyfocus.tui.geometry import TextBlock, Viewport, center, fit_block, fit_line, pad_to_width

# Key bindings
from lazyfocus.tui.keymap import DEFAULT_KEYMAP, AppAction, KeyMap

# Event loop
from lazyfocus.tui.orchestrator import Orchestrator, RenderSink

# Panels
from lazyfocus.tui.panels import (
    CommandBar,
    ConfirmPanel,
    ConfirmRequest,
    ErrorPanel,
    HelpPanel,
    SearchBar,
)

# Layers
from lazyfocus.tui.registry import (
    PRIORITY_ORDER,
    BaseView,
    LayerRegistry,
    Panel,
    PanelKind,
    Placement,
    placement_for,
)

# Runner
from lazyfocus.tui.runner import StreamSink, configure_logging, run

# Styles
from lazyfocus.tui.styles import DEFAULT_STYLES, PLAIN_STYLES, Styles, sgr

# Utilities
from lazyfocus.tui.utils import (
    cut,
    strip_ansi,
    truncate,
    truncate_left,
    truncate_to_width,
    visible_width,
    wrap_text,
)

__all__ = [
    # Compositing
    "CompositionRequest",
    "Compositor",
    "find_content_bounds",
    "render_with_bottom_bar",
    # Configuration
    "ResultPolicy",
    "TuiConfig",
    # Effects and events
    "Batch",
    "Close",
    "DomainResult",
    "Emit",
    "Event",
    "KeyPress",
    "Open",
    "Quit",
    "Resize",
    "Task",
    "batch",
    # Geometry
    "TextBlock",
    "Viewport",
    "center",
    "fit_block",
    "fit_line",
    "pad_to_width",
    # Key bindings
    "DEFAULT_KEYMAP",
    "AppAction",
    "KeyMap",
    # Event loop
    "Orchestrator",
    "RenderSink",
    # Panels
    "CommandBar",
    "ConfirmPanel",
    "ConfirmRequest",
    "ErrorPanel",
    "HelpPanel",
    "SearchBar",
    # Layers
    "PRIORITY_ORDER",
    "BaseView",
    "LayerRegistry",
    "Panel",
    "PanelKind",
    "Placement",
    "placement_for",
    # Runner
    "StreamSink",
    "configure_logging",
    "run",
    # Styles
    "DEFAULT_STYLES",
    "PLAIN_STYLES",
    "Styles",
    "sgr",
    # Utilities
    "cut",
    "strip_ansi",
    "truncate",
    "truncate_left",
    "truncate_to_width",
    "visible_width",
    "wrap_text",
]
