"""Process-level wiring: logging setup, a stream sink and a blocking runner."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import AsyncIterable, TextIO

from lazyfocus.tui.config import TuiConfig
from lazyfocus.tui.events import Event
from lazyfocus.tui.geometry import TextBlock
from lazyfocus.tui.orchestrator import Orchestrator

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_HOME = "\x1b[H"
_CLEAR_EOL = "\x1b[K"


def configure_logging(config: TuiConfig) -> None:
    """Configure root logging from *config*.

    Logs go to ``config.log_file`` when set.  Without a log file records are
    discarded: stderr is the terminal the frame is drawn on.
    """
    level = getattr(logging, config.log_level.upper())
    if config.log_file:
        logging.basicConfig(level=level, format=LOG_FORMAT, filename=config.log_file)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.NullHandler()])


class StreamSink:
    """Writes each frame to a text stream, homing the cursor first."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def write_frame(self, frame: TextBlock) -> None:
        body = "\r\n".join(line + _CLEAR_EOL for line in frame)
        self.stream.write(_HOME + body)
        self.stream.flush()


def run(orchestrator: Orchestrator, source: AsyncIterable[Event] | None = None) -> None:
    """Run *orchestrator* on a fresh event loop until it quits or settles."""
    asyncio.run(orchestrator.run(source))
