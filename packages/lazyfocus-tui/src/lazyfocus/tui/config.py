"""Runtime configuration for the compositor and orchestrator.

Values come from defaults, a settings mapping (the ``tui`` section of a
settings file, camelCase keys), and ``LAZYFOCUS_TUI_*`` environment
variables.  Values that cannot be parsed fall back to the default with a
warning; configuration never stops the UI from starting.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

ENV_PREFIX = "LAZYFOCUS_TUI_"

_LOG_LEVELS = ("debug", "info", "warning", "error")


class ResultPolicy(str, enum.Enum):
    """Where a ``DomainResult`` goes when it arrives.

    * ``BASE_VIEW`` -- always to the base view, regardless of open panels.
    * ``OWNER`` -- through focus arbitration, like a key press.
    * ``DROP_IF_HIDDEN`` -- dropped when the panel that spawned it is no
      longer visible, otherwise routed to the owner.
    """

    BASE_VIEW = "base_view"
    OWNER = "owner"
    DROP_IF_HIDDEN = "drop_if_hidden"


@dataclass(frozen=True)
class TuiConfig:
    dim_backdrop: bool = True
    result_policy: ResultPolicy = ResultPolicy.BASE_VIEW
    log_level: str = "warning"
    log_file: str | None = None
    debug_dir: str = field(
        default_factory=lambda: str(Path.home() / ".lazyfocus" / "tui-debug")
    )

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> TuiConfig:
        """Build a config from a settings mapping with camelCase keys."""
        config = cls()
        overrides: dict[str, Any] = {}

        dim = settings.get("dimBackdrop")
        if dim is not None:
            if isinstance(dim, bool):
                overrides["dim_backdrop"] = dim
            else:
                logger.warning("ignoring non-boolean dimBackdrop: %r", dim)

        policy = _parse_policy(settings.get("resultPolicy"))
        if policy is not None:
            overrides["result_policy"] = policy

        level = _parse_level(settings.get("logLevel"))
        if level is not None:
            overrides["log_level"] = level

        for key, attr in (("logFile", "log_file"), ("debugDir", "debug_dir")):
            value = settings.get(key)
            if isinstance(value, str) and value:
                overrides[attr] = value

        return replace(config, **overrides)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        base: TuiConfig | None = None,
    ) -> TuiConfig:
        """Apply ``LAZYFOCUS_TUI_*`` variables on top of *base* (or defaults)."""
        env = os.environ if environ is None else environ
        config = base if base is not None else cls()
        overrides: dict[str, Any] = {}

        dim = env.get(ENV_PREFIX + "DIM")
        if dim is not None:
            overrides["dim_backdrop"] = dim.strip().lower() not in ("0", "false", "no", "")

        policy = _parse_policy(env.get(ENV_PREFIX + "RESULT_POLICY"))
        if policy is not None:
            overrides["result_policy"] = policy

        level = _parse_level(env.get(ENV_PREFIX + "LOG_LEVEL"))
        if level is not None:
            overrides["log_level"] = level

        log_file = env.get(ENV_PREFIX + "LOG_FILE")
        if log_file:
            overrides["log_file"] = log_file

        debug_dir = env.get(ENV_PREFIX + "DEBUG_DIR")
        if debug_dir:
            overrides["debug_dir"] = debug_dir

        return replace(config, **overrides)


def _parse_policy(value: Any) -> ResultPolicy | None:
    if value is None:
        return None
    try:
        return ResultPolicy(str(value).lower())
    except ValueError:
        logger.warning("unknown result policy %r, keeping default", value)
        return None


def _parse_level(value: Any) -> str | None:
    if value is None:
        return None
    level = str(value).lower()
    if level not in _LOG_LEVELS:
        logger.warning("unknown log level %r, keeping default", value)
        return None
    return level
