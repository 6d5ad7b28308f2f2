from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from rowcast.config.encode import EncodeConfig
from rowcast.config.options import VALID_LOG_LEVELS


def cascade(*values, fallback=None):
    """First value that is not None, else ``fallback``."""
    return next((value for value in values if value is not None), fallback)


def _level_name(level: Any) -> Optional[str]:
    """Canonical level name for a name or number; blanks and None give None."""
    if level is None:
        return None
    if isinstance(level, int):
        return logging.getLevelName(level)
    return str(level).strip().upper() or None


@dataclass(frozen=True)
class LogLevelDecision:
    name: str
    value: int


def resolve_log_level(*levels: Any, fallback: str = "WARNING") -> LogLevelDecision:
    """Pick the first usable level; unknown names fall back to WARNING."""
    name = cascade(*(_level_name(level) for level in levels), _level_name(fallback))
    if name not in VALID_LOG_LEVELS:
        name = "WARNING"
    return LogLevelDecision(name=name, value=logging.getLevelNamesMapping()[name])


def configure_logging(*levels: Any, fallback: str = "WARNING") -> LogLevelDecision:
    """Apply the first configured level to the root logger."""
    decision = resolve_log_level(*levels, fallback=fallback)
    logging.basicConfig(level=decision.value, format="%(message)s")
    logging.getLogger().setLevel(decision.value)
    return decision


def resolve_encode_config(
    *,
    config: EncodeConfig | None = None,
    omit_header: bool | None = None,
    validate_items: bool | None = None,
    log_level: str | None = None,
) -> EncodeConfig:
    """Merge explicit arguments over a loaded config over the defaults."""
    base = config or EncodeConfig()
    data = base.model_dump()
    data.update(
        {
            "omit_header": cascade(omit_header, base.omit_header, fallback=False),
            "validate_items": cascade(validate_items, base.validate_items, fallback=True),
            "log_level": _level_name(cascade(log_level, base.log_level)),
        }
    )
    return EncodeConfig.model_validate(data)
