from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rowcast.config.encode import OutputConfig


@dataclass(frozen=True)
class OutputTarget:
    """Resolved writer target describing where rows go."""

    transport: str  # stdout | fs
    destination: Optional[Path]


class OutputResolutionError(ValueError):
    """Raised when output options cannot be resolved."""


def resolve_output_target(
    *,
    explicit: OutputConfig | None = None,
    config_output: OutputConfig | None = None,
    base_path: Path | None = None,
) -> OutputTarget:
    """
    Resolve the effective output target using an explicit override, the config, or stdout.
    """

    base_path = base_path or Path.cwd()
    config = explicit or config_output or OutputConfig(transport="stdout")

    if config.transport == "stdout":
        return OutputTarget(transport="stdout", destination=None)

    if config.path is None:
        raise OutputResolutionError("fs output requires a path")
    destination = (
        config.path if config.path.is_absolute() else (base_path / config.path)
    ).resolve()
    return OutputTarget(transport="fs", destination=destination)
