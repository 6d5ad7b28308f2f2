from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class DescendField:
    """Move into the field declared at ``position`` of the current record."""

    position: int
    name: str


@dataclass(frozen=True)
class IndexSequence:
    """Move into element ``index`` of the current sequence value."""

    index: int


Step = Union[DescendField, IndexSequence]
FieldPath = tuple[Step, ...]


def format_path(path: FieldPath) -> str:
    """Render a path as ``pet.tags[2].name`` for messages and debugging."""
    parts: list[str] = []
    for step in path:
        if isinstance(step, IndexSequence):
            parts.append(f"[{step.index}]")
        elif parts:
            parts.append(f".{step.name}")
        else:
            parts.append(step.name)
    return "".join(parts)
