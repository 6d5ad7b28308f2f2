from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from rowcast.catalog.path import FieldPath


@dataclass(frozen=True)
class Column:
    """One output position: the header text plus the path to its leaf value."""

    names: tuple[str, ...]
    path: FieldPath

    @property
    def display_name(self) -> str:
        return self.names[0]

    @property
    def aliases(self) -> tuple[str, ...]:
        return self.names[1:]


@dataclass(frozen=True)
class FieldCatalog:
    """Ordered, immutable column list built once per record type."""

    record_type: type
    columns: tuple[Column, ...]

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns)

    @property
    def header(self) -> list[str]:
        return [column.display_name for column in self.columns]

    def new_row(self) -> list[str]:
        return [""] * len(self.columns)
