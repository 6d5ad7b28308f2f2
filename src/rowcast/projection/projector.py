from __future__ import annotations

from typing import Any, MutableSequence, Optional

from rowcast.catalog.model import FieldCatalog
from rowcast.catalog.path import FieldPath, IndexSequence, format_path
from rowcast.errors import ShapeMismatch, UnsupportedShape
from rowcast.projection.accessor import DEFAULT_ACCESSOR, ValueAccessor
from rowcast.projection.text import DEFAULT_FORMATTER, ScalarFormatter


def resolve_path(
    record: Any,
    path: FieldPath,
    *,
    accessor: ValueAccessor = DEFAULT_ACCESSOR,
    formatter: ScalarFormatter = DEFAULT_FORMATTER,
) -> str:
    """Walk ``path`` one step at a time and return the leaf's cell text.

    An absent value at any depth, or an index past the end of a sequence,
    yields ``""``. Only a structural disagreement between the record and the
    path raises.
    """
    current = record
    for step in path:
        if accessor.is_absent(current):
            return ""
        if isinstance(step, IndexSequence):
            if not accessor.is_sequence(current):
                raise ShapeMismatch(
                    f"expected a sequence at [{step.index}], got {type(current).__qualname__}"
                )
            if step.index >= accessor.length(current):
                return ""
            current = accessor.element(current, step.index)
        else:
            current = accessor.field(current, step)
    if accessor.is_absent(current):
        return ""
    return formatter(current)


def project_into(
    record: Any,
    catalog: FieldCatalog,
    row: MutableSequence[str],
    *,
    accessor: ValueAccessor = DEFAULT_ACCESSOR,
    formatter: ScalarFormatter = DEFAULT_FORMATTER,
) -> None:
    """Fill ``row`` in place with one cell per catalog column.

    On error the row is left partially written and must not be used.
    """
    if len(row) != len(catalog):
        raise ValueError(
            f"row buffer has {len(row)} cells, catalog has {len(catalog)} columns"
        )
    for index, column in enumerate(catalog.columns):
        row[index] = ""
        try:
            row[index] = resolve_path(
                record, column.path, accessor=accessor, formatter=formatter
            )
        except (ShapeMismatch, UnsupportedShape) as exc:
            raise type(exc)(
                f"column {column.display_name!r} ({format_path(column.path)}): {exc}"
            ) from exc


def project(
    record: Any,
    catalog: FieldCatalog,
    *,
    accessor: ValueAccessor = DEFAULT_ACCESSOR,
    formatter: ScalarFormatter = DEFAULT_FORMATTER,
) -> list[str]:
    row = catalog.new_row()
    project_into(record, catalog, row, accessor=accessor, formatter=formatter)
    return row


class RowProjector:
    """Binds a catalog to the accessor and formatter used to project it."""

    def __init__(
        self,
        catalog: FieldCatalog,
        *,
        accessor: Optional[ValueAccessor] = None,
        formatter: Optional[ScalarFormatter] = None,
    ) -> None:
        self.catalog = catalog
        self.accessor = accessor or DEFAULT_ACCESSOR
        self.formatter = formatter or DEFAULT_FORMATTER

    @property
    def header(self) -> list[str]:
        return self.catalog.header

    def new_row(self) -> list[str]:
        return self.catalog.new_row()

    def project_into(self, record: Any, row: MutableSequence[str]) -> None:
        project_into(
            record, self.catalog, row, accessor=self.accessor, formatter=self.formatter
        )

    def project(self, record: Any) -> list[str]:
        row = self.new_row()
        self.project_into(record, row)
        return row
