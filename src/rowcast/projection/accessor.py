from __future__ import annotations

from typing import Any, Protocol

from rowcast.catalog.introspect import field_attrs, is_record_type
from rowcast.catalog.path import DescendField
from rowcast.errors import ShapeMismatch


class ValueAccessor(Protocol):
    """Structural questions the projector asks about a runtime value."""

    def is_absent(self, value: Any) -> bool: ...
    def is_sequence(self, value: Any) -> bool: ...
    def length(self, value: Any) -> int: ...
    def element(self, value: Any, index: int) -> Any: ...
    def field(self, value: Any, step: DescendField) -> Any: ...


class ObjectAccessor:
    """Accessor for dataclass/pydantic records, lists and tuples."""

    def is_absent(self, value: Any) -> bool:
        return value is None

    def is_sequence(self, value: Any) -> bool:
        return isinstance(value, (list, tuple))

    def length(self, value: Any) -> int:
        return len(value)

    def element(self, value: Any, index: int) -> Any:
        return value[index]

    def field(self, value: Any, step: DescendField) -> Any:
        record_type = type(value)
        if not is_record_type(record_type):
            raise ShapeMismatch(
                f"expected a record with field {step.name!r}, got {record_type.__qualname__}"
            )
        attrs = field_attrs(record_type)
        if step.position >= len(attrs) or attrs[step.position] != step.name:
            raise ShapeMismatch(
                f"{record_type.__qualname__} has no field {step.name!r} at position {step.position}"
            )
        return getattr(value, step.name)


DEFAULT_ACCESSOR = ObjectAccessor()
