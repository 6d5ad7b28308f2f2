from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional, get_origin

from pydantic import BaseModel

from rowcast.errors import UnsupportedShape

CSV_NAME_KEY = "csv"
CSV_LENGTH_KEY = "csv_length"
CSV_INLINE_KEY = "csv_inline"
SKIP_NAME = "-"


@dataclass(frozen=True)
class CsvTag:
    """Column options attached to a record field."""

    names: tuple[str, ...] = ()
    length: Optional[int] = None
    inline: bool = False

    @property
    def skip(self) -> bool:
        return self.names[:1] == (SKIP_NAME,)


@dataclass(frozen=True)
class DeclaredField:
    position: int
    attr: str
    annotation: Any
    tag: CsvTag

    @property
    def names(self) -> tuple[str, ...]:
        return self.tag.names or (self.attr,)


def csv_field(
    name: str | None = None,
    *aliases: str,
    length: int | None = None,
    inline: bool = False,
    **kwargs: Any,
) -> Any:
    """``dataclasses.field`` carrying column options.

    ``csv_field("Name", "name")`` declares the header ``Name`` with one alias,
    ``csv_field(length=3)`` sizes a variable-length sequence and
    ``csv_field("-")`` leaves the field out of the catalog.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    names = [n for n in (name, *aliases) if n]
    if names:
        metadata[CSV_NAME_KEY] = ",".join(names)
    if length is not None:
        metadata[CSV_LENGTH_KEY] = length
    if inline:
        metadata[CSV_INLINE_KEY] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def parse_tag(options: Mapping[str, Any] | None, *, owner: str) -> CsvTag:
    if not options:
        return CsvTag()
    raw_names = options.get(CSV_NAME_KEY)
    if raw_names is None:
        names: tuple[str, ...] = ()
    elif isinstance(raw_names, str):
        names = tuple(part.strip() for part in raw_names.split(",") if part.strip())
    else:
        raise UnsupportedShape(f"{owner}: csv name must be a string, got {raw_names!r}")

    length = options.get(CSV_LENGTH_KEY)
    if length is not None:
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise UnsupportedShape(
                f"{owner}: csv_length must be a non-negative integer, got {length!r}"
            )
    return CsvTag(names=names, length=length, inline=bool(options.get(CSV_INLINE_KEY)))


def is_record_type(tp: Any) -> bool:
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


@lru_cache(maxsize=None)
def declared_fields(record_type: type) -> tuple[DeclaredField, ...]:
    """Return the record type's fields in declaration order."""
    if not is_record_type(record_type):
        raise UnsupportedShape(
            f"cannot use {record_type!r}, only dataclasses and pydantic models are supported"
        )
    if issubclass(record_type, BaseModel):
        return _model_fields(record_type)
    return _dataclass_fields(record_type)


@lru_cache(maxsize=None)
def field_attrs(record_type: type) -> tuple[str, ...]:
    return tuple(f.attr for f in declared_fields(record_type))


def _dataclass_fields(record_type: type) -> tuple[DeclaredField, ...]:
    try:
        hints = typing.get_type_hints(record_type)
    except (NameError, TypeError) as exc:
        raise UnsupportedShape(
            f"cannot resolve annotations of {record_type.__qualname__}: {exc}"
        ) from exc
    out = []
    for position, f in enumerate(dataclasses.fields(record_type)):
        owner = f"{record_type.__qualname__}.{f.name}"
        out.append(
            DeclaredField(
                position=position,
                attr=f.name,
                annotation=hints.get(f.name, Any),
                tag=parse_tag(f.metadata, owner=owner),
            )
        )
    return tuple(out)


def _model_fields(record_type: type[BaseModel]) -> tuple[DeclaredField, ...]:
    out = []
    for position, (attr, info) in enumerate(record_type.model_fields.items()):
        owner = f"{record_type.__qualname__}.{attr}"
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else None
        tag = parse_tag(extra, owner=owner)
        if not tag.names and info.alias:
            tag = dataclasses.replace(tag, names=(info.alias,))
        out.append(
            DeclaredField(
                position=position,
                attr=attr,
                annotation=info.annotation if info.annotation is not None else Any,
                tag=tag,
            )
        )
    return tuple(out)
