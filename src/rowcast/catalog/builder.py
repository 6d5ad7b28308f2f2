from __future__ import annotations

import logging
import types
from collections import Counter
from collections.abc import Mapping, Sequence, Set
from functools import lru_cache
from typing import Any, Iterator, Optional, Union, get_args, get_origin

from rowcast.catalog.introspect import declared_fields, is_record_type
from rowcast.catalog.model import Column, FieldCatalog
from rowcast.catalog.path import DescendField, FieldPath, IndexSequence
from rowcast.errors import UnsupportedShape

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = (list, tuple, Sequence)
_UNSUPPORTED_ORIGINS = (Mapping, Set)


@lru_cache(maxsize=None)
def build_catalog(record_type: type) -> FieldCatalog:
    """Derive the ordered column list for ``record_type``.

    Nested records contribute their columns under a ``"<field>."`` prefix,
    sequences contribute one column (or one column group) per index. The
    result is cached, so every caller sees the same immutable catalog.
    """
    if not is_record_type(record_type):
        raise UnsupportedShape(
            f"cannot use {record_type!r}, only dataclasses and pydantic models are supported"
        )
    columns = tuple(_record_columns(record_type, "", (), frozenset()))
    _warn_duplicates(record_type, columns)
    logger.debug(
        "built catalog for %s with %d columns", record_type.__qualname__, len(columns)
    )
    return FieldCatalog(record_type=record_type, columns=columns)


def catalog_for(record: Any) -> FieldCatalog:
    return build_catalog(type(record))


def _record_columns(
    record_type: type,
    prefix: str,
    path: FieldPath,
    active: frozenset[type],
) -> Iterator[Column]:
    if record_type in active:
        raise UnsupportedShape(
            f"recursive record type {record_type.__qualname__} cannot be flattened into columns"
        )
    active = active | {record_type}
    for field in declared_fields(record_type):
        if field.tag.skip:
            continue
        step = DescendField(field.position, field.attr)
        owner = f"{record_type.__qualname__}.{field.attr}"
        yield from _expand(
            field.annotation,
            field.names,
            prefix,
            path + (step,),
            length=field.tag.length,
            inline=field.tag.inline,
            active=active,
            owner=owner,
        )


def _expand(
    annotation: Any,
    names: tuple[str, ...],
    prefix: str,
    path: FieldPath,
    *,
    length: Optional[int],
    inline: bool,
    active: frozenset[type],
    owner: str,
) -> Iterator[Column]:
    tp = _unwrap_optional(annotation)

    if is_record_type(tp) and not _has_marshaller(tp):
        child_prefix = prefix if inline else f"{prefix}{names[0]}."
        yield from _record_columns(tp, child_prefix, path, active)
        return
    if inline:
        raise UnsupportedShape(f"{owner}: inline requires a record type, got {tp!r}")

    elements = _sequence_elements(tp, length, owner)
    if elements is not None:
        for index, element in enumerate(elements):
            yield from _expand(
                element,
                tuple(f"{name}[{index}]" for name in names),
                prefix,
                path + (IndexSequence(index),),
                length=None,
                inline=False,
                active=active,
                owner=f"{owner}[{index}]",
            )
        return

    if _is_unsupported_container(tp):
        raise UnsupportedShape(f"{owner}: {tp!r} cannot be written as a column")
    yield Column(names=tuple(f"{prefix}{name}" for name in names), path=path)


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
        return Any
    return annotation


def _has_marshaller(tp: type) -> bool:
    return callable(getattr(tp, "to_csv", None))


def _origin_or_self(tp: Any) -> Any:
    return get_origin(tp) or tp


def _is_unsupported_container(tp: Any) -> bool:
    origin = _origin_or_self(tp)
    return isinstance(origin, type) and issubclass(origin, _UNSUPPORTED_ORIGINS)


def _sequence_elements(tp: Any, length: Optional[int], owner: str) -> Optional[list[Any]]:
    """Return the per-index element types when ``tp`` is a sequence, else None."""
    if tp in (str, bytes, bytearray):
        return None
    origin = _origin_or_self(tp)
    if origin not in _SEQUENCE_ORIGINS:
        return None
    args = get_args(tp)
    if origin is tuple and args and args[-1] is not Ellipsis:
        fixed = list(args)
        if length is None:
            return fixed
        return [fixed[i] if i < len(fixed) else Any for i in range(length)]
    if length is None:
        raise UnsupportedShape(
            f"{owner}: variable-length sequence needs an explicit length (csv_length)"
        )
    element = args[0] if args else Any
    return [element] * length


def _warn_duplicates(record_type: type, columns: tuple[Column, ...]) -> None:
    counts = Counter(column.display_name for column in columns)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        logger.warning(
            "catalog for %s repeats header names: %s",
            record_type.__qualname__,
            ", ".join(duplicates),
        )
