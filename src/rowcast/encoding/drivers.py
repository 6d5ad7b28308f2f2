from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Iterable, Optional, TextIO

from rowcast.catalog.builder import build_catalog
from rowcast.config.encode import EncodeConfig
from rowcast.config.resolution import configure_logging
from rowcast.encoding.encoder import raise_for_writer_error
from rowcast.errors import EmptySource, ShapeMismatch, UnsupportedShape
from rowcast.io.factory import open_writer
from rowcast.io.output import resolve_output_target
from rowcast.io.protocols import RowWriter
from rowcast.projection.accessor import ValueAccessor
from rowcast.projection.projector import RowProjector
from rowcast.projection.text import ScalarFormatter

logger = logging.getLogger(__name__)


def _check_item(record: Any, record_type: type, index: int) -> None:
    if record is not None and type(record) is not record_type:
        raise ShapeMismatch(
            f"record #{index} is {type(record).__qualname__}, "
            f"expected {record_type.__qualname__}"
        )


def _first_record_type(records: Sequence[Any]) -> type:
    for record in records:
        if record is not None:
            return type(record)
    raise EmptySource("cannot derive columns: no records and no record_type given")


def write_records(
    writer: RowWriter,
    records: Iterable[Any],
    *,
    record_type: Optional[type] = None,
    omit_header: bool = False,
    validate_items: bool = True,
    formatter: Optional[ScalarFormatter] = None,
    accessor: Optional[ValueAccessor] = None,
) -> int:
    """Write a header and one row per record, flushing once at the end.

    Columns come from ``record_type`` or, when omitted, from the first record
    that is not ``None``. Returns the number of data rows written.
    """
    items = records if isinstance(records, Sequence) else list(records)
    if record_type is None:
        record_type = _first_record_type(items)
    projector = RowProjector(
        build_catalog(record_type), accessor=accessor, formatter=formatter
    )

    if not omit_header:
        writer.write(projector.header)
    row = projector.new_row()
    count = 0
    for index, record in enumerate(items):
        if validate_items:
            _check_item(record, record_type, index)
        projector.project_into(record, row)
        writer.write(row)
        count += 1

    writer.flush()
    raise_for_writer_error(writer)
    logger.debug("wrote %d %s rows", count, record_type.__qualname__)
    return count


def write_stream(
    source: Iterable[Any],
    writer: RowWriter,
    *,
    omit_header: bool = False,
    validate_items: bool = True,
    formatter: Optional[ScalarFormatter] = None,
    accessor: Optional[ValueAccessor] = None,
) -> int:
    """Consume ``source`` until exhausted, writing one row per record.

    The first record fixes the columns; a source that yields nothing raises
    :class:`EmptySource` before anything is written. Iteration may block, e.g.
    on a :class:`~rowcast.encoding.channel.RecordChannel`.
    """
    iterator = iter(source)
    try:
        first = next(iterator)
    except StopIteration:
        raise EmptySource("record source closed without yielding a record") from None
    if first is None:
        raise UnsupportedShape("first streamed record is None; cannot derive columns")

    record_type = type(first)
    projector = RowProjector(
        build_catalog(record_type), accessor=accessor, formatter=formatter
    )
    row = projector.new_row()
    if not omit_header:
        writer.write(projector.header)
    projector.project_into(first, row)
    writer.write(row)
    count = 1

    for record in iterator:
        if validate_items:
            _check_item(record, record_type, count)
        projector.project_into(record, row)
        writer.write(row)
        count += 1

    writer.flush()
    raise_for_writer_error(writer)
    logger.debug("streamed %d %s rows", count, record_type.__qualname__)
    return count


def encode_with_config(
    records: Iterable[Any],
    config: Optional[EncodeConfig] = None,
    *,
    record_type: Optional[type] = None,
    base_path: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """Route records to the configured output with the configured dialect.

    Sequences go through :func:`write_records`, anything else through
    :func:`write_stream`. File outputs only appear once every row is written.
    A configured ``log_level`` is applied to the root logger first.
    """
    config = config or EncodeConfig()
    if config.log_level:
        configure_logging(config.log_level)
    target = resolve_output_target(config_output=config.output, base_path=base_path)
    formatter = ScalarFormatter.from_config(config.format)
    with open_writer(target, config.dialect, stream=stream) as writer:
        if isinstance(records, Sequence) or record_type is not None:
            return write_records(
                writer,
                records,
                record_type=record_type,
                omit_header=config.omit_header,
                validate_items=config.validate_items,
                formatter=formatter,
            )
        return write_stream(
            records,
            writer,
            omit_header=config.omit_header,
            validate_items=config.validate_items,
            formatter=formatter,
        )
