from __future__ import annotations

import logging
from typing import Any, Optional

from rowcast.catalog.builder import build_catalog
from rowcast.errors import TypeMismatch
from rowcast.io.protocols import RowWriter
from rowcast.projection.accessor import ValueAccessor
from rowcast.projection.projector import RowProjector
from rowcast.projection.text import ScalarFormatter

logger = logging.getLogger(__name__)


def raise_for_writer_error(writer: RowWriter) -> None:
    error = writer.error
    if error is not None:
        raise error


class Encoder:
    """Encodes one record per call into a writer, flushing after every row.

    The record type is fixed at construction. The row buffer is reused between
    calls, so the encoder is not safe to share between threads.
    """

    def __init__(
        self,
        writer: RowWriter,
        record_type: type,
        *,
        formatter: Optional[ScalarFormatter] = None,
        accessor: Optional[ValueAccessor] = None,
    ) -> None:
        self.writer = writer
        self.record_type = record_type
        self.catalog = build_catalog(record_type)
        self._projector = RowProjector(
            self.catalog, accessor=accessor, formatter=formatter
        )
        self._row = self.catalog.new_row()
        self.encoded = 0

    @classmethod
    def for_record(cls, writer: RowWriter, record: Any, **kwargs: Any) -> "Encoder":
        return cls(writer, type(record), **kwargs)

    def write_header(self) -> None:
        self._row[:] = self.catalog.header
        self.writer.write(self._row)

    def encode(self, record: Any) -> None:
        if record is not None and type(record) is not self.record_type:
            raise TypeMismatch(self.record_type, type(record))
        self._projector.project_into(record, self._row)
        self.writer.write(self._row)
        self.writer.flush()
        raise_for_writer_error(self.writer)
        self.encoded += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "encoded %s #%d", self.record_type.__qualname__, self.encoded
            )
