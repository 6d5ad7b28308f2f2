from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, TextIO

from rowcast.config.encode import CsvDialectConfig
from rowcast.io.output import OutputTarget
from rowcast.io.sinks import StdoutTextSink
from rowcast.io.writers.csv_writer import CsvFileWriter, CsvRowWriter

logger = logging.getLogger(__name__)


def writer_factory(
    target: OutputTarget,
    dialect: Optional[CsvDialectConfig] = None,
    *,
    stream: Optional[TextIO] = None,
) -> CsvRowWriter:
    transport = target.transport.lower()
    if transport == "stdout":
        return CsvRowWriter(StdoutTextSink(stream).fh, dialect)
    if transport == "fs":
        if target.destination is None:
            raise ValueError("fs output requires a destination path")
        return CsvFileWriter(target.destination, dialect)
    raise ValueError(f"Unsupported output transport '{target.transport}'")


@contextmanager
def open_writer(
    target: OutputTarget,
    dialect: Optional[CsvDialectConfig] = None,
    *,
    stream: Optional[TextIO] = None,
) -> Iterator[CsvRowWriter]:
    writer = writer_factory(target, dialect, stream=stream)
    logger.debug("writing csv to %s", target.destination or "stdout")
    if not isinstance(writer, CsvFileWriter):
        yield writer
        return
    try:
        yield writer
    except BaseException:
        writer.abort()
        raise
    writer.close()


def csv_file_writer(dest: Path, dialect: Optional[CsvDialectConfig] = None):
    """Context manager yielding a file writer; ``dest`` only appears if the block succeeds."""
    return open_writer(OutputTarget(transport="fs", destination=Path(dest)), dialect)
