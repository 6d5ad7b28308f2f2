import csv
from pathlib import Path
from typing import Optional, Sequence, TextIO

from rowcast.config.encode import CsvDialectConfig
from rowcast.errors import WriterError
from rowcast.io.protocols import HasFilePath, RowWriter
from rowcast.io.sinks import AtomicTextFileSink


class CsvRowWriter(RowWriter):
    """``csv.writer`` over a text stream with a sticky terminal error.

    The first failure is kept in ``error``; every later call re-raises it.
    """

    def __init__(self, stream: TextIO, dialect: Optional[CsvDialectConfig] = None):
        self.dialect = dialect or CsvDialectConfig()
        self._stream = stream
        self._writer = csv.writer(stream, **self.dialect.writer_kwargs())
        self._error: Optional[WriterError] = None
        self.rows_written = 0

    @property
    def error(self) -> Optional[WriterError]:
        return self._error

    def write(self, row: Sequence[str]) -> None:
        if self._error is not None:
            raise self._error
        try:
            self._writer.writerow(row)
        except (csv.Error, OSError, ValueError) as exc:
            self._fail("write", exc)
        self.rows_written += 1

    def flush(self) -> None:
        if self._error is not None:
            raise self._error
        try:
            self._stream.flush()
        except (OSError, ValueError) as exc:
            self._fail("flush", exc)

    def _fail(self, action: str, exc: Exception) -> None:
        self._error = WriterError(f"csv {action} failed: {exc}")
        self._error.__cause__ = exc
        raise self._error


class CsvFileWriter(CsvRowWriter, HasFilePath):
    """CSV writer that owns an atomic file sink."""

    def __init__(self, dest: Path, dialect: Optional[CsvDialectConfig] = None):
        dialect = dialect or CsvDialectConfig()
        self.sink = AtomicTextFileSink(dest, encoding=dialect.encoding)
        super().__init__(self.sink.fh, dialect)

    @property
    def file_path(self) -> Optional[Path]:
        return self.sink.file_path

    def close(self) -> None:
        self.sink.close()

    def abort(self) -> None:
        self.sink.abort()
