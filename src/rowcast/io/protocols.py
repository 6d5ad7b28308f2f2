from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable

from rowcast.errors import WriterError


@runtime_checkable
class RowWriter(Protocol):
    """Receives projected rows; escaping and record termination happen here."""

    @property
    def error(self) -> Optional[WriterError]: ...

    def write(self, row: Sequence[str]) -> None: ...
    def flush(self) -> None: ...


@runtime_checkable
class HasFilePath(Protocol):
    @property
    def file_path(self) -> Optional[Path]: ...
