from __future__ import annotations

import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class StdoutTextSink:
    """Text sink over the process stdout; closing only flushes."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.fh = stream or sys.stdout

    @property
    def file_path(self) -> Optional[Path]:
        return None

    def write_text(self, text: str) -> None:
        self.fh.write(text)

    def flush(self) -> None:
        self.fh.flush()

    def close(self) -> None:
        self.fh.flush()

    def abort(self) -> None:
        self.fh.flush()


class AtomicTextFileSink:
    """Writes to a temp file next to ``dest`` and moves it into place on close."""

    def __init__(self, dest: Path, *, encoding: str = "utf-8") -> None:
        self.dest = Path(dest)
        self.dest.parent.mkdir(parents=True, exist_ok=True)
        tmp = tempfile.NamedTemporaryFile(
            dir=str(self.dest.parent),
            prefix=f".{self.dest.name}.",
            suffix=".tmp",
            delete=False,
            mode="w",
            encoding=encoding,
            newline="",
        )
        self.tmp_path = Path(tmp.name)
        self.fh = tmp
        self._closed = False

    @property
    def file_path(self) -> Optional[Path]:
        return self.dest

    def write_text(self, text: str) -> None:
        self.fh.write(text)

    def flush(self) -> None:
        self.fh.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.fh.close()
        os.replace(self.tmp_path, self.dest)
        logger.debug("wrote %s", self.dest)

    def abort(self) -> None:
        """Drop the temp file without touching ``dest``."""
        if self._closed:
            return
        self._closed = True
        self.fh.close()
        self.tmp_path.unlink(missing_ok=True)
        logger.debug("discarded partial output for %s", self.dest)
