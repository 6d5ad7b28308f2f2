from __future__ import annotations

import threading
from collections import deque
from typing import Any, Iterator, Optional


class RecordChannel:
    """Thread-safe, closable record queue.

    Producers ``put`` records and ``close`` when done; iterating blocks until
    the next record arrives and stops once the channel is closed and drained.
    Closing never waits for queue space.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._items: deque[Any] = deque()
        self._maxsize = maxsize
        self._cond = threading.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _full(self) -> bool:
        return 0 < self._maxsize <= len(self._items)

    def put(self, record: Any, *, timeout: Optional[float] = None) -> None:
        with self._cond:
            if not self._cond.wait_for(
                lambda: self._closed or not self._full(), timeout=timeout
            ):
                raise TimeoutError("channel stayed full")
            if self._closed:
                raise ValueError("put on closed channel")
            self._items.append(record)
            self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __enter__(self) -> "RecordChannel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[Any]:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._items or self._closed)
                if not self._items:
                    return
                item = self._items.popleft()
                self._cond.notify_all()
            yield item
