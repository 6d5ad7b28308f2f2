from __future__ import annotations


class RowcastError(Exception):
    """Base class for every error raised while cataloguing or encoding records."""


class ShapeMismatch(RowcastError, TypeError):
    """Raised when a record's runtime structure does not match its catalog."""


class TypeMismatch(RowcastError, TypeError):
    """Raised when an encoder receives a record of a different type."""

    def __init__(self, expected: type, received: type) -> None:
        super().__init__(
            f"Encoder was initialized to encode {expected.__qualname__}, "
            f"but received {received.__qualname__}"
        )
        self.expected = expected
        self.received = received


class UnsupportedShape(RowcastError, TypeError):
    """Raised when a type or leaf value cannot be catalogued or converted to text."""


class EmptySource(RowcastError, ValueError):
    """Raised when a record source yields no records at all."""


class WriterError(RowcastError):
    """Raised by row writers; the underlying failure is kept as ``__cause__``."""
