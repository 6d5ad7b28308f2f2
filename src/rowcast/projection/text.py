from __future__ import annotations

import math
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Optional
from uuid import UUID

from rowcast.catalog.introspect import is_record_type
from rowcast.errors import UnsupportedShape


class ScalarFormatter:
    """Turn a leaf value into its cell text.

    Conversion is deterministic and ignores the process locale. Values that
    expose ``to_csv()`` control their own text.
    """

    def __init__(
        self,
        *,
        true_text: str = "true",
        false_text: str = "false",
        float_format: Optional[str] = None,
        datetime_format: Optional[str] = None,
    ) -> None:
        self.true_text = true_text
        self.false_text = false_text
        self.float_format = float_format
        self.datetime_format = datetime_format

    @classmethod
    def from_config(cls, config) -> "ScalarFormatter":
        return cls(
            true_text=config.true_text,
            false_text=config.false_text,
            float_format=config.float_format,
            datetime_format=config.datetime_format,
        )

    def __call__(self, value: Any) -> str:
        if value is None:
            return ""
        # Enum before str and int: mixin members are instances of both
        if isinstance(value, Enum):
            return self(value.value)
        if isinstance(value, str):
            return str(value)
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return self.true_text if value else self.false_text
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return self._float(value)
        if isinstance(value, (Decimal, UUID, PurePath)):
            return str(value)
        if isinstance(value, (datetime, date, time)):
            if self.datetime_format:
                return value.strftime(self.datetime_format)
            return value.isoformat()
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")
        marshal = getattr(value, "to_csv", None)
        if callable(marshal):
            return self._marshal(value, marshal)
        if is_record_type(type(value)) or isinstance(value, (dict, list, tuple, set, frozenset)):
            raise UnsupportedShape(
                f"{type(value).__qualname__} is not a scalar and cannot be written as one cell"
            )
        raise UnsupportedShape(f"no text conversion for {type(value).__qualname__}")

    def _float(self, value: float) -> str:
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        if self.float_format:
            return format(value, self.float_format)
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)

    @staticmethod
    def _marshal(value: Any, marshal) -> str:
        try:
            text = marshal()
        except Exception as exc:
            raise UnsupportedShape(
                f"{type(value).__qualname__}.to_csv() failed: {exc}"
            ) from exc
        if not isinstance(text, str):
            raise UnsupportedShape(
                f"{type(value).__qualname__}.to_csv() returned {type(text).__qualname__}, expected str"
            )
        return text


DEFAULT_FORMATTER = ScalarFormatter()
