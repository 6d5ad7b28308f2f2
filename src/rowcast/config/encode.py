from __future__ import annotations

import codecs
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from rowcast.config.options import QUOTING_MODES, VALID_LOG_LEVELS
from rowcast.utils.load import load_yaml

Transport = Literal["stdout", "fs"]
Quoting = Literal["minimal", "all", "nonnumeric", "none"]


class CsvDialectConfig(BaseModel):
    delimiter: str = Field(default=",", description="Single-character field separator.")
    quotechar: str = Field(default='"', description="Single-character quote.")
    quoting: Quoting = Field(default="minimal", description="minimal | all | nonnumeric | none")
    escapechar: Optional[str] = Field(
        default=None,
        description="Escape character, required when quoting is 'none' and cells contain delimiters.",
    )
    lineterminator: str = Field(default="\r\n", description="Record terminator.")
    encoding: str = Field(default="utf-8", description="Text encoding for file outputs.")

    @field_validator("delimiter", "quotechar")
    @classmethod
    def _single_char(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(f"must be a single character, got {value!r}")
        return value

    @field_validator("escapechar")
    @classmethod
    def _single_char_or_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) != 1:
            raise ValueError(f"must be a single character, got {value!r}")
        return value

    @field_validator("quoting", mode="before")
    @classmethod
    def _normalize_quoting(cls, value):
        if value is None:
            return "minimal"
        name = str(value).strip().lower()
        if name not in QUOTING_MODES:
            raise ValueError(
                f"quoting must be one of {', '.join(QUOTING_MODES)}, got {value!r}"
            )
        return name

    @field_validator("lineterminator")
    @classmethod
    def _non_empty_terminator(cls, value: str) -> str:
        if not value:
            raise ValueError("lineterminator cannot be empty")
        return value

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding {value!r}") from exc
        return value

    @model_validator(mode="after")
    def _validate(self):
        if self.delimiter == self.quotechar:
            raise ValueError("delimiter and quotechar must differ")
        return self

    def writer_kwargs(self) -> dict:
        kwargs = {
            "delimiter": self.delimiter,
            "quotechar": self.quotechar,
            "quoting": QUOTING_MODES[self.quoting],
            "lineterminator": self.lineterminator,
        }
        if self.escapechar is not None:
            kwargs["escapechar"] = self.escapechar
        return kwargs


class FormatConfig(BaseModel):
    true_text: str = Field(default="true")
    false_text: str = Field(default="false")
    float_format: Optional[str] = Field(
        default=None,
        description="format() spec for floats, e.g. '.2f'. Null keeps shortest round-trip text.",
    )
    datetime_format: Optional[str] = Field(
        default=None,
        description="strftime pattern for dates and times. Null keeps ISO 8601.",
    )

    @field_validator("float_format")
    @classmethod
    def _validate_float_format(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        try:
            format(1.5, value)
        except ValueError as exc:
            raise ValueError(f"invalid float_format {value!r}: {exc}") from exc
        return value


class OutputConfig(BaseModel):
    transport: Transport = Field(default="stdout", description="stdout | fs")
    path: Optional[Path] = Field(
        default=None,
        description="Destination file (fs transport only).",
    )

    @model_validator(mode="after")
    def _validate(self):
        if self.transport == "stdout":
            if self.path is not None:
                raise ValueError("stdout output cannot define a path")
            return self
        if self.path is None:
            raise ValueError("fs output requires a path")
        return self


class EncodeConfig(BaseModel):
    """Settings shared by every encoding driver."""

    omit_header: bool = Field(default=False, description="Skip the header row.")
    validate_items: bool = Field(
        default=True,
        description="Check every streamed/bulk record against the first record's type.",
    )
    log_level: Optional[str] = Field(
        default=None,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Null leaves logging untouched.",
    )
    dialect: CsvDialectConfig = Field(default_factory=CsvDialectConfig)
    format: FormatConfig = Field(default_factory=FormatConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str | None) -> str | None:
        if value is None:
            return None
        name = str(value).upper()
        if name not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, got {value!r}"
            )
        return name


def load_encode_config(path: Path) -> EncodeConfig:
    data = load_yaml(Path(path))
    config = EncodeConfig.model_validate(data)
    output = config.output
    if output.path is not None and not output.path.is_absolute():
        resolved = (Path(path).parent / output.path).resolve()
        config = config.model_copy(
            update={"output": output.model_copy(update={"path": resolved})}
        )
    return config
