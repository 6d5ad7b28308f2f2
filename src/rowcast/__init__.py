from rowcast.catalog.builder import build_catalog, catalog_for
from rowcast.catalog.introspect import csv_field
from rowcast.catalog.model import Column, FieldCatalog
from rowcast.catalog.path import DescendField, IndexSequence
from rowcast.encoding.channel import RecordChannel
from rowcast.encoding.drivers import encode_with_config, write_records, write_stream
from rowcast.encoding.encoder import Encoder
from rowcast.errors import (
    EmptySource,
    RowcastError,
    ShapeMismatch,
    TypeMismatch,
    UnsupportedShape,
    WriterError,
)
from rowcast.projection.projector import RowProjector, project, project_into, resolve_path
from rowcast.projection.text import ScalarFormatter

__all__ = [
    "Column",
    "DescendField",
    "EmptySource",
    "Encoder",
    "FieldCatalog",
    "IndexSequence",
    "RecordChannel",
    "RowProjector",
    "RowcastError",
    "ScalarFormatter",
    "ShapeMismatch",
    "TypeMismatch",
    "UnsupportedShape",
    "WriterError",
    "build_catalog",
    "catalog_for",
    "csv_field",
    "encode_with_config",
    "project",
    "project_into",
    "resolve_path",
    "write_records",
    "write_stream",
]
