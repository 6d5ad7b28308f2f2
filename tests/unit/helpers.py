from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from rowcast.catalog.introspect import csv_field
from rowcast.errors import WriterError


@dataclass
class Pet:
    name: str = csv_field("Name", "pet_name")


@dataclass
class Person:
    name: str = csv_field("Name")
    age: int = csv_field("Age")
    pet: Optional[Pet] = csv_field("Pet", default=None)


@dataclass
class Employee(Person):
    team: str = ""


@dataclass
class Tagged:
    tags: list[str] = csv_field("Tags", length=3, default_factory=list)


@dataclass
class Address:
    city: str
    zip: Optional[str] = None


@dataclass
class Owner:
    address: Optional[Address] = None


@dataclass
class Shelter:
    name: str
    owner: Optional[Owner] = None
    pets: list[Optional[Pet]] = csv_field(length=2, default_factory=list)
    coords: tuple[float, float] = (0.0, 0.0)


class LineItem(BaseModel):
    sku: str
    qty: int = 1
    price: Decimal = Decimal("0")


class Order(BaseModel):
    id: int
    customer: Optional[Person] = None
    items: list[LineItem] = Field(default_factory=list, json_schema_extra={"csv_length": 2})
    note: Optional[str] = Field(default=None, alias="Note")


@dataclass
class Audit:
    created_by: str = "system"


@dataclass
class Document:
    title: str
    audit: Audit = csv_field(inline=True, default_factory=Audit)
    secret: str = csv_field("-", default="")


@dataclass
class Loose:
    payload: Any = None


@dataclass
class Node:
    value: int
    next: Optional[Node] = None


@dataclass
class Money:
    amount: int
    currency: str

    def to_csv(self) -> str:
        return f"{self.amount} {self.currency}"


@dataclass
class RecordingWriter:
    """In-memory row writer that copies every row it receives."""

    rows: list[list[str]] = field(default_factory=list)
    flushes: int = 0
    error: Optional[WriterError] = None
    fail_on_flush: bool = False
    fail_after: Optional[int] = None

    def write(self, row) -> None:
        if self.fail_after is not None and len(self.rows) >= self.fail_after:
            self.error = WriterError("disk full")
            raise self.error
        self.rows.append(list(row))

    def flush(self) -> None:
        self.flushes += 1
        if self.fail_on_flush:
            self.error = WriterError("flush failed")
