import copy
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from rowcast.catalog.builder import build_catalog
from rowcast.catalog.path import DescendField
from rowcast.errors import ShapeMismatch, UnsupportedShape
from rowcast.projection.projector import RowProjector, project, project_into, resolve_path
from rowcast.projection.text import ScalarFormatter
from tests.unit.helpers import (
    Address,
    LineItem,
    Loose,
    Money,
    Order,
    Owner,
    Person,
    Pet,
    Shelter,
    Tagged,
)


class MappingAccessor:
    """Resolves field steps against plain dicts keyed by attribute name."""

    def is_absent(self, value):
        return value is None

    def is_sequence(self, value):
        return isinstance(value, list)

    def length(self, value):
        return len(value)

    def element(self, value, index):
        return value[index]

    def field(self, value, step: DescendField):
        if not isinstance(value, dict) or step.name not in value:
            raise ShapeMismatch(f"missing {step.name!r}")
        return value[step.name]


def test_absent_nested_record_projects_to_empty_cell() -> None:
    catalog = build_catalog(Person)

    assert project(Person(name="Ana", age=30), catalog) == ["Ana", "30", ""]
    assert project(Person(name="Bo", age=5, pet=Pet(name="Rex")), catalog) == ["Bo", "5", "Rex"]


def test_sequence_index_past_end_is_empty() -> None:
    catalog = build_catalog(Tagged)

    assert project(Tagged(tags=["a", "b"]), catalog) == ["a", "b", ""]
    assert project(Tagged(tags=["a", "b", "c"]), catalog) == ["a", "b", "c"]
    assert project(Tagged(tags=["a", "b", "c", "d"]), catalog) == ["a", "b", "c"]


@pytest.mark.parametrize(
    "shelter, expected",
    [
        (Shelter(name="s"), ["s", "", "", "", "", "0", "0"]),
        (Shelter(name="s", owner=Owner()), ["s", "", "", "", "", "0", "0"]),
        (
            Shelter(name="s", owner=Owner(address=Address(city="Oslo"))),
            ["s", "Oslo", "", "", "", "0", "0"],
        ),
        (
            Shelter(
                name="s",
                owner=Owner(address=Address(city="Oslo", zip="0150")),
                pets=[None, Pet(name="Rex")],
                coords=(59.9, 10.75),
            ),
            ["s", "Oslo", "0150", "", "Rex", "59.9", "10.75"],
        ),
        (Shelter(name="s", pets=[Pet(name="Kit")]), ["s", "", "", "Kit", "", "0", "0"]),
    ],
)
def test_absence_at_any_depth_is_never_an_error(shelter, expected) -> None:
    assert project(shelter, build_catalog(Shelter)) == expected


def test_absent_record_projects_to_empty_row() -> None:
    assert project(None, build_catalog(Shelter)) == [""] * 7


def test_pydantic_record_projection() -> None:
    order = Order(
        id=7,
        customer=Person(name="Ana", age=30),
        items=[LineItem(sku="A-1", qty=2, price=Decimal("2.50"))],
        Note="rush",
    )

    assert project(order, build_catalog(Order)) == [
        "7", "Ana", "30", "", "A-1", "2", "2.50", "", "", "", "rush",
    ]


def test_row_length_matches_catalog() -> None:
    records = [Shelter(name="a"), Shelter(name="b", pets=[Pet(name="x")] * 5), None]
    catalog = build_catalog(Shelter)

    for record in records:
        assert len(project(record, catalog)) == len(catalog)


def test_projection_is_idempotent_and_does_not_mutate() -> None:
    record = Shelter(name="s", owner=Owner(address=Address(city="Oslo")), pets=[Pet(name="Rex")])
    before = copy.deepcopy(record)
    catalog = build_catalog(Shelter)
    columns_before = catalog.columns

    first = project(record, catalog)
    second = project(record, catalog)

    assert first == second
    assert record == before
    assert catalog.columns == columns_before


def test_project_into_reuses_buffer() -> None:
    catalog = build_catalog(Person)
    row = catalog.new_row()

    project_into(Person(name="Bo", age=5, pet=Pet(name="Rex")), catalog, row)
    project_into(Person(name="Ana", age=30), catalog, row)

    assert row == ["Ana", "30", ""]


def test_project_into_rejects_wrong_buffer_size() -> None:
    with pytest.raises(ValueError, match="row buffer has 2 cells"):
        project_into(Person(name="Ana", age=30), build_catalog(Person), ["", ""])


def test_record_of_another_shape_is_a_shape_mismatch() -> None:
    with pytest.raises(ShapeMismatch, match="column 'Age'"):
        project(Pet(name="Rex"), build_catalog(Person))


def test_non_sequence_where_sequence_expected_is_a_shape_mismatch() -> None:
    with pytest.raises(ShapeMismatch, match="expected a sequence"):
        project(Tagged(tags="abc"), build_catalog(Tagged))


def test_unconvertible_leaf_is_unsupported() -> None:
    catalog = build_catalog(Loose)

    assert project(Loose(payload=Money(3, "EUR")), catalog) == ["3 EUR"]
    with pytest.raises(UnsupportedShape, match="column 'payload'"):
        project(Loose(payload={"a": 1}), catalog)


def test_custom_accessor_drives_resolution() -> None:
    catalog = build_catalog(Person)
    record = {"name": "Ana", "age": 30, "pet": {"name": "Rex"}}

    row = project(record, catalog, accessor=MappingAccessor())

    assert row == ["Ana", "30", "Rex"]
    assert resolve_path({"name": "Bo", "age": 5, "pet": None}, catalog.columns[2].path, accessor=MappingAccessor()) == ""


def test_row_projector_uses_its_formatter() -> None:
    projector = RowProjector(build_catalog(Loose), formatter=ScalarFormatter(true_text="Y"))

    assert projector.header == ["payload"]
    assert projector.project(Loose(payload=True)) == ["Y"]


def test_concurrent_projection_against_shared_catalog() -> None:
    catalog = build_catalog(Person)
    records = [Person(name=f"p{i}", age=i, pet=Pet(name=f"pet{i}") if i % 2 else None) for i in range(200)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        rows = list(pool.map(lambda rec: project(rec, catalog), records))

    assert rows == [project(rec, catalog) for rec in records]
    assert rows[1] == ["p1", "1", "pet1"]
    assert rows[2] == ["p2", "2", ""]
