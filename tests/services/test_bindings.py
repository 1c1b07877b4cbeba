from __future__ import annotations

import pytest

from sheetmap.core.errors import CatalogError, InvalidMappingError, UnknownFieldError
from sheetmap.services.mapping import CellPosition, DataType, Field, FieldBinding, FieldCatalog, Mapping


@pytest.fixture()
def catalog() -> FieldCatalog:
    return FieldCatalog(
        [
            Field("fullName", "Full name", DataType.STRING, is_required=True),
            Field("salary", "Salary", DataType.DECIMAL),
            Field("startDate", "Start date", DataType.DATE),
        ],
        key="staff",
    )


def _binding(field_name: str, column: int, row: int = 1, sheet: str = "S") -> FieldBinding:
    return FieldBinding(field_name=field_name, position=CellPosition(sheet, column, row))


def test_catalog_rejects_duplicate_fields():
    with pytest.raises(CatalogError):
        FieldCatalog([Field("a", "A"), Field("a", "A again")])


def test_catalog_next_unmapped_follows_catalog_order(catalog):
    assert catalog.next_unmapped(set()).field_name == "fullName"
    assert catalog.next_unmapped({"fullName"}).field_name == "salary"
    assert catalog.next_unmapped(set(catalog.names)) is None
    assert [item.field_name for item in catalog.required] == ["fullName"]


def test_cell_position_addresses():
    pos = CellPosition("Staff", 27, 4)

    assert pos.address == "AB5"
    assert str(pos) == "Staff!AB5"
    assert pos.offset(2).row == 6
    with pytest.raises(ValueError):
        CellPosition("Staff", -1, 0)


def test_add_rejects_second_binding_for_same_field():
    mapping = Mapping()

    assert mapping.add(_binding("fullName", 0))
    assert not mapping.add(_binding("fullName", 1))
    assert len(mapping) == 1


def test_add_rejects_second_binding_for_same_column():
    mapping = Mapping()

    assert mapping.add(_binding("fullName", 0, row=1))
    assert not mapping.add(_binding("salary", 0, row=7))
    assert mapping.add(_binding("salary", 0, sheet="Other"))


def test_capacity_caps_mapping_size():
    mapping = Mapping(capacity=2)

    assert mapping.add(_binding("a", 0))
    assert mapping.add(_binding("b", 1))
    assert mapping.is_full
    assert not mapping.add(_binding("c", 2))
    assert len(mapping) == 2


def test_released_field_can_be_bound_again():
    mapping = Mapping()
    mapping.add(_binding("fullName", 0))

    mapping.remove_at(0)

    assert mapping.add(_binding("fullName", 3))
    assert mapping.binding_for_column("S", 0) is None
    assert mapping.binding_for_field("fullName").column == 3


def test_reassign_releases_previous_field():
    mapping = Mapping([_binding("fullName", 0), _binding("salary", 1)])

    assert not mapping.reassign(1, "fullName")
    assert mapping.reassign(1, "startDate")

    assert mapping.field_names == {"fullName", "startDate"}
    assert mapping.binding_for_field("salary") is None
    assert mapping.reassign(0, "salary")
    assert mapping[0].field_name == "salary"


def test_sheets_configured_is_a_view_of_bindings():
    mapping = Mapping([_binding("a", 0, sheet="One"), _binding("b", 0, sheet="Two")])
    assert mapping.sheets_configured == {"One", "Two"}

    mapping.remove_at(1)
    assert mapping.sheets_configured == {"One"}

    mapping.clear()
    assert mapping.sheets_configured == frozenset()


def test_start_row_overrides():
    mapping = Mapping([_binding("a", 0, row=1), _binding("b", 1, row=1)])

    mapping.set_start_row(1, 4)
    assert [b.start_row for b in mapping] == [1, 4]

    mapping.set_all_start_rows(9)
    assert [b.start_row for b in mapping] == [9, 9]
    with pytest.raises(ValueError):
        mapping.set_all_start_rows(-1)


def test_constructor_rejects_conflicting_bindings():
    with pytest.raises(InvalidMappingError):
        Mapping([_binding("a", 0), _binding("a", 1)])


def test_records_round_trip_through_catalog(catalog):
    mapping = Mapping(
        [
            FieldBinding("fullName", CellPosition("S", 0, 3), display_label="Họ và tên"),
            _binding("salary", 4, row=3),
        ]
    )

    records = mapping.to_records(catalog)

    assert records[0] == {
        "fieldName": "fullName",
        "displayName": "Họ và tên",
        "columnPosition": 0,
        "rowPosition": 3,
        "sheetName": "S",
        "dataType": 0,
        "isRequired": True,
    }
    assert records[1]["displayName"] == "Salary"
    assert records[1]["dataType"] == int(DataType.DECIMAL)

    restored = Mapping.from_records(records, catalog)
    assert [(b.field_name, b.position) for b in restored] == [(b.field_name, b.position) for b in mapping]
    assert restored.capacity == len(catalog)


def test_from_records_rejects_unknown_fields(catalog):
    record = {
        "fieldName": "bonus",
        "displayName": "Bonus",
        "columnPosition": 0,
        "rowPosition": 1,
        "sheetName": "S",
        "dataType": 1,
        "isRequired": False,
    }

    with pytest.raises(UnknownFieldError):
        Mapping.from_records([record], catalog)
