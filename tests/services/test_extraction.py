from __future__ import annotations

import pytest

from sheetmap.core.errors import MissingRequiredFieldsError, NoBindingsError
from sheetmap.services.extraction import ensure_extractable, extract, missing_required_fields
from sheetmap.services.mapping import CellPosition, DataType, Field, FieldBinding, FieldCatalog
from sheetmap.services.wizard import start_wizard
from sheetmap_io.workbook import Workbook


def _binding(field_name: str, column: int, row: int, sheet: str = "Sheet1") -> FieldBinding:
    return FieldBinding(field_name=field_name, position=CellPosition(sheet, column, row))


def test_end_to_end_header_mapping(people_workbook, people_catalog):
    step = start_wizard(people_workbook, people_catalog).choose(True)
    step.toggle("Sheet1", 0, 0)
    step.toggle("Sheet1", 0, 1)
    ready = step.confirm().apply().finish()

    result = ready.extract()

    assert result.records == [
        {"Name": "Alice", "Age": 30},
        {"Name": "Bob", "Age": '"x" is not a number'},
    ]
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.position == CellPosition("Sheet1", 1, 2)
    assert error.field_index == 1
    assert error.field_name == "Age"
    assert result.succeeded is False
    assert result.failed_field_indexes == {1}
    assert result.error_at(CellPosition("Sheet1", 1, 2)) is error


def test_extraction_is_idempotent(people_workbook, people_catalog):
    bindings = [_binding("Name", 0, 1), _binding("Age", 1, 1)]

    first = extract(people_workbook, bindings, people_catalog)
    second = extract(people_workbook, bindings, people_catalog)

    assert first == second


def test_fully_empty_row_ends_extraction_even_with_data_below():
    catalog = FieldCatalog([Field("a", "A"), Field("b", "B"), Field("c", "C")])
    rows = [["A", "B", "C"]]
    rows += [[f"a{i}", f"b{i}", f"c{i}"] for i in range(1, 5)]
    rows.append([None, "b5", None])
    rows.append([None, None, None])
    rows.append(["a7", "b7", "c7"])
    book = Workbook.from_rows({"Sheet1": rows})
    bindings = [_binding("a", 0, 1), _binding("b", 1, 1), _binding("c", 2, 1)]

    result = extract(book, bindings, catalog)

    assert len(result.records) == 5
    assert result.records[-1] == {"a": None, "b": "b5", "c": None}
    assert result.succeeded


def test_errors_on_the_terminating_row_are_not_reported():
    catalog = FieldCatalog([Field("n", "N", DataType.NUMBER)])
    book = Workbook.from_rows({"Sheet1": [["1"], ["  "], ["oops"]]})

    result = extract(book, [_binding("n", 0, 0)], catalog)

    assert result.records == [{"n": 1}]
    assert result.errors == []


def test_whitespace_cells_on_a_data_row_are_values():
    catalog = FieldCatalog([Field("name", "Name"), Field("age", "Age", DataType.NUMBER)])
    book = Workbook.from_rows({"Sheet1": [["Alice", " "], [" ", 4]]})

    result = extract(book, [_binding("name", 0, 0), _binding("age", 1, 0)], catalog)

    assert result.records == [{"name": "Alice", "age": '" " is not a number'}, {"name": " ", "age": 4}]
    assert [err.position for err in result.errors] == [CellPosition("Sheet1", 1, 0)]


def test_bindings_with_different_start_rows_are_aligned_by_offset():
    catalog = FieldCatalog([Field("code", "Code"), Field("amount", "Amount", DataType.DECIMAL)])
    book = Workbook.from_rows(
        {
            "Sheet1": [["Code", None], ["X1", "Amount"], ["X2", "10.5"], [None, "20"]],
        }
    )
    bindings = [_binding("code", 0, 1), _binding("amount", 1, 2)]

    result = extract(book, bindings, catalog)

    assert result.records == [{"code": "X1", "amount": 10.5}, {"code": "X2", "amount": 20}]


def test_binding_without_data_yields_none_for_whole_span():
    catalog = FieldCatalog([Field("name", "Name"), Field("joined", "Joined", DataType.DATE)])
    book = Workbook.from_rows({"Sheet1": [["Alice"], ["Bob"]], "Empty": []})
    bindings = [_binding("name", 0, 0), _binding("joined", 0, 0, sheet="Empty")]

    result = extract(book, bindings, catalog)

    assert result.records == [{"name": "Alice", "joined": None}, {"name": "Bob", "joined": None}]
    assert result.errors == []


def test_missing_sheet_is_treated_as_empty(people_catalog):
    book = Workbook.from_rows({"Sheet1": [["Alice"]]})

    result = extract(book, [_binding("Name", 0, 0, sheet="Gone")], people_catalog)

    assert result.records == []
    assert result.succeeded


def test_no_bindings_extracts_nothing(people_workbook, people_catalog):
    result = extract(people_workbook, [], people_catalog)

    assert result.records == []
    assert result.errors == []


def test_date_fields_are_normalized():
    catalog = FieldCatalog([Field("d", "D", DataType.DATE)])
    book = Workbook.from_rows({"Sheet1": [[45291], ["31/12/2023"], ["2023-12-31"], ["soon"]]})

    result = extract(book, [_binding("d", 0, 0)], catalog)

    assert [r["d"] for r in result.records[:3]] == ["2023-12-31T00:00:00.000Z"] * 3
    assert result.records[3]["d"] == '"soon" is not a valid date'
    assert result.errors[0].position == CellPosition("Sheet1", 0, 3)


def test_required_field_precondition(people_catalog):
    assert missing_required_fields([_binding("Age", 1, 1)], people_catalog) == ["Name"]

    with pytest.raises(NoBindingsError):
        ensure_extractable([], people_catalog)
    with pytest.raises(MissingRequiredFieldsError):
        ensure_extractable([_binding("Age", 1, 1)], people_catalog)
    ensure_extractable([_binding("Name", 0, 1)], people_catalog)


def test_to_dataframe_numbers_rows(people_workbook, people_catalog):
    result = extract(people_workbook, [_binding("Name", 0, 1), _binding("Age", 1, 1)], people_catalog)

    frame = result.to_dataframe()

    assert list(frame.columns) == ["stt", "Name", "Age"]
    assert frame["stt"].tolist() == [1, 2]
    assert frame["Name"].tolist() == ["Alice", "Bob"]
