"""Unit tests for the YAML mapping store."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from sheetmap.services.mapping import CellPosition, FieldBinding, Mapping
from sheetmap_io.mapping_store import MappingStore, MappingStoreError


def _records(catalog):
    mapping = Mapping(
        [
            FieldBinding("Name", CellPosition("Sheet1", 0, 1), display_label="Họ tên"),
            FieldBinding("Age", CellPosition("Sheet1", 1, 1)),
        ]
    )
    return mapping.to_records(catalog)


def test_save_writes_camel_case_document(tmp_path: Path, people_catalog) -> None:
    store = MappingStore(tmp_path)

    path = store.save("people v1", "people", _records(people_catalog), template_file_name="people.xlsx", has_header=True)

    assert path == tmp_path / "people_v1.yaml"
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert payload["configName"] == "people v1"
    assert payload["catalog"] == "people"
    assert payload["hasHeader"] is True
    assert payload["details"][0] == {
        "fieldName": "Name",
        "displayName": "Họ tên",
        "columnPosition": 0,
        "rowPosition": 1,
        "sheetName": "Sheet1",
        "dataType": 0,
        "isRequired": True,
    }
    assert store.list() == ["people_v1"]


def test_round_trip_rebuilds_mapping(tmp_path: Path, people_catalog) -> None:
    store = MappingStore(tmp_path)
    records = _records(people_catalog)
    store.save("people", "people", records)

    document = store.load("people")
    restored = Mapping.from_records([entry.to_record() for entry in document.details], people_catalog)

    assert document.template_file_name is None
    assert [entry.to_record() for entry in document.details] == records
    assert [b.position for b in restored] == [CellPosition("Sheet1", 0, 1), CellPosition("Sheet1", 1, 1)]


def test_save_refuses_overwrite_when_asked(tmp_path: Path, people_catalog) -> None:
    store = MappingStore(tmp_path)
    store.save("people", "people", _records(people_catalog))

    with pytest.raises(MappingStoreError):
        store.save("people", "people", _records(people_catalog), overwrite=False)


def test_load_missing_and_corrupt_documents(tmp_path: Path) -> None:
    store = MappingStore(tmp_path)
    with pytest.raises(MappingStoreError):
        store.load("absent")

    (tmp_path / "broken.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(MappingStoreError):
        store.load("broken")

    (tmp_path / "negative.yaml").write_text(
        "configName: negative\n"
        "catalog: people\n"
        "details:\n"
        "  - fieldName: Name\n"
        "    columnPosition: -1\n"
        "    rowPosition: 0\n"
        "    sheetName: Sheet1\n",
        encoding="utf-8",
    )
    with pytest.raises(MappingStoreError):
        store.load("negative")


def test_delete_and_invalid_names(tmp_path: Path, people_catalog) -> None:
    store = MappingStore(tmp_path)
    store.save("people", "people", _records(people_catalog))

    assert store.delete("people")
    assert not store.delete("people")
    assert not store.exists("people")
    with pytest.raises(MappingStoreError):
        store.path_for("///")


def test_default_location_is_under_workspace(_isolated_home: Path) -> None:
    store = MappingStore()

    assert store.base_dir == _isolated_home / "mappings"
