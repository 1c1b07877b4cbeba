from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Package loggers open their log files on import; keep them out of the real home.
os.environ.setdefault("SHEETMAP_HOME", tempfile.mkdtemp(prefix="sheetmap-tests-"))

from sheetmap.services.mapping import DataType, Field, FieldCatalog  # noqa: E402
from sheetmap_io.workbook import Workbook  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the workspace at a per-test directory and drop location overrides."""

    home = tmp_path / "home"
    monkeypatch.setenv("SHEETMAP_HOME", str(home))
    monkeypatch.delenv("SHEETMAP_CATALOG_DIR", raising=False)
    monkeypatch.delenv("SHEETMAP_MAPPING_DIR", raising=False)
    yield home


@pytest.fixture()
def people_catalog() -> FieldCatalog:
    return FieldCatalog(
        [
            Field("Name", "Name", DataType.STRING, is_required=True),
            Field("Age", "Age", DataType.NUMBER),
        ],
        key="people",
    )


@pytest.fixture()
def people_workbook() -> Workbook:
    return Workbook.from_rows(
        {
            "Sheet1": [
                ["Name", "Age"],
                ["Alice", 30],
                ["Bob", "x"],
                ["", ""],
            ]
        }
    )
