"""`sheetmap_io` top-level package exports the workbook, column and mapping-store helpers."""

# Module responsibilities:
# - Re-export high-level interfaces for workbook loading, column reading, mapping persistence
#   and export so consumers have a stable API surface.

from __future__ import annotations

from .columns import iter_column, read_column
from .exporter import export_records
from .mapping_store import MappingStore, MappingStoreError
from .schema import BindingEntry, BindingRecord, MappingDocument
from .workbook import CellValue, Sheet, Workbook, load_workbook

__all__ = [
    "CellValue",
    "Sheet",
    "Workbook",
    "load_workbook",
    "iter_column",
    "read_column",
    "export_records",
    "MappingStore",
    "MappingStoreError",
    "BindingEntry",
    "BindingRecord",
    "MappingDocument",
]

__version__ = "0.1.0"
