"""State shared by every step of one mapping wizard run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from sheetmap.services.extraction.coercion import is_empty_value, stringify
from sheetmap.services.extraction.models import CellError
from sheetmap.services.mapping.bindings import Mapping
from sheetmap.services.mapping.models import CellPosition, FieldCatalog
from sheetmap_io.workbook import Workbook


@dataclass
class WizardSession:
    """Workbook, catalog and the mapping being built.

    The configured-sheet set and the header selection are projections of the
    mapping; only the bindings, the header mode and the last preview errors are
    stored.
    """

    workbook: Workbook
    catalog: FieldCatalog
    has_header: Optional[bool] = None
    cell_errors: List[CellError] = field(default_factory=list)
    mapping: Mapping = field(init=False)

    def __post_init__(self) -> None:
        self.mapping = Mapping(capacity=len(self.catalog))

    @property
    def sheets_configured(self) -> FrozenSet[str]:
        return self.mapping.sheets_configured

    @property
    def selected_header_cells(self) -> FrozenSet[CellPosition]:
        if not self.has_header:
            return frozenset()
        return self.mapping.selected_cells

    def header_text(self, anchor: CellPosition) -> str:
        sheet = self.workbook.get(anchor.sheet)
        value = sheet.cell(anchor.row, anchor.column) if sheet is not None else None
        return "" if is_empty_value(value) else stringify(value)

    def reset(self) -> None:
        self.mapping.clear()
        self.has_header = None
        self.cell_errors.clear()
