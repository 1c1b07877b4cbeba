"""Result containers produced by the extraction engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

import pandas as pd

from sheetmap.services.mapping.models import CellPosition

Record = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class CellError:
    """A cell whose raw value could not be coerced to its field type."""

    position: CellPosition
    field_index: int
    message: str
    field_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheet": self.position.sheet,
            "cell": self.position.address,
            "row": self.position.row,
            "column": self.position.column,
            "field_index": self.field_index,
            "field": self.field_name,
            "message": self.message,
        }


@dataclass(slots=True)
class ExtractionResult:
    """Records extracted from a workbook plus the per-cell coercion failures."""

    records: List[Record] = field(default_factory=list)
    errors: List[CellError] = field(default_factory=list)
    columns: Sequence[str] = ()

    @property
    def succeeded(self) -> bool:
        return not self.errors

    @property
    def failed_field_indexes(self) -> FrozenSet[int]:
        return frozenset(err.field_index for err in self.errors)

    def error_at(self, position: CellPosition) -> Optional[CellError]:
        for err in self.errors:
            if err.position == position:
                return err
        return None

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular preview with a 1-based ``stt`` column ahead of the field columns."""

        frame = pd.DataFrame.from_records(self.records, columns=list(self.columns) or None)
        frame.insert(0, "stt", range(1, len(frame) + 1))
        return frame
