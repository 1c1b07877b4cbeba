"""In-memory workbook model and xlsx loading."""

# Module responsibilities:
# - Materialize workbooks as plain sheet -> 2-D value grids so the mapping core never touches openpyxl.
# - Drop hidden sheets while loading; the core only ever sees visible sheets.
# - Emit structured logs for traceability.

from __future__ import annotations

import math
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd
from openpyxl import load_workbook as _open_xlsx
from openpyxl.utils.exceptions import InvalidFileException

from .utils.log import get_logger

logger = get_logger("workbook")

CellValue = Union[str, int, float, bool, datetime, date, time, None]


@dataclass(slots=True)
class Sheet:
    """A single worksheet as a ragged list of rows."""

    name: str
    rows: List[List[CellValue]] = field(default_factory=list)
    hidden: bool = False

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    @property
    def n_columns(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def cell(self, row: int, column: int) -> CellValue:
        """Return the raw value at ``(row, column)``; ``None`` outside the populated extent."""

        if row < 0 or column < 0 or row >= len(self.rows):
            return None
        values = self.rows[row]
        if column >= len(values):
            return None
        return values[column]


@dataclass(slots=True)
class Workbook:
    """Already-parsed workbook keyed by sheet name, in workbook order."""

    sheets: Dict[str, Sheet] = field(default_factory=dict)
    source: Optional[Path] = None

    @property
    def sheet_names(self) -> List[str]:
        return list(self.sheets)

    def get(self, name: str) -> Optional[Sheet]:
        return self.sheets.get(name)

    def visible(self) -> "Workbook":
        """Return a workbook containing only the visible sheets."""

        kept = {name: sheet for name, sheet in self.sheets.items() if not sheet.hidden}
        return Workbook(sheets=kept, source=self.source)

    @classmethod
    def from_rows(cls, data: Mapping[str, Sequence[Sequence[CellValue]]]) -> "Workbook":
        """Build a workbook from ``sheet name -> rows`` literals."""

        sheets = {
            name: Sheet(name=name, rows=[list(row) for row in rows])
            for name, rows in data.items()
        }
        return cls(sheets=sheets)

    @classmethod
    def from_frames(
        cls,
        frames: Mapping[str, pd.DataFrame],
        *,
        include_header: bool = True,
    ) -> "Workbook":
        """Build a workbook from DataFrames; NaN cells become ``None``.

        Args:
            frames: Mapping of sheet name to DataFrame.
            include_header: When True the column labels become row 0.
        """

        sheets: Dict[str, Sheet] = {}
        for name, frame in frames.items():
            rows: List[List[CellValue]] = []
            if include_header:
                rows.append([str(col) for col in frame.columns])
            for record in frame.itertuples(index=False, name=None):
                rows.append([_from_pandas(value) for value in record])
            sheets[name] = Sheet(name=name, rows=rows)
        return cls(sheets=sheets)


def _from_pandas(value: object) -> CellValue:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item"):
        # numpy scalars
        return value.item()  # type: ignore[no-any-return]
    return value  # type: ignore[return-value]


def _trim_rows(rows: Iterable[Sequence[CellValue]]) -> List[List[CellValue]]:
    trimmed = [list(row) for row in rows]
    while trimmed and all(value is None for value in trimmed[-1]):
        trimmed.pop()
    return trimmed


def load_workbook(path: Path, *, include_hidden: bool = False) -> Workbook:
    """Load an xlsx workbook into memory.

    Args:
        path: Path to the workbook.
        include_hidden: Keep hidden sheets (flagged ``hidden=True``) instead of dropping them.

    Returns:
        Workbook holding cached cell values (formulas resolved to their last saved value).

    Raises:
        FileNotFoundError: When the workbook does not exist.
        ValueError: When openpyxl cannot parse the file.
    """

    if not path.exists():
        raise FileNotFoundError(f"Source workbook not found: {path}")

    logger.info("Reading workbook", extra={"path": str(path)})
    try:
        xlsx = _open_xlsx(path, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        logger.error("Failed to read workbook", extra={"error": str(exc)})
        raise ValueError(f"Unsupported workbook format: {path.name}") from exc

    sheets: Dict[str, Sheet] = {}
    skipped: List[str] = []
    try:
        for ws in xlsx.worksheets:
            hidden = ws.sheet_state != "visible"
            if hidden and not include_hidden:
                skipped.append(ws.title)
                continue
            rows = _trim_rows(ws.iter_rows(values_only=True))
            sheets[ws.title] = Sheet(name=ws.title, rows=rows, hidden=hidden)
    finally:
        xlsx.close()

    logger.info(
        "Workbook loaded",
        extra={"sheets": list(sheets), "hidden_skipped": skipped},
    )
    return Workbook(sheets=sheets, source=path)
