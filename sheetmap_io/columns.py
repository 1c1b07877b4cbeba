"""Column readers over in-memory workbooks."""

# Module responsibilities:
# - Yield the raw values of one column from a start row down to the end of the sheet.
# - Treat unknown sheets and ragged rows as absent data instead of failing.

from __future__ import annotations

from typing import Iterator, List

from .workbook import CellValue, Workbook


def iter_column(
    workbook: Workbook,
    sheet_name: str,
    column: int,
    start_row: int,
) -> Iterator[CellValue]:
    """Lazily yield raw values of ``column`` from ``start_row`` onward.

    Unknown sheets yield nothing; cells beyond a row's populated extent yield ``None``.
    """

    sheet = workbook.get(sheet_name)
    if sheet is None:
        return
    for row_idx in range(max(start_row, 0), sheet.n_rows):
        yield sheet.cell(row_idx, column)


def read_column(
    workbook: Workbook,
    sheet_name: str,
    column: int,
    start_row: int,
) -> List[CellValue]:
    """Return a fresh list of the raw values read by :func:`iter_column`."""

    return list(iter_column(workbook, sheet_name, column, start_row))
