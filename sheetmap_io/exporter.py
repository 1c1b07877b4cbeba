"""Excel exporter for extracted records."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from openpyxl import Workbook

from .utils.log import get_logger

logger = get_logger("exporter")

_ERROR_COLUMNS = ("sheet", "cell", "field", "message")


def export_records(
    records: Sequence[Mapping[str, Any]],
    out_path: Path,
    *,
    columns: Optional[Sequence[str]] = None,
    errors: Sequence[Mapping[str, Any]] = (),
) -> Path:
    """Write extracted records (and optional cell errors) into a new workbook.

    Args:
        records: Ordered records keyed by field name.
        out_path: Destination ``.xlsx`` path.
        columns: Column order; defaults to the key order of the first record.
        errors: Rows for the ``Errors`` sheet keyed by ``sheet``/``cell``/``field``/``message``.

    Returns:
        The written path.
    """

    if columns is not None:
        headers = list(columns)
    elif records:
        headers = list(records[0].keys())
    else:
        headers = []

    wb = Workbook()
    ws = wb.active
    ws.title = "Records"
    ws.append(headers)
    for record in records:
        ws.append([record.get(col) for col in headers])

    if errors:
        err_ws = wb.create_sheet("Errors")
        err_ws.append(list(_ERROR_COLUMNS))
        for item in errors:
            err_ws.append([item.get(col) for col in _ERROR_COLUMNS])

    out_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(out_path)
    logger.info(
        "Records exported",
        extra={"output": str(out_path), "rows": len(records), "errors": len(errors)},
    )
    return out_path
