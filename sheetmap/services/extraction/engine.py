"""Extraction of typed records from a workbook following a mapping."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from sheetmap.core.errors import MissingRequiredFieldsError, NoBindingsError
from sheetmap.services.mapping.models import DataType, FieldBinding, FieldCatalog
from sheetmap_io.columns import read_column
from sheetmap_io.workbook import CellValue, Workbook

from .coercion import coerce, is_empty_value
from .models import CellError, ExtractionResult, Record

LOGGER = logging.getLogger(__name__)


def missing_required_fields(
    bindings: Iterable[FieldBinding],
    catalog: FieldCatalog,
) -> List[str]:
    """Names of required catalog fields without a binding, in catalog order."""

    bound = {binding.field_name for binding in bindings}
    return [item.field_name for item in catalog.required if item.field_name not in bound]


def ensure_extractable(bindings: Sequence[FieldBinding], catalog: FieldCatalog) -> None:
    """Pre-extraction check: at least one binding and every required field bound.

    Raises:
        NoBindingsError: When the mapping is empty.
        MissingRequiredFieldsError: When required fields are unmapped.
    """

    if len(bindings) == 0:
        raise NoBindingsError("Mapping has no bindings")
    missing = missing_required_fields(bindings, catalog)
    if missing:
        raise MissingRequiredFieldsError(missing)


def extract(
    workbook: Workbook,
    bindings: Sequence[FieldBinding],
    catalog: FieldCatalog,
) -> ExtractionResult:
    """Walk the mapped columns in lockstep and coerce every cell.

    Each binding is read from its own start row, so row offset ``n`` addresses
    ``start_row + n`` of every column. Extraction stops before the first offset
    at which every mapped raw value is empty. Coercion failures never stop the
    walk: the failed cell keeps the error message as its value and a
    :class:`CellError` is recorded.
    """

    bindings = list(bindings)
    columns: List[List[CellValue]] = [
        read_column(workbook, b.sheet, b.column, b.start_row) for b in bindings
    ]
    types: List[DataType] = []
    for binding in bindings:
        field = catalog.get(binding.field_name)
        types.append(field.type if field is not None else DataType.STRING)

    max_rows = max((len(values) for values in columns), default=0)
    result = ExtractionResult(columns=[b.field_name for b in bindings])

    for offset in range(max_rows):
        record: Record = {}
        row_errors: List[CellError] = []
        all_empty = True

        for idx, binding in enumerate(bindings):
            values = columns[idx]
            raw = values[offset] if offset < len(values) else None
            outcome = coerce(raw, types[idx])
            if outcome.success:
                record[binding.field_name] = outcome.value
            else:
                message = outcome.error or ""
                record[binding.field_name] = message
                row_errors.append(
                    CellError(
                        position=binding.position.offset(offset),
                        field_index=idx,
                        message=message,
                        field_name=binding.field_name,
                    )
                )
            if not is_empty_value(raw):
                all_empty = False

        if all_empty:
            break
        result.records.append(record)
        result.errors.extend(row_errors)

    LOGGER.info(
        "Extracted %s records from %s bindings (%s cell errors)",
        len(result.records),
        len(bindings),
        len(result.errors),
    )
    return result
