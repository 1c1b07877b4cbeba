"""Conversion of raw spreadsheet values into typed field values."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional

import pandas as pd
from openpyxl.utils.datetime import from_excel

from sheetmap.services.mapping.models import DataType

_DMY_PATTERN = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")


@dataclass(frozen=True, slots=True)
class CoercionResult:
    """Outcome of :func:`coerce`; ``error`` is set only when ``success`` is False."""

    success: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> "CoercionResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, message: str) -> "CoercionResult":
        return cls(success=False, error=message)


def is_missing_value(value: object) -> bool:
    """True for ``None``, NaN and the empty string; whitespace is a value."""

    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def is_empty_value(value: object) -> bool:
    """True for ``None``, NaN and blank strings; used to detect the end of data."""

    if isinstance(value, str):
        return value.strip() == ""
    return is_missing_value(value)


def stringify(value: object) -> str:
    """Render a raw cell value the way it reads in the sheet."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _to_number(value: object) -> Optional[float | int]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, str):
        text = value.strip()
        if "_" in text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def _to_boolean(value: object) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return value == 1
    if value in ("1", "true"):
        return True
    if value in ("0", "false"):
        return False
    return None


def _serial_date(value: object) -> Optional[datetime]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    if value <= 0:
        return None
    try:
        return from_excel(int(value))
    except (OverflowError, ValueError):
        return None


def _day_month_year(value: object) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    match = _DMY_PATTERN.match(value.strip())
    if match is None:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def _generic_date(value: object) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = pd.to_datetime(value.strip(), errors="coerce")
    except (ValueError, OverflowError, TypeError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def _to_date(value: object) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    for resolver in (_serial_date, _day_month_year, _generic_date):
        resolved = resolver(value)
        if resolved is not None:
            return resolved
    return None


def to_iso_instant(moment: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ``; naive values are taken as UTC."""

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec="milliseconds") + "Z"


def coerce(value: object, data_type: DataType) -> CoercionResult:
    """Convert a raw cell value to ``data_type``.

    Missing input (``None``, NaN, ``""``) always succeeds with ``None``; a
    whitespace-only string is a value like any other. Failures carry a message naming
    the offending value; no exception escapes this function.
    """

    if is_missing_value(value):
        return CoercionResult.ok(None)

    try:
        if data_type in (DataType.NUMBER, DataType.DECIMAL):
            number = _to_number(value)
            if number is None:
                return CoercionResult.fail(f'"{stringify(value)}" is not a number')
            return CoercionResult.ok(number)

        if data_type == DataType.BOOLEAN:
            flag = _to_boolean(value)
            if flag is None:
                return CoercionResult.fail(f'"{stringify(value)}" is not a boolean')
            return CoercionResult.ok(flag)

        if data_type == DataType.DATE:
            moment = _to_date(value)
            if moment is None:
                return CoercionResult.fail(f'"{stringify(value)}" is not a valid date')
            return CoercionResult.ok(to_iso_instant(moment))

        return CoercionResult.ok(stringify(value))
    except Exception as exc:  # noqa: BLE001 - coercion reports, never raises
        return CoercionResult.fail(str(exc))
