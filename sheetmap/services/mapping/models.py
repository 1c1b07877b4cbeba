"""Data models shared by the mapping wizard and the extraction engine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Collection, Dict, Iterable, Iterator, Optional, Tuple

from openpyxl.utils import get_column_letter

from sheetmap.core.errors import CatalogError


class DataType(IntEnum):
    """Declared type of a catalog field; values match the configuration backend codes."""

    STRING = 0
    NUMBER = 1
    DATE = 2
    BOOLEAN = 3
    DECIMAL = 4

    @classmethod
    def parse(cls, value: object) -> "DataType":
        """Accept a member, its integer code or its (case-insensitive) name."""

        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Unknown data type: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            text = value.strip().upper()
            if text.isdigit():
                return cls(int(text))
            try:
                return cls[text]
            except KeyError:
                raise ValueError(f"Unknown data type: {value!r}") from None
        raise ValueError(f"Unknown data type: {value!r}")


@dataclass(frozen=True, slots=True)
class Field:
    """One logical field an operator maps a spreadsheet column to."""

    field_name: str
    display_label: str
    type: DataType = DataType.STRING
    is_required: bool = False


class FieldCatalog:
    """Ordered, immutable list of fields for one document family."""

    def __init__(self, fields: Iterable[Field], key: str = "custom") -> None:
        self.key = key
        self._fields: Tuple[Field, ...] = tuple(fields)
        self._by_name: Dict[str, Field] = {}
        for item in self._fields:
            if item.field_name in self._by_name:
                raise CatalogError(f"Duplicate field '{item.field_name}' in catalog '{key}'")
            self._by_name[item.field_name] = item

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __getitem__(self, index: int) -> Field:
        return self._fields[index]

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._by_name

    def __repr__(self) -> str:
        return f"FieldCatalog(key={self.key!r}, fields={len(self._fields)})"

    def get(self, field_name: str) -> Optional[Field]:
        return self._by_name.get(field_name)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(item.field_name for item in self._fields)

    @property
    def required(self) -> Tuple[Field, ...]:
        return tuple(item for item in self._fields if item.is_required)

    def next_unmapped(self, bound: Collection[str]) -> Optional[Field]:
        """Return the first field, in catalog order, whose name is not in ``bound``."""

        for item in self._fields:
            if item.field_name not in bound:
                return item
        return None


@dataclass(frozen=True, slots=True)
class CellPosition:
    """Zero-based address of one cell."""

    sheet: str
    column: int
    row: int

    def __post_init__(self) -> None:
        if self.column < 0 or self.row < 0:
            raise ValueError(f"Cell indices must be non-negative: {self.column}, {self.row}")

    @property
    def column_letter(self) -> str:
        return get_column_letter(self.column + 1)

    @property
    def address(self) -> str:
        return f"{self.column_letter}{self.row + 1}"

    def with_row(self, row: int) -> "CellPosition":
        return replace(self, row=row)

    def offset(self, rows: int) -> "CellPosition":
        return replace(self, row=self.row + rows)

    def __str__(self) -> str:
        return f"{self.sheet}!{self.address}"


@dataclass(slots=True)
class FieldBinding:
    """Association of a catalog field with the first data cell of a column.

    ``anchor`` is the cell the operator clicked (the header cell in header mode,
    the data start cell otherwise); ``display_label`` holds the header text.
    """

    field_name: str
    position: CellPosition
    display_label: Optional[str] = None
    anchor: Optional[CellPosition] = None

    @property
    def sheet(self) -> str:
        return self.position.sheet

    @property
    def column(self) -> int:
        return self.position.column

    @property
    def start_row(self) -> int:
        return self.position.row
