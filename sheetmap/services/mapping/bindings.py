"""Ordered field bindings with a bidirectional index."""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from sheetmap.core.errors import InvalidMappingError, UnknownFieldError
from sheetmap_io.schema import BindingRecord

from .models import CellPosition, FieldBinding, FieldCatalog

LOGGER = logging.getLogger(__name__)

ColumnKey = Tuple[str, int]


class Mapping:
    """Ordered bindings indexed by field name, by column and by clicked cell.

    Every mutation validates first and then updates the list and all three
    indexes together, so no two bindings can ever share a field or a column.
    Mutators that would break a rule return False and leave the mapping as is.
    """

    def __init__(
        self,
        bindings: Iterable[FieldBinding] = (),
        *,
        capacity: Optional[int] = None,
    ) -> None:
        self.capacity = capacity
        self._bindings: List[FieldBinding] = []
        self._by_field: Dict[str, FieldBinding] = {}
        self._by_column: Dict[ColumnKey, FieldBinding] = {}
        self._by_anchor: Dict[CellPosition, FieldBinding] = {}
        for binding in bindings:
            if not self.add(binding):
                raise InvalidMappingError(
                    f"Binding for '{binding.field_name}' at {binding.position} conflicts with the mapping"
                )

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[FieldBinding]:
        return iter(tuple(self._bindings))

    def __getitem__(self, index: int) -> FieldBinding:
        return self._bindings[index]

    def __repr__(self) -> str:
        return f"Mapping({[b.field_name for b in self._bindings]!r})"

    @property
    def bindings(self) -> Tuple[FieldBinding, ...]:
        return tuple(self._bindings)

    @property
    def field_names(self) -> FrozenSet[str]:
        return frozenset(self._by_field)

    @property
    def is_full(self) -> bool:
        return self.capacity is not None and len(self._bindings) >= self.capacity

    @property
    def sheets_configured(self) -> FrozenSet[str]:
        """Distinct sheet names referenced by the current bindings."""

        return frozenset(binding.sheet for binding in self._bindings)

    @property
    def selected_cells(self) -> FrozenSet[CellPosition]:
        """Cells the operator clicked to create the current bindings."""

        return frozenset(self._by_anchor)

    def binding_for_field(self, field_name: str) -> Optional[FieldBinding]:
        return self._by_field.get(field_name)

    def binding_for_column(self, sheet: str, column: int) -> Optional[FieldBinding]:
        return self._by_column.get((sheet, column))

    def binding_at(self, anchor: CellPosition) -> Optional[FieldBinding]:
        return self._by_anchor.get(anchor)

    def index_of(self, binding: FieldBinding) -> int:
        for idx, item in enumerate(self._bindings):
            if item is binding:
                return idx
        raise ValueError(f"Binding for '{binding.field_name}' is not part of this mapping")

    def can_add(self, binding: FieldBinding) -> bool:
        if self.is_full:
            return False
        if binding.field_name in self._by_field:
            return False
        if (binding.sheet, binding.column) in self._by_column:
            return False
        if binding.anchor is not None and binding.anchor in self._by_anchor:
            return False
        return True

    def add(self, binding: FieldBinding) -> bool:
        """Append ``binding``; returns False when capacity, field or column is taken."""

        if not self.can_add(binding):
            LOGGER.debug("Rejected binding %s at %s", binding.field_name, binding.position)
            return False
        self._bindings.append(binding)
        self._by_field[binding.field_name] = binding
        self._by_column[(binding.sheet, binding.column)] = binding
        if binding.anchor is not None:
            self._by_anchor[binding.anchor] = binding
        return True

    def remove_at(self, index: int) -> FieldBinding:
        binding = self._bindings.pop(index)
        del self._by_field[binding.field_name]
        del self._by_column[(binding.sheet, binding.column)]
        if binding.anchor is not None:
            self._by_anchor.pop(binding.anchor, None)
        return binding

    def remove_anchor(self, anchor: CellPosition) -> Optional[FieldBinding]:
        binding = self._by_anchor.get(anchor)
        if binding is None:
            return None
        return self.remove_at(self.index_of(binding))

    def reassign(self, index: int, field_name: str) -> bool:
        """Point binding ``index`` at ``field_name``, releasing its previous field.

        Returns False (no change) when another binding already holds ``field_name``.
        """

        binding = self._bindings[index]
        if binding.field_name == field_name:
            return True
        if field_name in self._by_field:
            return False
        del self._by_field[binding.field_name]
        binding.field_name = field_name
        self._by_field[field_name] = binding
        return True

    def set_start_row(self, index: int, row: int) -> None:
        if row < 0:
            raise ValueError(f"Start row must be non-negative: {row}")
        binding = self._bindings[index]
        binding.position = binding.position.with_row(row)

    def set_all_start_rows(self, row: int) -> None:
        if row < 0:
            raise ValueError(f"Start row must be non-negative: {row}")
        for binding in self._bindings:
            binding.position = binding.position.with_row(row)

    def rename(self, index: int, label: Optional[str]) -> None:
        self._bindings[index].display_label = label

    def clear(self) -> None:
        self._bindings.clear()
        self._by_field.clear()
        self._by_column.clear()
        self._by_anchor.clear()

    def to_records(self, catalog: FieldCatalog) -> List[BindingRecord]:
        """Serialize into the detail-list form used by the configuration store."""

        records: List[BindingRecord] = []
        for binding in self._bindings:
            field = catalog.get(binding.field_name)
            if field is None:
                raise UnknownFieldError(
                    f"Field '{binding.field_name}' is not part of catalog '{catalog.key}'"
                )
            records.append(
                BindingRecord(
                    fieldName=field.field_name,
                    displayName=binding.display_label or field.display_label,
                    columnPosition=binding.column,
                    rowPosition=binding.start_row,
                    sheetName=binding.sheet,
                    dataType=int(field.type),
                    isRequired=field.is_required,
                )
            )
        return records

    @classmethod
    def from_records(
        cls,
        records: Sequence[BindingRecord],
        catalog: FieldCatalog,
    ) -> "Mapping":
        """Rebuild a mapping from stored details; types always come from ``catalog``."""

        bindings: List[FieldBinding] = []
        for record in records:
            name = record["fieldName"]
            if name not in catalog:
                raise UnknownFieldError(f"Field '{name}' is not part of catalog '{catalog.key}'")
            bindings.append(
                FieldBinding(
                    field_name=name,
                    position=CellPosition(
                        sheet=record["sheetName"],
                        column=record["columnPosition"],
                        row=record["rowPosition"],
                    ),
                    display_label=record.get("displayName") or None,
                )
            )
        return cls(bindings, capacity=len(catalog))
