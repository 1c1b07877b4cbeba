"""Mapping wizard steps.

Each step is its own class and exposes only the actions allowed in that
step; a transition returns the next step and retires the current one, so a
stale step object cannot be used to mutate the mapping later::

    select_mode -> select_headers -> set_row_start -> configure -> ready_for_extraction
                \\-> select_data_start -------------/
    configure --reset--> select_mode
"""

from __future__ import annotations

import logging
from itertools import islice
from typing import ClassVar, List, Optional, Tuple, Union

from sheetmap.core.errors import EmptySelectionError, WizardError
from sheetmap.services.extraction.engine import (
    ensure_extractable,
    extract,
    missing_required_fields,
)
from sheetmap.services.extraction.models import ExtractionResult
from sheetmap.services.mapping.bindings import Mapping
from sheetmap.services.mapping.models import CellPosition, Field, FieldBinding
from sheetmap_io.columns import iter_column
from sheetmap_io.schema import BindingRecord
from sheetmap_io.workbook import CellValue, Workbook

from .session import WizardSession

LOGGER = logging.getLogger(__name__)


class StaleStepError(WizardError):
    """Raised when a step is used after the wizard already moved past it."""


class WizardStep:
    """Base class holding the shared session."""

    name: ClassVar[str] = ""

    def __init__(self, session: WizardSession) -> None:
        self._session = session
        self._active = True

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} bindings={len(self._session.mapping)}>"

    @property
    def session(self) -> WizardSession:
        return self._session

    @property
    def mapping(self) -> Mapping:
        return self._session.mapping

    @property
    def bindings(self) -> Tuple[FieldBinding, ...]:
        return self._session.mapping.bindings

    def _check_active(self) -> None:
        if not self._active:
            raise StaleStepError(f"Step '{self.name}' is no longer current")

    def _advance(self, next_step: "WizardStep") -> "WizardStep":
        self._check_active()
        self._active = False
        LOGGER.debug("Wizard step %s -> %s", self.name, next_step.name)
        return next_step


class SelectMode(WizardStep):
    """Operator declares whether the source sheet has a header row."""

    name = "select_mode"

    def choose(self, has_header: bool) -> Union["SelectHeaders", "SelectDataStart"]:
        self._check_active()
        self._session.has_header = has_header
        if has_header:
            return self._advance(SelectHeaders(self._session))  # type: ignore[return-value]
        return self._advance(SelectDataStart(self._session))  # type: ignore[return-value]


class _CellSelectionStep(WizardStep):
    """Click-to-toggle selection shared by both selection modes."""

    empty_message: ClassVar[str] = "Select at least one cell"

    def toggle(self, sheet: str, row: int, column: int) -> bool:
        """Select or unselect one cell; returns True when the mapping changed.

        Selecting binds the next unmapped catalog field. Nothing happens when the
        catalog is fully bound or the column already has a binding.
        """

        self._check_active()
        anchor = CellPosition(sheet=sheet, column=column, row=row)
        if self.mapping.binding_at(anchor) is not None:
            removed = self.mapping.remove_anchor(anchor)
            LOGGER.debug("Unselected %s (%s)", anchor, removed.field_name if removed else None)
            return True

        target = self._session.catalog.next_unmapped(self.mapping.field_names)
        if target is None or self.mapping.is_full:
            LOGGER.debug("Catalog fully mapped, ignoring %s", anchor)
            return False
        added = self.mapping.add(self._build_binding(anchor, target))
        if added:
            LOGGER.debug("Selected %s for field %s", anchor, target.field_name)
        return added

    def is_selected(self, sheet: str, row: int, column: int) -> bool:
        return self.mapping.binding_at(CellPosition(sheet=sheet, column=column, row=row)) is not None

    def _build_binding(self, anchor: CellPosition, target: Field) -> FieldBinding:
        raise NotImplementedError

    def _require_selection(self) -> None:
        self._check_active()
        if len(self.mapping) == 0:
            raise EmptySelectionError(self.empty_message)


class SelectHeaders(_CellSelectionStep):
    """Header mode: each clicked header cell binds the column below it."""

    name = "select_headers"
    empty_message = "Select at least one header cell"

    def _build_binding(self, anchor: CellPosition, target: Field) -> FieldBinding:
        return FieldBinding(
            field_name=target.field_name,
            position=anchor.offset(1),
            display_label=self._session.header_text(anchor),
            anchor=anchor,
        )

    def confirm(self) -> "SetRowStart":
        self._require_selection()
        return self._advance(SetRowStart(self._session))  # type: ignore[return-value]


class SelectDataStart(_CellSelectionStep):
    """Headerless mode: each clicked cell is the first data cell of its column."""

    name = "select_data_start"
    empty_message = "Select at least one cell to start reading data from"

    def _build_binding(self, anchor: CellPosition, target: Field) -> FieldBinding:
        return FieldBinding(field_name=target.field_name, position=anchor, anchor=anchor)

    def confirm(self) -> "Configure":
        self._require_selection()
        return self._advance(Configure(self._session))  # type: ignore[return-value]


class SetRowStart(WizardStep):
    """Optional common data start row for every binding."""

    name = "set_row_start"

    def apply(self, start_row: Optional[int] = None) -> "Configure":
        self._check_active()
        if start_row is not None:
            self.mapping.set_all_start_rows(start_row)
        return self._advance(Configure(self._session))  # type: ignore[return-value]


class Configure(WizardStep):
    """Review and edit bindings, preview the extraction, reset or finish."""

    name = "configure"

    def reassign(self, index: int, field_name: str) -> bool:
        """Bind entry ``index`` to ``field_name``; False if unknown or bound elsewhere."""

        self._check_active()
        if field_name not in self._session.catalog:
            return False
        return self.mapping.reassign(index, field_name)

    def set_start_row(self, index: int, row: int) -> None:
        self._check_active()
        self.mapping.set_start_row(index, row)

    def rename(self, index: int, label: Optional[str]) -> None:
        self._check_active()
        self.mapping.rename(index, label)

    def remove(self, index: int) -> FieldBinding:
        """Drop entry ``index``, releasing its field and column."""

        self._check_active()
        return self.mapping.remove_at(index)

    def available_fields(self, index: int) -> List[Field]:
        """Fields entry ``index`` may be reassigned to, in catalog order."""

        self._check_active()
        current = self.mapping[index].field_name
        taken = self.mapping.field_names - {current}
        return [item for item in self._session.catalog if item.field_name not in taken]

    def sample(self, index: int, limit: int = 5) -> List[CellValue]:
        """First ``limit`` raw values of entry ``index`` from its start row."""

        self._check_active()
        binding = self.mapping[index]
        values = iter_column(self._session.workbook, binding.sheet, binding.column, binding.start_row)
        return list(islice(values, limit))

    def missing_required(self) -> List[str]:
        self._check_active()
        return missing_required_fields(self.bindings, self._session.catalog)

    def preview(self) -> ExtractionResult:
        """Run the extraction without leaving this step; errors are kept for highlighting."""

        self._check_active()
        result = extract(self._session.workbook, self.bindings, self._session.catalog)
        self._session.cell_errors = list(result.errors)
        return result

    def reset(self) -> SelectMode:
        """Discard every binding and start over."""

        self._check_active()
        self._session.reset()
        return self._advance(SelectMode(self._session))  # type: ignore[return-value]

    def finish(self) -> "ReadyForExtraction":
        """Freeze the mapping once it is non-empty and covers every required field."""

        self._check_active()
        ensure_extractable(self.bindings, self._session.catalog)
        return self._advance(ReadyForExtraction(self._session))  # type: ignore[return-value]


class ReadyForExtraction(WizardStep):
    """Terminal step: the mapping is final and can be run against workbooks."""

    name = "ready_for_extraction"

    def extract(self, workbook: Optional[Workbook] = None) -> ExtractionResult:
        return extract(workbook or self._session.workbook, self.bindings, self._session.catalog)

    def records(self) -> List[BindingRecord]:
        return self.mapping.to_records(self._session.catalog)
