"""Mapping wizard service package."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from sheetmap.core.errors import InvalidMappingError, UnknownFieldError
from sheetmap.services.mapping.models import FieldBinding, FieldCatalog
from sheetmap_io.workbook import Workbook

from .session import WizardSession
from .states import (
    Configure,
    ReadyForExtraction,
    SelectDataStart,
    SelectHeaders,
    SelectMode,
    SetRowStart,
    StaleStepError,
    WizardStep,
)


def start_wizard(workbook: Workbook, catalog: FieldCatalog) -> SelectMode:
    """Open a wizard over the visible sheets of ``workbook``."""

    return SelectMode(WizardSession(workbook=workbook.visible(), catalog=catalog))


def resume_wizard(
    workbook: Workbook,
    catalog: FieldCatalog,
    bindings: Iterable[FieldBinding],
    *,
    has_header: Optional[bool] = None,
) -> Configure:
    """Reopen a saved mapping in the configure step, skipping cell selection.

    ``workbook`` is the template the mapping was built on; it backs samples
    and previews. Bindings are copied, so edits never touch the caller's
    mapping.

    Raises:
        UnknownFieldError: When a binding targets a field outside ``catalog``.
        InvalidMappingError: When two bindings share a field or a column.
    """

    session = WizardSession(workbook=workbook.visible(), catalog=catalog, has_header=has_header)
    for binding in bindings:
        if binding.field_name not in catalog:
            raise UnknownFieldError(f"Field '{binding.field_name}' is not part of catalog '{catalog.key}'")
        if not session.mapping.add(replace(binding)):
            raise InvalidMappingError(
                f"Binding for '{binding.field_name}' at {binding.position} conflicts with the mapping"
            )
    return Configure(session)


__all__ = [
    "WizardSession",
    "WizardStep",
    "SelectMode",
    "SelectHeaders",
    "SelectDataStart",
    "SetRowStart",
    "Configure",
    "ReadyForExtraction",
    "StaleStepError",
    "resume_wizard",
    "start_wizard",
]
