"""Configuration helpers for SheetMap field catalogs.

Catalogs are YAML files named ``<key>.yaml`` (one per document family) in the
bundled ``catalogs`` directory or in ``SHEETMAP_CATALOG_DIR``. Each file is
validated before it becomes an immutable :class:`FieldCatalog`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field as PydanticField, ValidationError, field_validator

from sheetmap.core.errors import CatalogError, ConfigError
from sheetmap.core.settings import get_settings
from sheetmap.services.mapping.models import DataType, Field, FieldCatalog


class CatalogFieldEntry(BaseModel):
    """One field as written in a catalog file."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    field_name: str = PydanticField(alias="fieldName", min_length=1)
    display_label: str = PydanticField(default="", alias="displayLabel")
    type: DataType = DataType.STRING
    is_required: bool = PydanticField(default=False, alias="isRequired")

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> DataType:
        return DataType.parse(value)

    def to_field(self) -> Field:
        return Field(
            field_name=self.field_name,
            display_label=self.display_label or self.field_name,
            type=self.type,
            is_required=self.is_required,
        )


class CatalogFile(BaseModel):
    """Complete catalog file model."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    label: Optional[str] = None
    entries: List[CatalogFieldEntry] = PydanticField(default_factory=list, alias="fields")


def _catalog_dir(catalog_dir: Optional[Path]) -> Path:
    return catalog_dir or get_settings().catalog_dir


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Catalog file must contain a mapping: {path}")
    return data


def list_catalogs(catalog_dir: Optional[Path] = None) -> List[str]:
    """Keys of every catalog available in ``catalog_dir``."""

    directory = _catalog_dir(catalog_dir)
    if not directory.is_dir():
        return []
    return sorted(path.stem for path in directory.glob("*.yaml"))


def build_catalog(entries: List[Dict[str, Any]], key: str = "custom") -> FieldCatalog:
    """Validate raw field dicts and build a catalog."""

    try:
        parsed = CatalogFile.model_validate({"fields": entries})
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog '{key}': {exc}") from exc
    return FieldCatalog((entry.to_field() for entry in parsed.entries), key=key)


def load_catalog(key: str, catalog_dir: Optional[Path] = None) -> FieldCatalog:
    """Load the catalog ``key`` from ``catalog_dir`` (defaults to the configured directory)."""

    path = _catalog_dir(catalog_dir) / f"{key}.yaml"
    raw = _load_yaml(path)
    try:
        parsed = CatalogFile.model_validate(raw)
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog file {path}: {exc}") from exc
    if not parsed.entries:
        raise CatalogError(f"Catalog '{key}' defines no fields")
    return FieldCatalog((entry.to_field() for entry in parsed.entries), key=key)


__all__ = [
    "CatalogFieldEntry",
    "CatalogFile",
    "build_catalog",
    "list_catalogs",
    "load_catalog",
]
