"""YAML-backed store for finished mappings."""

# Module responsibilities:
# - Persist named mappings in the detail-list form the configuration backend uses.
# - Validate documents on load so a corrupted file fails loudly instead of mis-mapping a workbook.

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Sequence

import yaml
from pydantic import ValidationError

from .schema import BindingEntry, BindingRecord, MappingDocument
from .utils.log import get_logger
from .utils.paths import ensure_default_structure

logger = get_logger("mapping_store")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class MappingStoreError(RuntimeError):
    """Raised when a stored mapping is missing or malformed."""


def _slug(name: str) -> str:
    slug = _UNSAFE_CHARS.sub("_", name.strip()).strip("._")
    if not slug:
        raise MappingStoreError(f"Invalid mapping name: {name!r}")
    return slug


class MappingStore:
    """Directory of ``<name>.yaml`` mapping documents."""

    suffix = ".yaml"

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = base_dir or ensure_default_structure()["mappings"]

    def path_for(self, name: str) -> Path:
        return self.base_dir / f"{_slug(name)}{self.suffix}"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def list(self) -> List[str]:
        if not self.base_dir.exists():
            return []
        return sorted(p.stem for p in self.base_dir.glob(f"*{self.suffix}"))

    def save(
        self,
        name: str,
        catalog: str,
        records: Sequence[BindingRecord],
        *,
        template_file_name: Optional[str] = None,
        has_header: Optional[bool] = None,
        overwrite: bool = True,
    ) -> Path:
        """Write a mapping document and return its path.

        Raises:
            MappingStoreError: When the document exists and ``overwrite`` is False,
                or when a record fails validation.
        """

        path = self.path_for(name)
        if path.exists() and not overwrite:
            raise MappingStoreError(f"Mapping '{name}' already exists: {path}")

        try:
            document = MappingDocument(
                config_name=name,
                catalog=catalog,
                template_file_name=template_file_name,
                has_header=has_header,
                details=[BindingEntry.model_validate(dict(record)) for record in records],
            )
        except ValidationError as exc:
            raise MappingStoreError(f"Invalid mapping '{name}': {exc}") from exc

        payload = document.model_dump(by_alias=True, exclude_none=True)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            yaml.safe_dump(payload, fh, allow_unicode=True, sort_keys=False)
        logger.info(
            "Mapping saved",
            extra={"mapping": name, "path": str(path), "details": len(document.details)},
        )
        return path

    def load(self, name: str) -> MappingDocument:
        """Read and validate a stored mapping document."""

        path = self.path_for(name)
        if not path.exists():
            raise MappingStoreError(f"Mapping '{name}' not found in {self.base_dir}")
        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh)
        if not isinstance(payload, dict):
            raise MappingStoreError(f"Invalid mapping YAML structure in {path} (expected mapping)")
        try:
            document = MappingDocument.model_validate(payload)
        except ValidationError as exc:
            raise MappingStoreError(f"Invalid mapping document {path}: {exc}") from exc
        logger.info("Mapping loaded", extra={"mapping": name, "details": len(document.details)})
        return document

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Mapping deleted", extra={"mapping": name})
        return True
