"""Filesystem helpers for the standard SheetMap workspace structure."""

# Module responsibilities:
# - Define the default ~/SheetMap directory layout and create folders on demand.
# - Offer small helpers to resolve output paths without overwriting source workbooks.

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

DEFAULT_BASE = Path.home() / "SheetMap"
HOME_ENV_VAR = "SHEETMAP_HOME"


def resolve_base(base: Optional[Path] = None) -> Path:
    """Return the workspace base, honouring ``SHEETMAP_HOME`` when set."""

    if base is not None:
        return base
    env_value = os.getenv(HOME_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_BASE


def ensure_default_structure(base: Optional[Path] = None) -> Dict[str, Path]:
    """Ensure the default SheetMap directory structure exists.

    Args:
        base: Optional override for the SheetMap base directory.

    Returns:
        Mapping with keys ``base``, ``mappings``, ``out``, ``logs``.
    """

    target_base = resolve_base(base)
    paths = {
        "base": target_base,
        "mappings": target_base / "mappings",
        "out": target_base / "out",
        "logs": target_base / "logs",
    }
    for path in paths.values():
        path.mkdir(parents=True, exist_ok=True)
    return paths


def prepare_output_path(filename: str, base: Optional[Path] = None) -> Path:
    """Prepare an output path inside the SheetMap out directory."""

    paths = ensure_default_structure(base)
    return paths["out"] / filename
