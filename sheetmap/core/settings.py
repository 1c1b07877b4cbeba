"""Runtime settings resolved from the environment and an optional ``.env`` file."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

from sheetmap_io.utils.paths import resolve_base

load_dotenv(override=False)

BUNDLED_CATALOG_DIR = Path(__file__).resolve().parent.parent / "config" / "catalogs"


class Settings(BaseModel):
    """Application settings."""

    home: Path
    catalog_dir: Path = BUNDLED_CATALOG_DIR
    mapping_dir: Path
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Build settings from the current environment.

    ``SHEETMAP_HOME`` moves the whole workspace; ``SHEETMAP_CATALOG_DIR`` and
    ``SHEETMAP_MAPPING_DIR`` override single locations.
    """

    home = resolve_base()
    catalog_env = os.getenv("SHEETMAP_CATALOG_DIR")
    mapping_env = os.getenv("SHEETMAP_MAPPING_DIR")
    return Settings(
        home=home,
        catalog_dir=Path(catalog_env).expanduser() if catalog_env else BUNDLED_CATALOG_DIR,
        mapping_dir=Path(mapping_env).expanduser() if mapping_env else home / "mappings",
        log_level=os.getenv("SHEETMAP_LOG_LEVEL", "INFO"),
    )
