"""Field catalog and mapping model package."""

from .bindings import Mapping
from .models import CellPosition, DataType, Field, FieldBinding, FieldCatalog

__all__ = [
    "CellPosition",
    "DataType",
    "Field",
    "FieldBinding",
    "FieldCatalog",
    "Mapping",
]
