"""Extraction service package."""

from .coercion import CoercionResult, coerce, is_empty_value, is_missing_value
from .engine import ensure_extractable, extract, missing_required_fields
from .models import CellError, ExtractionResult

__all__ = [
    "CoercionResult",
    "coerce",
    "is_empty_value",
    "is_missing_value",
    "CellError",
    "ExtractionResult",
    "extract",
    "ensure_extractable",
    "missing_required_fields",
]
