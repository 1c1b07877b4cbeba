"""Custom exceptions used across SheetMap."""


class SheetMapError(Exception):
    """Base error for the application."""


class ConfigError(SheetMapError):
    """Configuration related error."""


class CatalogError(ConfigError):
    """Raised when a field catalog is missing or malformed."""


class WizardError(SheetMapError):
    """Raised when a wizard step cannot be confirmed."""


class EmptySelectionError(WizardError):
    """Raised when a selection step is confirmed without any binding."""


class ExtractionPreconditionError(SheetMapError):
    """Raised when a mapping is not ready to be extracted."""


class NoBindingsError(ExtractionPreconditionError):
    """Raised when extraction is requested for an empty mapping."""


class MissingRequiredFieldsError(ExtractionPreconditionError):
    """Raised when required catalog fields have no binding."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Required fields are not mapped: {', '.join(self.missing)}")


class InvalidMappingError(SheetMapError):
    """Raised when a stored mapping breaks the one-binding-per-field/column rules."""


class UnknownFieldError(InvalidMappingError):
    """Raised when a stored mapping references a field absent from the catalog."""
