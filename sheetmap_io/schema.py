"""Serialized forms shared with the external configuration store."""

# Module responsibilities:
# - Describe one stored mapping detail exactly as the configuration backend exchanges it.
# - Validate stored mapping documents with pydantic (camelCase on disk, snake_case in code).

from __future__ import annotations

from typing import List, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field


class BindingRecord(TypedDict):
    """One mapping detail: a field bound to a data start cell."""

    fieldName: str
    displayName: str
    columnPosition: int
    rowPosition: int
    sheetName: str
    dataType: int
    isRequired: bool


class BindingEntry(BaseModel):
    """Validated stored form of :class:`BindingRecord`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field_name: str = Field(alias="fieldName", min_length=1)
    display_name: str = Field(default="", alias="displayName")
    column_position: int = Field(alias="columnPosition", ge=0)
    row_position: int = Field(alias="rowPosition", ge=0)
    sheet_name: str = Field(alias="sheetName", min_length=1)
    data_type: int = Field(default=0, alias="dataType", ge=0, le=4)
    is_required: bool = Field(default=False, alias="isRequired")

    def to_record(self) -> BindingRecord:
        return BindingRecord(
            fieldName=self.field_name,
            displayName=self.display_name,
            columnPosition=self.column_position,
            rowPosition=self.row_position,
            sheetName=self.sheet_name,
            dataType=self.data_type,
            isRequired=self.is_required,
        )


class MappingDocument(BaseModel):
    """A named mapping together with the catalog it targets."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    config_name: str = Field(alias="configName", min_length=1)
    catalog: str = Field(min_length=1)
    template_file_name: Optional[str] = Field(default=None, alias="templateFileName")
    has_header: Optional[bool] = Field(default=None, alias="hasHeader")
    details: List[BindingEntry] = Field(default_factory=list)
