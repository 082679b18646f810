"""
Header model: the validated, role-annotated CSV header row.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ColumnRole(str, Enum):
    """Role a CSV column plays when rows become points."""

    TIMESTAMP = "timestamp"
    TAG = "tag"
    FIELD = "field"


class Column(BaseModel):
    """A single header column and its role."""

    name: str
    role: ColumnRole

    class Config:
        frozen = True


class Header(BaseModel):
    """
    Ordered header columns, positionally aligned to row cells.

    Created once per run by the HeaderValidator and never modified.

    Attributes:
        columns: Columns in file order
        first_field: Name of the first field column (used for row-count diagnostics)
    """

    columns: tuple[Column, ...] = Field(..., min_length=1)
    first_field: str

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "columns": [
                    {"name": "timestamp", "role": "timestamp"},
                    {"name": "host", "role": "tag"},
                    {"name": "cpu", "role": "field"},
                ],
                "first_field": "cpu"
            }
        }

    @property
    def tag_names(self) -> list[str]:
        return [c.name for c in self.columns if c.role is ColumnRole.TAG]

    @property
    def field_names(self) -> list[str]:
        return [c.name for c in self.columns if c.role is ColumnRole.FIELD]
