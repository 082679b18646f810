"""
Point model representing one typed, timestamped record ready for the store.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from .typed_value import TypedValue


class Point(BaseModel):
    """
    One fully typed record destined for a measurement.

    A point always has at least one field. Tag and field keys never overlap.

    Attributes:
        measurement: Target measurement name
        tags: Raw, unconverted tag values keyed by column name
        fields: Classified field values keyed by column name (never null)
        timestamp: Point time in nanoseconds since the Unix epoch;
            None lets the store assign its own
    """

    measurement: str = Field(..., min_length=1)
    tags: dict[str, str] = Field(default_factory=dict)
    fields: dict[str, TypedValue]
    timestamp: int | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "measurement": "data",
                "tags": {"host": "serverA"},
                "fields": {
                    "cpu": {"kind": "float", "value": 93.5},
                    "ok": {"kind": "boolean", "value": True}
                },
                "timestamp": 1704067200000000000
            }
        }

    @field_validator("fields")
    @classmethod
    def check_fields(cls, v):
        """A point needs at least one non-null field."""
        if not v:
            raise ValueError("point must have at least one field")
        for name, value in v.items():
            if value.is_null:
                raise ValueError(f"field '{name}' is null")
        return v

    @model_validator(mode="after")
    def check_disjoint_keys(self):
        """Tag and field keys must not overlap."""
        overlap = set(self.tags) & set(self.fields)
        if overlap:
            raise ValueError(f"keys used as both tag and field: {sorted(overlap)}")
        return self
