"""
TypedValue model: the result of classifying a single CSV cell.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class ValueKind(str, Enum):
    """Kinds a classified cell can take."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    STRING = "string"
    NULL = "null"


class TypedValue(BaseModel):
    """
    A classified cell value (tagged union over ValueKind).

    Attributes:
        kind: Which member of the union this is
        value: Python value matching the kind (int, float, bool, str or None);
            timestamps are integer nanoseconds since the Unix epoch
        error: Diagnostic for a null produced by a failed timestamp parse
    """

    kind: ValueKind
    value: Any = None
    error: str | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "kind": "float",
                "value": 93.5
            }
        }

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    @classmethod
    def null(cls, error: str | None = None) -> "TypedValue":
        return cls(kind=ValueKind.NULL, error=error)

    @classmethod
    def integer(cls, value: int) -> "TypedValue":
        return cls(kind=ValueKind.INTEGER, value=value)

    @classmethod
    def float_(cls, value: float) -> "TypedValue":
        return cls(kind=ValueKind.FLOAT, value=value)

    @classmethod
    def boolean(cls, value: bool) -> "TypedValue":
        return cls(kind=ValueKind.BOOLEAN, value=value)

    @classmethod
    def timestamp(cls, value: int) -> "TypedValue":
        return cls(kind=ValueKind.TIMESTAMP, value=value)

    @classmethod
    def string(cls, value: str) -> "TypedValue":
        return cls(kind=ValueKind.STRING, value=value)
