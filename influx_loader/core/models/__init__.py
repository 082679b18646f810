"""
Core data models for the CSV to InfluxDB loader.

All models use Pydantic for runtime validation and type safety.
"""

from .header import Column, ColumnRole, Header
from .load_summary import LoadSummary
from .point import Point
from .typed_value import TypedValue, ValueKind

__all__ = [
    "Column",
    "ColumnRole",
    "Header",
    "LoadSummary",
    "Point",
    "TypedValue",
    "ValueKind",
]
