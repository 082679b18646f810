"""
Row to point mapping.
"""

from .record_mapper import RecordMapper

__all__ = ["RecordMapper"]
