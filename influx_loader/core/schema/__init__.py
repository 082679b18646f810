"""
Header validation, type inference and timestamp layouts.
"""

from .header_validator import HeaderValidator
from .inference import TypeClassifier
from .timeformat import TimestampLayout

__all__ = [
    "HeaderValidator",
    "TypeClassifier",
    "TimestampLayout",
]
