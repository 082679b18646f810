"""
Per-cell type inference.

Turns raw CSV cell text into a TypedValue using a fixed, ordered set of
rules. All patterns are compiled once per run.
"""

import math
import re

from influx_loader.core.config import LoaderConfig
from influx_loader.core.models import TypedValue

from .timeformat import INT64_MAX, INT64_MIN, TimestampLayout, to_nanoseconds

INTEGER_RE = re.compile(r"^\d+$")
FLOAT_RE = re.compile(r"^[-+]?\d*\.?\d+([eE][-+]?\d+)?$")
TRUE_RE = re.compile(r"^(true|T|True|TRUE)$")
FALSE_RE = re.compile(r"^(false|F|False|FALSE)$")
NULL_RE = re.compile(r"^(null|Null|NULL)$")
UNIX_RE = re.compile(r"^[-+]?\d+$")


def parse_int64(raw: str) -> int | None:
    """
    Parse a decimal string as a signed 64-bit integer.

    Returns None when the value does not fit.
    """
    try:
        value = int(raw)
    except ValueError:
        # Beyond the interpreter's int digit limit
        return None
    if INT64_MIN <= value <= INT64_MAX:
        return value
    return None


class TypeClassifier:
    """
    Classifies raw cell text into typed values.

    Rules, first match wins:
    1. empty -> null
    2. matches the timestamp layout (layout is not "unix") -> timestamp
    3. timestamp column with "unix" format -> epoch nanoseconds
    4. ^\\d+$ within int64 -> integer (unless force_float or force_string)
    5. signed decimal/exponent, finite -> float (unless force_string)
    6. true tokens -> True
    7. false tokens -> False
    8. null tokens -> null (only with treat_null_token_as_absent)
    9. anything else -> string

    Timestamps are held as integer nanoseconds since the Unix epoch.
    """

    def __init__(self, config: LoaderConfig):
        """
        Initialize classifier.

        Args:
            config: Loader configuration (timestamp format and type flags)
        """
        self.unix = config.is_unix_timestamp
        self.layout = None if self.unix else TimestampLayout(config.timestamp_format)
        self.force_float = config.force_float
        self.force_string = config.force_string
        self.treat_null = config.treat_null_token_as_absent

    def classify(self, raw: str, is_timestamp_column: bool = False) -> TypedValue:
        """
        Classify one cell. Never raises.

        Args:
            raw: Raw cell text
            is_timestamp_column: Whether the cell belongs to the timestamp column

        Returns:
            TypedValue; a failed timestamp parse yields a null carrying an error
        """
        if raw == "":
            return TypedValue.null()

        if self.layout is not None and self.layout.matches(raw):
            try:
                nanoseconds = to_nanoseconds(self.layout.parse(raw))
            except ValueError as e:
                return TypedValue.null(error=f"Invalid time: {e}")
            if not INT64_MIN <= nanoseconds <= INT64_MAX:
                return TypedValue.null(error=f"Invalid time: {raw!r} is out of range")
            return TypedValue.timestamp(nanoseconds)

        if is_timestamp_column and self.unix:
            if not UNIX_RE.match(raw):
                return TypedValue.null(error=f"Invalid unix time: {raw!r}")
            nanoseconds = parse_int64(raw)
            if nanoseconds is None:
                return TypedValue.null(error=f"Invalid unix time: {raw!r} is out of range")
            return TypedValue.timestamp(nanoseconds)

        if not (self.force_float or self.force_string) and INTEGER_RE.match(raw):
            value = parse_int64(raw)
            if value is not None:
                return TypedValue.integer(value)
            # Out of int64 range; classified as float below

        if not self.force_string and FLOAT_RE.match(raw):
            number = float(raw)
            if math.isfinite(number):
                return TypedValue.float_(number)

        if TRUE_RE.match(raw):
            return TypedValue.boolean(True)
        if FALSE_RE.match(raw):
            return TypedValue.boolean(False)

        if self.treat_null and NULL_RE.match(raw):
            return TypedValue.null()

        return TypedValue.string(raw)
