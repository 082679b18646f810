"""
Timestamp layouts written in Go reference-time notation.

Layouts describe the reference time ``Mon Jan 2 15:04:05 MST 2006``, e.g.
``2006-01-02 15:04:05``. Each layout is translated once into a ``strptime``
format plus an anchored pattern used to recognise candidate cells.
"""

import re
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Line protocol timestamps and integers are signed 64-bit
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

NANOS_PER_SECOND = 1_000_000_000

# Layout tokens and their strptime directives. Longer tokens must come first.
LAYOUT_TOKENS = [
    ("January", "%B"),
    ("Jan", "%b"),
    ("Monday", "%A"),
    ("Mon", "%a"),
    ("2006", "%Y"),
    ("Z07:00", "%z"),
    ("Z0700", "%z"),
    ("-07:00", "%z"),
    ("-0700", "%z"),
    ("MST", "%Z"),
    ("PM", "%p"),
    ("pm", "%p"),
    ("01", "%m"),
    ("02", "%d"),
    ("_2", "%d"),
    ("03", "%I"),
    ("04", "%M"),
    ("05", "%S"),
    ("06", "%y"),
    ("15", "%H"),
    ("1", "%m"),
    ("2", "%d"),
    ("3", "%I"),
    ("4", "%M"),
    ("5", "%S"),
]

# Fractional seconds: a dot followed by 0s or 9s and no further digit
_FRACTION = r"\.(?:0+|9+)(?!\d)"

_TOKEN_RE = re.compile(
    "|".join([_FRACTION] + [re.escape(token) for token, _ in LAYOUT_TOKENS])
)
_DIRECTIVES = dict(LAYOUT_TOKENS)
_DIGIT_RE = re.compile(r"\d")


def layout_to_strptime(layout: str) -> str:
    """
    Translate a Go reference layout into a strptime format.

    Args:
        layout: Layout such as "2006-01-02 15:04:05"

    Returns:
        Equivalent strptime format such as "%Y-%m-%d %H:%M:%S"
    """
    parts = []
    pos = 0
    for match in _TOKEN_RE.finditer(layout):
        parts.append(layout[pos:match.start()].replace("%", "%%"))
        token = match.group(0)
        if token.startswith("."):
            parts.append(".%f")
        else:
            parts.append(_DIRECTIVES[token])
        pos = match.end()
    parts.append(layout[pos:].replace("%", "%%"))
    return "".join(parts)


def layout_to_pattern(layout: str) -> re.Pattern:
    """
    Build the anchored pattern for cells that look like the layout.

    Every digit becomes a digit wildcard; everything else must match literally.
    """
    escaped = "".join(
        r"\d" if _DIGIT_RE.fullmatch(ch) else re.escape(ch)
        for ch in layout
    )
    return re.compile(f"^{escaped}$")


class TimestampLayout:
    """
    A compiled timestamp layout.

    Immutable once built; safe to share across every row of a run.
    """

    def __init__(self, layout: str):
        self.layout = layout
        self.strptime_format = layout_to_strptime(layout)
        self.pattern = layout_to_pattern(layout)

    def matches(self, text: str) -> bool:
        return self.pattern.match(text) is not None

    def parse(self, text: str) -> datetime:
        """
        Parse a cell with this layout.

        Naive results are taken to be UTC; aware results are converted to UTC.

        Raises:
            ValueError: If the text does not fit the layout
        """
        parsed = datetime.strptime(text, self.strptime_format)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    def __repr__(self) -> str:
        return f"TimestampLayout({self.layout!r} -> {self.strptime_format!r})"


def to_nanoseconds(moment: datetime) -> int:
    """Exact nanoseconds since the Unix epoch for an aware datetime."""
    delta = moment - EPOCH
    return (delta.days * 86_400 + delta.seconds) * NANOS_PER_SECOND + delta.microseconds * 1000


def format_rfc3339(nanoseconds: int) -> str:
    """
    Render epoch nanoseconds as an RFC 3339 UTC string.

    Trailing zeros of the fraction are dropped, e.g. 2024-01-01T00:00:00.5Z
    """
    seconds, fraction = divmod(nanoseconds, NANOS_PER_SECOND)
    text = (EPOCH + timedelta(seconds=seconds)).replace(tzinfo=None).isoformat(timespec="seconds")
    if fraction:
        text += f".{fraction:09d}".rstrip("0")
    return text + "Z"
