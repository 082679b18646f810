"""
Exception hierarchy for the loader.

Fatal errors propagate to the CLI, which logs them and exits non-zero.
Per-row errors (PointConstructionError, TimestampParseError) are logged
by the record mapper and never abort the run.
"""


class LoaderError(Exception):
    """Base class for all loader errors."""


class ConfigError(LoaderError):
    """Raised when configuration or the CSV header is unusable."""


class ReadError(LoaderError):
    """Raised when the CSV input cannot be read or a row is malformed."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class StoreConnectionError(LoaderError):
    """Raised when the store is unreachable or refuses database operations."""


class StoreWriteError(LoaderError):
    """Raised by the store client when a single write attempt fails."""


class WriteRetriesExhausted(LoaderError):
    """Raised when a batch could not be written within the allowed attempts."""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Write failed after {attempts} attempts: {last_error}"
        )


class RowError(LoaderError):
    """Base class for recoverable, per-row problems."""

    def __init__(self, row_number: int, column: str | None, message: str):
        self.row_number = row_number
        self.column = column
        self.message = message
        location = f"#{row_number}" if column is None else f"#{row_number}: {column}"
        super().__init__(f"{location}: {message}")


class PointConstructionError(RowError):
    """A row produced no fields, so no point can be built from it."""


class TimestampParseError(RowError):
    """A timestamp cell could not be parsed with the configured format."""
