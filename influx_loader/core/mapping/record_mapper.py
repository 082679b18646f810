"""
Record mapping: one raw CSV row -> one Point.
"""

from pydantic import ValidationError

from influx_loader.core.errors import PointConstructionError, TimestampParseError
from influx_loader.core.models import ColumnRole, Header, Point, ValueKind
from influx_loader.core.schema import TypeClassifier
from influx_loader.observability import metrics
from influx_loader.observability.logger import get_logger

logger = get_logger(__name__)


class RecordMapper:
    """
    Builds points from raw rows using the validated header roles.

    Tags are stored as raw text, the timestamp column sets the point time and
    every other column is classified into a field. Empty cells are skipped.
    Rows that end up with no fields are rejected (logged, not raised).
    """

    def __init__(self, header: Header, classifier: TypeClassifier, measurement: str):
        """
        Initialize record mapper.

        Args:
            header: Validated header
            classifier: Cell classifier for this run
            measurement: Measurement name for every point
        """
        self.header = header
        self.classifier = classifier
        self.measurement = measurement
        self.timestamp_errors = 0
        self.rows_skipped = 0

    def map(self, record: list[str], row_number: int) -> Point | None:
        """
        Convert one row.

        Args:
            record: Cells aligned with the header
            row_number: Data row number, for diagnostics

        Returns:
            The Point, or None when the row was skipped
        """
        tags: dict[str, str] = {}
        fields = {}
        timestamp = None

        for column, cell in zip(self.header.columns, record):
            if cell == "":
                continue

            if column.role is ColumnRole.TAG:
                tags[column.name] = cell
                continue

            if column.role is ColumnRole.TIMESTAMP:
                value = self.classifier.classify(cell, is_timestamp_column=True)
                if value.kind is ValueKind.TIMESTAMP:
                    timestamp = value.value
                else:
                    self._timestamp_error(row_number, column.name, value.error or f"Invalid time: {cell!r}")
                continue

            value = self.classifier.classify(cell)
            if value.is_null:
                if value.error:
                    logger.warning(f"#{row_number}: {column.name}: {value.error}")
                continue
            fields[column.name] = value

        if not fields:
            return self._skip(row_number, "row has no field values")

        try:
            return Point(
                measurement=self.measurement,
                tags=tags,
                fields=fields,
                timestamp=timestamp,
            )
        except ValidationError as e:
            return self._skip(row_number, str(e), reason="invalid_point")

    def _timestamp_error(self, row_number: int, column: str, message: str) -> None:
        error = TimestampParseError(row_number, column, message)
        self.timestamp_errors += 1
        metrics.increment_counter(metrics.timestamp_parse_errors_total, measurement=self.measurement)
        logger.warning(f"{error} (timestamp left unset)")

    def _skip(self, row_number: int, message: str, reason: str = "no_fields") -> None:
        error = PointConstructionError(row_number, None, message)
        self.rows_skipped += 1
        metrics.increment_counter(metrics.rows_skipped_total, measurement=self.measurement, reason=reason)
        logger.warning(f"Skipping row {error}")
        return None
