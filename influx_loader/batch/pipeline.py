"""
Ingestion pipeline orchestration.

Coordinates the flow: header -> map rows -> accumulate -> flush -> done
"""

import time
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from influx_loader.batch.accumulator import BatchAccumulator
from influx_loader.batch.backoff import BackoffPolicy
from influx_loader.batch.readers import CSVReader
from influx_loader.batch.writers import RetryingBatchWriter
from influx_loader.core.config import LoaderConfig
from influx_loader.core.mapping import RecordMapper
from influx_loader.core.models import Header, LoadSummary
from influx_loader.core.schema import HeaderValidator, TypeClassifier
from influx_loader.observability import metrics
from influx_loader.observability.logger import get_logger
from influx_loader.store import StoreClient

logger = get_logger(__name__)


class PipelineState(str, Enum):
    AWAITING_HEADER = "awaiting_header"
    ACCUMULATING = "accumulating"
    FLUSHING = "flushing"
    DONE = "done"


class IngestionPipeline:
    """
    Drives one load from a row stream into the store.

    Flow:
    1. Validate the first row as the header
    2. Map every later row to a point
    3. Flush whenever the batch reaches capacity
    4. Flush the remainder at end of input

    Runs strictly sequentially; a flush blocks reading until it succeeds.
    """

    def __init__(
        self,
        config: LoaderConfig,
        store: StoreClient,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize ingestion pipeline.

        Args:
            config: Loader configuration
            store: Store client that receives the batches
            sleep: Sleep function used between write retries
        """
        self.config = config
        self.store = store
        self.state = PipelineState.AWAITING_HEADER

        self.header_validator = HeaderValidator.from_config(config)
        self.classifier = TypeClassifier(config)
        self.accumulator = BatchAccumulator(config.batch_size)
        self.writer = RetryingBatchWriter(
            store,
            backoff=BackoffPolicy.from_config(config),
            max_attempts=config.max_write_attempts,
            measurement=config.measurement_name,
            sleep=sleep,
        )
        self.header: Header | None = None
        self.mapper: RecordMapper | None = None
        self.summary = LoadSummary()

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state

    def run(self, rows: Iterable[list[str]]) -> LoadSummary:
        """
        Load every row.

        Args:
            rows: Header row followed by data rows

        Returns:
            LoadSummary for the run

        Raises:
            ConfigError: If the header is invalid
            ReadError: If the row source fails
            WriteRetriesExhausted: If a batch could not be written
        """
        for row_number, row in enumerate(rows):
            if self.state is PipelineState.AWAITING_HEADER:
                self._accept_header(row)
                continue

            self.summary.rows_read += 1
            metrics.increment_counter(metrics.rows_read_total, measurement=self.config.measurement_name)

            point = self.mapper.map(row, row_number)
            if point is None:
                continue

            self.accumulator.append(point)
            if self.accumulator.is_full():
                self._flush()

        if self.state is PipelineState.AWAITING_HEADER:
            logger.warning("Input is empty; nothing to load")
        else:
            self._flush()

        self.summary.rows_skipped = self.mapper.rows_skipped if self.mapper else 0
        self.summary.timestamp_errors = self.mapper.timestamp_errors if self.mapper else 0
        self.summary.write_retries = self.writer.total_retries
        self._transition(PipelineState.DONE)
        logger.info(f"Done (wrote {self.summary.points_written} points)")
        return self.summary

    def load_file(self, file_path: str | Path) -> LoadSummary:
        """
        Load a CSV file.

        Args:
            file_path: Path to a CSV file with a header row

        Returns:
            LoadSummary for the run
        """
        return self.run(CSVReader(file_path))

    def _accept_header(self, row: list[str]) -> None:
        self.header = self.header_validator.validate(row)
        self.mapper = RecordMapper(self.header, self.classifier, self.config.measurement_name)
        self._transition(PipelineState.ACCUMULATING)

    def _flush(self) -> None:
        self._transition(PipelineState.FLUSHING)
        logger.debug(f"Flushing {len(self.accumulator)} points")
        written = self.writer.flush(self.accumulator)
        if written:
            self.summary.points_written += written
            self.summary.batches_flushed += 1
            if self.config.verify_count:
                count = self.store.count_field(self.config.measurement_name, self.header.first_field)
                logger.info(f"count: {count}")
        self._transition(PipelineState.ACCUMULATING)
