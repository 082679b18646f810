"""
Batch writer with exponential backoff retries.

Sends the accumulated batch to the store, resending the identical batch
after each failure until it succeeds or the attempt budget is spent.
"""

import time
from typing import Callable

from influx_loader.batch.accumulator import BatchAccumulator
from influx_loader.batch.backoff import BackoffPolicy
from influx_loader.core.errors import StoreWriteError, WriteRetriesExhausted
from influx_loader.observability import metrics
from influx_loader.observability.logger import get_logger
from influx_loader.store import StoreClient

logger = get_logger(__name__)


class RetryState:
    """Attempt bookkeeping for one flush."""

    def __init__(self, max_attempts: int = 0):
        self.max_attempts = max_attempts
        self.attempts = 0

    def reset(self) -> None:
        self.attempts = 0

    def record_failure(self) -> int:
        self.attempts += 1
        return self.attempts

    @property
    def exhausted(self) -> bool:
        return self.max_attempts > 0 and self.attempts >= self.max_attempts


class RetryingBatchWriter:
    """
    Writes full batches to the store with retry-on-failure.

    Only StoreWriteError is retried; any other exception propagates.
    """

    def __init__(
        self,
        store: StoreClient,
        backoff: BackoffPolicy | None = None,
        max_attempts: int = 0,
        measurement: str = "",
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize retrying writer.

        Args:
            store: Store client receiving the batches
            backoff: Delay policy between attempts
            max_attempts: Attempts per batch before giving up (0 = unbounded)
            measurement: Measurement name, used as a metrics label
            sleep: Sleep function (replaceable in tests)
        """
        if max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {max_attempts}")
        self.store = store
        self.backoff = backoff or BackoffPolicy()
        self.retry_state = RetryState(max_attempts)
        self.measurement = measurement
        self.sleep = sleep
        self.total_retries = 0

    def flush(self, accumulator: BatchAccumulator) -> int:
        """
        Write the accumulator's batch, then drain it.

        Args:
            accumulator: Batch to send; left untouched until the write succeeds

        Returns:
            Number of points written (0 for an empty batch)

        Raises:
            WriteRetriesExhausted: If every allowed attempt failed
        """
        if accumulator.is_empty():
            return 0

        batch = list(accumulator.points)
        self.retry_state.reset()

        with metrics.track_duration(metrics.flush_duration_seconds, measurement=self.measurement):
            while True:
                try:
                    self.store.write(batch)
                    break
                except StoreWriteError as e:
                    attempt = self.retry_state.record_failure()
                    metrics.increment_counter(
                        metrics.write_attempts_total, measurement=self.measurement, status="failure"
                    )
                    if self.retry_state.exhausted:
                        metrics.increment_counter(
                            metrics.batches_flushed_total, measurement=self.measurement, status="failure"
                        )
                        logger.error(f"Write failed: {e} (giving up after {attempt} attempts)")
                        raise WriteRetriesExhausted(attempt, e) from e

                    delay = self.backoff.delay(attempt)
                    self.total_retries += 1
                    logger.warning(f"Write failed: {e} (retrying in {delay:.3f}s)")
                    self.sleep(delay)

        metrics.increment_counter(metrics.write_attempts_total, measurement=self.measurement, status="success")
        metrics.increment_counter(metrics.batches_flushed_total, measurement=self.measurement, status="success")
        metrics.observe_histogram(metrics.batch_size, len(batch), measurement=self.measurement)
        metrics.increment_counter(metrics.points_written_total, len(batch), measurement=self.measurement)

        accumulator.drain()
        logger.debug(f"Wrote batch of {len(batch)} points")
        return len(batch)
