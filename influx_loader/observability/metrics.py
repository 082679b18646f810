"""
Prometheus metrics collection for influx-loader

This module provides metrics instrumentation for monitoring
load progress, skipped rows and store write health.
"""
import os
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# INGESTION METRICS
# =======================

rows_read_total = Counter(
    name="loader_rows_read_total",
    documentation="Total number of CSV data rows read",
    labelnames=["measurement"],
    registry=REGISTRY,
)

rows_skipped_total = Counter(
    name="loader_rows_skipped_total",
    documentation="Total number of rows that produced no point",
    labelnames=["measurement", "reason"],  # reason: no_fields, invalid_point
    registry=REGISTRY,
)

timestamp_parse_errors_total = Counter(
    name="loader_timestamp_parse_errors_total",
    documentation="Total number of timestamp cells that failed to parse",
    labelnames=["measurement"],
    registry=REGISTRY,
)

# =======================
# WRITE METRICS
# =======================

points_written_total = Counter(
    name="loader_points_written_total",
    documentation="Total number of points written to the store",
    labelnames=["measurement"],
    registry=REGISTRY,
)

batches_flushed_total = Counter(
    name="loader_batches_flushed_total",
    documentation="Total number of batch flushes",
    labelnames=["measurement", "status"],  # status: success, failure
    registry=REGISTRY,
)

write_attempts_total = Counter(
    name="loader_write_attempts_total",
    documentation="Total number of store write attempts",
    labelnames=["measurement", "status"],  # status: success, failure
    registry=REGISTRY,
)

batch_size = Histogram(
    name="loader_batch_size_points",
    documentation="Number of points in each flushed batch",
    labelnames=["measurement"],
    buckets=[1, 10, 100, 500, 1000, 5000, 10000, 50000],
    registry=REGISTRY,
)

flush_duration_seconds = Histogram(
    name="loader_flush_duration_seconds",
    documentation="Time spent flushing a batch, retries included",
    labelnames=["measurement"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 60.0],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Imported lazily so importing this module never binds a port
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(flush_duration_seconds, measurement="cpu"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """
    Observe a value in a histogram metric

    Args:
        histogram: Prometheus Histogram metric
        value: Value to observe
        **labels: Label values for the metric
    """
    histogram.labels(**labels).observe(value)


def get_counter_value(counter: Counter, **labels) -> float:
    """
    Read the current value of a labelled counter from the registry.

    Returns 0.0 when the label combination has never been incremented.
    """
    value = REGISTRY.get_sample_value(f"{counter._name}_total", labels)
    return value or 0.0
