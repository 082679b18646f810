"""
Batch ingestion: reading, accumulation, retrying writes and orchestration.
"""

from .accumulator import BatchAccumulator
from .backoff import BackoffPolicy
from .pipeline import IngestionPipeline, PipelineState
from .readers import CSVReader
from .writers import RetryingBatchWriter

__all__ = [
    "BatchAccumulator",
    "BackoffPolicy",
    "CSVReader",
    "IngestionPipeline",
    "PipelineState",
    "RetryingBatchWriter",
]
