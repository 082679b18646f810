"""
Batch writers for the time-series store.
"""

from .retry_writer import RetryingBatchWriter, RetryState

__all__ = [
    "RetryingBatchWriter",
    "RetryState",
]
