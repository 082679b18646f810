"""
LoadSummary model: counters reported at the end of an ingestion run.
"""

from pydantic import BaseModel


class LoadSummary(BaseModel):
    """
    Outcome of one ingestion run.

    Attributes:
        rows_read: Data rows read (header excluded)
        points_written: Points successfully written to the store
        rows_skipped: Rows that produced no point
        timestamp_errors: Rows whose timestamp could not be parsed
        batches_flushed: Successful batch writes
        write_retries: Failed write attempts that were retried
    """

    rows_read: int = 0
    points_written: int = 0
    rows_skipped: int = 0
    timestamp_errors: int = 0
    batches_flushed: int = 0
    write_retries: int = 0
