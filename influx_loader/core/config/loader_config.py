"""
LoaderConfig model holding every recognised loader option.
"""

from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

UNIX_TIMESTAMP_FORMAT = "unix"
DEFAULT_TIMESTAMP_FORMAT = "2006-01-02 15:04:05"


class LoaderConfig(BaseModel):
    """
    Validated loader configuration.

    Attributes:
        server_address: InfluxDB base URL
        database_name: Target database
        username: Accepted for v1-style invocations; InfluxDB 3 ignores it
        password: Used as the API token when no token is given
        token: InfluxDB 3 API token
        measurement_name: Measurement every point is written to
        batch_size: Points per write call
        tag_columns: Columns stored as tags instead of fields
        timestamp_column: Header name of the timestamp column
        timestamp_format: Go reference layout, or "unix" for epoch integers
        disable_auto_create_database: Fail instead of creating a missing database
        force_float: Classify integer-looking cells as floats
        force_string: Store every non-empty, non-boolean cell as a string
        treat_null_token_as_absent: Drop null/Null/NULL cells
        max_write_attempts: Attempts per batch before giving up (0 = unbounded)
        http_timeout_seconds: Timeout for each HTTP request to the store
        backoff_min_seconds: First retry delay
        backoff_max_seconds: Retry delay cap
        backoff_factor: Growth factor between retries
        backoff_jitter: Randomise each retry delay
        verify_count: Log the measurement row count after every flush
        metrics_port: Port for the Prometheus endpoint (disabled when None)
    """

    server_address: str = "http://localhost:8181"
    database_name: str = Field("test", min_length=1)
    username: str = ""
    password: str = ""
    token: str = ""
    measurement_name: str = Field("data", min_length=1)
    batch_size: int = Field(5000, ge=1)
    tag_columns: list[str] = Field(default_factory=list)
    timestamp_column: str = Field("timestamp", min_length=1)
    timestamp_format: str = Field(DEFAULT_TIMESTAMP_FORMAT, min_length=1)
    disable_auto_create_database: bool = False
    force_float: bool = False
    force_string: bool = False
    treat_null_token_as_absent: bool = False
    max_write_attempts: int = Field(0, ge=0)
    http_timeout_seconds: float = Field(10.0, gt=0)
    backoff_min_seconds: float = Field(0.1, gt=0)
    backoff_max_seconds: float = Field(10.0, gt=0)
    backoff_factor: float = Field(2.0, ge=1.0)
    backoff_jitter: bool = False
    verify_count: bool = False
    metrics_port: int | None = Field(None, ge=1, le=65535)

    class Config:
        json_schema_extra = {
            "example": {
                "server_address": "http://localhost:8181",
                "database_name": "metrics",
                "measurement_name": "cpu",
                "batch_size": 5000,
                "tag_columns": ["host", "region"],
                "timestamp_column": "timestamp",
                "timestamp_format": "2006-01-02 15:04:05",
                "max_write_attempts": 5
            }
        }

    @field_validator("tag_columns", mode="before")
    @classmethod
    def split_tag_columns(cls, v):
        """Accept a comma-separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [name.strip() for name in v if name and name.strip()]

    @field_validator("server_address")
    @classmethod
    def check_server_address(cls, v):
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid server address: {v!r}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def check_backoff_bounds(self):
        if self.backoff_max_seconds < self.backoff_min_seconds:
            raise ValueError("backoff_max_seconds must not be less than backoff_min_seconds")
        return self

    @property
    def is_unix_timestamp(self) -> bool:
        return self.timestamp_format == UNIX_TIMESTAMP_FORMAT

    @property
    def auth_token(self) -> str:
        """Bearer token sent to the store; the password stands in for it when unset."""
        return self.token or self.password
