"""
InfluxDB store client.

Wraps influxdb_client_3 for writes and queries, and the HTTP configuration
API for database listing and creation.
"""

from typing import Any, Protocol

import requests
from influxdb_client_3 import SYNCHRONOUS, InfluxDBClient3, WritePrecision, write_client_options
from influxdb_client_3.exceptions.exceptions import InfluxDBError
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from influx_loader.core.config import LoaderConfig
from influx_loader.core.errors import StoreConnectionError, StoreWriteError
from influx_loader.core.models import Point
from influx_loader.observability.logger import get_logger

from .serialization import to_influx_point

logger = get_logger(__name__)


class StoreClient(Protocol):
    """Operations the loader needs from a time-series store."""

    def list_databases(self) -> set[str]: ...

    def create_database(self, name: str) -> None: ...

    def write(self, points: list[Point]) -> None: ...

    def count_field(self, measurement: str, field: str) -> int: ...


class InfluxStoreClient:
    """
    InfluxDB client used by the loader.

    Writes are synchronous so each call either lands the whole batch or
    raises StoreWriteError.
    """

    def __init__(
        self,
        server_address: str,
        database: str,
        token: str = "",
        timeout_seconds: float = 10.0,
    ) -> None:
        """
        Initialize store client

        Args:
            server_address: InfluxDB base URL
            database: Database written to
            token: API token (may be empty for unauthenticated servers)
            timeout_seconds: Per-request timeout
        """
        self.server_address = server_address.rstrip("/")
        self.database = database
        self.token = token
        self.timeout_seconds = timeout_seconds
        self._client: InfluxDBClient3 | None = None

    @classmethod
    def from_config(cls, config: LoaderConfig) -> "InfluxStoreClient":
        return cls(
            server_address=config.server_address,
            database=config.database_name,
            token=config.auth_token,
            timeout_seconds=config.http_timeout_seconds,
        )

    @property
    def client(self) -> InfluxDBClient3:
        if self._client is None:
            self._client = InfluxDBClient3(
                host=self.server_address,
                database=self.database,
                token=self.token or None,
                write_client_options=write_client_options(write_options=SYNCHRONOUS),
                timeout=int(self.timeout_seconds * 1000),
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _database_url(self) -> str:
        return f"{self.server_address}/api/v3/configure/database"

    def list_databases(self) -> set[str]:
        """
        List database names on the server.

        Raises:
            StoreConnectionError: If the server is unreachable or refuses the request
        """
        try:
            response = requests.get(
                self._database_url(),
                params={"format": "json"},
                headers=self._headers(),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise StoreConnectionError(f"Invalid server address: {e}") from e

        if response.status_code in (401, 403):
            raise StoreConnectionError(
                f"Not authorized to list databases (HTTP {response.status_code})"
            )
        if response.status_code != 200:
            raise StoreConnectionError(
                f"Failed to list databases: HTTP {response.status_code}: {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise StoreConnectionError(f"Unexpected database list response: {e}") from e
        return parse_database_list(payload)

    def create_database(self, name: str) -> None:
        """
        Create a database.

        Raises:
            StoreConnectionError: If the server rejects the request
        """
        try:
            response = requests.post(
                self._database_url(),
                json={"db": name},
                headers=self._headers(),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise StoreConnectionError(f"Failed to create database: {e}") from e

        if response.status_code not in (200, 201, 204):
            raise StoreConnectionError(
                f"Failed to create database '{name}': HTTP {response.status_code}: {response.text}"
            )
        logger.info(f"Created database '{name}'")

    def write(self, points: list[Point]) -> None:
        """
        Write one batch.

        Raises:
            StoreWriteError: If the write did not succeed
        """
        records = [to_influx_point(point) for point in points]
        try:
            self.client.write(record=records, write_precision=WritePrecision.NS)
        except (InfluxDBError, Urllib3HTTPError, OSError) as e:
            raise StoreWriteError(str(e)) from e

    def count_field(self, measurement: str, field: str) -> int:
        """
        Count stored values of a field in a measurement.

        Raises:
            StoreConnectionError: If the query fails
        """
        query = f'SELECT count("{field}") FROM "{measurement}"'
        try:
            table = self.client.query(query=query, language="influxql")
            rows = table.to_pylist()
        except Exception as e:
            raise StoreConnectionError(f"Failed to count rows: {e}") from e

        if not rows:
            return 0
        return int(rows[0].get("count") or 0)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def parse_database_list(payload: Any) -> set[str]:
    """
    Extract database names from a configuration API response.

    Accepts ``[{"iox::database": "name"}, ...]``, ``["name", ...]`` and
    ``{"databases": [...]}``.
    """
    if isinstance(payload, dict):
        payload = payload.get("databases", [])
    if not isinstance(payload, list):
        raise StoreConnectionError(f"Unexpected database list response: {type(payload).__name__}")

    names = set()
    for entry in payload:
        if isinstance(entry, dict):
            name = entry.get("iox::database") or entry.get("name")
        else:
            name = entry
        if name:
            names.add(str(name))
    return names


def ensure_database(store: StoreClient, database: str, auto_create: bool = True) -> bool:
    """
    Make sure the target database exists.

    Args:
        store: Store client
        database: Database name
        auto_create: Create the database when missing

    Returns:
        True if the database was created

    Raises:
        StoreConnectionError: If listing is empty or fails, or the database
            is missing and auto-creation is disabled
    """
    databases = store.list_databases()
    if not databases:
        raise StoreConnectionError("Database listing is empty; check credentials and server address")

    if database in databases:
        logger.info(f"Database '{database}' already exists")
        return False

    if not auto_create:
        raise StoreConnectionError(f"Database '{database}' does not exist")

    logger.info(f"Database '{database}' does not exist, creating it")
    store.create_database(database)
    return True
