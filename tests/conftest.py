"""
Pytest configuration and fixtures for influx-loader tests

This module provides shared fixtures for unit, integration, and E2E tests.
No test talks to a real InfluxDB server or sleeps for real.
"""
import os
from pathlib import Path
from typing import Callable

import pytest

from influx_loader.core.config import LoaderConfig
from influx_loader.core.errors import StoreWriteError


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that run the pipeline against a fake store"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that drive the command line"
    )


# =======================
# STORE FIXTURES
# =======================

class FakeStore:
    """
    In-memory stand-in for InfluxStoreClient.

    Args:
        databases: Names returned by list_databases
        fail_writes: Number of write attempts to fail before succeeding
            (-1 fails forever)
    """

    def __init__(self, databases=None, fail_writes: int = 0):
        self.databases = set(databases if databases is not None else {"_internal", "test"})
        self.fail_writes = fail_writes
        self.write_attempts: list[list] = []
        self.batches: list[list] = []
        self.created: list[str] = []
        self.count_queries: list[tuple[str, str]] = []
        self.closed = False

    def list_databases(self) -> set[str]:
        return set(self.databases)

    def create_database(self, name: str) -> None:
        self.created.append(name)
        self.databases.add(name)

    def write(self, points) -> None:
        self.write_attempts.append(list(points))
        if self.fail_writes == -1 or len(self.write_attempts) <= self.fail_writes:
            raise StoreWriteError("connection refused")
        self.batches.append(list(points))

    def count_field(self, measurement: str, field: str) -> int:
        self.count_queries.append((measurement, field))
        return sum(
            1 for batch in self.batches for point in batch if field in point.fields
        )

    def close(self) -> None:
        self.closed = True

    @property
    def points(self) -> list:
        return [point for batch in self.batches for point in batch]


@pytest.fixture
def fake_store() -> FakeStore:
    """Store that accepts every write"""
    return FakeStore()


@pytest.fixture
def store_factory() -> Callable[..., FakeStore]:
    """Factory for stores with custom databases or failure counts"""
    return FakeStore


@pytest.fixture
def sleeps() -> list[float]:
    """Collects requested sleep durations instead of sleeping"""
    return []


@pytest.fixture
def fake_sleep(sleeps) -> Callable[[float], None]:
    return sleeps.append


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def make_config() -> Callable[..., LoaderConfig]:
    """
    Build a LoaderConfig with test-friendly defaults

    Returns:
        Factory accepting LoaderConfig keyword overrides
    """
    def _make(**overrides) -> LoaderConfig:
        values = {"tag_columns": ["host"], "batch_size": 5000}
        values.update(overrides)
        return LoaderConfig(**values)

    return _make


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep connection environment variables from leaking into tests"""
    for var in ("INFLUX_SERVER", "INFLUX_DATABASE", "INFLUX_USERNAME",
                "INFLUX_PASSWORD", "INFLUX_TOKEN", "INFLUX_MEASUREMENT"):
        monkeypatch.delenv(var, raising=False)


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return Path(os.path.dirname(__file__)) / "fixtures"


@pytest.fixture
def write_csv(tmp_path) -> Callable[[str, str], Path]:
    """
    Write CSV text to a temporary file

    Returns:
        Function taking (text, name) and returning the file path
    """
    def _write(text: str, name: str = "data.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
