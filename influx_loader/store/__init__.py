"""
Time-series store access.
"""

from .connection import InfluxStoreClient, StoreClient, ensure_database

__all__ = [
    "InfluxStoreClient",
    "StoreClient",
    "ensure_database",
]
