"""
Loader configuration model and layered loading.
"""

from .config_loader import ConfigLoader
from .loader_config import DEFAULT_TIMESTAMP_FORMAT, UNIX_TIMESTAMP_FORMAT, LoaderConfig

__all__ = [
    "ConfigLoader",
    "LoaderConfig",
    "DEFAULT_TIMESTAMP_FORMAT",
    "UNIX_TIMESTAMP_FORMAT",
]
