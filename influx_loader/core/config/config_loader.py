"""
Configuration loading.

Merges loader options from, lowest to highest precedence: model defaults,
an optional YAML file, environment variables, and explicit overrides
(normally parsed command-line arguments).
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from influx_loader.core.errors import ConfigError

from .loader_config import LoaderConfig

# Environment variables recognised for connection settings
ENV_VARS = {
    "INFLUX_SERVER": "server_address",
    "INFLUX_DATABASE": "database_name",
    "INFLUX_USERNAME": "username",
    "INFLUX_PASSWORD": "password",
    "INFLUX_TOKEN": "token",
    "INFLUX_MEASUREMENT": "measurement_name",
}


def normalize_key(key: str) -> str:
    """Map kebab-case option names ("batch-size") to model attributes."""
    return key.strip().replace("-", "_")


class ConfigLoader:
    """
    Builds a LoaderConfig from layered sources.

    Expected YAML format (kebab or snake case keys):
    ```yaml
    server-address: http://localhost:8181
    database-name: metrics
    measurement-name: cpu
    batch-size: 5000
    tag-columns: host,region
    timestamp-column: timestamp
    timestamp-format: "2006-01-02 15:04:05"
    max-write-attempts: 5
    ```
    """

    def __init__(self, config_path: str | Path | None = None, environ: dict[str, str] | None = None):
        """
        Initialize the config loader.

        Args:
            config_path: Optional path to a YAML configuration file
            environ: Environment mapping (defaults to os.environ)
        """
        self.config_path = Path(config_path) if config_path else None
        if self.config_path is not None and not self.config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
        self.environ = os.environ if environ is None else environ

    def load(self, overrides: dict[str, Any] | None = None) -> LoaderConfig:
        """
        Load and validate the configuration.

        Args:
            overrides: Highest-precedence values; None entries are ignored

        Returns:
            Validated LoaderConfig

        Raises:
            ConfigError: If the file is malformed or a value is invalid
        """
        values: dict[str, Any] = {}
        values.update(self._load_file())
        values.update(self._load_env())
        for key, value in (overrides or {}).items():
            if value is not None:
                values[normalize_key(key)] = value

        unknown = set(values) - set(LoaderConfig.model_fields)
        if unknown:
            raise ConfigError(f"Unknown configuration options: {', '.join(sorted(unknown))}")

        try:
            return LoaderConfig(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(f"Invalid configuration: {problems}") from e

    def _load_file(self) -> dict[str, Any]:
        if self.config_path is None:
            return {}

        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file {self.config_path} must contain a mapping")

        return {normalize_key(str(key)): value for key, value in config.items()}

    def _load_env(self) -> dict[str, Any]:
        return {
            attr: self.environ[var]
            for var, attr in ENV_VARS.items()
            if self.environ.get(var)
        }
