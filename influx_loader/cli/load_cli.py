"""
Command-line interface for loading CSV files into InfluxDB.

Usage:
    python -m influx_loader.cli.load_cli <csv-file> [options]
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from influx_loader import __version__
from influx_loader.batch import IngestionPipeline
from influx_loader.core.config import ConfigLoader, LoaderConfig
from influx_loader.core.errors import LoaderError, ReadError
from influx_loader.core.models import LoadSummary
from influx_loader.observability.logger import get_logger, log_operation, set_level
from influx_loader.observability.metrics import start_metrics_server
from influx_loader.store import InfluxStoreClient, StoreClient, ensure_database

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def create_store(config: LoaderConfig) -> StoreClient:
    """
    Create the store client for a run.

    Args:
        config: Loader configuration

    Returns:
        Store client
    """
    return InfluxStoreClient.from_config(config)


def run_load(config: LoaderConfig, csv_file: Path, store: StoreClient) -> LoadSummary:
    """
    Prepare the database and load one CSV file.

    Args:
        config: Loader configuration
        csv_file: CSV file with a header row
        store: Store client

    Returns:
        LoadSummary for the run
    """
    if not csv_file.is_file():
        raise ReadError(f"Failed to open {csv_file}")

    ensure_database(
        store,
        config.database_name,
        auto_create=not config.disable_auto_create_database,
    )

    pipeline = IngestionPipeline(config, store)
    with log_operation(f"Loading {csv_file}", logger=logger, database=config.database_name):
        return pipeline.load_file(csv_file)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="influx-loader",
        description="Bulk-load a CSV file into InfluxDB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load with defaults (database "test", measurement "data")
  influx-loader data/cpu.csv

  # Tag columns and a custom timestamp layout
  influx-loader data/cpu.csv --database-name metrics --measurement-name cpu \\
      --tag-columns host,region --timestamp-format "2006-01-02T15:04:05Z07:00"

  # Epoch timestamps, bounded retries
  influx-loader data/cpu.csv --timestamp-format unix --max-write-attempts 5

  # Options from a YAML file, overridden on the command line
  influx-loader data/cpu.csv --config loader.yaml --batch-size 1000
        """
    )

    parser.add_argument("csv_file", help="Path to a CSV file with an initial header row")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--log-level", default=None, help="Log level (default: env LOG_LEVEL or INFO)")

    # Connection
    parser.add_argument("--server-address", "--server", help="Server address (default: http://localhost:8181)")
    parser.add_argument("--database-name", "--database", help="Database name (default: test)")
    parser.add_argument("--username", help="Username (ignored by InfluxDB 3)")
    parser.add_argument("--password", help="Password, used as the API token when --token is not given")
    parser.add_argument("--token", help="API token")
    parser.add_argument("--http-timeout-seconds", type=float, help="HTTP timeout in seconds (default: 10)")
    parser.add_argument(
        "--disable-auto-create-database",
        action="store_true",
        default=None,
        help="Disable automatic creation of database",
    )

    # Mapping
    parser.add_argument("--measurement-name", "--measurement", help="Measurement name (default: data)")
    parser.add_argument("--batch-size", type=int, help="Batch insert size (default: 5000)")
    parser.add_argument("--tag-columns", help="Comma-separated list of columns to use as tags instead of fields")
    parser.add_argument("--timestamp-column", "-ts", help="Header name of the column to use as the timestamp")
    parser.add_argument(
        "--timestamp-format",
        "-tf",
        help='Timestamp layout used to parse all timestamp records, or "unix"',
    )
    parser.add_argument("--force-float", action="store_true", default=None, help="Store integers as floats")
    parser.add_argument("--force-string", action="store_true", default=None, help="Store numbers as strings")
    parser.add_argument(
        "--treat-null-token-as-absent",
        action="store_true",
        default=None,
        help="Drop null/Null/NULL cells instead of storing them as strings",
    )

    # Retries and diagnostics
    parser.add_argument("--max-write-attempts", type=int, help="Attempts per batch, 0 = unbounded (default: 0)")
    parser.add_argument("--backoff-min-seconds", type=float, help="First retry delay (default: 0.1)")
    parser.add_argument("--backoff-max-seconds", type=float, help="Maximum retry delay (default: 10)")
    parser.add_argument("--backoff-factor", type=float, help="Retry delay growth factor (default: 2)")
    parser.add_argument("--backoff-jitter", action="store_true", default=None, help="Randomise retry delays")
    parser.add_argument(
        "--verify-count",
        action="store_true",
        default=None,
        help="Log the stored row count after every batch",
    )
    parser.add_argument("--metrics-port", type=int, help="Expose Prometheus metrics on this port")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv()
    if args.log_level:
        set_level(args.log_level)

    overrides = {
        key: value
        for key, value in vars(args).items()
        if key not in ("csv_file", "config", "log_level")
    }

    try:
        config = ConfigLoader(args.config).load(overrides)

        if config.metrics_port:
            start_metrics_server(config.metrics_port)
            logger.info(f"Metrics available on port {config.metrics_port}")

        store = create_store(config)
        try:
            summary = run_load(config, Path(args.csv_file), store)
        finally:
            close = getattr(store, "close", None)
            if close is not None:
                close()

    except LoaderError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.error("Interrupted; the current batch was not written")
        return EXIT_INTERRUPTED

    logger.info(
        f"Loaded {summary.points_written} points from {summary.rows_read} rows "
        f"({summary.rows_skipped} skipped, {summary.batches_flushed} batches, "
        f"{summary.write_retries} retries)"
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
