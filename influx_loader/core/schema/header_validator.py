"""
Header validation: assigns a role to every CSV column.
"""

from influx_loader.core.config import LoaderConfig
from influx_loader.core.errors import ConfigError
from influx_loader.core.models import Column, ColumnRole, Header
from influx_loader.observability.logger import get_logger

logger = get_logger(__name__)


class HeaderValidator:
    """
    Checks a header row against the configured tag and timestamp columns.
    """

    def __init__(self, tag_names: list[str] | set[str], timestamp_column: str):
        """
        Initialize header validator.

        Args:
            tag_names: Columns to be stored as tags
            timestamp_column: Header name of the timestamp column
        """
        self.tag_names = set(tag_names)
        self.timestamp_column = timestamp_column

    @classmethod
    def from_config(cls, config: LoaderConfig) -> "HeaderValidator":
        return cls(config.tag_columns, config.timestamp_column)

    def validate(self, header_row: list[str]) -> Header:
        """
        Derive the role of every column.

        Args:
            header_row: Column names in file order

        Returns:
            Validated Header

        Raises:
            ConfigError: If there is no field column, no timestamp column,
                a configured tag name matches no column, or a column name
                is repeated
        """
        remaining_tags = set(self.tag_names)
        has_timestamp = False
        first_field = None
        columns = []

        for name in header_row:
            if name == self.timestamp_column:
                has_timestamp = True
                role = ColumnRole.TIMESTAMP
            elif name in self.tag_names:
                remaining_tags.discard(name)
                role = ColumnRole.TAG
            else:
                if first_field is None:
                    first_field = name
                role = ColumnRole.FIELD
            columns.append(Column(name=name, role=role))

        headers = ",".join(header_row)
        if first_field is None:
            raise ConfigError("You must have at least one field (non-tag) column")
        if not has_timestamp:
            raise ConfigError(
                f"Timestamp column ({self.timestamp_column}) does not match any header ({headers})"
            )
        if remaining_tags:
            raise ConfigError(
                f"Tag names ({','.join(sorted(remaining_tags))}) do not all have matching headers ({headers})"
            )

        duplicates = sorted({name for name in header_row if header_row.count(name) > 1})
        if duplicates:
            raise ConfigError(
                f"Column names ({','.join(duplicates)}) appear more than once in the header ({headers})"
            )

        header = Header(columns=tuple(columns), first_field=first_field)
        logger.debug(
            f"Header validated: {len(header.tag_names)} tags, {len(header.field_names)} fields, "
            f"timestamp column '{self.timestamp_column}'"
        )
        return header
