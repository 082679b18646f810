"""
CSV row reader.

Streams rows as lists of strings. Every row must have as many cells as the
header; anything else is a fatal ReadError.
"""

import csv
from pathlib import Path
from typing import Iterator

from influx_loader.core.errors import ReadError


class CSVReader:
    """
    Reads a delimited text file row by row without type conversion.
    """

    def __init__(
        self,
        file_path: str | Path,
        delimiter: str = ",",
        encoding: str = "utf-8-sig"
    ):
        """
        Initialize CSV reader.

        Args:
            file_path: Path to CSV file
            delimiter: Field delimiter
            encoding: File encoding (the default strips a UTF-8 BOM)
        """
        self.file_path = Path(file_path)
        self.delimiter = delimiter
        self.encoding = encoding

    def rows(self) -> Iterator[tuple[int, list[str]]]:
        """
        Yield (line_number, cells) for every non-blank row, header included.

        Raises:
            ReadError: If the file cannot be opened, is malformed, or a row's
                cell count differs from the header's
        """
        try:
            f = open(self.file_path, newline="", encoding=self.encoding)
        except OSError as e:
            raise ReadError(f"Failed to open {self.file_path}: {e}") from e

        with f:
            reader = csv.reader(f, delimiter=self.delimiter, strict=True)
            expected = None
            try:
                for cells in reader:
                    if not cells:
                        continue
                    if expected is None:
                        expected = len(cells)
                    elif len(cells) != expected:
                        raise ReadError(
                            f"wrong number of fields (expected {expected}, got {len(cells)})",
                            line_number=reader.line_num,
                        )
                    yield reader.line_num, cells
            except csv.Error as e:
                raise ReadError(f"CSV error: {e}", line_number=reader.line_num) from e
            except UnicodeDecodeError as e:
                raise ReadError(f"CSV error: {e}", line_number=reader.line_num) from e

    def __iter__(self) -> Iterator[list[str]]:
        for _, cells in self.rows():
            yield cells
