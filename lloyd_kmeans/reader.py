"""
Delimited-text input and label output for the command line tool.

Rows are read line by line, the selected columns are pulled out by index and
parsed as floats. Malformed rows are skipped unless ``fail_on_errors`` is set.
"""

import sys
from typing import IO, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError, InputParseError


def _parse_index(text: str, original: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise ConfigurationError(
            f"Could not parse column '{original}' as an unsigned integer"
        ) from None
    if value < 0:
        raise ConfigurationError(f"Column index must be non-negative, got '{original}'")
    return value


def parse_columns(args: Iterable[str]) -> List[int]:
    """
    Turn positional arguments into column indices.

    Each argument is either a single index (``3``) or an inclusive range
    (``0-9``).

    Returns:
        Column indices in the order given
    """
    columns = []
    for arg in args:
        if '-' in arg:
            start, sep, end = arg.partition('-')
            if not start or not end:
                raise ConfigurationError(
                    f"Could not parse range '{arg}', expected the format <digit>-<digit>"
                )
            low = _parse_index(start, arg)
            high = _parse_index(end, arg)
            if high <= low:
                raise ConfigurationError(f"Invalid range '{arg}'")
            columns.extend(range(low, high + 1))
        else:
            columns.append(_parse_index(arg, arg))
    if not columns:
        raise ConfigurationError("A set or range of columns is required")
    return columns


class ReaderConfig:
    """
    How to turn lines of delimited text into rows of floats.

    Args:
        columns: Column indices to extract from every line
        field_separator: Separator between fields, may be several characters
        decimal_separator: Decimal point character used by the input
        ignore_header: Treat the first line as a header
        fail_on_errors: Raise on malformed rows instead of skipping them
    """

    def __init__(
        self,
        columns: Sequence[int],
        field_separator: str = ",",
        decimal_separator: str = ".",
        ignore_header: bool = False,
        fail_on_errors: bool = False,
    ):
        if not columns:
            raise ConfigurationError("At least one column is required")
        if not field_separator:
            raise ConfigurationError("Field separator must not be empty")
        if not decimal_separator:
            raise ConfigurationError("Decimal separator must not be empty")
        if len(decimal_separator) > 1:
            print(
                "WARNING: decimal separator should only be a single char, "
                f"but was '{decimal_separator}'.",
                file=sys.stderr,
            )
            decimal_separator = decimal_separator[0]
        if decimal_separator != "." and decimal_separator in field_separator:
            raise ConfigurationError(
                f"Decimal separator '{decimal_separator}' clashes with "
                f"field separator '{field_separator}'"
            )

        self.columns = list(columns)
        self.field_separator = field_separator
        self.decimal_separator = decimal_separator
        self.ignore_header = ignore_header
        self.fail_on_errors = fail_on_errors

    @property
    def n_features(self) -> int:
        return len(self.columns)


def _reject(config: ReaderConfig, message: str, line_number: int, line: str) -> None:
    if config.fail_on_errors:
        raise InputParseError(f"{message} in line {line_number + 1}: '{line}'", line_number + 1, line)
    return None


def parse_row(line: str, line_number: int, config: ReaderConfig) -> Optional[List[float]]:
    """
    Extract the configured columns from one line.

    Args:
        line: Line of text without the trailing newline
        line_number: Zero-based line number, used in error messages
        config: Reader configuration

    Returns:
        The parsed values, or None if the row was malformed and is skipped
    """
    if config.decimal_separator != ".":
        line = line.replace(config.decimal_separator, ".")

    fields = line.split(config.field_separator)
    row = []
    for column in config.columns:
        if column >= len(fields):
            return _reject(config, f"Could not find column {column}", line_number, line)
        try:
            row.append(float(fields[column].strip()))
        except ValueError:
            return _reject(config, f"Could not parse column {column}", line_number, line)
    return row


def read_matrix(stream: IO[str], config: ReaderConfig) -> Tuple[Optional[str], np.ndarray]:
    """
    Read every row from ``stream``.

    Blank lines are ignored. Line numbers in errors count data lines only,
    starting at 1 after the header.

    Returns:
        (header line or None, matrix of shape (n_rows, len(config.columns)))
    """
    header = None
    rows = []
    line_number = 0
    for index, raw in enumerate(stream):
        line = raw.rstrip("\r\n")
        if config.ignore_header and index == 0:
            header = line
            continue
        if not line.strip():
            continue
        row = parse_row(line, line_number, config)
        if row is not None:
            rows.append(row)
        line_number += 1

    if not rows:
        return header, np.empty((0, config.n_features), dtype=np.float64)
    return header, np.array(rows, dtype=np.float64)


def write_labels(stream: IO[str], labels: Iterable[int], header: Optional[str] = None) -> None:
    """Write one label per line, optionally preceded by a header line."""
    if header is not None:
        stream.write(f"{header}\n")
    for label in labels:
        stream.write(f"{int(label)}\n")
