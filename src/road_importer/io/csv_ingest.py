from __future__ import annotations

import csv
import io
import math
import re
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterator

from loguru import logger

from road_importer.errors import InputAccessError
from road_importer.records import COLUMNS, RawRow

INCORRECT_FIELD = "incorrect field"
EMPTY_MODE = "empty edge mode value"
MISSING_FIELD = "missing field"
INVALID_ENCODING = "invalid utf-8"
MALFORMED_RECORD = "malformed record"

MODE_COLUMN = COLUMNS.index("edge_mode")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_int64(value: str) -> int:
    """Parse a base-10 signed 64-bit integer.

    :raises ValueError: If `value` is not plain decimal digits with an optional sign,
        or falls outside the int64 range.
    """
    if not _INT_RE.fullmatch(value):
        raise ValueError(f"not an integer: {value!r}")
    n = int(value)
    if not _INT64_MIN <= n <= _INT64_MAX:
        raise ValueError(f"integer out of int64 range: {value!r}")
    return n


def parse_float64(value: str) -> float:
    """Parse a finite float written in decimal or exponent notation.

    `float()` alone is too lenient here: it accepts "nan", "inf", underscores
    and surrounding whitespace.

    :raises ValueError: If `value` is not conventional notation or is not finite.
    """
    if not _FLOAT_RE.fullmatch(value):
        raise ValueError(f"not a float: {value!r}")
    x = float(value)
    if not math.isfinite(x):
        raise ValueError(f"float out of range: {value!r}")
    return x


def parse_mode(value: str) -> str:
    if value == "":
        raise ValueError("empty mode")
    return value


_COERCERS: tuple[Callable[[str], object], ...] = (
    parse_int64,
    parse_int64,
    parse_int64,
    parse_float64,
    parse_float64,
    parse_mode,
    parse_float64,
)


def coerce_row(values: list[str], line: int = 0, allow_short_rows: bool = False) -> RawRow:
    """Coerce the textual columns of one CSV record into a :class:`RawRow`.

    Coercion stops at the first failing column; the row carries an error marker
    and the remaining fields keep their zero value. Extra columns are ignored.

    :param values: Raw column values of one record.
    :type values: list[str]
    :param line: 1-based line number, for diagnostics.
    :type line: int
    :param allow_short_rows: Leave missing trailing columns zero-valued instead of
        rejecting the row, defaults to False.
    :type allow_short_rows: bool, optional
    :return: The coerced row, possibly carrying an error marker.
    :rtype: RawRow
    """
    row = RawRow(line=line)

    for idx, (name, coerce) in enumerate(zip(COLUMNS, _COERCERS)):
        if idx >= len(values):
            if not allow_short_rows:
                logger.warning("Missing column {} (line {})", idx, line)
                row.error = MISSING_FIELD
                row.error_column = idx
            break

        try:
            setattr(row, name, coerce(values[idx]))
        except ValueError:
            logger.warning("Unexpected type in column {} (line {})", idx, line)
            row.error = EMPTY_MODE if idx == MODE_COLUMN else INCORRECT_FIELD
            row.error_column = idx
            break

    return row


def _first_undecodable(values: list[str]) -> int | None:
    # bytes that aren't UTF-8 come through as lone surrogates (surrogateescape)
    for idx, value in enumerate(values):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            return idx
    return None


def parse_rows(
    stream: BinaryIO,
    skip_header: bool = False,
    allow_short_rows: bool = False,
) -> Iterator[RawRow]:
    """Lazily parse an edge CSV byte stream into :class:`RawRow` values.

    Rows are yielded in input order, including rows that failed to parse (their
    `error` is set). Rows with bytes that are not valid UTF-8, or that the CSV
    reader cannot split, are marked as bad rather than aborting the stream.
    Blank lines are skipped. The iterator is single-use.

    :param stream: Readable binary stream of UTF-8 comma-separated data.
    :type stream: BinaryIO
    :param skip_header: Drop the first non-blank line unparsed, defaults to False.
    :type skip_header: bool, optional
    :param allow_short_rows: See :func:`coerce_row`, defaults to False.
    :type allow_short_rows: bool, optional
    :return: Iterator of parsed rows.
    :rtype: Iterator[RawRow]
    """
    text = io.TextIOWrapper(stream, encoding="utf-8-sig", errors="surrogateescape", newline="")
    try:
        reader = csv.reader(text)
        header_pending = skip_header
        while True:
            try:
                values = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                if header_pending:
                    header_pending = False
                    continue
                logger.warning(f"Malformed CSV record (line {reader.line_num}): {e}")
                yield RawRow(line=reader.line_num, error=MALFORMED_RECORD)
                continue

            if not values:
                continue
            if header_pending:
                header_pending = False
                continue

            bad_idx = _first_undecodable(values)
            if bad_idx is not None:
                logger.warning(f"Invalid UTF-8 in column {bad_idx} (line {reader.line_num})")
                yield RawRow(line=reader.line_num, error=INVALID_ENCODING, error_column=bad_idx)
                continue

            yield coerce_row(values, line=reader.line_num, allow_short_rows=allow_short_rows)
    finally:
        # don't let the wrapper close the caller's stream
        text.detach()


@contextmanager
def open_input(path: str | Path) -> Iterator[BinaryIO]:
    """Open the input CSV for binary reading.

    :param path: Path to the CSV file.
    :type path: str | Path
    :raises InputAccessError: If the file cannot be opened.
    :return: Context manager yielding the open binary stream.
    :rtype: Iterator[BinaryIO]
    """
    path = Path(path)
    try:
        f = path.open("rb")
    except OSError as e:
        raise InputAccessError(f"Cannot open input file: {path}") from e
    with f:
        yield f
