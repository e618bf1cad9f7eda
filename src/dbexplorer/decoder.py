"""
Normalization of raw driver rows into output entries.
"""

import enum
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .exceptions import RecordNotFoundError
from .models import ColumnMetadata, Entry, TableMetadata

logger = logging.getLogger(__name__)


class CellKind(enum.Enum):
    NULL = "null"
    INTEGER = "integer"
    TEXT = "text"


@dataclass(frozen=True)
class Cell:
    """A decoded column value tagged with its output kind."""

    kind: CellKind
    value: int | str | None


NULL_CELL = Cell(CellKind.NULL, None)


def _as_text(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode("utf-8", errors="replace")
    return str(raw)


def _as_integer(raw: Any, column: ColumnMetadata) -> int:
    if isinstance(raw, (bytes, bytearray, memoryview, str)):
        raw = _as_text(raw).strip()
    try:
        return int(raw)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Column %s returned a non-integer value %r; decoding as 0", column.field_name, raw)
        return 0


def decode_cell(raw: Any, column: ColumnMetadata) -> Cell:
    """
    Decode one raw value by the column's category, not by the value's own type.

    SQL NULL stays null for every column; numeric columns always yield int and
    all other columns always yield str.
    """
    if raw is None:
        return NULL_CELL
    if column.is_numeric_type:
        return Cell(CellKind.INTEGER, _as_integer(raw, column))
    return Cell(CellKind.TEXT, _as_text(raw))


def decode_row(raw_row: Sequence[Any], metadata: TableMetadata) -> Entry:
    return {
        column.field_name: decode_cell(raw, column).value
        for column, raw in zip(metadata.columns, raw_row)
    }


def decode_single(raw_row: Sequence[Any] | None, metadata: TableMetadata) -> Entry:
    """
    Decode the single row of a by-id read.

    Raises:
        RecordNotFoundError: If there is no row, or its shape does not match the table
    """
    if raw_row is None or len(raw_row) != len(metadata.columns):
        raise RecordNotFoundError()
    return decode_row(raw_row, metadata)


def decode_many(raw_rows: Iterable[Sequence[Any]], metadata: TableMetadata) -> list[Entry]:
    return [decode_row(raw_row, metadata) for raw_row in raw_rows]
