"""
Data models for dbexplorer schema metadata and requests.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

DEFAULT_LIMIT = 5
DEFAULT_OFFSET = 0

# Widest integer every supported driver binds (signed 64-bit).
MIN_BIND_INTEGER = -(2**63)
MAX_BIND_INTEGER = 2**63 - 1

# One row in either direction: a JSON payload on the way in, a decoded record on the way out.
Entry = dict[str, Any]


@dataclass(frozen=True)
class ColumnMetadata:
    """Classification of a single database column."""

    field_name: str
    is_numeric_type: bool
    is_nullable: bool
    is_auto_increment: bool = False

    @property
    def zero_value(self) -> int | str:
        """Value substituted for a missing non-nullable column on insert."""
        return 0 if self.is_numeric_type else ""


@dataclass(frozen=True)
class TableMetadata:
    """Columns of one table in canonical order, with a name lookup."""

    name: str
    columns: tuple[ColumnMetadata, ...]
    column_names: tuple[str, ...] = field(init=False)
    lookup: Mapping[str, ColumnMetadata] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "column_names", tuple(col.field_name for col in self.columns))
        object.__setattr__(self, "lookup", MappingProxyType({col.field_name: col for col in self.columns}))

    @classmethod
    def from_columns(cls, name: str, columns: Iterable[ColumnMetadata]) -> "TableMetadata":
        return cls(name=name, columns=tuple(columns))

    def get_column(self, name: str) -> ColumnMetadata | None:
        return self.lookup.get(name)

    @property
    def id_column(self) -> ColumnMetadata | None:
        for col in self.columns:
            if col.is_auto_increment:
                return col
        return None

    @property
    def writable_columns(self) -> tuple[ColumnMetadata, ...]:
        return tuple(col for col in self.columns if not col.is_auto_increment)


def fits_bind_integer(value: int) -> bool:
    return MIN_BIND_INTEGER <= value <= MAX_BIND_INTEGER


def _parse_non_negative(raw: Any, default: int) -> int:
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except (TypeError, ValueError):
            return default
    return value if 0 <= value <= MAX_BIND_INTEGER else default


@dataclass(frozen=True)
class RequestDescriptor:
    """
    A single request against one table.

    ``row_id`` is None for collection-level requests. ``params`` holds the raw
    query parameters; ``limit`` and ``offset`` parse them and fall back to the
    defaults when a value is missing, malformed, negative or too large to bind.
    """

    table: str
    row_id: int | None = None
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Entry = field(default_factory=dict)

    @property
    def limit(self) -> int:
        return _parse_non_negative(self.params.get("limit"), DEFAULT_LIMIT)

    @property
    def offset(self) -> int:
        return _parse_non_negative(self.params.get("offset"), DEFAULT_OFFSET)

    @property
    def is_collection(self) -> bool:
        return self.row_id is None


@dataclass(frozen=True)
class Statement:
    """Parameterized SQL text with its bind values in statement order."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)
    returns_key: bool = False
