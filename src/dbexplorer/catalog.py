"""
Schema catalog built from database introspection.
"""

import logging
import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from sqlalchemy import Engine, inspect
from sqlalchemy.engine import Connection
from sqlalchemy.exc import CompileError, SQLAlchemyError

from .exceptions import NoTablesFoundError, StorageError, UnknownTableError
from .models import ColumnMetadata, TableMetadata

logger = logging.getLogger(__name__)

# Matches INT, INTEGER, TINYINT, SMALLINT, MEDIUMINT, BIGINT as whole words,
# so POINT or INTERVAL do not count as numeric.
_INTEGER_MARKER = re.compile(r"(?<![A-Z])(?:TINY|SMALL|MEDIUM|BIG)?INT(?:EGER)?(?![A-Z])", re.IGNORECASE)
_INCREMENT_MARKER = "increment"


def classify_column(field_name: str, type_name: str, extra: str, nullable: bool) -> ColumnMetadata:
    """
    Build column metadata from the attributes reported by introspection.

    Args:
        field_name: Name of the column
        type_name: Declared SQL type, e.g. ``VARCHAR(255)`` or ``INTEGER``
        extra: Extra attributes string, e.g. ``auto_increment``
        nullable: Whether the column accepts NULL

    Returns:
        ColumnMetadata for the column
    """
    return ColumnMetadata(
        field_name=field_name,
        is_numeric_type=bool(_INTEGER_MARKER.search(type_name)),
        is_nullable=bool(nullable),
        is_auto_increment=_INCREMENT_MARKER in extra.lower(),
    )


def _type_name(column: Mapping[str, Any]) -> str:
    type_ = column["type"]
    try:
        return str(type_)
    except CompileError:
        # Dialect-specific types the generic compiler cannot render
        return type(type_).__name__


def _sqlite_declared_types(conn: Connection, table_name: str) -> dict[str, str]:
    """Column types exactly as written in the CREATE TABLE statement."""
    quoted = conn.dialect.identifier_preparer.quote_identifier(table_name)
    return {row[1]: row[2] for row in conn.exec_driver_sql(f"PRAGMA table_info({quoted})")}


def _extra_attributes(column: Mapping[str, Any], pk_columns: list[str], declared_type: str | None) -> str:
    autoincrement = column.get("autoincrement")
    if autoincrement is True:
        return "auto_increment"
    # SQLite reports no autoincrement flag. Only a lone primary key declared
    # exactly INTEGER aliases the rowid; BIGINT or INT keys are not generated.
    if (
        declared_type is not None
        and autoincrement is not False
        and pk_columns == [column["name"]]
        and declared_type.strip().upper() == "INTEGER"
    ):
        return "auto_increment"
    return ""


class Catalog:
    """
    Read-only mapping from table name to column metadata.

    Build it once with :meth:`build` before serving requests; nothing mutates it afterwards.
    """

    def __init__(self, tables: Mapping[str, TableMetadata]):
        self._tables = MappingProxyType(dict(tables))
        self._table_names = tuple(self._tables)

    @classmethod
    def build(cls, engine: Engine) -> "Catalog":
        """
        Introspect every table reachable through the engine.

        Args:
            engine: SQLAlchemy engine with a verified connection

        Returns:
            Catalog covering every discovered table

        Raises:
            NoTablesFoundError: If the database has no tables
            StorageError: If introspection of any table fails
        """
        tables: dict[str, TableMetadata] = {}
        try:
            with engine.connect() as conn:
                inspector = inspect(conn)
                table_names = inspector.get_table_names()
                if not table_names:
                    raise NoTablesFoundError()

                for table_name in table_names:
                    pk_columns = inspector.get_pk_constraint(table_name).get("constrained_columns") or []
                    declared = _sqlite_declared_types(conn, table_name) if conn.dialect.name == "sqlite" else {}
                    columns = []
                    for col in inspector.get_columns(table_name):
                        type_name = _type_name(col)
                        columns.append(
                            classify_column(
                                col["name"],
                                type_name,
                                _extra_attributes(col, pk_columns, declared.get(col["name"])),
                                col.get("nullable", True),
                            )
                        )
                    tables[table_name] = TableMetadata.from_columns(table_name, columns)
        except SQLAlchemyError as e:
            raise StorageError(f"Schema introspection failed: {e}") from e

        logger.info("Catalog built with %d tables", len(tables))
        return cls(tables)

    @property
    def table_names(self) -> list[str]:
        return list(self._table_names)

    def table(self, name: str) -> TableMetadata:
        """
        Get metadata for a table.

        Raises:
            UnknownTableError: If the table was not discovered at startup
        """
        try:
            return self._tables[name]
        except KeyError:
            raise UnknownTableError(name) from None

    def get_id_column(self, table: str) -> str:
        """Name of the table's auto-increment column, or an empty string if it has none."""
        id_column = self.table(table).id_column
        return id_column.field_name if id_column else ""

    def collect_writable_columns(self, table: str) -> list[str]:
        """All columns except the auto-increment one, in canonical order."""
        return [col.field_name for col in self.table(table).writable_columns]

    def __contains__(self, name: object) -> bool:
        return name in self._tables

    def __iter__(self) -> Iterator[str]:
        return iter(self._table_names)

    def __len__(self) -> int:
        return len(self._tables)
