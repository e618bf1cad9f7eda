"""
Parameterized SQL synthesis from catalog metadata.

Every identifier placed in SQL text comes from the catalog and is quoted by
the dialect; every submitted value travels as a bound parameter.
"""

import re
from typing import Any

from sqlalchemy.engine import Dialect

from .catalog import Catalog
from .exceptions import BadRequestError
from .models import RequestDescriptor, Statement, TableMetadata

_BIND_LIKE_COLON = re.compile(r":(?=[\w$])")


class QueryBuilder:
    """Builds list, get, insert, update and delete statements for any catalog table."""

    def __init__(self, catalog: Catalog, dialect: Dialect):
        self._catalog = catalog
        self._dialect = dialect
        self._preparer = dialect.identifier_preparer

    def quote(self, identifier: str) -> str:
        """
        Always-quoted identifier, safe to embed in ``text()``.

        ``text()`` doubles percent signs itself and reads ``:name`` as a bind
        marker, so only the quote character is escaped here, plus such colons.
        """
        preparer = self._preparer
        escaped = identifier.replace(preparer.escape_quote, preparer.escape_to_quote)
        quoted = f"{preparer.initial_quote}{escaped}{preparer.final_quote}"
        return _BIND_LIKE_COLON.sub(r"\\:", quoted)

    def _column_list(self, names) -> str:
        return ", ".join(self.quote(name) for name in names)

    def _key_column(self, table: TableMetadata) -> str:
        id_column = table.id_column
        if id_column is None:
            raise BadRequestError(f"table {table.name} has no auto-increment key")
        return id_column.field_name

    def _require_row_id(self, request: RequestDescriptor) -> int:
        if request.row_id is None:
            raise BadRequestError("record id is required")
        return request.row_id

    def select_page(self, request: RequestDescriptor) -> Statement:
        """SELECT one page of rows, ordered by the key column when the table has one."""
        table = self._catalog.table(request.table)
        sql = f"SELECT {self._column_list(table.column_names)} FROM {self.quote(table.name)}"
        if table.id_column is not None:
            sql += f" ORDER BY {self.quote(table.id_column.field_name)}"
        sql += " LIMIT :limit OFFSET :offset"
        return Statement(sql, {"limit": request.limit, "offset": request.offset})

    def select_by_id(self, request: RequestDescriptor) -> Statement:
        table = self._catalog.table(request.table)
        key = self._key_column(table)
        row_id = self._require_row_id(request)
        sql = (
            f"SELECT {self._column_list(table.column_names)} FROM {self.quote(table.name)} "
            f"WHERE {self.quote(key)} = :row_id"
        )
        return Statement(sql, {"row_id": row_id})

    def insert(self, request: RequestDescriptor) -> Statement:
        """
        INSERT every writable column of the table.

        Columns missing from the body, or sent as null, are bound as null when
        nullable and as their zero value (``0`` or ``""``) otherwise.
        """
        table = self._catalog.table(request.table)
        columns = table.writable_columns
        params: dict[str, Any] = {}
        for i, col in enumerate(columns):
            value = request.body.get(col.field_name)
            if value is None and not col.is_nullable:
                value = col.zero_value
            params[f"v{i}"] = value

        if columns:
            placeholders = ", ".join(f":v{i}" for i in range(len(columns)))
            sql = (
                f"INSERT INTO {self.quote(table.name)} "
                f"({self._column_list(col.field_name for col in columns)}) VALUES ({placeholders})"
            )
        elif self._dialect.supports_default_values:
            sql = f"INSERT INTO {self.quote(table.name)} DEFAULT VALUES"
        else:
            sql = f"INSERT INTO {self.quote(table.name)} () VALUES ()"

        returns_key = table.id_column is not None and self._dialect.insert_returning
        if returns_key:
            sql += f" RETURNING {self.quote(table.id_column.field_name)}"
        return Statement(sql, params, returns_key=returns_key)

    def update(self, request: RequestDescriptor) -> Statement:
        """
        UPDATE only the writable columns present in the body.

        Raises:
            BadRequestError: If the body names no writable column
        """
        table = self._catalog.table(request.table)
        key = self._key_column(table)
        row_id = self._require_row_id(request)
        columns = [col.field_name for col in table.writable_columns if col.field_name in request.body]
        if not columns:
            raise BadRequestError()

        params: dict[str, Any] = {}
        assignments = []
        for i, name in enumerate(columns):
            assignments.append(f"{self.quote(name)} = :v{i}")
            params[f"v{i}"] = request.body[name]
        params["row_id"] = row_id
        sql = f"UPDATE {self.quote(table.name)} SET {', '.join(assignments)} WHERE {self.quote(key)} = :row_id"
        return Statement(sql, params)

    def delete(self, request: RequestDescriptor) -> Statement:
        table = self._catalog.table(request.table)
        key = self._key_column(table)
        row_id = self._require_row_id(request)
        sql = f"DELETE FROM {self.quote(table.name)} WHERE {self.quote(key)} = :row_id"
        return Statement(sql, {"row_id": row_id})
