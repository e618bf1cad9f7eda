"""
Core DBExplorer class for generic CRUD over an introspected schema.
"""

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Engine, text
from sqlalchemy.engine import Connection, CursorResult
from sqlalchemy.exc import SQLAlchemyError

from .catalog import Catalog
from .config import ExplorerConfig
from .decoder import decode_many, decode_single
from .exceptions import DatabaseConnectionError, StorageError
from .logging_utils import statement_context
from .models import Entry, RequestDescriptor, Statement
from .query_builder import QueryBuilder
from .validator import coerce_inbound, validate

logger = logging.getLogger(__name__)


def create_engine_from_config(config: ExplorerConfig) -> Engine:
    """
    Create a pooled SQLAlchemy engine from configuration.

    ``max_idle`` connections are kept in the pool, up to ``max_open`` in total;
    connections idle past ``idle_timeout_seconds`` are recycled on checkout.
    """
    url = sa.engine.make_url(config.database.url)
    if url.get_backend_name() == "sqlite":
        # SQLite picks its own pool class; the sizing options do not apply.
        return sa.create_engine(url)
    pool = config.pool
    return sa.create_engine(
        url,
        pool_size=pool.max_idle,
        max_overflow=pool.max_open - pool.max_idle,
        pool_recycle=pool.idle_timeout_seconds,
        pool_timeout=pool.checkout_timeout_seconds,
        pool_pre_ping=True,
    )


class DBExplorer:
    """
    Generic CRUD access to every table of a database.

    The schema catalog is built once when the explorer is created and is
    shared read-only by every request afterwards.
    """

    def __init__(self, engine: Engine, catalog: Catalog | None = None):
        """
        Initialize the explorer over an engine.

        Args:
            engine: SQLAlchemy engine for the target database
            catalog: Prebuilt catalog; introspected from the engine when omitted

        Raises:
            DatabaseConnectionError: If the database cannot be reached
            NoTablesFoundError: If the database has no tables
            StorageError: If schema introspection fails
        """
        self._engine: Engine | None = engine
        self._check_connection()
        self._catalog = catalog if catalog is not None else Catalog.build(engine)
        self._builder = QueryBuilder(self._catalog, engine.dialect)

    @classmethod
    def from_config(cls, config: ExplorerConfig) -> "DBExplorer":
        return cls(create_engine_from_config(config))

    def _check_connection(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(f"Cannot access database: {e}") from e

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DatabaseConnectionError("Explorer is closed")
        return self._engine

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def _execute(self, conn: Connection, statement: Statement, operation: str, table: str) -> CursorResult:
        try:
            result = conn.execute(text(statement.sql), statement.params)
        except (SQLAlchemyError, OverflowError) as e:
            # Drivers raise OverflowError unwrapped for integers they cannot bind
            logger.warning("Statement failed", extra=statement_context(operation, table, error=str(e)))
            raise StorageError(f"{operation} on {table} failed: {e}") from e
        logger.debug("Statement executed", extra=statement_context(operation, table, sql=statement.sql))
        return result

    def _read(self, statement: Statement, operation: str, table: str) -> list[Any]:
        try:
            with self.engine.connect() as conn:
                return self._execute(conn, statement, operation, table).fetchall()
        except SQLAlchemyError as e:
            raise StorageError(f"{operation} on {table} failed: {e}") from e

    def _write(self, statement: Statement, operation: str, table: str) -> tuple[int, Any]:
        """Run one statement in its own transaction; return (rowcount, generated key)."""
        try:
            with self.engine.begin() as conn:
                result = self._execute(conn, statement, operation, table)
                if statement.returns_key:
                    return 1, result.scalar_one()
                return result.rowcount, result.lastrowid
        except SQLAlchemyError as e:
            raise StorageError(f"{operation} on {table} failed: {e}") from e

    def list_tables(self) -> list[str]:
        """
        Get list of all tables in the catalog.

        Returns:
            Table names in introspection order
        """
        return self._catalog.table_names

    def list_records(self, request: RequestDescriptor) -> list[Entry]:
        """
        Read one page of rows from a table.

        Args:
            request: Descriptor with the table name and raw ``limit``/``offset`` params

        Returns:
            Decoded records in key order

        Raises:
            UnknownTableError: If the table is not in the catalog
            StorageError: If the query fails
        """
        metadata = self._catalog.table(request.table)
        statement = self._builder.select_page(request)
        rows = self._read(statement, "list", request.table)
        return decode_many(rows, metadata)

    def get_record(self, request: RequestDescriptor) -> Entry:
        """
        Read a single row by its auto-increment key.

        Raises:
            UnknownTableError: If the table is not in the catalog
            RecordNotFoundError: If no row has the requested id
            StorageError: If the query fails
        """
        metadata = self._catalog.table(request.table)
        statement = self._builder.select_by_id(request)
        rows = self._read(statement, "get", request.table)
        return decode_single(rows[0] if rows else None, metadata)

    def create_record(self, request: RequestDescriptor, payload: Mapping[str, Any]) -> dict[str, Any]:
        """
        Insert a row built from a raw JSON payload.

        Unknown payload keys are dropped; missing non-nullable columns get
        their zero value.

        Args:
            request: Descriptor naming the table
            payload: Parsed JSON object as received

        Returns:
            ``{id_column: new_id}``, or ``{"inserted": count}`` for tables without a key

        Raises:
            UnknownTableError: If the table is not in the catalog
            InvalidFieldTypeError: If a submitted field breaks its column's rules
            StorageError: If the insert fails
        """
        metadata = self._catalog.table(request.table)
        entry = coerce_inbound(payload, metadata.columns)
        validate(entry, metadata.columns)
        statement = self._builder.insert(replace(request, body=entry))
        rowcount, key = self._write(statement, "insert", request.table)

        id_column = self._catalog.get_id_column(request.table)
        if not id_column:
            return {"inserted": rowcount}
        return {id_column: key}

    def update_record(self, request: RequestDescriptor, payload: Mapping[str, Any]) -> dict[str, int]:
        """
        Partially update a row by its auto-increment key.

        Returns:
            ``{"updated": count}``

        Raises:
            UnknownTableError: If the table is not in the catalog
            InvalidFieldTypeError: If a submitted field breaks its column's rules
            BadRequestError: If no writable column is left to set
            StorageError: If the update fails
        """
        metadata = self._catalog.table(request.table)
        entry = coerce_inbound(payload, metadata.columns)
        validate(entry, metadata.columns)
        statement = self._builder.update(replace(request, body=entry))
        rowcount, _ = self._write(statement, "update", request.table)
        return {"updated": rowcount}

    def delete_record(self, request: RequestDescriptor) -> dict[str, int]:
        """
        Delete a row by its auto-increment key. Deleting a missing id reports zero rows.

        Raises:
            UnknownTableError: If the table is not in the catalog
            StorageError: If the delete fails
        """
        self._catalog.table(request.table)
        statement = self._builder.delete(request)
        rowcount, _ = self._write(statement, "delete", request.table)
        return {"deleted": rowcount}

    def close(self) -> None:
        """Dispose the engine and its connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
