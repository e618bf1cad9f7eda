"""
dbexplorer - generic CRUD access to any relational schema

This library introspects a live database once, then lists, fetches, inserts,
updates and deletes rows of any discovered table through parameterized SQL
built from the discovered metadata.
"""

from .catalog import Catalog, classify_column
from .core import DBExplorer
from .decoder import Cell, CellKind, decode_many, decode_single
from .exceptions import (
    BadRequestError,
    ConfigError,
    DatabaseConnectionError,
    ExplorerError,
    InvalidFieldTypeError,
    NoTablesFoundError,
    RecordNotFoundError,
    StorageError,
    UnknownTableError,
)
from .models import ColumnMetadata, Entry, RequestDescriptor, Statement, TableMetadata
from .query_builder import QueryBuilder
from .validator import coerce_inbound, validate

__version__ = "0.1.0"
__all__ = [
    "DBExplorer",
    "Catalog",
    "QueryBuilder",
    "classify_column",
    "validate",
    "coerce_inbound",
    "decode_single",
    "decode_many",
    "Cell",
    "CellKind",
    "ColumnMetadata",
    "TableMetadata",
    "RequestDescriptor",
    "Statement",
    "Entry",
    "ExplorerError",
    "DatabaseConnectionError",
    "NoTablesFoundError",
    "UnknownTableError",
    "RecordNotFoundError",
    "InvalidFieldTypeError",
    "BadRequestError",
    "StorageError",
    "ConfigError",
]
