"""
Exception classes for dbexplorer operations.
"""


class ExplorerError(Exception):
    """Base exception for database explorer operations."""

    pass


class DatabaseConnectionError(ExplorerError):
    """Exception raised when the database cannot be reached at startup."""

    pass


class NoTablesFoundError(ExplorerError):
    """Exception raised when introspection finds no tables to expose."""

    def __init__(self, message: str = "no tables in database"):
        super().__init__(message)


class UnknownTableError(ExplorerError):
    """Exception raised when a requested table is not in the catalog."""

    def __init__(self, table: str):
        super().__init__("unknown table")
        self.table = table


class RecordNotFoundError(ExplorerError):
    """Exception raised when no row matches a by-id read."""

    def __init__(self, message: str = "record not found"):
        super().__init__(message)


class InvalidFieldTypeError(ExplorerError):
    """Exception raised when a submitted field violates its column's rules."""

    def __init__(self, column: str):
        super().__init__(f"field {column} has invalid type")
        self.column = column


class BadRequestError(ExplorerError):
    """Exception raised when a request carries nothing usable."""

    def __init__(self, message: str = "bad request"):
        super().__init__(message)


class StorageError(ExplorerError):
    """Exception raised when the database driver fails."""

    pass


class ConfigError(ValueError):
    """Configuration is missing or invalid."""
