"""
Logging setup for the dbexplorer service.

Statement logs carry their operation, table and details under a single
``db_context`` record attribute, which the formatter renders as
``key=value`` pairs after the message.
"""

import logging
from typing import Any

from .exceptions import ConfigError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
CONTEXT_ATTRIBUTE = "db_context"


class StatementFormatter(logging.Formatter):
    """Formatter that appends the statement context of a record, when present."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, CONTEXT_ATTRIBUTE, None)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


def configure_logging(level: str) -> int:
    """
    Install the service's log handler on the root logger.

    Args:
        level: Level name such as ``info`` or ``DEBUG``

    Returns:
        The numeric level that was applied

    Raises:
        ConfigError: If the level name is unknown
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ConfigError(f"Unknown log level: {level}")
    handler = logging.StreamHandler()
    handler.setFormatter(StatementFormatter(LOG_FORMAT))
    logging.basicConfig(level=resolved, handlers=[handler])
    logging.getLogger("dbexplorer").setLevel(resolved)
    return resolved


def statement_context(operation: str, table: str, **details: Any) -> dict[str, Any]:
    """Build the ``extra`` mapping for a statement log; None-valued details are dropped."""
    context = {"operation": operation, "table": table}
    context.update((key, value) for key, value in details.items() if value is not None)
    return {CONTEXT_ATTRIBUTE: context}
