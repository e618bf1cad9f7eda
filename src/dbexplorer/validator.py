"""
Validation and coercion of inbound field maps.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import BadRequestError, InvalidFieldTypeError
from .models import ColumnMetadata, Entry, fits_bind_integer


def _violates(column: ColumnMetadata, value: Any) -> bool:
    if column.is_auto_increment:
        return True
    if value is None:
        return not column.is_nullable
    if column.is_numeric_type:
        return isinstance(value, str)
    return not isinstance(value, str)


def validate(entity: Mapping[str, Any], columns_info: Iterable[ColumnMetadata]) -> None:
    """
    Check submitted fields against their columns.

    Columns absent from ``entity`` are skipped, so partial updates pass. The
    auto-increment key may never be submitted, non-nullable columns may not be
    set to null, numeric columns reject text and text columns reject anything
    that is not text.

    Args:
        entity: Field map to check
        columns_info: Columns of the target table in canonical order

    Raises:
        InvalidFieldTypeError: For the first violating column in canonical order
    """
    for column in columns_info:
        if column.field_name not in entity:
            continue
        if _violates(column, entity[column.field_name]):
            raise InvalidFieldTypeError(column.field_name)


def coerce_inbound(raw_payload: Any, columns_info: Iterable[ColumnMetadata]) -> Entry:
    """
    Filter a parsed JSON payload down to known columns.

    Unknown keys are dropped. JSON has a single number type, so floats bound
    for numeric columns are narrowed to int. Everything else passes through
    untouched for :func:`validate` to judge.

    Raises:
        BadRequestError: If the payload is not a JSON object
        InvalidFieldTypeError: If a numeric column receives NaN, infinity or a
            value outside the signed 64-bit range
    """
    if not isinstance(raw_payload, Mapping):
        raise BadRequestError("request body must be a JSON object")

    entry: Entry = {}
    for column in columns_info:
        if column.field_name not in raw_payload:
            continue
        value = raw_payload[column.field_name]
        if column.is_numeric_type and isinstance(value, float):
            if not math.isfinite(value):
                raise InvalidFieldTypeError(column.field_name)
            value = int(value)
        if column.is_numeric_type and isinstance(value, int) and not fits_bind_integer(value):
            raise InvalidFieldTypeError(column.field_name)
        entry[column.field_name] = value
    return entry
