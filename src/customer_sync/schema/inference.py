"""Infer a semantic field type from sampled customer values.

The first sample that is neither None nor "" represents the field. Sequences mark the field
as an array and are typed by their first element. Strings are refined to Email, then Date.
"""
from __future__ import annotations
import logging
import re
from datetime import datetime, date
from typing import Any, Iterable, NamedTuple
import validators
from customer_sync.models.enums import FieldType

logger = logging.getLogger(__name__)

_EXTENDED_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:$|[T ]\d{2}:\d{2})")


class InferredType(NamedTuple):
    type: FieldType
    is_array: bool


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def representative(samples: Iterable[Any]) -> Any | None:
    for value in samples:
        if not _is_blank(value):
            return value
    return None


def is_email(value: str) -> bool:
    return bool(validators.email(value))


def is_date_string(value: str) -> bool:
    """ISO-8601 extended-format date or datetime string (YYYY-MM-DD prefix)."""
    candidate = value.strip()
    # basic format (20240115) and week dates parse on some interpreters only
    if not _EXTENDED_DATE.match(candidate):
        return False
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        datetime.fromisoformat(candidate)
        return True
    except ValueError:
        return False


def base_type(value: Any) -> FieldType | None:
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return FieldType.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldType.NUMBER
    if isinstance(value, (datetime, date)):
        return FieldType.DATE
    if isinstance(value, str):
        if is_email(value):
            return FieldType.EMAIL
        if is_date_string(value):
            return FieldType.DATE
        return FieldType.STRING
    return None


def infer(samples: Iterable[Any]) -> InferredType | None:
    """Return the inferred (type, is_array) for a field, or None when it should be skipped."""
    value = representative(samples)
    if value is None:
        return None
    is_array = isinstance(value, (list, tuple))
    if is_array:
        if not value:
            return None
        value = value[0]
    kind = base_type(value)
    if kind is None:
        logger.debug("no inferable type for value of shape %s", type(value).__name__)
        return None
    return InferredType(kind, is_array)
