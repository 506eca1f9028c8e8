"""
Django-Filtero Range Utilities

Parses ``range[<column>][min|max]`` parameters and turns them into
comparison constraints.

- only min: column > min (>= with INCLUDE_EQUAL_IN_RANGE_FILTER)
- only max: column < max (<= with INCLUDE_EQUAL_IN_RANGE_FILTER)
- both: column BETWEEN min AND max, inclusive on both ends regardless of
  INCLUDE_EQUAL_IN_RANGE_FILTER

Dates are widened to whole days: min becomes "YYYY-MM-DD 00:00:00" and max
"YYYY-MM-DD 23:59:59". Numbers and anything that does not parse as a date
are passed through unchanged.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.parser import ParserError
from django.db.models import Q

from django_filtero.conf import filtero_settings

logger = logging.getLogger("django_filtero")

DAY_START = "00:00:00"
DAY_END = "23:59:59"


@dataclass(frozen=True)
class RangeSpec:
    """Min/max boundaries requested for one column path."""

    column: str
    min: Optional[Any] = None
    max: Optional[Any] = None

    @property
    def is_empty(self):
        return _absent(self.min) and _absent(self.max)


def _absent(value):
    return value is None or value == ""


def _is_number(value):
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    try:
        Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return False
    return True


def format_boundary(value, upper=False):
    """
    Format a range boundary, widening dates to the start or end of the day.

    Args:
        value: Raw boundary value from the request
        upper: True for a max boundary (end of day), False for min

    Returns:
        Formatted date string, or the raw value if it is not a date

    Examples:
        >>> format_boundary("2024-03-05")
        '2024-03-05 00:00:00'
        >>> format_boundary("March 5, 2024 14:30", upper=True)
        '2024-03-05 23:59:59'
        >>> format_boundary("2024-01")
        '2024-01-01 00:00:00'
        >>> format_boundary("150")
        '150'
        >>> format_boundary("pending")
        'pending'
    """
    suffix = DAY_END if upper else DAY_START

    if isinstance(value, (datetime, date)):
        return f"{value.strftime('%Y-%m-%d')} {suffix}"
    if not isinstance(value, str) or _is_number(value):
        return value

    try:
        # Missing month and day fall back to the 1st, not to today
        parsed = date_parser.parse(value, default=datetime(datetime.now().year, 1, 1))
    except (ParserError, ValueError, OverflowError):
        return value
    return f"{parsed.strftime('%Y-%m-%d')} {suffix}"


def get_range(params, column_path):
    """
    Read the RangeSpec for a column path from request parameters.

    Args:
        params: RequestParams
        column_path: Column name, or "relation.column"

    Returns:
        RangeSpec, or None if the request has no usable range for the path
    """
    ranges = params.input(filtero_settings.RANGE_KEY)
    if not isinstance(ranges, Mapping) or not ranges:
        return None

    if column_path in ranges:
        raw = ranges[column_path]
    else:
        relation, _, column = column_path.partition(".")
        nested = ranges.get(relation) if column else None
        raw = nested.get(column) if isinstance(nested, Mapping) else None

    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        logger.debug("Ignoring malformed range for '%s': %r", column_path, raw)
        return None

    range_spec = RangeSpec(column=column_path, min=raw.get("min"), max=raw.get("max"))
    return None if range_spec.is_empty else range_spec


def boundaries(range_spec):
    """Return the formatted (min, max) of a RangeSpec, None for an absent bound."""
    low = None if _absent(range_spec.min) else format_boundary(range_spec.min)
    high = None if _absent(range_spec.max) else format_boundary(range_spec.max, upper=True)
    return low, high


def range_q(lookup_path, range_spec, include_equal=None):
    """
    Build a Q object for a range on a field.

    Args:
        lookup_path: ORM lookup path of the field (e.g. "created_at")
        range_spec: RangeSpec with the raw boundaries
        include_equal: Override for INCLUDE_EQUAL_IN_RANGE_FILTER

    Returns:
        Q object (empty when neither boundary is set)

    Examples:
        >>> range_q("amount", RangeSpec("amount", min="10"))
        <Q: (AND: ('amount__gte', '10'))>
        >>> range_q("created_at", RangeSpec("created_at", "2024-01-01", "2024-01-31"))
        <Q: (AND: ('created_at__range', ('2024-01-01 00:00:00', '2024-01-31 23:59:59')))>
    """
    if range_spec is None or range_spec.is_empty:
        return Q()

    if include_equal is None:
        include_equal = filtero_settings.INCLUDE_EQUAL_IN_RANGE_FILTER

    low, high = boundaries(range_spec)
    has_min = low is not None
    has_max = high is not None

    if has_min and has_max:
        return Q(**{f"{lookup_path}__range": (low, high)})
    if has_min:
        operator = "gte" if include_equal else "gt"
        return Q(**{f"{lookup_path}__{operator}": low})
    operator = "lte" if include_equal else "lt"
    return Q(**{f"{lookup_path}__{operator}": high})
