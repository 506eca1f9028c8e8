"""
Django-Filtero Sort Keys

Decodes the sort parameter into a SortDirective.

    sort=created_at                                     plain, ASC
    sort=-created_at                                    plain, DESC
    sort=recipient.first_name                           relation column
    sort=-estimated_provider_fee{sum}estimated_platform_fee   summed columns

The stripped key must literally equal an entry of the filter spec's sortable list,
otherwise nothing is sorted.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from django_filtero.clauses import ASC, DESC

PLAIN = "plain"
RELATION = "relation"
SUMMED = "summed"


@dataclass(frozen=True)
class SortDirective:
    """One decoded sort request."""

    key: str
    direction: str
    kind: str
    columns: Tuple[str, ...]
    relation: Optional[str] = None


def decode_direction(raw):
    """
    Split a raw sort value into (key, direction).

    Examples:
        >>> decode_direction("-created_at")
        ('created_at', 'DESC')
        >>> decode_direction("created_at")
        ('created_at', 'ASC')
        >>> decode_direction("--amount")
        ('amount', 'DESC')
    """
    if raw.startswith("-"):
        # Every leading dash is stripped; repeated dashes still mean DESC
        return raw.lstrip("-"), DESC
    return raw, ASC


def parse_sort_key(raw, sortable, separator="{sum}"):
    """
    Parse a sort parameter against the sortable allowlist.

    Relation keys (one dot) are detected first, then summed-column keys
    (two or more columns joined by separator), then plain columns.

    Args:
        raw: Sort parameter value from the request
        sortable: Allowed sort keys
        separator: Token joining summed columns

    Returns:
        SortDirective, or None if the key is empty, malformed or not allowed

    Examples:
        >>> parse_sort_key("-amount", ["amount"])
        SortDirective(key='amount', direction='DESC', kind='plain', columns=('amount',), relation=None)
        >>> parse_sort_key("amount", ["created_at"]) is None
        True
    """
    if not isinstance(raw, str) or not raw:
        return None

    key, direction = decode_direction(raw)
    if not key or key not in sortable:
        return None

    if "." in key:
        parts = key.split(".")
        if len(parts) != 2 or not all(parts):
            return None
        relation, column = parts
        return SortDirective(key, direction, RELATION, (column,), relation=relation)

    if separator and separator in key:
        columns = tuple(key.split(separator))
        if len(columns) >= 2 and all(columns):
            return SortDirective(key, direction, SUMMED, columns)
        return None

    return SortDirective(key, direction, PLAIN, (key,))
