"""
Django-Filtero Request Parameters

Reads scalar, nested and range-shaped values out of a request.

Query strings use bracket notation for nesting, the same way PHP and Rails
style frontends send them:

    ?status=paid&recipient[city]=Tbilisi&range[created_at][min]=2024-01-01

is exposed as:

    {
        "status": "paid",
        "recipient": {"city": "Tbilisi"},
        "range": {"created_at": {"min": "2024-01-01"}},
    }
"""

import re
from collections.abc import Mapping

from django.http import HttpRequest, QueryDict

_MISSING = object()

# "range[recipient.city][min]" -> "range", "[recipient.city][min]"
_BRACKET_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])+)$")
_BRACKET_PART_RE = re.compile(r"\[([^\[\]]*)\]")


def split_key(key):
    """
    Split a bracket-notation key into its path segments.

    Examples:
        >>> split_key("status")
        ['status']
        >>> split_key("recipient[city]")
        ['recipient', 'city']
        >>> split_key("range[recipient.created_at][max]")
        ['range', 'recipient.created_at', 'max']
        >>> split_key("ids[]")
        ['ids', '']
    """
    match = _BRACKET_KEY_RE.match(key)
    if not match:
        return [key]
    return [match.group(1)] + _BRACKET_PART_RE.findall(match.group(2))


def parse_nested(querydict):
    """
    Build a nested dict from a QueryDict (or any mapping of flat keys).

    The last value wins for repeated scalar keys, while keys ending in
    ``[]`` collect every value into a list.
    """
    data = {}
    for key in querydict.keys():
        segments = split_key(key)
        if segments[-1] == "":
            segments = segments[:-1]
            if hasattr(querydict, "getlist"):
                value = querydict.getlist(key)
            else:
                value = querydict[key]
                value = value if isinstance(value, list) else [value]
        else:
            value = querydict.get(key) if hasattr(querydict, "getlist") else querydict[key]

        node = data
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = node[segment] = {}
            node = child
        node[segments[-1]] = value
    return data


def lookup(data, key):
    """
    Look up a dot-notation key in nested data.

    The literal key is tried first at every level so that keys which
    themselves contain dots (``range[recipient.city]``) resolve, then the
    key is split at each dot in turn.

    Returns:
        The value, or the module's missing sentinel when absent
    """
    if not isinstance(data, Mapping):
        return _MISSING
    if key in data:
        return data[key]

    start = 0
    while True:
        dot = key.find(".", start)
        if dot == -1:
            return _MISSING
        head, rest = key[:dot], key[dot + 1 :]
        if head in data:
            found = lookup(data[head], rest)
            if found is not _MISSING:
                return found
        start = dot + 1


class RequestParams:
    """
    Read-only view over request parameters with a ``has``/``input`` contract.

    Accepts a Django HttpRequest (GET merged with POST for non-GET methods),
    a QueryDict, a plain nested mapping, or None.

    Example:
        params = RequestParams(request)
        if params.has("recipient.city"):
            city = params.input("recipient.city")
    """

    def __init__(self, source=None):
        if isinstance(source, RequestParams):
            self.data = source.data
        elif isinstance(source, HttpRequest):
            self.data = parse_nested(source.GET)
            if source.method != "GET":
                self.data.update(parse_nested(source.POST))
        elif isinstance(source, QueryDict):
            self.data = parse_nested(source)
        elif isinstance(source, Mapping):
            self.data = dict(source)
        elif source is None:
            self.data = {}
        else:
            raise TypeError(f"Cannot read request parameters from {type(source).__name__}")

    def has(self, key):
        """Return True if the key is present, even with an empty value."""
        return lookup(self.data, key) is not _MISSING

    def input(self, key, default=None):
        """Return the value for a dot-notation key, or default."""
        value = lookup(self.data, key)
        return default if value is _MISSING else value

    def __repr__(self):
        return f"RequestParams({self.data!r})"
