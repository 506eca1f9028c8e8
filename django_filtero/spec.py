"""
Django-Filtero Filter Specs

A FilterSpec declares which columns of a model may be searched, filtered
and sorted from request parameters. Nothing outside the filter spec is ever
reachable from a request.

Entries for searchable and filterable are either a bare column of the
model's own table or a relation map of relation name -> list of columns on
the related table:

    @register(
        searchable=["status", {"recipient": ["first_name", "last_name"], "currency": ["code"]}],
        filterable=["status", "currency_id", {"recipient": ["country_id", "city", "email"]}],
        sortable=["created_at", "recipient.first_name", "estimated_provider_fee{sum}estimated_platform_fee"],
    )
    class Payment(models.Model):
        ...
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Tuple, Union

from django.core.exceptions import ImproperlyConfigured

# ("recipient", ("first_name", "last_name"))
RelationEntry = Tuple[str, Tuple[str, ...]]
Entry = Union[str, RelationEntry]


def normalize_entries(entries, name="entries"):
    """
    Normalize declared search/filter entries into an immutable tuple.

    Bare columns stay strings; each relation of a relation map becomes a
    (relation, columns) pair, in declaration order.

    Examples:
        >>> normalize_entries(["status", {"recipient": ["city", "email"]}])
        ('status', ('recipient', ('city', 'email')))

    Raises:
        ImproperlyConfigured: If an entry is neither a string nor a relation map
    """
    normalized = []
    for entry in entries or ():
        if isinstance(entry, str):
            normalized.append(entry)
        elif isinstance(entry, Mapping):
            for relation, columns in entry.items():
                if not isinstance(relation, str):
                    raise ImproperlyConfigured(f"{name}: relation name must be a string, got {relation!r}")
                if isinstance(columns, str) or not all(isinstance(c, str) for c in columns):
                    raise ImproperlyConfigured(f"{name}: columns of relation '{relation}' must be a list of strings")
                normalized.append((relation, tuple(columns)))
        elif isinstance(entry, tuple) and len(entry) == 2 and isinstance(entry[0], str):
            # Already normalized, e.g. through dataclasses.replace()
            normalized.append((entry[0], tuple(entry[1])))
        else:
            raise ImproperlyConfigured(f"{name}: unsupported entry {entry!r}")
    return tuple(normalized)


def normalize_sortable(entries):
    if isinstance(entries, str):
        raise ImproperlyConfigured("sortable: expected a list of sort keys, got a string")
    for entry in entries or ():
        if not isinstance(entry, str):
            raise ImproperlyConfigured(f"sortable: unsupported entry {entry!r}")
    return tuple(entries or ())


@dataclass(frozen=True)
class FilterSpec:
    """Per-model allowlist of searchable, filterable and sortable columns."""

    searchable: Tuple[Entry, ...] = field(default_factory=tuple)
    filterable: Tuple[Entry, ...] = field(default_factory=tuple)
    sortable: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "searchable", normalize_entries(self.searchable, "searchable"))
        object.__setattr__(self, "filterable", normalize_entries(self.filterable, "filterable"))
        object.__setattr__(self, "sortable", normalize_sortable(self.sortable))

    def relation_names(self):
        """Every relation referenced by the filter spec, sort keys included, in order."""
        names = []
        for entry in self.searchable + self.filterable:
            if isinstance(entry, tuple) and entry[0] not in names:
                names.append(entry[0])
        for key in self.sortable:
            if "." in key:
                relation = key.split(".", 1)[0]
                if relation not in names:
                    names.append(relation)
        return names


_registry = {}


def register(model=None, spec=None, **entries):
    """
    Attach a FilterSpec to a model.

    Can be called directly or used as a class decorator:

        register(Payment, searchable=["status"])

        @register(sortable=["created_at"])
        class Payment(models.Model):
            ...

    Args:
        model: Django model class (omit to use as a decorator)
        spec: Ready FilterSpec; mutually exclusive with entries
        **entries: searchable / filterable / sortable lists

    Raises:
        ImproperlyConfigured: On malformed entries or a double registration
    """
    if spec is not None and entries:
        raise ImproperlyConfigured("Pass either a FilterSpec or searchable/filterable/sortable entries, not both")
    unknown = set(entries) - {"searchable", "filterable", "sortable"}
    if unknown:
        raise ImproperlyConfigured(f"Unknown filter spec option(s): {', '.join(sorted(unknown))}")

    filter_spec = spec if spec is not None else FilterSpec(**entries)

    def decorator(model_cls):
        if model_cls in _registry:
            raise ImproperlyConfigured(f"{model_cls.__name__} already has a filter spec registered")
        _registry[model_cls] = filter_spec
        return model_cls

    if model is None:
        return decorator
    return decorator(model)


def get_spec(model):
    """Return the FilterSpec registered for a model, or None."""
    return _registry.get(model)


def get_registry():
    """Return a copy of every registered (model, spec) pair."""
    return dict(_registry)


def unregister(model):
    """Remove a model's spec (useful for testing)."""
    _registry.pop(model, None)
