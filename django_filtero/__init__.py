"""
Django-Filtero: Request-driven search, filter and sort for Django

Turns untrusted query parameters into ORM constraints on a queryset,
restricted to the columns each model declares as searchable, filterable
and sortable, including columns of related models.

Example:
    from django_filtero import register, apply_query_params

    @register(
        searchable=["status", {"recipient": ["first_name", "last_name"]}],
        filterable=["status", {"recipient": ["city"]}],
        sortable=["created_at", "recipient.first_name"],
    )
    class Payment(models.Model):
        ...

    # ?search=john&recipient[city]=Tbilisi&range[created_at][min]=2024-01-01&sort=-created_at
    payments = apply_query_params(Payment, request)
"""

__version__ = "26.10.0"

# Core query execution
from django_filtero.query import FilteroQuery, FilteroQuerySet, FilteroManager, apply_query_params

# Filter specs
from django_filtero.spec import FilterSpec, register, get_spec

# Request parameters
from django_filtero.params import RequestParams

# Relations
from django_filtero.relations import RelationDescriptor, get_relations, resolve_relation

# Ranges and sorting
from django_filtero.ranges import RangeSpec, format_boundary, range_q
from django_filtero.sorting import SortDirective, parse_sort_key

# Configuration
from django_filtero.conf import filtero_settings

__all__ = [
    # Version
    "__version__",
    # Query
    "FilteroQuery",
    "FilteroQuerySet",
    "FilteroManager",
    "apply_query_params",
    # Specs
    "FilterSpec",
    "register",
    "get_spec",
    # Params
    "RequestParams",
    # Relations
    "RelationDescriptor",
    "get_relations",
    "resolve_relation",
    # Ranges and sorting
    "RangeSpec",
    "format_boundary",
    "range_q",
    "SortDirective",
    "parse_sort_key",
    # Settings
    "filtero_settings",
]
