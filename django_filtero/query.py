"""
Django-Filtero Core Query Engine

Applies search, filter and sort parameters from a request to a queryset,
restricted to what the model's FilterSpec allows.

Provides:
- FilteroQuery class for OOP-style usage
- FilteroQuerySet / FilteroManager for chaining from the model manager
- apply_query_params function for procedural usage
"""

import logging

from django.db import models
from django.db.models import Q

from django_filtero.clauses import (
    equality_q,
    field_accepts,
    model_field,
    plain_ordering,
    relation_exists,
    relation_ordering,
    search_q,
    summed_ordering,
)
from django_filtero.conf import filtero_settings
from django_filtero.params import RequestParams
from django_filtero.ranges import boundaries, get_range, range_q
from django_filtero.relations import resolve_relation
from django_filtero.sorting import RELATION, SUMMED, parse_sort_key
from django_filtero.spec import FilterSpec, get_spec

logger = logging.getLogger("django_filtero")


class FilteroQuery:
    """
    Applies request parameters to a queryset.

    Example:
        # Direct usage
        queryset = FilteroQuery(Payment).apply(request)

        # Step by step, on an existing queryset
        query = FilteroQuery(Payment.objects.select_related("recipient"))
        queryset = query.search(request)
        queryset = FilteroQuery(queryset).filter(request)

        # Explicit spec instead of the registered one
        FilteroQuery(Payment, spec=FilterSpec(sortable=["amount"])).sort(request)
    """

    def __init__(self, model_or_queryset, spec=None):
        """
        Initialize a FilteroQuery.

        Args:
            model_or_queryset: Django model class or QuerySet
            spec: Optional FilterSpec (defaults to the model's registered spec)
        """
        if isinstance(model_or_queryset, models.QuerySet):
            self.queryset = model_or_queryset
            self.model = model_or_queryset.model
        else:
            self.model = model_or_queryset
            self.queryset = model_or_queryset._default_manager.all()

        if spec is None:
            spec = get_spec(self.model)
        if spec is None:
            logger.debug("No filter spec registered for %s; nothing is allowed", self.model.__name__)
            spec = FilterSpec()
        self.spec = spec

    def filter_q(self, params):
        """
        Build the conjunction of every filter constraint present in the request.

        Args:
            params: Request, QueryDict, mapping or RequestParams

        Returns:
            Q object (empty when nothing applies)
        """
        params = RequestParams(params)
        condition = Q()

        for entry in self.spec.filterable:
            if isinstance(entry, tuple):
                condition &= self._relation_filter_q(entry, params)
            else:
                condition &= self._column_q(self.model, entry, entry, params)

        return condition

    def _column_q(self, model, column, column_path, params):
        """
        Build the equality and range constraints for one column.

        A constraint whose value the column's field cannot take is left out,
        so malformed input narrows nothing instead of failing the query.
        """
        field = model_field(model, column)
        if field is None:
            logger.debug("Skipping filters on unknown column '%s' of %s", column, model.__name__)
            return Q()

        condition = Q()
        if params.has(column_path):
            value = params.input(column_path)
            if field_accepts(field, value):
                condition &= equality_q(column, value)
            else:
                logger.debug("Ignoring filter value %r for '%s'", value, column_path)

        range_spec = get_range(params, column_path)
        if range_spec:
            bounds = [bound for bound in boundaries(range_spec) if bound is not None]
            if field_accepts(field, bounds):
                condition &= range_q(column, range_spec)
            else:
                logger.debug("Ignoring range %r for '%s'", bounds, column_path)

        return condition

    def _relation_filter_q(self, entry, params):
        relation, columns = entry
        descriptor = resolve_relation(self.model, relation)
        if descriptor is None:
            logger.debug("Skipping filters on unresolvable relation '%s' of %s", relation, self.model.__name__)
            return Q()

        condition = Q()
        for column in columns:
            related = self._column_q(descriptor.model, column, f"{relation}.{column}", params)
            if related:
                condition &= Q(relation_exists(descriptor, related))
        return condition

    def search_q(self, params):
        """
        Build the disjunction of search matches over every searchable column.

        Returns:
            Q object, or None when the request has no search key
        """
        params = RequestParams(params)
        search_key = filtero_settings.SEARCH_KEY
        if not params.has(search_key):
            return None

        term = params.input(search_key)
        condition = Q()
        for entry in self.spec.searchable:
            if isinstance(entry, tuple):
                relation, columns = entry
                descriptor = resolve_relation(self.model, relation)
                if descriptor is None:
                    logger.debug("Skipping search on unresolvable relation '%s' of %s", relation, self.model.__name__)
                    continue
                for column in columns:
                    condition |= Q(relation_exists(descriptor, search_q(descriptor.model, column, term)))
            else:
                condition |= search_q(self.model, entry, term)
        return condition

    def ordering(self, params):
        """
        Decode the sort parameter into an ordering expression.

        Returns:
            Tuple of (ordering expression, relation name to join) or (None, None)
        """
        params = RequestParams(params)
        raw = params.input(filtero_settings.SORT_KEY)
        directive = parse_sort_key(raw, self.spec.sortable, filtero_settings.SUM_SEPARATOR)
        if directive is None:
            if raw:
                logger.debug("Ignoring sort key %r: not sortable on %s", raw, self.model.__name__)
            return None, None

        if directive.kind == RELATION:
            descriptor = resolve_relation(self.model, directive.relation)
            if descriptor is None or not descriptor.joinable:
                logger.debug("Ignoring sort key %r: relation '%s' cannot be joined", raw, directive.relation)
                return None, None
            return relation_ordering(descriptor, directive.columns[0], directive.direction), descriptor.name

        if directive.kind == SUMMED:
            return summed_ordering(directive.columns, directive.direction), None

        return plain_ordering(directive.columns[0], directive.direction), None

    def filter(self, params):
        """Return the queryset narrowed by the request's filter parameters."""
        params = RequestParams(params)
        self._audit("filter", params)
        return self._filter(self.queryset, params)

    def search(self, params):
        """Return the queryset narrowed by the request's search term."""
        params = RequestParams(params)
        self._audit("search", params)
        return self._search(self.queryset, params)

    def sort(self, params):
        """Return the queryset with the request's sort directive appended."""
        params = RequestParams(params)
        self._audit("sort", params)
        return self._sort(self.queryset, params)

    def apply(self, params):
        """
        Apply search, filter and sort parameters, in that order.

        Args:
            params: Request, QueryDict, mapping or RequestParams

        Returns:
            QuerySet
        """
        params = RequestParams(params)
        self._audit("apply", params)

        queryset = self._search(self.queryset, params)
        queryset = self._filter(queryset, params)
        return self._sort(queryset, params)

    def _filter(self, queryset, params):
        condition = self.filter_q(params)
        if not condition:
            return queryset
        return queryset.filter(condition)

    def _search(self, queryset, params):
        condition = self.search_q(params)
        if condition is None or not condition:
            return queryset
        return queryset.filter(condition)

    def _sort(self, queryset, params):
        expression, join = self.ordering(params)
        if expression is None:
            return queryset

        if join:
            # Inner join: rows without a related row are not sorted in
            queryset = queryset.filter(**{f"{join}__isnull": False})
        return queryset.order_by(*queryset.query.order_by, expression)

    def _audit(self, operation, params):
        # One record per public entry point; apply logs once for all three steps
        if not filtero_settings.AUDIT_QUERIES:
            return
        logger.info(
            "filtero_query",
            extra={
                "model": self.model.__name__.lower(),
                "operation": operation,
                "params": params.data,
            },
        )


class FilteroQuerySet(models.QuerySet):
    """
    QuerySet exposing search, filter and sort as chainable methods.

    Example:
        class Payment(models.Model):
            objects = FilteroQuerySet.as_manager()

        Payment.objects.select_related("recipient").apply_search(request).apply_filters(request).apply_sort(request)
    """

    filter_spec = None

    def _filtero(self):
        return FilteroQuery(self, spec=self.filter_spec)

    def apply_filters(self, request):
        return self._filtero().filter(request)

    def apply_search(self, request):
        return self._filtero().search(request)

    def apply_sort(self, request):
        return self._filtero().sort(request)

    def apply_query_params(self, request):
        return self._filtero().apply(request)


FilteroManager = models.Manager.from_queryset(FilteroQuerySet)


def apply_query_params(queryset, request, spec=None):
    """
    Apply search, filter and sort parameters to a queryset.

    Convenience function that wraps FilteroQuery.

    Args:
        queryset: Django model class or QuerySet
        request: Request, QueryDict, mapping or RequestParams
        spec: Optional FilterSpec (defaults to the model's registered spec)

    Returns:
        QuerySet

    Example:
        payments = apply_query_params(Payment.objects.select_related("recipient"), request)
    """
    return FilteroQuery(queryset, spec=spec).apply(request)
