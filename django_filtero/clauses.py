"""
Django-Filtero Clause Builders

Builds the ORM constraints and ordering expressions that the filter,
search and sort orchestrators compose:

- equality on a column
- case-insensitive substring search on a column or trusted SQL expression
- existence subqueries against a relation
- plain, relation and summed-column orderings
"""

import operator
from collections.abc import Mapping
from functools import reduce

from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.db.models import CharField, Exists, ExpressionWrapper, F, FloatField, OuterRef, Q
from django.db.models.expressions import RawSQL
from django.db.models.functions import Lower
from django.db.models.lookups import Contains

ASC = "ASC"
DESC = "DESC"


def equality_q(column, value):
    """
    Build an equality Q object, using ``__in`` for list values.

    Examples:
        >>> equality_q("status", "paid")
        <Q: (AND: ('status', 'paid'))>
        >>> equality_q("status", ["paid", "failed"])
        <Q: (AND: ('status__in', ['paid', 'failed']))>
    """
    if isinstance(value, (list, tuple)):
        return Q(**{f"{column}__in": list(value)})
    return Q(**{column: value})


def model_field(model, column):
    """Return the concrete field named column (by name or attname), or None."""
    try:
        field = model._meta.get_field(column)
    except FieldDoesNotExist:
        field = next((f for f in model._meta.concrete_fields if f.attname == column), None)
    if field is None or not getattr(field, "concrete", False):
        return None
    return field


def is_model_field(model, column):
    """True if column is the name or attname of a concrete field on model."""
    return model_field(model, column) is not None


def field_accepts(field, value):
    """
    True if the ORM can prepare value (or every item of a list) for field.

    Runs the same ``get_prep_value`` conversion a lookup runs, so a value
    that passes never raises once the queryset is evaluated.

    Examples:
        >>> field_accepts(Payment._meta.get_field("amount"), "10.50")
        True
        >>> field_accepts(Payment._meta.get_field("amount"), "ten")
        False
    """
    values = value if isinstance(value, (list, tuple)) else [value]
    for item in values:
        if isinstance(item, Mapping):
            return False
        try:
            field.get_prep_value(item)
        except (ValidationError, ValueError, TypeError):
            return False
    return True


def column_expression(model, column):
    """
    Return an expression for a searchable column.

    Real fields become F() references (compiled table-qualified); anything
    else is a trusted SQL expression from the filter spec, used verbatim.
    """
    if is_model_field(model, column):
        return F(column)
    return RawSQL(column, (), output_field=CharField())


def search_q(model, column, term):
    """
    Build ``LOWER(column) LIKE '%term%'`` for a searchable column.

    The term is lower-cased and sent as a bound parameter; LIKE wildcards
    inside it are escaped by the database backend.

    Args:
        model: Model the column belongs to
        column: Field name or trusted SQL expression
        term: Search text from the request

    Returns:
        Q object wrapping the lookup
    """
    term = "" if term is None else str(term)
    return Q(Contains(Lower(column_expression(model, column)), term.lower()))


def relation_exists(descriptor, condition):
    """
    Build an existence subquery requiring at least one related row matching condition.

    Args:
        descriptor: RelationDescriptor of the relation
        condition: Q object evaluated against the related model

    Returns:
        Exists expression, correlated to the outer row
    """
    related = descriptor.model._default_manager.filter(
        **{descriptor.remote_attname: OuterRef(descriptor.local_attname)}
    ).filter(condition)
    return Exists(related)


def order_expression(expression, direction):
    if direction == DESC:
        return expression.desc()
    return expression.asc()


def plain_ordering(column, direction):
    """Order by a column of the model's own table."""
    return order_expression(F(column), direction)


def relation_ordering(descriptor, column, direction):
    """Order by a column of a joined relation (relation__column)."""
    return order_expression(F(f"{descriptor.name}__{column}"), direction)


def summed_ordering(columns, direction):
    """
    Order by the sum of several columns of the model's own table.

    Compiles to ``("table"."a" + "table"."b")``.
    """
    total = reduce(operator.add, (F(column) for column in columns))
    return order_expression(ExpressionWrapper(total, output_field=FloatField()), direction)
