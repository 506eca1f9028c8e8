"""
Django-Filtero Relation Registry

Resolves relation names declared in a filter spec into the metadata needed
to build constraints against them:

- foreign key / owner key columns and the target table, used to join a
  relation for sorting
- the attribute pair correlating an existence subquery, used to filter and
  search through a relation without duplicating base rows

Descriptors are built once per model from Django's model _meta and cached.
"""

from dataclasses import dataclass
from typing import Optional

FORWARD = "forward"
REVERSE = "reverse"


@dataclass(frozen=True)
class RelationDescriptor:
    """Metadata for one relation of a model."""

    name: str
    model: type
    table: str
    foreign_key: str
    owner_key: str
    # related_model.<remote_attname> = OuterRef(<local_attname>)
    remote_attname: str
    local_attname: str
    direction: str = FORWARD
    many: bool = False

    @property
    def joinable(self):
        """True when the relation can be joined as base.foreign_key = related.owner_key."""
        return self.direction == FORWARD and bool(self.table and self.foreign_key and self.owner_key)


_cache = {}


def _forward_descriptor(field):
    target = field.target_field
    return RelationDescriptor(
        name=field.name,
        model=field.related_model,
        table=field.related_model._meta.db_table,
        foreign_key=field.column,
        owner_key=target.column,
        remote_attname=target.attname,
        local_attname=field.attname,
        direction=FORWARD,
        many=False,
    )


def _reverse_descriptor(rel):
    remote_field = rel.field
    target = remote_field.target_field
    return RelationDescriptor(
        name=rel.get_accessor_name(),
        model=rel.related_model,
        table=rel.related_model._meta.db_table,
        foreign_key=remote_field.column,
        owner_key=target.column,
        remote_attname=remote_field.attname,
        local_attname=target.attname,
        direction=REVERSE,
        many=not rel.one_to_one,
    )


def get_relations(model):
    """
    Get dict of relation_name -> RelationDescriptor for a model.

    Forward relations (ForeignKey, OneToOneField) are keyed by field name,
    reverse ForeignKey / OneToOne relations by their accessor name.
    Many-to-many and generic relations are not resolvable.

    Args:
        model: Django model class

    Returns:
        Dict mapping relation name to RelationDescriptor

    Example:
        >>> get_relations(Payment)["recipient"].table
        'testapp_recipient'
    """
    if model in _cache:
        return _cache[model]

    relations = {}
    for field in model._meta.get_fields():
        if not field.is_relation or field.many_to_many or field.related_model is None:
            continue
        if field.concrete and (field.many_to_one or field.one_to_one):
            relations[field.name] = _forward_descriptor(field)
        elif field.auto_created and not field.concrete and (field.one_to_many or field.one_to_one):
            if getattr(field, "field", None) is None or not hasattr(field.field, "target_field"):
                continue
            relations[field.get_accessor_name()] = _reverse_descriptor(field)

    _cache[model] = relations
    return relations


def resolve_relation(model, name) -> Optional[RelationDescriptor]:
    """Return the descriptor for a relation name, or None if it cannot be resolved."""
    return get_relations(model).get(name)


def clear_cache():
    """Forget cached descriptors (useful for testing)."""
    _cache.clear()
