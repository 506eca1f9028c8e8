"""
Django-Filtero System Checks

Validates every registered FilterSpec against its model when Django runs
its checks (runserver, migrate, ``manage.py check``):

- django_filtero.E001: a relation named in a filter spec does not exist
- django_filtero.E002: a filterable or sortable column is not a field
- django_filtero.E003: a relation used in a sort key cannot be joined

Searchable columns are not checked, since they may be SQL expressions.
"""

from django.core import checks

from django_filtero.clauses import is_model_field
from django_filtero.conf import filtero_settings
from django_filtero.relations import get_relations
from django_filtero.spec import get_registry


def _label(model):
    return f"{model._meta.app_label}.{model.__name__}"


def check_spec(model, spec):
    """
    Validate one FilterSpec against its model.

    Returns:
        List of checks.Error
    """
    errors = []
    relations = get_relations(model)

    for relation in spec.relation_names():
        if relation not in relations:
            errors.append(
                checks.Error(
                    f"Filter spec of {_label(model)} references unknown relation '{relation}'.",
                    hint="Use the name of a ForeignKey/OneToOneField or a reverse accessor.",
                    obj=model,
                    id="django_filtero.E001",
                )
            )

    for entry in spec.filterable:
        if isinstance(entry, tuple):
            relation, columns = entry
            descriptor = relations.get(relation)
            if descriptor is None:
                continue
            for column in columns:
                if not is_model_field(descriptor.model, column):
                    errors.append(_unknown_column(model, f"{relation}.{column}", "filterable"))
        elif not is_model_field(model, entry):
            errors.append(_unknown_column(model, entry, "filterable"))

    separator = filtero_settings.SUM_SEPARATOR
    for key in spec.sortable:
        if "." in key:
            relation, _, column = key.partition(".")
            descriptor = relations.get(relation)
            if descriptor is None:
                continue
            if not descriptor.joinable:
                errors.append(
                    checks.Error(
                        f"Sort key '{key}' of {_label(model)} uses relation '{relation}', which cannot be joined.",
                        hint="Only ForeignKey and OneToOneField relations owned by the model can be sorted on.",
                        obj=model,
                        id="django_filtero.E003",
                    )
                )
            elif not is_model_field(descriptor.model, column):
                errors.append(_unknown_column(model, key, "sortable"))
            continue

        columns = key.split(separator) if separator and separator in key else [key]
        for column in columns:
            if not is_model_field(model, column):
                errors.append(_unknown_column(model, column, "sortable"))

    return errors


def _unknown_column(model, column, kind):
    return checks.Error(
        f"The {kind} column '{column}' is not a field of {_label(model)}.",
        obj=model,
        id="django_filtero.E002",
    )


@checks.register()
def check_filter_specs(app_configs=None, **kwargs):
    """Run check_spec for every registered model (limited to app_configs when given)."""
    errors = []
    for model, spec in get_registry().items():
        if app_configs is not None and model._meta.app_config not in app_configs:
            continue
        errors.extend(check_spec(model, spec))
    return errors
