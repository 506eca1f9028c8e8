from django.apps import AppConfig


class FilteroConfig(AppConfig):
    name = "django_filtero"
    verbose_name = "Django Filtero"

    def ready(self):
        # Registers the filter spec system checks
        from django_filtero import checks  # noqa: F401
