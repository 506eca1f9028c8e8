"""
Django-Filtero Settings

Configuration is read from Django settings under the DJANGO_FILTERO key.
All settings have sensible defaults.

Example:
    # settings.py
    DJANGO_FILTERO = {
        'SEARCH_KEY': 'q',
        'SORT_KEY': 'order',
        'RANGE_KEY': 'between',
        'INCLUDE_EQUAL_IN_RANGE_FILTER': False,
    }
"""

from django.conf import settings
from django.core.signals import setting_changed

DEFAULTS = {
    # Request parameter names
    "SEARCH_KEY": "search",
    "SORT_KEY": "sort",
    "RANGE_KEY": "range",
    # Single-bound ranges use >= / <= when True, > / < when False
    "INCLUDE_EQUAL_IN_RANGE_FILTER": True,
    # Token joining the columns of a summed sort key
    "SUM_SEPARATOR": "{sum}",
    # Log every applied request at INFO level
    "AUDIT_QUERIES": False,
}


class FilteroSettings:
    """
    A settings object that allows django-filtero settings to be accessed as
    properties. For example:

        from django_filtero.conf import filtero_settings
        print(filtero_settings.SEARCH_KEY)

    Settings can be overridden in Django settings.py under DJANGO_FILTERO key.
    """

    def __init__(self, defaults=None):
        self.defaults = defaults or DEFAULTS
        self._cached_attrs = set()

    @property
    def user_settings(self):
        if not hasattr(self, "_user_settings"):
            self._user_settings = getattr(settings, "DJANGO_FILTERO", {})
        return self._user_settings

    def __getattr__(self, attr):
        if attr not in self.defaults:
            raise AttributeError(f"Invalid django-filtero setting: '{attr}'")

        try:
            val = self.user_settings[attr]
        except KeyError:
            val = self.defaults[attr]

        self._cached_attrs.add(attr)
        setattr(self, attr, val)
        return val

    def reload(self):
        """Reload settings (useful for testing)."""
        for attr in self._cached_attrs:
            try:
                delattr(self, attr)
            except AttributeError:
                pass
        self._cached_attrs.clear()
        if hasattr(self, "_user_settings"):
            delattr(self, "_user_settings")


filtero_settings = FilteroSettings(DEFAULTS)


def reload_filtero_settings(*args, **kwargs):
    if kwargs.get("setting") == "DJANGO_FILTERO":
        filtero_settings.reload()


setting_changed.connect(reload_filtero_settings)
