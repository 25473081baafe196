"""Django app configuration for records app."""

from typing import override

from django.apps import AppConfig


class RecordsConfig(AppConfig):
    """Configuration for records app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.records'
    verbose_name = 'File records'

    @override
    def ready(self) -> None:
        """Import signal handlers when app is ready."""
        from server.apps.records import signals  # noqa: F401
