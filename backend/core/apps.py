from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Shared plumbing: permissions, pagination and the API error contract."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
