from django.apps import AppConfig


class ApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'api'
    verbose_name = 'Back-office users'

    def ready(self):
        """Register signal handlers for automatic profile creation."""
        from . import signals
