from django.apps import AppConfig


class RightsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'rights'
    verbose_name = 'Splits and rights'
