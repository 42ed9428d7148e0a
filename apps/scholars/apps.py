from django.apps import AppConfig


class ScholarsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.scholars"
    label = "scholars"
