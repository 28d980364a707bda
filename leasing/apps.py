from django.apps import AppConfig


class LeasingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "leasing"
    verbose_name = "Leasing"
