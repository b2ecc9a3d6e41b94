from django.apps import AppConfig


class DemodayConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "demoday"
    verbose_name = "Demoday"
