from django.apps import AppConfig


class AkademikConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "akademik"
    verbose_name = "Akademik"

    def ready(self) -> None:  # pragma: no cover - Django convention
        from . import signals  # noqa: F401
