from django.apps import AppConfig


class SettingsRegistryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dw_core.settings_registry"

    def ready(self):
        from dw_core.settings_registry import subscribers  # noqa: F401
