from django.apps import AppConfig


class AssetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dw_core.assets"

    def ready(self):
        from dw_core.assets.models import Asset
        from dw_core.settings_registry.usage import field_counter, register_usage_counter

        register_usage_counter("asset", "category", field_counter(Asset, "category"))
        register_usage_counter("asset", "location", field_counter(Asset, "location"))
