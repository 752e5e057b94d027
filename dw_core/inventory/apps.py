from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dw_core.inventory"

    def ready(self):
        from dw_core.inventory.models import InventoryItem
        from dw_core.settings_registry.usage import field_counter, register_usage_counter

        register_usage_counter("inventory", "location", field_counter(InventoryItem, "location"))
        register_usage_counter("inventory", "supplier", field_counter(InventoryItem, "supplier"))
