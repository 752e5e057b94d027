from django.apps import AppConfig


class ChangeRequestsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dw_core.change_requests"

    def ready(self):
        from dw_core.change_requests.models import ChangeRequest
        from dw_core.settings_registry.usage import field_counter, register_usage_counter

        register_usage_counter("change_management", "category", field_counter(ChangeRequest, "category"))
        register_usage_counter("change_management", "risk", field_counter(ChangeRequest, "risk_level"))
        register_usage_counter("change_management", "impact", field_counter(ChangeRequest, "impact"))
