from django.apps import AppConfig


class TicketsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dw_core.tickets"

    def ready(self):
        from dw_core.settings_registry.usage import field_counter, register_usage_counter
        from dw_core.tickets.models import Ticket

        register_usage_counter("ticket", "status", field_counter(Ticket, "status"))
        register_usage_counter("ticket", "priority", field_counter(Ticket, "priority"))
        register_usage_counter("ticket", "queue", field_counter(Ticket, "queue"))
