from django.apps import AppConfig


class ProjectsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dw_core.projects"

    def ready(self):
        from dw_core.projects.models import Project
        from dw_core.settings_registry.usage import field_counter, register_usage_counter

        register_usage_counter("project", "status", field_counter(Project, "status"))
