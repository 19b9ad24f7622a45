from django.apps import AppConfig


class DiagramLookupConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'diagram_lookup'
    verbose_name = 'Diagram Lookup'
