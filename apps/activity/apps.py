from django.apps import AppConfig


class ActivityConfig(AppConfig):
    """
    User activity log, usage analytics and client event API
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.activity'
    verbose_name = 'Actividad'

    def ready(self):
        from . import signals
        signals.connect_tracked_models()
