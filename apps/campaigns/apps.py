from django.apps import AppConfig


class CampaignsConfig(AppConfig):
    """
    Commercial campaigns shown to the field and login notifications
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.campaigns'
    verbose_name = 'Campañas'
