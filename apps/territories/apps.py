from django.apps import AppConfig


class TerritoriesConfig(AppConfig):
    """
    Sales territory hierarchy: Zonal > Circuit > Tack (route)
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.territories'
    verbose_name = 'Territorios'
