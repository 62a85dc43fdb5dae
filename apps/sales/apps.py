from django.apps import AppConfig


class SalesConfig(AppConfig):
    """
    Sales, monthly quotas (shares) and their spreadsheet bulk operations
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.sales'
    verbose_name = 'Ventas'
