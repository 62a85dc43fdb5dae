from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """
    Product families and the web products (SKUs) sold under them
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.catalog'
    verbose_name = 'Catálogo'
