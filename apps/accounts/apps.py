from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """
    Configuration class for accounts app

    Custom DNI-based User model, sellers, role decorators and the
    login / user management views.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.accounts'
    verbose_name = 'Cuentas'
