# Models:
# 1. User - Custom user model, logs in with DNI
# 2. Seller - Vendor working for a PDV


from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.utils import timezone
from django.core.validators import RegexValidator


ROLE_ADMIN = 'admin'
ROLE_QA = 'qa'
ROLE_ZONIFICADO = 'zonificado'
ROLE_PDV = 'pdv'

ROLE_CHOICES = [
    (ROLE_ADMIN, 'Administrador'),
    (ROLE_QA, 'QA'),
    (ROLE_ZONIFICADO, 'Zonificado'),
    (ROLE_PDV, 'PDV'),
]

dni_validator = RegexValidator(
    regex=r'^\d{8}$',
    message='El DNI debe tener exactamente 8 dígitos numéricos.',
)
cel_validator = RegexValidator(
    regex=r'^\d{9}$',
    message='El celular debe tener exactamente 9 dígitos numéricos.',
)


def pad_dni(value):
    """
    Normalize a DNI cell/field to the 8-digit text form.

    Spreadsheet cells come back as int, float ("12345678.0") or text, and
    leading zeros are often lost on the way.

    >>> pad_dni(1234567)
    '01234567'
    """
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    if text.endswith('.0') and text[:-2].isdigit():
        text = text[:-2]
    if text.isdigit() and len(text) < 8:
        text = text.zfill(8)
    return text


# USER MANAGER (handles user creation)
class UserManager(BaseUserManager):
    """
    Manager for the DNI-based User model
    """

    def create_user(self, dni, password=None, **extra_fields):
        if not dni:
            raise ValueError('Users must have a DNI')

        dni = pad_dni(dni)

        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)

        email = extra_fields.pop('email', None)
        user = self.model(dni=dni, email=self.normalize_email(email) if email else None, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, dni, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', ROLE_ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(dni, password, **extra_fields)


# USER MODEL
class User(AbstractBaseUser, PermissionsMixin):
    """
    Back-office user

    Roles:
    - admin: manages territories, users and catalog
    - qa: manages sales, quotas, campaigns and reviews activity
    - zonificado: field supervisor over a set of PDVs
    - pdv: point of sale
    """

    dni = models.CharField('DNI', max_length=8, unique=True, validators=[dni_validator], help_text='8 digits. Used for login.')
    name = models.CharField('nombre', max_length=255, help_text='Full name')
    email = models.EmailField('email', max_length=255, blank=True, null=True)
    cel = models.CharField('celular', max_length=9, blank=True, validators=[cel_validator], help_text='9 digits')

    # COMPANY & ROLE (Multi-tenancy)
    company = models.ForeignKey('core.Company', on_delete=models.CASCADE, related_name='users',
                                null=True, blank=True, help_text='The company this user belongs to')
    role = models.CharField('rol', max_length=20, choices=ROLE_CHOICES, default=ROLE_PDV, db_index=True)

    # Territory
    circuit = models.ForeignKey('territories.Circuit', on_delete=models.SET_NULL, related_name='users',
                                null=True, blank=True, help_text='Circuit where the PDV works')
    zonificador = models.ForeignKey('self', on_delete=models.SET_NULL, related_name='zonificados',
                                    null=True, blank=True, help_text='Supervisor of this PDV')

    is_active = models.BooleanField('activo', default=True)
    is_staff = models.BooleanField('staff', default=False, help_text='Designates whether the user can log into admin site.')
    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'dni'
    REQUIRED_FIELDS = ['name']

    class Meta:
        verbose_name = 'usuario'
        verbose_name_plural = 'usuarios'
        ordering = ['name']
        indexes = [
            models.Index(fields=['company', 'role'], name='user_company_role_idx'),
            models.Index(fields=['is_active'], name='user_active_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.dni})"

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name.split(' ')[0] if self.name else self.dni

    # ROLE CHECKS
    def is_admin(self):
        return self.role == ROLE_ADMIN or self.is_superuser

    def is_qa(self):
        return self.role == ROLE_QA

    def is_zonificado(self):
        return self.role == ROLE_ZONIFICADO

    def is_pdv(self):
        return self.role == ROLE_PDV

    @property
    def zonal(self):
        return self.circuit.zonal if self.circuit_id else None


class Seller(models.Model):
    """Vendor that sells on behalf of a PDV."""

    name = models.CharField('nombre', max_length=60, blank=True)
    dni = models.CharField('DNI', max_length=8, unique=True, validators=[dni_validator])
    cel = models.CharField('celular', max_length=9, unique=True, null=True, blank=True, validators=[cel_validator])
    pdv = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sellers', help_text='PDV this seller works for')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'vendedor'
        verbose_name_plural = 'vendedores'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.dni})"
