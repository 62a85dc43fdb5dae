# Models:
# 1. Sale - One line sold by a PDV
# 2. Share - Monthly sales quota of a PDV

from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.db import models


phone_validator = RegexValidator(
    regex=r'^9\d{8}$',
    message='El teléfono debe tener 9 dígitos, ser solo números y empezar con 9',
)


class Sale(models.Model):
    CLUSTER_A_PLUS = 'A+'
    CLUSTER_A = 'A'
    CLUSTER_B = 'B'
    CLUSTER_C = 'C'

    CLUSTER_CHOICES = [
        (CLUSTER_A_PLUS, 'A+'),
        (CLUSTER_A, 'A'),
        (CLUSTER_B, 'B'),
        (CLUSTER_C, 'C'),
    ]

    ACTION_REGULAR = 'REGULAR'
    ACTION_PREMIUM = 'PREMIUM'

    ACTION_CHOICES = [
        (ACTION_REGULAR, 'Regular'),
        (ACTION_PREMIUM, 'Premium'),
    ]

    date = models.DateField('fecha', db_index=True)
    telefono = models.CharField('teléfono', max_length=9, validators=[phone_validator])
    cluster_quality = models.CharField('calidad de cluster', max_length=2, choices=CLUSTER_CHOICES,
                                       blank=True, null=True)
    recharge_date = models.DateField('fecha de recarga', blank=True, null=True)
    recharge_amount = models.PositiveIntegerField('monto de recarga', blank=True, null=True)
    accumulated_amount = models.PositiveIntegerField('monto acumulado', blank=True, null=True)
    commissionable_charge = models.BooleanField('comisionable', default=False)
    action = models.CharField('acción', max_length=10, choices=ACTION_CHOICES, blank=True, null=True)

    user = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='sales',
                             help_text='PDV that made the sale')
    webproduct = models.ForeignKey('catalog.WebProduct', on_delete=models.PROTECT, related_name='sales')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'venta'
        verbose_name_plural = 'ventas'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['telefono', 'date'], name='sale_phone_date_idx'),
            models.Index(fields=['user', 'date'], name='sale_user_date_idx'),
        ]

    def __str__(self):
        return f"{self.telefono} ({self.date:%d/%m/%Y})"


class Share(models.Model):
    """Sales quota a PDV must reach in a given month."""

    year = models.PositiveIntegerField('año')
    month = models.PositiveSmallIntegerField('mes', validators=[MinValueValidator(1), MaxValueValidator(12)])
    amount = models.PositiveIntegerField('monto', default=0)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='shares')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'cuota'
        verbose_name_plural = 'cuotas'
        ordering = ['-year', '-month']
        constraints = [
            models.UniqueConstraint(fields=['user', 'year', 'month'], name='unique_share_per_user_period'),
        ]

    def __str__(self):
        return f"{self.user} {self.month:02d}/{self.year}"
