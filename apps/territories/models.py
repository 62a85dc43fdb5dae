from django.db import models


class Zonal(models.Model):
    """Top-level geographic sales territory."""

    company = models.ForeignKey('core.Company', on_delete=models.CASCADE, related_name='zonals')
    name = models.CharField('nombre', max_length=20, help_text='3-20 characters')
    short_name = models.CharField('abreviatura', max_length=10, help_text='2-10 characters')
    active = models.BooleanField('activo', default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'zonal'
        verbose_name_plural = 'zonales'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['company', 'name'], name='unique_zonal_name_per_company'),
            models.UniqueConstraint(fields=['company', 'short_name'], name='unique_zonal_short_name_per_company'),
        ]

    def __str__(self):
        return self.name


class Circuit(models.Model):
    """Subdivision of a zonal that groups PDVs."""

    zonal = models.ForeignKey(Zonal, on_delete=models.CASCADE, related_name='circuits')
    name = models.CharField('nombre', max_length=50, unique=True)
    address = models.CharField('dirección', max_length=255, blank=True)
    active = models.BooleanField('activo', default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'circuito'
        verbose_name_plural = 'circuitos'
        ordering = ['name']
        indexes = [
            models.Index(fields=['zonal', 'active'], name='circuit_zonal_active_idx'),
        ]

    def __str__(self):
        return self.name


class Tack(models.Model):
    """Route walked inside a circuit."""

    circuit = models.ForeignKey(Circuit, on_delete=models.CASCADE, related_name='tacks')
    name = models.CharField('nombre', max_length=20, unique=True)
    active = models.BooleanField('activo', default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'ruta'
        verbose_name_plural = 'rutas'
        ordering = ['name']

    def __str__(self):
        return self.name
