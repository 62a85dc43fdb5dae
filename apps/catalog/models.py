from django.db import models


class Product(models.Model):
    """Product family, e.g. PREPAGO or POSTPAGO."""

    company = models.ForeignKey('core.Company', on_delete=models.CASCADE, related_name='products')
    name = models.CharField('nombre', max_length=255)
    description = models.CharField('descripción', max_length=255, blank=True)
    active = models.BooleanField('activo', default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'producto'
        verbose_name_plural = 'productos'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['company', 'name'], name='unique_product_name_per_company'),
        ]

    def __str__(self):
        return self.name


class WebProduct(models.Model):
    """Sellable SKU referenced by each sale."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='webproducts')
    name = models.CharField('nombre', max_length=255)
    description = models.TextField('descripción', blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'producto web'
        verbose_name_plural = 'productos web'
        ordering = ['name']

    def __str__(self):
        return self.name
