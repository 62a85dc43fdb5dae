import logging

from django.db import models
from django.db.models import Q
from django.utils import timezone

logger = logging.getLogger(__name__)


class Campaign(models.Model):
    TYPE_SCHEME = 'Esquema'
    TYPE_ACCELERATOR = 'Acelerador'
    TYPE_INFO = 'Información'

    TYPE_CHOICES = [
        (TYPE_SCHEME, 'Esquema'),
        (TYPE_ACCELERATOR, 'Acelerador'),
        (TYPE_INFO, 'Información'),
    ]

    company = models.ForeignKey('core.Company', on_delete=models.CASCADE, related_name='campaigns')
    name = models.CharField('nombre', max_length=100)
    description = models.CharField('descripción', max_length=255, blank=True)
    type = models.CharField('tipo', max_length=20, choices=TYPE_CHOICES)
    image = models.ImageField('imagen', upload_to='campaigns/', blank=True, help_text='jpeg, png or gif, max 2MB')
    date_start = models.DateField('fecha de inicio')
    date_end = models.DateField('fecha de fin')
    status = models.BooleanField('activa', default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'campaña'
        verbose_name_plural = 'campañas'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['company', 'name'], name='unique_campaign_name_per_company'),
        ]
        indexes = [
            models.Index(fields=['status', 'date_end'], name='campaign_status_end_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def image_url(self):
        return self.image.url if self.image else None

    def delete(self, *args, **kwargs):
        if self.image:
            self.image.delete(save=False)
        return super().delete(*args, **kwargs)


def expire_campaigns(today=None):
    """Deactivate active campaigns whose end date is before ``today``."""
    today = today or timezone.localdate()
    updated = Campaign.objects.filter(status=True, date_end__lt=today).update(status=False)
    logger.info("Campaign expiry: %s campaigns set inactive", updated)
    return updated


class NotificationQuerySet(models.QuerySet):

    def active(self, today=None):
        """
        Notifications for the login modal:
        - active ones starting today (and not yet ended)
        - URGENT ones anywhere inside their validity window
        URGENT first, newest first.
        """
        today = today or timezone.localdate()
        not_ended = Q(end_date__isnull=True) | Q(end_date__gte=today)
        starting_today = Q(start_date=today) & not_ended
        urgent_in_window = Q(type=Notification.TYPE_URGENT, start_date__lte=today) & not_ended
        return self.filter(status=True).filter(starting_today | urgent_in_window) \
            .order_by('-type', '-created_at')


class Notification(models.Model):
    TYPE_URGENT = 'URGENT'
    TYPE_ALERT = 'ALERT'

    TYPE_CHOICES = [
        (TYPE_URGENT, 'Urgente'),
        (TYPE_ALERT, 'Alerta'),
    ]

    company = models.ForeignKey('core.Company', on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField('título', max_length=255)
    description = models.TextField('descripción')
    type = models.CharField('tipo', max_length=10, choices=TYPE_CHOICES)
    status = models.BooleanField('activa', default=True)
    start_date = models.DateField('fecha de inicio')
    end_date = models.DateField('fecha de fin', null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        verbose_name = 'notificación'
        verbose_name_plural = 'notificaciones'
        ordering = ['-created_at']

    def __str__(self):
        return self.title
