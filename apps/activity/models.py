from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class ActivityLog(models.Model):
    """One thing a user did: a page view, a download, a login, a model change..."""

    ACTION_LOGIN = 'login'
    ACTION_LOGOUT = 'logout'
    ACTION_PAGE_VIEW = 'page_view'
    ACTION_FILE_DOWNLOAD = 'file_download'
    ACTION_MODEL_CREATED = 'model_created'
    ACTION_MODEL_UPDATED = 'model_updated'
    ACTION_MODEL_DELETED = 'model_deleted'
    ACTION_APP_START = 'app_start'
    ACTION_BACKGROUND_SWITCH = 'background_switch'
    ACTION_EXPORT_DATA = 'export_data'
    ACTION_IMPORT_DATA = 'import_data'

    DEVICE_PHONE = 'phone'
    DEVICE_TABLET = 'tablet'
    DEVICE_DESKTOP = 'desktop'
    DEVICE_UNKNOWN = 'unknown'

    DEVICE_CHOICES = [
        (DEVICE_PHONE, 'Celular'),
        (DEVICE_TABLET, 'Tablet'),
        (DEVICE_DESKTOP, 'Escritorio'),
        (DEVICE_UNKNOWN, 'Desconocido'),
    ]

    user = models.ForeignKey('accounts.User', on_delete=models.SET_NULL, related_name='activity_logs',
                             null=True, blank=True)
    action = models.CharField('acción', max_length=50, db_index=True)
    description = models.TextField('descripción', blank=True)
    ip_address = models.GenericIPAddressField('dirección IP', null=True, blank=True)
    user_agent = models.TextField(blank=True)
    device_type = models.CharField('dispositivo', max_length=10, choices=DEVICE_CHOICES, default=DEVICE_UNKNOWN)
    app_state = models.CharField(max_length=20, default='active', help_text='App-State header sent by the PWA')
    route = models.CharField('ruta', max_length=255, blank=True)
    additional_data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'registro de actividad'
        verbose_name_plural = 'registros de actividad'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='activity_user_created_idx'),
            models.Index(fields=['action', 'created_at'], name='activity_action_created_idx'),
        ]

    def __str__(self):
        return f"{self.action} - {self.user or '-'} ({self.created_at:%d/%m/%Y %H:%M})"

    @property
    def response_time(self):
        return (self.additional_data or {}).get('response_time')
