# Model change tracking:
# model_created / model_updated / model_deleted entries for the models in
# TRACKED_MODELS, attributed to the user of the request being served.

from django.db.models.signals import post_delete, post_save, pre_save

from apps.catalog.models import WebProduct
from apps.territories.models import Zonal
from .models import ActivityLog
from .services import get_current_request, log_activity

TRACKED_MODELS = [Zonal, WebProduct]

IGNORED_FIELDS = {'created_at', 'updated_at'}


def snapshot(instance):
    return {
        field.attname: field.value_from_object(instance)
        for field in instance._meta.concrete_fields
        if field.attname not in IGNORED_FIELDS
    }


def remember_original(sender, instance, **kwargs):
    instance._activity_original = None
    if instance.pk:
        original = sender.objects.filter(pk=instance.pk).first()
        if original is not None:
            instance._activity_original = snapshot(original)


def log_saved(sender, instance, created, **kwargs):
    name = sender.__name__
    if created:
        log_activity(
            get_current_request(),
            ActivityLog.ACTION_MODEL_CREATED,
            f'Se creó un nuevo registro en {name}',
            {'model': name, 'id': instance.pk, 'attributes': snapshot(instance)},
        )
        return

    original = getattr(instance, '_activity_original', None) or {}
    current = snapshot(instance)
    changes = {key: value for key, value in current.items() if original.get(key) != value}
    if not changes:
        return

    log_activity(
        get_current_request(),
        ActivityLog.ACTION_MODEL_UPDATED,
        f'Se actualizó un registro en {name}',
        {
            'model': name,
            'id': instance.pk,
            'changes': changes,
            'original': {key: original.get(key) for key in changes},
        },
    )


def log_deleted(sender, instance, **kwargs):
    name = sender.__name__
    log_activity(
        get_current_request(),
        ActivityLog.ACTION_MODEL_DELETED,
        f'Se eliminó un registro de {name}',
        {'model': name, 'id': instance.pk, 'attributes': snapshot(instance)},
    )


def connect_tracked_models():
    for model in TRACKED_MODELS:
        uid = f'activity_{model._meta.label_lower}'
        pre_save.connect(remember_original, sender=model, dispatch_uid=f'{uid}_pre_save')
        post_save.connect(log_saved, sender=model, dispatch_uid=f'{uid}_post_save')
        post_delete.connect(log_deleted, sender=model, dispatch_uid=f'{uid}_post_delete')
