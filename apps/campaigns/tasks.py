from celery import shared_task

from .models import expire_campaigns


@shared_task
def expire_campaigns_task():
    updated = expire_campaigns()
    return f'{updated} campaigns set inactive.'
