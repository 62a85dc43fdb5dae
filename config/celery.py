# Celery runs the periodic jobs of the back-office:
# - Deactivate campaigns whose end date has passed
#
# Start worker: celery -A config worker -l info
# Start beat: celery -A config beat -l info

import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('salesops')

# All settings prefixed with 'CELERY_' are used
app.config_from_object('django.conf:settings', namespace='CELERY')

# Looks for tasks.py in each installed app
app.autodiscover_tasks()


# CELERY BEAT SCHEDULE (Periodic Tasks)

app.conf.beat_schedule = {
    'expire-campaigns': {
        'task': 'apps.campaigns.tasks.expire_campaigns_task',
        'schedule': crontab(hour=0, minute=5),  # Every day at 00:05
    },
}
