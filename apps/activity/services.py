"""
Recording user activity

``log_activity`` is the single entry point: views, the middleware, model
signals and the client event API all go through it.
"""
import contextvars
import logging
import time
from datetime import timedelta

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.core.utils import get_client_ip
from .models import ActivityLog

logger = logging.getLogger(__name__)

# More actions than this in 24 hours flags the activity as unusual
UNUSUAL_DAILY_ACTIONS = 100
WORKING_HOURS = (6, 22)

_current_request = contextvars.ContextVar('activity_request', default=None)


def set_current_request(request):
    return _current_request.set(request)


def reset_current_request(token):
    _current_request.reset(token)


def get_current_request():
    """Request being served, for code (model signals) that is not handed one."""
    return _current_request.get()


def detect_device_type(user_agent):
    """
    Rough device class from the User-Agent header

    >>> detect_device_type('Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)')
    'phone'
    """
    agent = (user_agent or '').lower()
    if not agent:
        return ActivityLog.DEVICE_UNKNOWN
    if 'ipad' in agent or 'tablet' in agent or ('android' in agent and 'mobile' not in agent):
        return ActivityLog.DEVICE_TABLET
    if 'mobi' in agent or 'iphone' in agent or 'ipod' in agent:
        return ActivityLog.DEVICE_PHONE
    if any(keyword in agent for keyword in ('windows', 'macintosh', 'x11', 'linux', 'cros')):
        return ActivityLog.DEVICE_DESKTOP
    return ActivityLog.DEVICE_UNKNOWN


def is_unusual_activity(user, now):
    hour = now.hour
    if hour < WORKING_HOURS[0] or hour > WORKING_HOURS[1]:
        return True
    if user is None:
        return False
    recent = ActivityLog.objects.filter(user=user, created_at__gte=now - timedelta(hours=24)).count()
    return recent > UNUSUAL_DAILY_ACTIONS


def request_user(request):
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user
    return None


def log_activity(request, action, description='', additional_data=None, user=None):
    """
    Store an ActivityLog for ``request`` (may be None outside a request).

    Adds response time, weekday/hour markers and the unusual-activity flag to
    ``additional_data``. Returns the entry, or None when it could not be saved.
    """
    now = timezone.localtime()
    if user is None and request is not None:
        user = request_user(request)

    response_time = 0
    started = getattr(request, 'activity_started', None)
    if started is not None:
        response_time = round((time.monotonic() - started) * 1000, 2)

    data = dict(additional_data or {})
    data.update({
        'response_time': response_time,
        'is_weekend': now.weekday() >= 5,
        'hour_of_day': now.hour,
        # 0 = Sunday
        'day_of_week': now.isoweekday() % 7,
        'is_unusual': is_unusual_activity(user, now),
    })

    entry = ActivityLog(
        user=user,
        action=action,
        description=description or '',
        additional_data=data,
    )
    if request is not None:
        user_agent = request.META.get('HTTP_USER_AGENT', '')
        entry.ip_address = get_client_ip(request)
        entry.user_agent = user_agent
        entry.device_type = detect_device_type(user_agent)
        entry.app_state = request.headers.get('App-State', 'active')[:20]
        entry.route = request.path[:255]

    try:
        with transaction.atomic():
            entry.save()
    except DatabaseError:
        logger.exception("Could not store activity '%s' for user %s", action, getattr(user, 'pk', None))
        return None
    return entry
