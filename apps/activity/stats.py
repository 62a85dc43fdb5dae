"""
Aggregations behind the activity screens

Every function takes an ActivityLog queryset already scoped to the tenant
(and to the screen's filters) and returns plain data for the page props.
"""
from datetime import timedelta

from django.db.models import Avg, Count, FloatField, Max, Q
from django.db.models.fields.json import KT
from django.db.models.functions import Cast, ExtractHour, ExtractWeekDay, TruncDate, TruncMonth
from django.utils import timezone
from django.utils.dateparse import parse_date

from apps.territories.models import Zonal
from .models import ActivityLog

SUSPICIOUS_HOURLY_HITS = 100

RESPONSE_TIME = Cast(KT('additional_data__response_time'), FloatField())


def parse_date_or_none(value):
    try:
        return parse_date(value or '')
    except ValueError:
        return None


def filter_logs(logs, params, with_action=True, with_zonal=True):
    """Apply the user / action / date_from / date_to / zonal_id query filters."""
    if params.get('user_id', '').isdigit():
        logs = logs.filter(user_id=int(params['user_id']))
    if with_action and params.get('action'):
        logs = logs.filter(action=params['action'])
    date_from = parse_date_or_none(params.get('date_from'))
    if date_from:
        logs = logs.filter(created_at__date__gte=date_from)
    date_to = parse_date_or_none(params.get('date_to'))
    if date_to:
        logs = logs.filter(created_at__date__lte=date_to)
    if with_zonal and params.get('zonal_id', '').isdigit():
        logs = logs.filter(user__circuit__zonal_id=int(params['zonal_id']))
    return logs


def count_by(logs, field):
    return logs.order_by().values(field).annotate(count=Count('id'))


def launches(logs):
    app_starts = logs.filter(action=ActivityLog.ACTION_APP_START)
    return {
        'total_launches': app_starts.count(),
        'browser_launches': app_starts.filter(additional_data__launch_type='browser').count(),
        'pwa_launches': app_starts.filter(additional_data__launch_type='pwa').count(),
    }


def hourly_counts(logs):
    rows = count_by(logs.annotate(hour=ExtractHour('created_at')), 'hour').order_by('hour')
    return {row['hour']: row['count'] for row in rows}


def zonal_stats(logs, company):
    activity = {
        row['user__circuit__zonal_id']: row
        for row in logs.order_by()
        .values('user__circuit__zonal_id')
        .annotate(
            total_activities=Count('id'),
            users_with_login=Count('user', filter=Q(action=ActivityLog.ACTION_LOGIN), distinct=True),
            total_logins=Count('id', filter=Q(action=ActivityLog.ACTION_LOGIN)),
        )
    }

    zonals = Zonal.objects.filter(company=company) \
        .annotate(total_users=Count('circuits__users', distinct=True)) \
        .order_by('name')

    stats = []
    for zonal in zonals:
        row = activity.get(zonal.id, {})
        stats.append({
            'zonal_id': zonal.id,
            'zonal_name': zonal.name,
            'total_users': zonal.total_users,
            'total_activities': row.get('total_activities', 0),
            'users_with_login': row.get('users_with_login', 0),
            'total_logins': row.get('total_logins', 0),
        })
    return stats


def activity_stats(logs, company, today=None):
    """Summary panels of the activity log screen."""
    today = today or timezone.localdate()

    devices = dict.fromkeys([value for value, _label in ActivityLog.DEVICE_CHOICES], 0)
    for row in count_by(logs, 'device_type'):
        devices[row['device_type'] or ActivityLog.DEVICE_UNKNOWN] += row['count']

    daily = count_by(logs.annotate(day=TruncDate('created_at')), 'day').order_by('day')

    return {
        'general': {
            'total_users': logs.exclude(user=None).order_by().values('user').distinct().count(),
            'active_today': logs.filter(created_at__date=today).order_by().values('user').distinct().count(),
            'pwa_users': logs.filter(additional_data__launch_type='pwa').order_by().values('user').distinct().count(),
            'total_activities': logs.count(),
        },
        'zonal': zonal_stats(logs, company),
        'devices': devices,
        'hourly': hourly_counts(logs),
        'commonActions': list(count_by(logs, 'action').order_by('-count', 'action')[:8]),
        'pwa': {
            **launches(logs),
            'background_switches': logs.filter(action=ActivityLog.ACTION_BACKGROUND_SWITCH).count(),
        },
        'daily': {row['day'].strftime('%Y-%m-%d'): row['count'] for row in daily},
    }


def user_activity_stats(logs):
    """Detail panels of a single user's activity page; ``logs`` are that user's entries."""
    first = logs.order_by('created_at').first()
    last = logs.order_by('-created_at').first()
    daily = count_by(logs.annotate(date=TruncDate('created_at')), 'date').order_by('-date')[:30]

    return {
        'total_activities': logs.count(),
        'last_active': last.created_at if last else None,
        'first_seen': first.created_at if first else None,
        'device_types': list(count_by(logs, 'device_type').order_by('-count')),
        'most_common_actions': list(count_by(logs, 'action').order_by('-count', 'action')[:5]),
        'activity_hours': hourly_counts(logs),
        'pwa_usage': launches(logs),
        'most_visited_routes': list(
            logs.filter(action=ActivityLog.ACTION_PAGE_VIEW)
            .order_by()
            .values('route')
            .annotate(visits=Count('id'))
            .order_by('-visits', 'route')[:5]
        ),
        'daily_activity': [
            {'date': row['date'].strftime('%Y-%m-%d'), 'count': row['count']}
            for row in daily
        ],
    }


def activity_analytics(logs, company, now=None):
    """Everything on the analytics screen."""
    now = now or timezone.now()

    weekday_patterns = logs.annotate(day=ExtractWeekDay('created_at')) \
        .order_by() \
        .values('day') \
        .annotate(count=Count('id'), avg_response_time=Avg(RESPONSE_TIME)) \
        .order_by('day')

    actions_by_zonal = logs.exclude(user__circuit__zonal=None) \
        .order_by() \
        .values('user__circuit__zonal__name', 'action') \
        .annotate(count=Count('id')) \
        .order_by('user__circuit__zonal__name', '-count')

    # ExtractWeekDay: 1 = Sunday, 7 = Saturday
    weekend = logs.annotate(day=ExtractWeekDay('created_at')).filter(day__in=[1, 7]).count()

    heatmap = logs.annotate(hour=ExtractHour('created_at'), day=ExtractWeekDay('created_at')) \
        .order_by() \
        .values('hour', 'day') \
        .annotate(intensity=Count('id')) \
        .order_by('day', 'hour')

    unusual = logs.filter(additional_data__is_unusual=True) \
        .select_related('user') \
        .order_by('-created_at')[:50]

    suspicious_ips = logs.filter(created_at__gte=now - timedelta(hours=1)) \
        .exclude(ip_address=None) \
        .order_by() \
        .values('ip_address') \
        .annotate(attempts=Count('id')) \
        .filter(attempts__gt=SUSPICIOUS_HOURLY_HITS) \
        .order_by('-attempts')

    last_week = hourly_counts(logs.filter(created_at__gte=now - timedelta(days=7)))

    response_by_zonal = logs.exclude(user__circuit__zonal=None) \
        .order_by() \
        .values('user__circuit__zonal__name') \
        .annotate(avg_response_time=Avg(RESPONSE_TIME), total_activities=Count('id')) \
        .order_by('user__circuit__zonal__name')

    monthly = logs.filter(created_at__gte=now - timedelta(days=365)) \
        .annotate(month=TruncMonth('created_at')) \
        .order_by() \
        .values('month') \
        .annotate(total=Count('id')) \
        .order_by('month')

    engagement = company.users \
        .annotate(
            activity_count=Count('activity_logs', filter=Q(activity_logs__in=logs)),
            last_activity=Max('activity_logs__created_at', filter=Q(activity_logs__in=logs)),
        ) \
        .order_by('-activity_count', 'name')[:10]

    total = logs.count()
    return {
        'weekdayPatterns': [
            {
                'day': row['day'],
                'count': row['count'],
                'avg_response_time': round(row['avg_response_time'] or 0, 2),
            }
            for row in weekday_patterns
        ],
        'topRoutes': list(
            logs.order_by().values('route').annotate(visits=Count('id')).order_by('-visits', 'route')[:10]
        ),
        'actionsByZonal': [
            {'zonal_name': row['user__circuit__zonal__name'], 'action': row['action'], 'count': row['count']}
            for row in actions_by_zonal
        ],
        'weekendVsWeekday': {'weekend': weekend, 'weekday': total - weekend},
        'heatmap': list(heatmap),
        'unusualPatterns': [
            {
                'id': log.id,
                'user': log.user.name if log.user else '-',
                'action': log.action,
                'route': log.route,
                'created_at': log.created_at,
            }
            for log in unusual
        ],
        'suspiciousIps': list(suspicious_ips),
        'predictedLoad': [
            {'hour': hour, 'average_load': round(count / 7, 2)}
            for hour, count in sorted(last_week.items())
        ],
        'deviceStats': list(count_by(logs, 'device_type').order_by('-count')),
        'responseTimesByZonal': [
            {
                'name': row['user__circuit__zonal__name'],
                'avg_response_time': round(row['avg_response_time'] or 0, 2),
                'total_activities': row['total_activities'],
            }
            for row in response_by_zonal
        ],
        'monthlyActivity': [
            {'month': row['month'].strftime('%Y-%m'), 'total': row['total']}
            for row in monthly
        ],
        'userEngagement': [
            {
                'name': user.name,
                'activity_count': user.activity_count,
                'last_activity': user.last_activity,
            }
            for user in engagement
        ],
    }
