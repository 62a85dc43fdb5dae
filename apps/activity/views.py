import logging

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404
from django.utils import timezone

import openpyxl

from apps.accounts.decorators import company_required, role_required
from apps.accounts.models import ROLE_ADMIN, ROLE_QA, User
from apps.core.pages import get_filters, paginate, render_page
from apps.core.spreadsheets import adjust_widths, workbook_response, write_header
from apps.territories.models import Zonal
from .models import ActivityLog
from .stats import activity_analytics, activity_stats, filter_logs, user_activity_stats

logger = logging.getLogger(__name__)

FILTER_KEYS = ('user_id', 'action', 'date_from', 'date_to', 'zonal_id')

EXPORT_HEADERS = [
    'Usuario', 'Email', 'Zonal', 'Acción', 'Dispositivo',
    'Dirección IP', 'Fecha y Hora', 'Tiempo de Respuesta (ms)',
]


def company_logs(company):
    return ActivityLog.objects.filter(user__company=company)


def serialize_activity(activity):
    user = activity.user
    zonal = user.zonal if user else None
    return {
        'id': activity.id,
        'user': {
            'id': user.id if user else None,
            'name': user.name if user else '-',
            'email': (user.email or '-') if user else '-',
            'zonal': zonal.name if zonal else '-',
        },
        'action': activity.action,
        'description': activity.description,
        'ip_address': activity.ip_address,
        'route': activity.route,
        'created_at': activity.created_at,
        'additional_data': {
            **(activity.additional_data or {}),
            'device_type': activity.device_type or '-',
            'response_time': activity.response_time,
        },
    }


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def activity_index_view(request):
    logs = company_logs(request.company)
    activities = filter_logs(logs, request.GET) \
        .select_related('user__circuit__zonal') \
        .order_by('-created_at')

    # Stats follow the user and date filters only
    stats_logs = filter_logs(logs, request.GET, with_action=False, with_zonal=False)

    users = User.objects.filter(company=request.company, activity_logs__isnull=False) \
        .distinct() \
        .order_by('name')

    return render_page(request, 'Admin/ActivityLogs', {
        'activities': paginate(request, activities, serialize_activity, per_page=settings.ACTIVITY_LOG_PAGE_SIZE),
        'stats': activity_stats(stats_logs, request.company),
        'users': [{'id': user.id, 'name': user.name, 'email': user.email} for user in users],
        'zonales': [
            {'id': zonal.id, 'name': zonal.name}
            for zonal in Zonal.objects.filter(company=request.company).order_by('name')
        ],
        'filters': get_filters(request, *FILTER_KEYS),
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def activity_user_view(request, user_id):
    user = get_object_or_404(User, pk=user_id, company=request.company)
    logs = ActivityLog.objects.filter(user=user)

    return render_page(request, 'Admin/UserActivity', {
        'user': {
            'id': user.id,
            'name': user.name,
            'dni': user.dni,
            'email': user.email,
            'role': user.role,
        },
        'activities': paginate(request, logs.order_by('-created_at'), serialize_activity, per_page=20),
        'stats': user_activity_stats(logs),
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def activity_export_view(request):
    """Workbook of the log entries matching the on-screen filters."""
    activities = filter_logs(company_logs(request.company), request.GET) \
        .select_related('user__circuit__zonal') \
        .order_by('-created_at')

    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = 'Actividad'
    write_header(worksheet, EXPORT_HEADERS)

    row = 2
    for activity in activities.iterator(chunk_size=1000):
        user = activity.user
        zonal = user.zonal if user else None
        response_time = activity.response_time
        values = [
            user.name if user else '-',
            (user.email or '-') if user else '-',
            zonal.name if zonal else '-',
            activity.action,
            activity.device_type or '-',
            activity.ip_address,
            timezone.localtime(activity.created_at).strftime('%d/%m/%Y %H:%M:%S'),
            response_time if response_time is not None else '-',
        ]
        for col, value in enumerate(values, start=1):
            worksheet.cell(row=row, column=col, value=value)
        row += 1

    adjust_widths(worksheet)
    filename = f"actividad_{timezone.localtime().strftime('%Y%m%d_%H%M%S')}.xlsx"
    return workbook_response(workbook, filename)


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def activity_analytics_view(request):
    return render_page(
        request,
        'Admin/ActivityAnalytics',
        activity_analytics(company_logs(request.company), request.company),
    )
