import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from apps.accounts.decorators import company_required, role_required
from apps.accounts.models import ROLE_ADMIN, ROLE_QA
from apps.core.pages import (
    get_per_page, paginate, render_page, respond_form_errors,
    respond_success, search_filter,
)
from apps.core.utils import MONTH_LABELS
from .forms import CampaignForm, CampaignFilterForm, NotificationForm
from .models import Campaign, Notification

logger = logging.getLogger(__name__)


AVAILABLE_MONTHS = [
    {'value': f'{number:02d}', 'label': label}
    for number, label in enumerate(MONTH_LABELS, start=1)
]


def serialize_campaign(campaign):
    return {
        'id': campaign.id,
        'name': campaign.name,
        'description': campaign.description,
        'type': campaign.type,
        'image_url': campaign.image_url,
        'date_start': campaign.date_start.strftime('%Y-%m-%d'),
        'date_end': campaign.date_end.strftime('%Y-%m-%d'),
        'date_start_display': campaign.date_start.strftime('%d-%m-%Y'),
        'date_end_display': campaign.date_end.strftime('%d-%m-%Y'),
        'status': campaign.status,
        'created_at': timezone.localtime(campaign.created_at).strftime('%d-%m-%Y %H:%M:%S'),
    }


def serialize_notification(notification):
    return {
        'id': notification.id,
        'title': notification.title,
        'description': notification.description,
        'type': notification.type,
        'status': notification.status,
        'start_date': notification.start_date,
        'end_date': notification.end_date,
        'created_at': notification.created_at,
    }


# CAMPAIGNS
@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def campaign_index_view(request):
    filter_form = CampaignFilterForm(request.GET)
    filter_form.is_valid()

    campaigns = filter_form.filter(
        Campaign.objects.filter(company=request.company).order_by('-created_at')
    )

    return render_page(request, 'Campaign/Index', {
        'campaigns': paginate(request, campaigns, serialize_campaign),
        'filters': {
            'year': request.GET.get('year', ''),
            'month': request.GET.get('month', ''),
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def campaign_store_view(request):
    form = CampaignForm(request.POST, request.FILES, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'campaigns:campaign_index')

    campaign = form.save(commit=False)
    campaign.company = request.company
    campaign.save()
    logger.info("Campaign %s created by %s", campaign.name, request.user.dni)

    return respond_success(request, 'Campaña creada correctamente', 'campaigns:campaign_index', {'id': campaign.id})


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def campaign_update_view(request, pk):
    campaign = get_object_or_404(Campaign, pk=pk, company=request.company)
    old_image = campaign.image.name if campaign.image else None

    form = CampaignForm(request.POST, request.FILES, instance=campaign, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'campaigns:campaign_index')

    campaign = form.save()

    # A new upload replaces the stored file
    if old_image and 'image' in request.FILES and campaign.image.name != old_image:
        campaign.image.storage.delete(old_image)

    return respond_success(request, 'Campaña actualizada correctamente', 'campaigns:campaign_index')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def campaign_destroy_view(request, pk):
    campaign = get_object_or_404(Campaign, pk=pk, company=request.company)
    campaign.delete()
    return respond_success(request, 'Campaña eliminada correctamente', 'campaigns:campaign_index')


@login_required
@company_required
def campaign_history_view(request):
    """
    Campaigns of a year/month grouped by type

    Defaults to the current year and month; 'all' disables either filter.
    """
    today = timezone.localdate()
    year = request.GET.get('year', str(today.year))
    month = request.GET.get('month', f'{today.month:02d}')

    campaigns = Campaign.objects.filter(company=request.company).order_by('date_start')
    if year != 'all' and year.isdigit():
        campaigns = campaigns.filter(date_start__year=int(year))
    if month != 'all' and month.isdigit():
        campaigns = campaigns.filter(date_start__month=int(month))

    campaigns_by_type = {key: [] for key, _label in Campaign.TYPE_CHOICES}
    for campaign in campaigns:
        campaigns_by_type.setdefault(campaign.type, []).append({
            'id': campaign.id,
            'name': campaign.name,
            'description': campaign.description,
            'type': campaign.type,
            'image_url': campaign.image_url,
            'date_start_display': campaign.date_start.strftime('%d/%m/%Y'),
            'date_end_display': campaign.date_end.strftime('%d/%m/%Y'),
            'status': campaign.status,
        })

    return render_page(request, 'Campaign/History', {
        'campaignsByType': campaigns_by_type,
        'currentYear': year,
        'currentMonth': month,
        'availableYears': list(range(today.year, today.year - 10, -1)),
        'availableMonths': AVAILABLE_MONTHS,
    })


# NOTIFICATIONS
@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def notification_index_view(request):
    search = request.GET.get('search', '').strip()

    notifications = Notification.objects.filter(company=request.company).order_by('-created_at')
    notifications = search_filter(notifications, search, ['title', 'description', 'type'])

    return render_page(request, 'Notification/Notification/Index', {
        'notifications': paginate(request, notifications, serialize_notification),
        'filters': {
            'search': search,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def notification_store_view(request):
    form = NotificationForm(request.POST)
    if not form.is_valid():
        return respond_form_errors(request, form, 'campaigns:notification_index')

    notification = form.save(commit=False)
    notification.company = request.company
    notification.save()
    return respond_success(request, 'Notificación creada correctamente', 'campaigns:notification_index', {'id': notification.id})


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def notification_update_view(request, pk):
    notification = get_object_or_404(Notification, pk=pk, company=request.company)

    form = NotificationForm(request.POST, instance=notification)
    if not form.is_valid():
        return respond_form_errors(request, form, 'campaigns:notification_index')

    form.save()
    return respond_success(request, 'Notificación actualizada correctamente', 'campaigns:notification_index')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def notification_destroy_view(request, pk):
    notification = get_object_or_404(Notification, pk=pk, company=request.company)
    notification.delete()
    return respond_success(request, 'Notificación eliminada correctamente', 'campaigns:notification_index')


@login_required
@company_required
def notification_active_view(request):
    """Notifications for the modal shown right after login."""
    notifications = Notification.objects.filter(company=request.company).active()
    return JsonResponse({
        'notifications': [serialize_notification(notification) for notification in notifications],
    })
