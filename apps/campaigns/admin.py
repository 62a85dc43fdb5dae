from django.contrib import admin
from django.utils.html import format_html
from .models import Campaign, Notification


@admin.register(Campaign)
class CampaignAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'date_start', 'date_end', 'status_badge', 'company']
    list_filter = ['type', 'status', 'company']
    search_fields = ['name', 'description']
    date_hierarchy = 'date_start'
    readonly_fields = ['created_at', 'updated_at']

    def status_badge(self, obj):
        color = '#28a745' if obj.status else '#6c757d'
        label = 'Activa' if obj.status else 'Inactiva'
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 10px; border-radius: 3px; font-size: 11px;">{}</span>',
            color,
            label,
        )

    status_badge.short_description = 'Estado'


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'status', 'start_date', 'end_date', 'company']
    list_filter = ['type', 'status', 'company']
    search_fields = ['title', 'description']
