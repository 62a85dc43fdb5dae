from django.contrib import admin
from django.utils.html import format_html
from .models import Company


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):

    list_display = ['name', 'status_badge', 'users_count', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Información', {
            'fields': ('name', 'slug', 'description')
        }),
        ('Estado', {
            'fields': ('is_active',)
        }),
        ('Fechas', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_badge(self, obj):
        color, label = ('#28a745', 'Activa') if obj.is_active else ('#dc3545', 'Inactiva')
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 10px; border-radius: 3px; font-size: 11px;">{}</span>',
            color,
            label,
        )

    status_badge.short_description = 'Estado'

    def users_count(self, obj):
        return format_html(
            '<span style="color: #667eea; font-weight: bold;">{} usuarios</span>',
            obj.get_active_users_count(),
        )

    users_count.short_description = 'Usuarios'
