from django.contrib import admin
from .models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ['action', 'user', 'device_type', 'ip_address', 'route', 'created_at']
    list_filter = ['action', 'device_type', 'created_at']
    search_fields = ['user__name', 'user__dni', 'action', 'route', 'ip_address']
    list_select_related = ['user']
    date_hierarchy = 'created_at'
    readonly_fields = [field.name for field in ActivityLog._meta.fields]

    def has_add_permission(self, request):
        return False
