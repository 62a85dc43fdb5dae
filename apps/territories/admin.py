from django.contrib import admin
from .models import Zonal, Circuit, Tack


class CircuitInline(admin.TabularInline):
    model = Circuit
    extra = 0
    fields = ['name', 'address', 'active']


@admin.register(Zonal)
class ZonalAdmin(admin.ModelAdmin):
    list_display = ['name', 'short_name', 'company', 'active', 'created_at']
    list_filter = ['company', 'active']
    search_fields = ['name', 'short_name']
    inlines = [CircuitInline]


@admin.register(Circuit)
class CircuitAdmin(admin.ModelAdmin):
    list_display = ['name', 'zonal', 'address', 'active']
    list_filter = ['zonal', 'active']
    search_fields = ['name', 'address', 'zonal__name']
    list_select_related = ['zonal']


@admin.register(Tack)
class TackAdmin(admin.ModelAdmin):
    list_display = ['name', 'circuit', 'active']
    list_filter = ['active']
    search_fields = ['name', 'circuit__name']
