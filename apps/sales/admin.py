from django.contrib import admin
from .models import Sale, Share


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['telefono', 'date', 'user', 'webproduct', 'commissionable_charge', 'action']
    list_filter = ['commissionable_charge', 'action', 'cluster_quality', 'date']
    search_fields = ['telefono', 'user__name', 'user__dni', 'webproduct__name']
    list_select_related = ['user', 'webproduct']
    date_hierarchy = 'date'
    raw_id_fields = ['user']


@admin.register(Share)
class ShareAdmin(admin.ModelAdmin):
    list_display = ['user', 'year', 'month', 'amount']
    list_filter = ['year', 'month']
    search_fields = ['user__name', 'user__dni']
    list_select_related = ['user']
    raw_id_fields = ['user']
