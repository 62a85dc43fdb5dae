from django.contrib import admin
from .models import Product, WebProduct


class WebProductInline(admin.TabularInline):
    model = WebProduct
    extra = 0
    fields = ['name', 'description']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'active', 'created_at']
    list_filter = ['company', 'active']
    search_fields = ['name', 'description']
    inlines = [WebProductInline]


@admin.register(WebProduct)
class WebProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'product', 'created_at']
    list_filter = ['product']
    search_fields = ['name', 'product__name']
    list_select_related = ['product']
