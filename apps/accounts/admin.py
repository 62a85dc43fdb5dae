from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import ROLE_ADMIN, ROLE_QA, ROLE_ZONIFICADO, Seller, User


ROLE_COLORS = {
    ROLE_ADMIN: '#28a745',
    ROLE_QA: '#17a2b8',
    ROLE_ZONIFICADO: '#667eea',
}


class SellerInline(admin.TabularInline):
    model = Seller
    fk_name = 'pdv'
    extra = 0
    fields = ('name', 'dni', 'cel')


# CUSTOM USER ADMIN
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        'dni',
        'name',
        'company',
        'role_badge',
        'circuit',
        'is_active_badge',
        'date_joined',
    )
    list_display_links = ('dni', 'name')
    list_filter = ('role', 'is_active', 'is_staff', 'is_superuser', 'company')
    search_fields = ('dni', 'name', 'email', 'cel', 'company__name', 'circuit__name')
    ordering = ('name',)
    list_per_page = 25
    list_select_related = ('company', 'circuit')
    raw_id_fields = ('zonificador',)

    fieldsets = (
        ('Acceso', {
            'fields': ('dni', 'password'),
            'classes': ('wide',),
            'description': 'El DNI se usa para iniciar sesión.',
        }),
        ('Datos personales', {
            'fields': ('name', 'email', 'cel'),
        }),
        ('Empresa y rol', {
            'fields': ('company', 'role', 'circuit', 'zonificador'),
        }),
        ('Permisos', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        ('Fechas', {
            'fields': ('date_joined', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Acceso', {
            'fields': ('dni', 'password1', 'password2'),
            'classes': ('wide',),
        }),
        ('Datos personales', {
            'fields': ('name', 'cel'),
        }),
        ('Empresa y rol', {
            'fields': ('company', 'role', 'circuit'),
        }),
    )

    readonly_fields = ('date_joined', 'last_login')
    inlines = [SellerInline]

    def role_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            ROLE_COLORS.get(obj.role, '#007bff'), obj.get_role_display()
        )

    role_badge.short_description = 'Rol'
    role_badge.admin_order_field = 'role'

    def is_active_badge(self, obj):
        color, label = ('#28a745', 'Activo') if obj.is_active else ('#dc3545', 'Inactivo')
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            color, label
        )

    is_active_badge.short_description = 'Estado'
    is_active_badge.admin_order_field = 'is_active'

    actions = ['activate_users', 'deactivate_users']

    def activate_users(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f'{updated} usuario(s) activados.', level='success')

    activate_users.short_description = 'Activar usuarios seleccionados'

    def deactivate_users(self, request, queryset):
        # Superusers stay active
        updated = queryset.filter(is_superuser=False).update(is_active=False)
        self.message_user(request, f'{updated} usuario(s) desactivados.', level='success')

    deactivate_users.short_description = 'Desactivar usuarios seleccionados'

    def has_delete_permission(self, request, obj=None):
        if obj and obj == request.user:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(Seller)
class SellerAdmin(admin.ModelAdmin):
    list_display = ('name', 'dni', 'cel', 'pdv')
    search_fields = ('name', 'dni', 'cel', 'pdv__name', 'pdv__dni')
    list_select_related = ('pdv',)
    raw_id_fields = ('pdv',)


admin.site.site_header = 'Administración Back-office de Ventas'
admin.site.site_title = 'Back-office de Ventas'
admin.site.index_title = 'Panel de administración'
