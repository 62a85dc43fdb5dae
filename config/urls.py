from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from django.shortcuts import redirect

from apps.activity import api as activity_api

# Main URL Configuration
# Routes all requests to appropriate apps

urlpatterns = [

    path('admin/', admin.site.urls),
    path('accounts/', include('apps.accounts.urls')),
    path('dashboard/', include('apps.core.urls')),
    path('', lambda request: redirect('core:dashboard') if request.user.is_authenticated else redirect('accounts:login')),
    path('territories/', include('apps.territories.urls')),
    path('catalog/', include('apps.catalog.urls')),
    path('campaigns/', include('apps.campaigns.urls')),
    path('sales/', include('apps.sales.urls')),
    path('activity/', include('apps.activity.urls')),
    path('api/activity/', activity_api.client_event, name='api_activity'),

]

if settings.DEBUG:
    # Media files (campaign images)
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

    # Static files (CSS, JS, images)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
