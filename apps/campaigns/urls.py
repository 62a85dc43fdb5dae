from django.urls import path
from . import views

app_name = 'campaigns'

urlpatterns = [
    path('', views.campaign_index_view, name='campaign_index'),
    path('store/', views.campaign_store_view, name='campaign_store'),
    path('<int:pk>/update/', views.campaign_update_view, name='campaign_update'),
    path('<int:pk>/delete/', views.campaign_destroy_view, name='campaign_destroy'),
    path('history/', views.campaign_history_view, name='campaign_history'),

    path('notifications/', views.notification_index_view, name='notification_index'),
    path('notifications/store/', views.notification_store_view, name='notification_store'),
    path('notifications/<int:pk>/update/', views.notification_update_view, name='notification_update'),
    path('notifications/<int:pk>/delete/', views.notification_destroy_view, name='notification_destroy'),
    path('notifications/active/', views.notification_active_view, name='notification_active'),
]
