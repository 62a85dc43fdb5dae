from django.urls import path

from . import views

app_name = 'activity'

urlpatterns = [
    path('', views.activity_index_view, name='activity_index'),
    path('users/<int:user_id>/', views.activity_user_view, name='activity_user'),
    path('export/', views.activity_export_view, name='activity_export'),
    path('analytics/', views.activity_analytics_view, name='activity_analytics'),
]
