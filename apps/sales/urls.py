from django.urls import path
from . import views

app_name = 'sales'

urlpatterns = [
    # Sales
    path('', views.sale_index_view, name='sale_index'),
    path('store/', views.sale_store_view, name='sale_store'),
    path('<int:pk>/update/', views.sale_update_view, name='sale_update'),
    path('<int:pk>/delete/', views.sale_destroy_view, name='sale_destroy'),
    path('bulk-delete/', views.sale_bulk_destroy_view, name='sale_bulk_destroy'),
    path('export/', views.sale_export_view, name='sale_export'),
    path('bulk/', views.sale_bulk_view, name='sale_bulk'),
    path('bulk/template/', views.sale_template_view, name='sale_template'),
    path('bulk/upload/', views.sale_upload_view, name='sale_upload'),
    path('bulk/update/', views.sale_bulk_update_view, name='sale_bulk_update'),

    # Shares (monthly quotas)
    path('shares/', views.share_index_view, name='share_index'),
    path('shares/store/', views.share_store_view, name='share_store'),
    path('shares/<int:pk>/update/', views.share_update_view, name='share_update'),
    path('shares/<int:pk>/delete/', views.share_destroy_view, name='share_destroy'),
    path('shares/bulk-delete/', views.share_bulk_destroy_view, name='share_bulk_destroy'),
    path('shares/bulk/', views.share_bulk_view, name='share_bulk'),
    path('shares/bulk/template/', views.share_template_view, name='share_template'),
    path('shares/bulk/upload/', views.share_upload_view, name='share_upload'),

    # History
    path('history/', views.sales_history_view, name='sales_history'),
]
