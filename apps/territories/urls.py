from django.urls import path
from . import views

app_name = 'territories'

urlpatterns = [
    path('zonals/', views.zonal_index_view, name='zonal_index'),
    path('zonals/store/', views.zonal_store_view, name='zonal_store'),
    path('zonals/<int:pk>/update/', views.zonal_update_view, name='zonal_update'),
    path('zonals/<int:pk>/delete/', views.zonal_destroy_view, name='zonal_destroy'),

    path('circuits/', views.circuit_index_view, name='circuit_index'),
    path('circuits/store/', views.circuit_store_view, name='circuit_store'),
    path('circuits/<int:pk>/update/', views.circuit_update_view, name='circuit_update'),
    path('circuits/<int:pk>/delete/', views.circuit_destroy_view, name='circuit_destroy'),

    path('circuits/<int:circuit_id>/tacks/', views.tack_index_view, name='tack_index'),
    path('circuits/<int:circuit_id>/tacks/store/', views.tack_store_view, name='tack_store'),
    path('tacks/<int:pk>/update/', views.tack_update_view, name='tack_update'),
    path('tacks/<int:pk>/delete/', views.tack_destroy_view, name='tack_destroy'),
]
