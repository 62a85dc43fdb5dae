from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [

    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),

    path('users/', views.user_index_view, name='user_index'),
    path('users/store/', views.user_store_view, name='user_store'),
    path('users/bulk-create/', views.user_bulk_create_view, name='user_bulk_create'),
    path('users/<int:pk>/update/', views.user_update_view, name='user_update'),
    path('users/<int:pk>/delete/', views.user_destroy_view, name='user_destroy'),

    path('users/<int:user_id>/sellers/', views.seller_index_view, name='seller_index'),
    path('users/<int:user_id>/sellers/store/', views.seller_store_view, name='seller_store'),
    path('sellers/<int:pk>/update/', views.seller_update_view, name='seller_update'),
    path('sellers/<int:pk>/delete/', views.seller_destroy_view, name='seller_destroy'),
]
