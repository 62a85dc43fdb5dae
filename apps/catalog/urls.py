from django.urls import path
from . import views

app_name = 'catalog'

urlpatterns = [
    path('products/', views.product_index_view, name='product_index'),
    path('products/store/', views.product_store_view, name='product_store'),
    path('products/<int:pk>/update/', views.product_update_view, name='product_update'),
    path('products/<int:pk>/delete/', views.product_destroy_view, name='product_destroy'),

    path('products/<int:product_id>/webproducts/', views.webproduct_index_view, name='webproduct_index'),
    path('products/<int:product_id>/webproducts/store/', views.webproduct_store_view, name='webproduct_store'),
    path('webproducts/<int:pk>/update/', views.webproduct_update_view, name='webproduct_update'),
    path('webproducts/<int:pk>/delete/', views.webproduct_destroy_view, name='webproduct_destroy'),
]
