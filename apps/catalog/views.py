import logging

from django.contrib.auth.decorators import login_required
from django.db.models import Count, ProtectedError
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.views.decorators.http import require_POST

from apps.accounts.decorators import company_required, role_required
from apps.accounts.models import ROLE_ADMIN, ROLE_QA
from apps.core.pages import (
    get_per_page, paginate, render_page, respond_error,
    respond_form_errors, respond_success, search_filter,
)
from .forms import ProductForm, WebProductForm
from .models import Product, WebProduct

logger = logging.getLogger(__name__)


def serialize_product(product):
    return {
        'id': product.id,
        'name': product.name,
        'description': product.description,
        'active': product.active,
        'webproducts_count': getattr(product, 'webproducts_count', None),
    }


def serialize_webproduct(webproduct):
    return {
        'id': webproduct.id,
        'name': webproduct.name,
        'description': webproduct.description,
        'product_id': webproduct.product_id,
    }


# PRODUCTS
@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def product_index_view(request):
    search = request.GET.get('search', '').strip()

    products = Product.objects.filter(company=request.company) \
        .annotate(webproducts_count=Count('webproducts')) \
        .order_by('name')
    products = search_filter(products, search, ['name', 'description'])

    return render_page(request, 'Product/Index', {
        'products': paginate(request, products, serialize_product),
        'filters': {
            'search': search,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def product_store_view(request):
    form = ProductForm(request.POST, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'catalog:product_index')

    product = form.save(commit=False)
    product.company = request.company
    product.save()
    return respond_success(request, 'Producto creado correctamente', 'catalog:product_index', {'id': product.id})


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def product_update_view(request, pk):
    product = get_object_or_404(Product, pk=pk, company=request.company)

    form = ProductForm(request.POST, instance=product, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'catalog:product_index')

    form.save()
    return respond_success(request, 'Producto actualizado correctamente', 'catalog:product_index')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def product_destroy_view(request, pk):
    product = get_object_or_404(Product, pk=pk, company=request.company)
    try:
        product.delete()
    except ProtectedError:
        return respond_error(
            request,
            'No se puede eliminar el producto porque tiene ventas registradas',
            'catalog:product_index',
            status=409,
        )
    return respond_success(request, 'Producto eliminado correctamente', 'catalog:product_index')


# WEB PRODUCTS (nested under a product)
@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def webproduct_index_view(request, product_id):
    product = get_object_or_404(Product, pk=product_id, company=request.company)
    search = request.GET.get('search', '').strip()

    webproducts = search_filter(product.webproducts.order_by('name'), search, ['name'])

    return render_page(request, 'Product/Webproduct/Index', {
        'webproducts': paginate(request, webproducts, serialize_webproduct),
        'product': serialize_product(product),
        'filters': {
            'search': search,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def webproduct_store_view(request, product_id):
    product = get_object_or_404(Product, pk=product_id, company=request.company)
    redirect_to = reverse('catalog:webproduct_index', args=[product.id])

    form = WebProductForm(request.POST, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, redirect_to)

    webproduct = form.save(commit=False)
    webproduct.product = product
    webproduct.save()
    return respond_success(request, 'Producto web creado correctamente', redirect_to, {'id': webproduct.id})


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def webproduct_update_view(request, pk):
    webproduct = get_object_or_404(WebProduct, pk=pk, product__company=request.company)
    redirect_to = reverse('catalog:webproduct_index', args=[webproduct.product_id])

    form = WebProductForm(request.POST, instance=webproduct, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, redirect_to)

    form.save()
    return respond_success(request, 'Producto web actualizado correctamente', redirect_to)


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def webproduct_destroy_view(request, pk):
    webproduct = get_object_or_404(WebProduct, pk=pk, product__company=request.company)
    redirect_to = reverse('catalog:webproduct_index', args=[webproduct.product_id])
    try:
        webproduct.delete()
    except ProtectedError:
        return respond_error(
            request,
            'No se pudo eliminar el producto web porque tiene ventas registradas',
            redirect_to,
            status=409,
        )
    return respond_success(request, 'Producto web eliminado correctamente', redirect_to)
