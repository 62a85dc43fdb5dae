import logging

from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.http import JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.urls import reverse
from django.conf import settings
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_POST

from apps.activity.models import ActivityLog
from apps.activity.services import log_activity
from apps.core.pages import (
    get_per_page, paginate, render_page, respond_error, respond_form_errors,
    respond_success, search_filter, wants_json,
)
from apps.territories.models import Circuit
from .decorators import admin_required, company_required
from .forms import BulkCreateForm, LoginForm, SellerForm, UserForm
from .models import ROLE_PDV, ROLE_ZONIFICADO, Seller, User, pad_dni

logger = logging.getLogger(__name__)

REMEMBER_ME_SECONDS = 30 * 24 * 60 * 60
BULK_RESULTS_KEY = 'user_bulk_results'

PLACEHOLDER_NAME = 'sin nombre'
PLACEHOLDER_CEL = '999999999'


def serialize_user(user):
    circuit = user.circuit
    return {
        'id': user.id,
        'name': user.name,
        'dni': user.dni,
        'email': user.email,
        'cel': user.cel,
        'role': user.role,
        'is_active': user.is_active,
        'circuit': {
            'id': circuit.id,
            'name': circuit.name,
            'zonal': circuit.zonal.short_name,
        } if circuit else None,
        'zonificador': {
            'id': user.zonificador_id,
            'name': user.zonificador.name,
        } if user.zonificador_id else None,
    }


def serialize_seller(seller):
    return {
        'id': seller.id,
        'name': seller.name,
        'dni': seller.dni,
        'cel': seller.cel,
        'pdv_id': seller.pdv_id,
    }


def safe_next_url(request):
    next_url = request.GET.get('next') or request.POST.get('next')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return next_url
    return None


# AUTHENTICATION VIEWS
@never_cache
def login_view(request):
    # Users without a company stay here; the dashboard would send them back
    if request.user.is_authenticated and (request.user.company_id or request.user.is_superuser):
        return redirect('core:dashboard')

    if request.method == 'POST':
        form = LoginForm(request.POST)

        if form.is_valid():
            dni = form.cleaned_data['dni']
            user = authenticate(request, username=dni, password=form.cleaned_data['password'])

            if user is not None:
                login(request, user)
                request.session.set_expiry(REMEMBER_ME_SECONDS if form.cleaned_data.get('remember') else 0)

                log_activity(request, ActivityLog.ACTION_LOGIN, 'Inicio de sesión', user=user)
                logger.info("User %s logged in", user.dni)

                messages.success(request, f'Bienvenido, {user.get_short_name()}')
                return redirect(safe_next_url(request) or 'core:dashboard')

            # Inactive users fail authentication too
            logger.warning("Failed login for DNI %s", dni)
            messages.error(request, 'DNI o contraseña incorrectos.')
        else:
            messages.error(request, 'Por favor corrige los errores del formulario.')
    else:
        form = LoginForm()

    return render(request, 'accounts/login.html', {'form': form, 'page_title': 'Iniciar sesión'})


@login_required
@require_POST
def logout_view(request):
    log_activity(request, ActivityLog.ACTION_LOGOUT, 'Cierre de sesión')
    logout(request)
    messages.success(request, 'Sesión cerrada correctamente.')
    return redirect('accounts:login')


# USERS
@login_required
@company_required
@admin_required
def user_index_view(request):
    search = request.GET.get('search', '').strip()

    users = User.objects.filter(company=request.company) \
        .select_related('circuit__zonal', 'zonificador') \
        .order_by('name')
    users = search_filter(users, search, ['name', 'dni', 'cel', 'circuit__name', 'role'])

    circuits = Circuit.objects.filter(zonal__company=request.company, active=True) \
        .select_related('zonal') \
        .order_by('name')
    zonificadores = User.objects.filter(company=request.company, role=ROLE_ZONIFICADO).order_by('name')

    return render_page(request, 'User/Index', {
        'users': paginate(request, users, serialize_user),
        'circuits': [
            {'id': circuit.id, 'name': circuit.name, 'zonal': circuit.zonal.short_name}
            for circuit in circuits
        ],
        'zonificadores': [
            {'id': user.id, 'name': user.name, 'dni': user.dni}
            for user in zonificadores
        ],
        'roles': [{'value': value, 'label': label} for value, label in User._meta.get_field('role').choices],
        'bulkResults': request.session.pop(BULK_RESULTS_KEY, None),
        'filters': {
            'search': search,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@admin_required
@require_POST
def user_store_view(request):
    form = UserForm(request.POST, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'accounts:user_index')

    user = form.save()
    logger.info("User %s created by %s", user.dni, request.user.dni)
    return respond_success(request, 'Usuario creado correctamente', 'accounts:user_index', {'id': user.id})


@login_required
@company_required
@admin_required
@require_POST
def user_update_view(request, pk):
    user = get_object_or_404(User, pk=pk, company=request.company)

    form = UserForm(request.POST, instance=user, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'accounts:user_index')

    form.save()
    return respond_success(request, 'Usuario actualizado correctamente', 'accounts:user_index')


@login_required
@company_required
@admin_required
@require_POST
def user_destroy_view(request, pk):
    user = get_object_or_404(User, pk=pk, company=request.company)
    if user.pk == request.user.pk:
        return respond_error(request, 'No puedes eliminar tu propio usuario', 'accounts:user_index')

    try:
        with transaction.atomic():
            user.delete()
    except ProtectedError:
        return respond_error(
            request,
            'No se puede eliminar el usuario porque tiene ventas registradas',
            'accounts:user_index',
            status=409,
        )

    logger.info("User %s deleted by %s", pk, request.user.dni)
    return respond_success(request, 'Usuario eliminado correctamente', 'accounts:user_index')


def bulk_create_users(company, dnis):
    """
    Create placeholder PDV users for ``dnis``

    Each DNI is padded to 8 digits and gets name 'sin nombre', password equal
    to the DNI, cel 999999999 and the placeholder circuit. Existing DNIs are
    reported per row and do not stop the rest.
    """
    circuit = Circuit.objects.filter(
        zonal__company=company,
        name=settings.SHARE_AUTO_CREATE_CIRCUIT,
    ).first()
    if circuit is None:
        return None

    results = {'total': 0, 'success': 0, 'errors': []}
    for raw in dnis:
        results['total'] += 1
        dni = pad_dni(raw)
        if User.objects.filter(dni=dni).exists():
            results['errors'].append({'dni': dni, 'message': 'El usuario ya existe'})
            continue
        try:
            with transaction.atomic():
                User.objects.create_user(
                    dni,
                    password=dni,
                    name=PLACEHOLDER_NAME,
                    cel=PLACEHOLDER_CEL,
                    role=ROLE_PDV,
                    company=company,
                    circuit=circuit,
                )
        except IntegrityError:
            results['errors'].append({'dni': dni, 'message': 'El usuario ya existe'})
            continue
        results['success'] += 1

    logger.info(
        "Bulk user creation for %s: %s of %s created",
        company, results['success'], results['total'],
    )
    return results


@login_required
@company_required
@admin_required
@require_POST
def user_bulk_create_view(request):
    form = BulkCreateForm(request.POST)
    if not form.is_valid():
        return respond_form_errors(request, form, 'accounts:user_index')

    results = bulk_create_users(request.company, form.cleaned_data['dnis'])
    if results is None:
        return respond_error(
            request,
            f'No se encontró el circuito {settings.SHARE_AUTO_CREATE_CIRCUIT}',
            'accounts:user_index',
        )

    success = not results['errors']
    if success:
        message = f"Se crearon {results['success']} usuarios correctamente"
    else:
        message = 'Se encontraron errores al crear algunos usuarios'

    if wants_json(request):
        return JsonResponse({'success': success, 'message': message, 'results': results})

    request.session[BULK_RESULTS_KEY] = results
    if success:
        messages.success(request, message)
    else:
        messages.error(request, message)
    return redirect('accounts:user_index')


# SELLERS (nested under a PDV user)
def get_pdv(request, user_id):
    return get_object_or_404(User, pk=user_id, company=request.company)


@login_required
@company_required
@admin_required
def seller_index_view(request, user_id):
    pdv = get_pdv(request, user_id)
    search = request.GET.get('search', '').strip()

    sellers = search_filter(pdv.sellers.order_by('name'), search, ['name', 'dni', 'cel'])

    return render_page(request, 'User/Seller/Index', {
        'sellers': paginate(request, sellers, serialize_seller),
        'pdv': {'id': pdv.id, 'name': pdv.name, 'dni': pdv.dni},
        'filters': {
            'search': search,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@admin_required
@require_POST
def seller_store_view(request, user_id):
    pdv = get_pdv(request, user_id)
    redirect_to = reverse('accounts:seller_index', args=[pdv.id])

    form = SellerForm(request.POST)
    if not form.is_valid():
        return respond_form_errors(request, form, redirect_to)

    seller = form.save(commit=False)
    seller.pdv = pdv
    seller.save()
    return respond_success(request, 'Vendedor creado correctamente.', redirect_to, {'id': seller.id})


@login_required
@company_required
@admin_required
@require_POST
def seller_update_view(request, pk):
    seller = get_object_or_404(Seller, pk=pk, pdv__company=request.company)
    redirect_to = reverse('accounts:seller_index', args=[seller.pdv_id])

    form = SellerForm(request.POST, instance=seller)
    if not form.is_valid():
        return respond_form_errors(request, form, redirect_to)

    form.save()
    return respond_success(request, 'Vendedor actualizado correctamente.', redirect_to)


@login_required
@company_required
@admin_required
@require_POST
def seller_destroy_view(request, pk):
    seller = get_object_or_404(Seller, pk=pk, pdv__company=request.company)
    redirect_to = reverse('accounts:seller_index', args=[seller.pdv_id])
    seller.delete()
    return respond_success(request, 'Vendedor eliminado correctamente.', redirect_to)
