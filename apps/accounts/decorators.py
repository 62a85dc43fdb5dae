# Decorators in this file:
# 1. admin_required - Only admins can access
# 2. role_required - Only the listed roles can access
# 3. company_required - User must work inside a company
#
# Denied page requests get a flash message and a redirect,
# denied AJAX requests get a 403 JSON body.

from functools import wraps
from django.shortcuts import redirect
from django.contrib import messages
from django.http import JsonResponse

from apps.core.utils import get_user_company


LOGIN_MESSAGE = 'Inicia sesión para continuar.'
FORBIDDEN_MESSAGE = 'No tienes permiso para acceder a esta página.'


def _is_ajax(request):
    return request.headers.get('X-Requested-With') == 'XMLHttpRequest'


def _deny(request, message, error, redirect_to='core:dashboard'):
    if _is_ajax(request):
        return JsonResponse({
            'success': False,
            'error': error,
        }, status=403)
    messages.error(request, message)
    return redirect(redirect_to)


def admin_required(view_func):
    """
    Only admins (or superusers) can access this view
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            messages.error(request, LOGIN_MESSAGE)
            return redirect('accounts:login')

        if request.user.is_admin() or request.user.is_superuser:
            return view_func(request, *args, **kwargs)

        return _deny(
            request,
            'No tienes permiso para acceder a esta página. Se requiere acceso de administrador.',
            'Admin access required',
        )

    return wrapper


def role_required(*allowed_roles):
    """
    Only specific roles can access

    Usage:
        @role_required('admin', 'qa')
        def sale_index_view(request):
            ...
    """

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                messages.error(request, LOGIN_MESSAGE)
                return redirect('accounts:login')

            if request.user.role in allowed_roles or request.user.is_superuser:
                return view_func(request, *args, **kwargs)

            return _deny(request, FORBIDDEN_MESSAGE, 'Permission denied')

        return wrapper

    return decorator


def company_required(view_func):
    """
    Resolve the tenant and attach it as ``request.company``

    Superusers without a selected company are sent to the company picker;
    regular users without a company are denied.
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            messages.error(request, LOGIN_MESSAGE)
            return redirect('accounts:login')

        company = get_user_company(request)
        if company:
            request.company = company
            return view_func(request, *args, **kwargs)

        if request.user.is_superuser:
            return _deny(
                request,
                'Selecciona una empresa para continuar.',
                'Company selection required',
                redirect_to='core:company_selector',
            )

        return _deny(
            request,
            'Debes pertenecer a una empresa para acceder a esta página.',
            'Company required',
            redirect_to='accounts:login',
        )

    return wrapper
