"""
Server-driven page bridge

Every screen of the back-office is a component name plus a dict of plain
props. Browsers get the ``app.html`` shell with the page object embedded as
JSON; XHR clients get the page object itself.

    render_page(request, 'Zonal/Index', {'zonals': paginate(...)})
"""
from django.conf import settings
from django.contrib import messages
from django.core.paginator import Paginator
from django.core.serializers.json import DjangoJSONEncoder
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import redirect, render

from .utils import get_user_company


FORM_ERROR_MESSAGE = 'Por favor corrige los errores del formulario.'


def is_ajax(request):
    return request.headers.get('X-Requested-With') == 'XMLHttpRequest'


def wants_json(request):
    """AJAX header or an explicit JSON Accept header."""
    return is_ajax(request) or 'application/json' in request.headers.get('Accept', '')


def auth_props(user):
    if not user.is_authenticated:
        return {'user': None}
    return {
        'user': {
            'id': user.id,
            'name': user.name,
            'dni': user.dni,
            'role': user.role,
            'is_superuser': user.is_superuser,
        }
    }


def flash_props(request):
    flash = {'success': [], 'error': [], 'info': [], 'warning': []}
    for message in messages.get_messages(request):
        flash.setdefault(message.level_tag or 'info', []).append(str(message))
    return flash


def shared_props(request):
    company = get_user_company(request)
    return {
        'auth': auth_props(request.user),
        'flash': flash_props(request),
        'errors': request.session.pop('errors', {}) if hasattr(request, 'session') else {},
        'company': {'id': company.id, 'name': company.name} if company else None,
    }


def render_page(request, component, props=None, status=200):
    page = {
        'component': component,
        'props': {**shared_props(request), **(props or {})},
        'url': request.get_full_path(),
    }
    if is_ajax(request):
        return JsonResponse(page, encoder=DjangoJSONEncoder, status=status)
    return render(request, 'app.html', {'page': page}, status=status)


def form_errors(form):
    return {field: [str(error) for error in errors] for field, errors in form.errors.items()}


def respond_success(request, message, redirect_to, data=None):
    """Mutation succeeded: JSON acknowledgement or redirect with flash."""
    if wants_json(request):
        payload = {'success': True, 'message': message}
        payload.update(data or {})
        return JsonResponse(payload, encoder=DjangoJSONEncoder)
    messages.success(request, message)
    return redirect(redirect_to)


def respond_error(request, message, redirect_to, status=400):
    if wants_json(request):
        return JsonResponse({'success': False, 'error': message}, status=status)
    messages.error(request, message)
    return redirect(redirect_to)


def respond_form_errors(request, form, redirect_to):
    """Form invalid: 422 JSON, or keep the errors in session for the next page."""
    errors = form_errors(form)
    if wants_json(request):
        return JsonResponse({'success': False, 'errors': errors}, status=422)
    request.session['errors'] = errors
    messages.error(request, FORM_ERROR_MESSAGE)
    return redirect(redirect_to)


def get_per_page(request):
    default = settings.PAGINATION_SIZE
    try:
        per_page = int(request.GET.get('per_page', default))
    except (TypeError, ValueError):
        return default
    return per_page if per_page in settings.PER_PAGE_OPTIONS else default


def paginate(request, queryset, serializer, per_page=None):
    """
    Paginate a queryset into the plain-data payload every index screen uses.

    ``per_page`` forces a fixed page size; otherwise the ``per_page`` query
    parameter is read against the allow-list.
    """
    per_page = per_page or get_per_page(request)
    paginator = Paginator(queryset, per_page)
    page_obj = paginator.get_page(request.GET.get('page', 1))

    links = []
    for number in paginator.get_elided_page_range(page_obj.number, on_each_side=2, on_ends=1):
        is_page = number != Paginator.ELLIPSIS
        links.append({
            'label': str(number),
            'page': number if is_page else None,
            'active': is_page and number == page_obj.number,
        })

    has_rows = paginator.count > 0
    return {
        'data': [serializer(obj) for obj in page_obj.object_list],
        'current_page': page_obj.number,
        'last_page': paginator.num_pages,
        'per_page': per_page,
        'total': paginator.count,
        'from': page_obj.start_index() if has_rows else None,
        'to': page_obj.end_index() if has_rows else None,
        'links': links,
    }


def search_filter(queryset, term, fields):
    """OR of icontains lookups over ``fields``; empty term leaves the queryset alone."""
    term = (term or '').strip()
    if not term:
        return queryset
    query = Q()
    for field in fields:
        query |= Q(**{f'{field}__icontains': term})
    return queryset.filter(query)


def get_filters(request, *keys):
    """Echo the query-string filters back to the page."""
    return {key: request.GET.get(key, '') for key in keys}
