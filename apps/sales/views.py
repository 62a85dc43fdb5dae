import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db.models import Count, Q, Sum
from django.db.models.functions import Coalesce
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.http import require_POST

from apps.accounts.decorators import company_required, role_required
from apps.accounts.models import ROLE_ADMIN, ROLE_PDV, ROLE_QA, ROLE_ZONIFICADO, User, pad_dni
from apps.activity.models import ActivityLog
from apps.activity.services import log_activity
from apps.catalog.models import Product, WebProduct
from apps.core.pages import (
    get_per_page, paginate, render_page, respond_error, respond_form_errors,
    respond_success, wants_json,
)
from apps.core.spreadsheets import workbook_response
from .forms import SaleForm, ShareForm, UploadForm
from .importers import (
    ImportFileError, SaleImporter, SaleUpdater, ShareImporter,
    file_error_result, read_workbook, rows_from_session, rows_to_session,
)
from .models import Sale, Share
from .reports import sales_history
from .spreadsheets import build_sale_export, build_sale_template, build_share_template, export_filename

logger = logging.getLogger(__name__)

FILE_ERROR_PREFIX = 'Error al procesar el archivo: '


def serialize_sale(sale):
    return {
        'id': sale.id,
        'date': sale.date.strftime('%Y-%m-%d'),
        'telefono': sale.telefono,
        'cluster_quality': sale.cluster_quality,
        'recharge_date': sale.recharge_date.strftime('%Y-%m-%d') if sale.recharge_date else None,
        'recharge_amount': sale.recharge_amount,
        'accumulated_amount': sale.accumulated_amount,
        'commissionable_charge': sale.commissionable_charge,
        'action': sale.action,
        'user': {
            'id': sale.user_id,
            'name': sale.user.name,
            'dni': sale.user.dni,
        },
        'webproduct': {
            'id': sale.webproduct_id,
            'name': sale.webproduct.name,
            'product': sale.webproduct.product.name,
        },
    }


def serialize_share(share):
    zonal = share.user.zonal
    return {
        'id': share.id,
        'year': share.year,
        'month': share.month,
        'amount': share.amount,
        'user': {
            'id': share.user_id,
            'name': share.user.name,
            'dni': share.user.dni,
            'zonal': zonal.short_name if zonal else None,
        },
    }


def parse_date_param(value, default):
    try:
        return parse_date(value or '') or default
    except ValueError:
        return default


def pdv_options(company):
    return [
        {'id': user.id, 'name': user.name, 'dni': user.dni}
        for user in User.objects.filter(company=company, role=ROLE_PDV).order_by('name')
    ]


# IMPORT RESPONSES
def import_session_key(kind):
    return f'{kind}_import_data'


def import_results_key(kind):
    return f'{kind}_import_results'


def respond_import(request, results, message, redirect_to, kind):
    """Bulk operation finished: JSON with the results, or flash + results kept for the bulk page."""
    success = not results['errors']
    if wants_json(request):
        return JsonResponse({
            'success': success,
            'message': message,
            'results': results,
        }, status=200 if success else 422)

    request.session[import_results_key(kind)] = results
    if success:
        messages.success(request, message)
    else:
        messages.error(request, message)
    return redirect(redirect_to)


def upload_rows(request, importer, kind, redirect_to):
    """
    Rows to import for an upload request, or the response to send instead

    ``only_successful`` retries the previous failed upload of this kind with
    the rows that had no error.
    """
    if request.POST.get('only_successful') in ('1', 'true', 'on'):
        original = request.session.get(import_session_key(kind))
        if not original:
            return None, respond_error(request, 'No hay una importación anterior para reintentar.', redirect_to)
        error_rows = {error['row'] for error in original['results']['errors']}
        rows = [row for row in rows_from_session(original['rows']) if row[0] not in error_rows]
        return rows, None

    form = UploadForm(request.POST, request.FILES)
    if not form.is_valid():
        return None, respond_form_errors(request, form, redirect_to)

    try:
        return read_workbook(form.cleaned_data['file'], importer.sheet_name), None
    except ImportFileError as exc:
        results = file_error_result(str(exc))
        return None, respond_import(request, results, FILE_ERROR_PREFIX + str(exc), redirect_to, kind)


def run_upload(request, importer, kind, redirect_to, noun):
    rows, response = upload_rows(request, importer, kind, redirect_to)
    if response is not None:
        return response

    results = importer.run(rows)
    if results['errors']:
        top_level = results['errors'][0]['row'] == 0
        if not top_level:
            request.session[import_session_key(kind)] = {
                'rows': rows_to_session(rows),
                'results': results,
            }
        message = FILE_ERROR_PREFIX + results['errors'][0]['message'] if top_level \
            else 'Se encontraron errores en la importación'
        return respond_import(request, results, message, redirect_to, kind)

    request.session.pop(import_session_key(kind), None)
    logger.info("%s %s imported by %s", results['success'], noun, request.user.dni)
    log_activity(request, ActivityLog.ACTION_IMPORT_DATA, f'Importación de {noun}', {'rows': results['success']})
    return respond_import(
        request, results, f"Se importaron {results['success']} {noun} correctamente", redirect_to, kind,
    )


# SALES
def filter_sales(request, company):
    """Sales of the tenant narrowed by the index filters."""
    today = timezone.localdate()
    start_date = parse_date_param(request.GET.get('startDate'), today)
    end_date = parse_date_param(request.GET.get('endDate'), today)

    sales = Sale.objects.filter(user__company=company, date__range=(start_date, end_date))

    pdv = request.GET.get('pdv', '').strip()
    if pdv:
        if pdv.isdigit():
            sales = sales.filter(Q(user__name__icontains=pdv) | Q(user__dni=pad_dni(pdv)))
        else:
            sales = sales.filter(Q(user__name__icontains=pdv) | Q(user__dni__icontains=pdv))

    commissionable = request.GET.get('commissionable', 'all')
    if commissionable == 'true':
        sales = sales.filter(commissionable_charge=True)
    elif commissionable == 'false':
        sales = sales.filter(commissionable_charge=False)

    zonificado = request.GET.get('zonificado', '').strip()
    if zonificado:
        sales = sales.filter(
            Q(user__zonificador__name__icontains=zonificado) |
            Q(user__zonificador__circuit__zonal__name__icontains=zonificado) |
            Q(user__zonificador__circuit__zonal__short_name__icontains=zonificado)
        )

    product = request.GET.get('product', 'all')
    if product not in ('', 'all') and product.isdigit():
        sales = sales.filter(webproduct__product_id=int(product))

    webproduct = request.GET.get('webproduct', 'all')
    if webproduct not in ('', 'all') and webproduct.isdigit():
        sales = sales.filter(webproduct_id=int(webproduct))

    filters = {
        'startDate': start_date.strftime('%Y-%m-%d'),
        'endDate': end_date.strftime('%Y-%m-%d'),
        'pdv': pdv,
        'zonificado': zonificado,
        'commissionable': commissionable,
        'product': product,
        'webproduct': webproduct,
    }
    return sales, filters, start_date, end_date


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def sale_index_view(request):
    sales, filters, _start, _end = filter_sales(request, request.company)

    totals = sales.aggregate(
        recharge_amount=Coalesce(Sum('recharge_amount'), 0),
        accumulated_amount=Coalesce(Sum('accumulated_amount'), 0),
        count=Count('id'),
    )

    sales = sales.select_related('user', 'webproduct__product').order_by('-date', '-created_at')

    return render_page(request, 'Sale/Index', {
        'sales': paginate(request, sales, serialize_sale),
        'users': pdv_options(request.company),
        'products': [
            {'id': product.id, 'name': product.name}
            for product in Product.objects.filter(company=request.company).order_by('name')
        ],
        'webProducts': [
            {'id': webproduct.id, 'name': webproduct.name, 'product_id': webproduct.product_id}
            for webproduct in WebProduct.objects.filter(product__company=request.company).order_by('name')
        ],
        'totals': totals,
        'filters': {**filters, 'per_page': get_per_page(request)},
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def sale_store_view(request):
    form = SaleForm(request.POST, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'sales:sale_index')

    sale = form.save()
    return respond_success(request, 'Venta creada correctamente.', 'sales:sale_index', {'id': sale.id})


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def sale_update_view(request, pk):
    sale = get_object_or_404(Sale, pk=pk, user__company=request.company)

    form = SaleForm(request.POST, instance=sale, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'sales:sale_index')

    form.save()
    return respond_success(request, 'Venta actualizada correctamente.', 'sales:sale_index')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def sale_destroy_view(request, pk):
    sale = get_object_or_404(Sale, pk=pk, user__company=request.company)
    sale.delete()
    return respond_success(request, 'Venta eliminada correctamente.', 'sales:sale_index')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def sale_bulk_destroy_view(request):
    ids = [value for value in request.POST.getlist('ids') if value.isdigit()]
    if not ids:
        return respond_error(request, 'Selecciona al menos una venta.', 'sales:sale_index')

    deleted, _detail = Sale.objects.filter(pk__in=ids, user__company=request.company).delete()
    logger.info("%s sales deleted in bulk by %s", deleted, request.user.dni)
    return respond_success(request, 'Ventas eliminadas correctamente', 'sales:sale_index', {'deleted': deleted})


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def sale_export_view(request):
    sales, _filters, start_date, end_date = filter_sales(request, request.company)
    workbook = build_sale_export(sales.order_by('-date', '-created_at'))
    return workbook_response(workbook, export_filename(start_date, end_date))


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def sale_bulk_view(request):
    return render_page(request, 'Sale/Bulk', {
        'results': request.session.pop(import_results_key('sale'), None),
        'canRetry': import_session_key('sale') in request.session,
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def sale_template_view(request):
    return workbook_response(build_sale_template(request.company), 'plantilla_ventas.xlsx')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def sale_upload_view(request):
    return run_upload(request, SaleImporter(request.company), 'sale', 'sales:sale_bulk', 'ventas')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def sale_bulk_update_view(request):
    form = UploadForm(request.POST, request.FILES)
    if not form.is_valid():
        return respond_form_errors(request, form, 'sales:sale_bulk')

    updater = SaleUpdater(request.company)
    try:
        rows = read_workbook(form.cleaned_data['file'], updater.sheet_name)
    except ImportFileError as exc:
        results = {**file_error_result(str(exc)), 'not_found': 0}
        return respond_import(request, results, FILE_ERROR_PREFIX + str(exc), 'sales:sale_bulk', 'sale')

    results = updater.run(rows)
    if results['errors']:
        return respond_import(
            request, results, 'Se encontraron errores en la actualización', 'sales:sale_bulk', 'sale',
        )

    log_activity(request, ActivityLog.ACTION_IMPORT_DATA, 'Actualización de ventas', {'rows': results['success']})
    message = f"Se actualizaron {results['success']} ventas correctamente"
    if results['not_found']:
        message += f" ({results['not_found']} no encontradas)"
    return respond_import(request, results, message, 'sales:sale_bulk', 'sale')


# SHARES
@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def share_index_view(request):
    today = timezone.localdate()
    year = request.GET.get('year', str(today.year))
    month = request.GET.get('month', str(today.month))

    shares = Share.objects.filter(user__company=request.company)
    if year != 'all' and year.isdigit():
        shares = shares.filter(year=int(year))
    if month != 'all' and month.isdigit():
        shares = shares.filter(month=int(month))

    pdv = request.GET.get('pdv', '').strip()
    if pdv:
        shares = shares.filter(Q(user__name__icontains=pdv) | Q(user__dni__icontains=pdv))

    search = request.GET.get('search', '').strip()
    if search:
        shares = shares.filter(
            Q(user__name__icontains=search) |
            Q(user__dni__icontains=search) |
            Q(user__circuit__zonal__name__icontains=search) |
            Q(user__circuit__zonal__short_name__icontains=search)
        )

    zonificado = request.GET.get('zonificado', '').strip()
    if zonificado:
        shares = shares.filter(
            Q(user__zonificador__name__icontains=zonificado) |
            Q(user__zonificador__dni__icontains=zonificado) |
            Q(user__zonificador__circuit__zonal__name__icontains=zonificado)
        )

    total = shares.aggregate(total=Coalesce(Sum('amount'), 0))['total']
    shares = shares.select_related('user__circuit__zonal').order_by('-year', '-month', 'user__name')

    years = Share.objects.filter(user__company=request.company) \
        .order_by('-year') \
        .values_list('year', flat=True) \
        .distinct()

    return render_page(request, 'Share/Index', {
        'shares': paginate(request, shares, serialize_share),
        'users': pdv_options(request.company),
        'years': list(years),
        'total': total,
        'filters': {
            'year': year,
            'month': month,
            'pdv': pdv,
            'search': search,
            'zonificado': zonificado,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def share_store_view(request):
    form = ShareForm(request.POST, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'sales:share_index')

    share = form.save()
    return respond_success(request, 'Cuota creada correctamente', 'sales:share_index', {'id': share.id})


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def share_update_view(request, pk):
    share = get_object_or_404(Share, pk=pk, user__company=request.company)

    form = ShareForm(request.POST, instance=share, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'sales:share_index')

    form.save()
    return respond_success(request, 'Cuota actualizada correctamente', 'sales:share_index')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def share_destroy_view(request, pk):
    share = get_object_or_404(Share, pk=pk, user__company=request.company)
    share.delete()
    return respond_success(request, 'Cuota eliminada correctamente', 'sales:share_index')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def share_bulk_destroy_view(request):
    ids = [value for value in request.POST.getlist('ids') if value.isdigit()]
    if not ids:
        return respond_error(request, 'Selecciona al menos una cuota.', 'sales:share_index')

    deleted, _detail = Share.objects.filter(pk__in=ids, user__company=request.company).delete()
    return respond_success(request, 'Cuotas eliminadas correctamente', 'sales:share_index', {'deleted': deleted})


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def share_bulk_view(request):
    return render_page(request, 'Share/Bulk', {
        'results': request.session.pop(import_results_key('share'), None),
        'canRetry': import_session_key('share') in request.session,
    })


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
def share_template_view(request):
    return workbook_response(build_share_template(request.company), 'plantilla_cuotas.xlsx')


@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA)
@require_POST
def share_upload_view(request):
    return run_upload(request, ShareImporter(request.company), 'share', 'sales:share_bulk', 'cuotas')


# SALES HISTORY
@login_required
@company_required
@role_required(ROLE_ADMIN, ROLE_QA, ROLE_ZONIFICADO, ROLE_PDV)
def sales_history_view(request):
    """Sales per day and web product; month to date unless a range is given."""
    today = timezone.localdate()
    start_date = parse_date_param(request.GET.get('startDate'), today.replace(day=1))
    end_date = parse_date_param(request.GET.get('endDate'), today)

    history = sales_history(request.user, request.company, start_date, end_date)

    return render_page(request, 'SalesHistory/Index', {
        **history,
        'webProducts': [
            {'id': webproduct.id, 'name': webproduct.name}
            for webproduct in WebProduct.objects.filter(product__company=request.company).order_by('name')
        ],
        'startDate': start_date.strftime('%Y-%m-%d'),
        'endDate': end_date.strftime('%Y-%m-%d'),
        'isZonificado': request.user.is_zonificado(),
        'isPdv': request.user.is_pdv(),
    })
