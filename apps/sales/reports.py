"""
Read-only sales reports: the PDV/zonificador dashboard and the sales history
"""
import math
from collections import defaultdict

from django.db.models import Count, Sum
from django.utils import timezone

from apps.accounts.models import ROLE_PDV
from apps.catalog.models import WebProduct
from .models import Sale, Share

PREPAID_PRODUCT = 'PREPAGO'
RATIO_TARGET = 50

NOT_ASSIGNED = 'No asignado'


def traffic_light(value, green, yellow):
    if value >= green:
        return 'green'
    if value >= yellow:
        return 'yellow'
    return 'red'


def scoped_pdvs(user, company):
    """
    PDVs whose numbers the user is looking at.

    A PDV sees itself, a zonificador its own PDVs, admin and QA every PDV of
    the company.
    """
    if user.is_pdv():
        return company.users.filter(pk=user.pk)
    if user.is_zonificado():
        return user.zonificados.filter(company=company)
    return company.users.filter(role=ROLE_PDV)


def daily_sales_matrix(sales, webproduct_ids):
    """
    Sales counted per day and web product

    ``sales`` is a Sale queryset; every web product appears in every day and
    in the totals, with 0 when nothing was sold.
    """
    by_date = {}
    totals = dict.fromkeys(webproduct_ids, 0)

    rows = sales.values('date', 'webproduct_id') \
        .annotate(total=Count('id')) \
        .order_by('-date')
    for row in rows:
        day = row['date'].strftime('%Y-%m-%d')
        if day not in by_date:
            by_date[day] = dict.fromkeys(webproduct_ids, 0)
        by_date[day][row['webproduct_id']] = row['total']
        totals[row['webproduct_id']] = totals.get(row['webproduct_id'], 0) + row['total']

    return {'byDate': by_date, 'totals': totals}


def dashboard_data(user, company, today=None):
    """Quota progress, recharge ratio and daily sales of the current month."""
    today = today or timezone.localdate()
    pdvs = scoped_pdvs(user, company)

    total_share = Share.objects.filter(user__in=pdvs, year=today.year, month=today.month) \
        .aggregate(total=Sum('amount'))['total'] or 0

    month_sales = Sale.objects.filter(user__in=pdvs, date__year=today.year, date__month=today.month)
    prepaid_sales = month_sales.filter(webproduct__product__name__icontains=PREPAID_PRODUCT)
    total_sales = prepaid_sales.count()
    total_recharges = prepaid_sales.filter(commissionable_charge=True).count()

    ratio = (total_recharges / total_sales) * 100 if total_sales else 0
    quota_progress = (total_sales / total_share) * 100 if total_share else 0
    ratio_status = traffic_light(ratio, RATIO_TARGET, 40)

    recharges_needed = 0
    if ratio_status != 'green':
        recharges_needed = max(0, math.ceil(RATIO_TARGET * total_sales / 100 - total_recharges))

    webproducts = WebProduct.objects.filter(product__company=company) \
        .select_related('product') \
        .order_by('name')
    webproduct_ids = [webproduct.id for webproduct in webproducts]

    daily_sales = []
    for pdv in pdvs.order_by('name'):
        pdv_sales = month_sales.filter(user=pdv)
        # Zonificadores only see PDVs that sold something
        if not user.is_pdv() and not pdv_sales.exists():
            continue
        daily_sales.append({
            'pdv_id': pdv.id,
            'pdv_name': pdv.name,
            'sales': daily_sales_matrix(pdv_sales, webproduct_ids),
        })

    zonificador = user.zonificador
    return {
        'name': user.name,
        'dni': user.dni,
        'vendorName': zonificador.name if zonificador else NOT_ASSIGNED,
        'vendorDNI': zonificador.dni if zonificador else NOT_ASSIGNED,
        'vendorPhone': zonificador.cel if zonificador and zonificador.cel else NOT_ASSIGNED,
        'channel': 'PDV',
        'group': user.circuit.name if user.circuit_id else NOT_ASSIGNED,
        'updateDate': timezone.localtime(user.updated_at).strftime('%d-%m-%Y'),
        'totalShare': total_share,
        'pdvCount': 0 if user.is_pdv() else pdvs.count(),
        'isZonificado': user.is_zonificado(),
        'salesData': {
            'totalSales': total_sales,
            'totalRecharges': total_recharges,
            'ratio': round(ratio, 2),
            'quotaMetrics': {
                'remaining': max(0, total_share - total_sales),
                'progress': round(quota_progress, 2),
                'status': traffic_light(quota_progress, 100, 90),
            },
            'ratioMetrics': {
                'rechargesNeeded': recharges_needed,
                'status': ratio_status,
            },
            'webProducts': [
                {'id': webproduct.id, 'name': webproduct.name, 'product_name': webproduct.product.name}
                for webproduct in webproducts
            ],
            'dailySales': daily_sales,
        },
    }


def sales_history(user, company, start_date, end_date):
    """
    Sales per day and web product between two dates

    PDV and zonificador users also get ``salesDetails``: the same counts
    broken down per PDV.
    """
    pdvs = scoped_pdvs(user, company)
    sales = Sale.objects.filter(user__in=pdvs, date__range=(start_date, end_date))

    sales_data = defaultdict(dict)
    rows = sales.values('date', 'webproduct_id').annotate(total=Count('id')).order_by('date')
    for row in rows:
        sales_data[row['date'].strftime('%Y-%m-%d')][row['webproduct_id']] = row['total']

    sales_details = {}
    if user.is_pdv() or user.is_zonificado():
        details = defaultdict(lambda: defaultdict(dict))
        rows = sales.values('date', 'webproduct_id', 'user_id', 'user__name', 'user__dni') \
            .annotate(total=Count('id')) \
            .order_by('date')
        for row in rows:
            details[row['date'].strftime('%Y-%m-%d')][row['webproduct_id']][row['user_id']] = {
                'user_name': f"{row['user__name']} ({row['user__dni']})",
                'count': row['total'],
            }
        sales_details = {day: dict(products) for day, products in details.items()}

    return {
        'salesData': dict(sales_data),
        'salesDetails': sales_details,
    }
