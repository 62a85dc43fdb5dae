from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect

from apps.accounts.decorators import company_required, role_required
from apps.accounts.models import ROLE_ADMIN, ROLE_PDV, ROLE_QA, ROLE_ZONIFICADO
from apps.sales.reports import dashboard_data
from .models import Company
from .pages import render_page
from .utils import get_user_company, set_selected_company


@login_required
def company_selector_view(request):
    """
    Company picker for superusers
    Choosing a company (``?company_id=``) stores it in the session.
    """
    if not request.user.is_superuser:
        return redirect('core:dashboard')

    company_id = request.GET.get('company_id')
    if company_id and set_selected_company(request, company_id):
        return redirect('core:dashboard')

    selected = get_user_company(request)

    return render_page(request, 'Company/Selector', {
        'companies': [
            {'id': company.id, 'name': company.name, 'is_active': company.is_active}
            for company in Company.objects.order_by('name')
        ],
        'selectedCompanyId': selected.id if selected else None,
    })


@login_required
@company_required
@role_required(ROLE_PDV, ROLE_ZONIFICADO, ROLE_ADMIN, ROLE_QA)
def dashboard_view(request):
    """
    Current month quota, sales, recharges and the daily sales matrix
    - PDV: own numbers
    - Zonificado: totals of its PDVs
    - Admin/QA: totals of every PDV of the company
    """
    return render_page(request, 'Dashboard', dashboard_data(request.user, request.company))
