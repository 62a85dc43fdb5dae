"""
Helper utilities for company selection and request metadata
"""
from apps.core.models import Company


def get_user_company(request):
    """
    Get the company for the current user:
    - Superuser: from session (selected company)
    - Regular users: from user.company

    Returns:
        Company object or None
    """
    if not request.user.is_authenticated:
        return None

    if request.user.is_superuser:
        company_id = request.session.get('selected_company_id')
        if company_id:
            try:
                return Company.objects.get(pk=company_id)
            except Company.DoesNotExist:
                # Company deleted - clear session
                request.session.pop('selected_company_id', None)
                return None
        return None

    return request.user.company


def set_selected_company(request, company_id):
    """
    Set the selected company in session (Superuser only)

    Returns:
        True if successful, False otherwise
    """
    if not request.user.is_superuser:
        return False

    try:
        company = Company.objects.get(pk=company_id)
    except (Company.DoesNotExist, ValueError):
        return False

    request.session['selected_company_id'] = company.id
    return True


def get_client_ip(request):
    """Client IP, honouring the first X-Forwarded-For hop."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


MONTH_LABELS = [
    'Enero', 'Febrero', 'Marzo', 'Abril', 'Mayo', 'Junio',
    'Julio', 'Agosto', 'Septiembre', 'Octubre', 'Noviembre', 'Diciembre',
]


def month_label(year, month):
    """'Marzo 2024' for (2024, 3)."""
    return f"{MONTH_LABELS[month - 1]} {year}"
