import logging

from django.contrib.auth.decorators import login_required
from django.db.models import Count
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.views.decorators.http import require_POST

from apps.accounts.decorators import admin_required, company_required
from apps.core.pages import (
    get_per_page, paginate, render_page, respond_form_errors,
    respond_success, search_filter,
)
from .forms import ZonalForm, CircuitForm, TackForm
from .models import Zonal, Circuit, Tack

logger = logging.getLogger(__name__)


def serialize_zonal(zonal):
    return {
        'id': zonal.id,
        'name': zonal.name,
        'short_name': zonal.short_name,
        'active': zonal.active,
        'circuits_count': getattr(zonal, 'circuits_count', None),
    }


def serialize_circuit(circuit):
    return {
        'id': circuit.id,
        'name': circuit.name,
        'address': circuit.address,
        'active': circuit.active,
        'zonal': {
            'id': circuit.zonal_id,
            'name': circuit.zonal.name,
            'short_name': circuit.zonal.short_name,
        },
    }


def serialize_tack(tack):
    return {
        'id': tack.id,
        'name': tack.name,
        'active': tack.active,
        'circuit_id': tack.circuit_id,
    }


# ZONALS
@login_required
@company_required
@admin_required
def zonal_index_view(request):
    search = request.GET.get('search', '').strip()

    zonals = Zonal.objects.filter(company=request.company) \
        .annotate(circuits_count=Count('circuits')) \
        .order_by('name')
    zonals = search_filter(zonals, search, ['name', 'short_name'])

    return render_page(request, 'Zonal/Zonal/Index', {
        'zonals': paginate(request, zonals, serialize_zonal),
        'filters': {
            'search': search,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@admin_required
@require_POST
def zonal_store_view(request):
    form = ZonalForm(request.POST, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'territories:zonal_index')

    zonal = form.save(commit=False)
    zonal.company = request.company
    zonal.save()
    logger.info("Zonal %s created by %s", zonal.name, request.user.dni)

    return respond_success(request, 'Zonal creado correctamente', 'territories:zonal_index', {'id': zonal.id})


@login_required
@company_required
@admin_required
@require_POST
def zonal_update_view(request, pk):
    zonal = get_object_or_404(Zonal, pk=pk, company=request.company)

    form = ZonalForm(request.POST, instance=zonal, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'territories:zonal_index')

    form.save()
    return respond_success(request, 'Zonal actualizado correctamente', 'territories:zonal_index')


@login_required
@company_required
@admin_required
@require_POST
def zonal_destroy_view(request, pk):
    zonal = get_object_or_404(Zonal, pk=pk, company=request.company)
    zonal.delete()
    logger.info("Zonal %s deleted by %s", pk, request.user.dni)
    return respond_success(request, 'Zonal eliminado correctamente', 'territories:zonal_index')


# CIRCUITS
@login_required
@company_required
@admin_required
def circuit_index_view(request):
    search = request.GET.get('search', '').strip()

    circuits = Circuit.objects.filter(zonal__company=request.company) \
        .select_related('zonal') \
        .order_by('name')
    circuits = search_filter(circuits, search, ['name', 'address', 'zonal__name', 'zonal__short_name'])

    zonals = Zonal.objects.filter(company=request.company).order_by('name')

    return render_page(request, 'Zonal/Circuit/Index', {
        'circuits': paginate(request, circuits, serialize_circuit),
        'zonals': [
            {'id': zonal.id, 'name': zonal.name, 'short_name': zonal.short_name}
            for zonal in zonals
        ],
        'filters': {
            'search': search,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@admin_required
@require_POST
def circuit_store_view(request):
    form = CircuitForm(request.POST, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'territories:circuit_index')

    circuit = form.save()
    return respond_success(request, 'Circuito creado correctamente', 'territories:circuit_index', {'id': circuit.id})


@login_required
@company_required
@admin_required
@require_POST
def circuit_update_view(request, pk):
    circuit = get_object_or_404(Circuit, pk=pk, zonal__company=request.company)

    form = CircuitForm(request.POST, instance=circuit, company=request.company)
    if not form.is_valid():
        return respond_form_errors(request, form, 'territories:circuit_index')

    form.save()
    return respond_success(request, 'Circuito actualizado correctamente', 'territories:circuit_index')


@login_required
@company_required
@admin_required
@require_POST
def circuit_destroy_view(request, pk):
    circuit = get_object_or_404(Circuit, pk=pk, zonal__company=request.company)
    circuit.delete()
    return respond_success(request, 'Circuito eliminado correctamente', 'territories:circuit_index')


# TACKS (routes nested under a circuit)
@login_required
@company_required
@admin_required
def tack_index_view(request, circuit_id):
    circuit = get_object_or_404(Circuit.objects.select_related('zonal'), pk=circuit_id, zonal__company=request.company)
    search = request.GET.get('search', '').strip()

    tacks = search_filter(circuit.tacks.order_by('name'), search, ['name'])

    return render_page(request, 'Zonal/Circuit/Tack/Index', {
        'tacks': paginate(request, tacks, serialize_tack),
        'circuit': serialize_circuit(circuit),
        'filters': {
            'search': search,
            'per_page': get_per_page(request),
        },
    })


@login_required
@company_required
@admin_required
@require_POST
def tack_store_view(request, circuit_id):
    circuit = get_object_or_404(Circuit, pk=circuit_id, zonal__company=request.company)
    redirect_to = reverse('territories:tack_index', args=[circuit.id])

    form = TackForm(request.POST)
    if not form.is_valid():
        return respond_form_errors(request, form, redirect_to)

    tack = form.save(commit=False)
    tack.circuit = circuit
    tack.save()
    return respond_success(request, 'Ruta creada correctamente', redirect_to, {'id': tack.id})


@login_required
@company_required
@admin_required
@require_POST
def tack_update_view(request, pk):
    tack = get_object_or_404(Tack, pk=pk, circuit__zonal__company=request.company)
    redirect_to = reverse('territories:tack_index', args=[tack.circuit_id])

    form = TackForm(request.POST, instance=tack)
    if not form.is_valid():
        return respond_form_errors(request, form, redirect_to)

    form.save()
    return respond_success(request, 'Ruta actualizada correctamente', redirect_to)


@login_required
@company_required
@admin_required
@require_POST
def tack_destroy_view(request, pk):
    tack = get_object_or_404(Tack, pk=pk, circuit__zonal__company=request.company)
    circuit_id = tack.circuit_id
    tack.delete()
    return respond_success(request, 'Ruta eliminada correctamente', reverse('territories:tack_index', args=[circuit_id]))
