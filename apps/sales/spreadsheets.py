"""
Workbooks the sales screens hand out: upload templates and the filtered
sales export.
"""
import openpyxl
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.datavalidation import DataValidation

from apps.accounts.models import ROLE_PDV
from apps.catalog.models import WebProduct
from apps.core.spreadsheets import TITLE_FONT, adjust_widths, write_header
from .models import Sale

# Rows covered by the dropdowns of an upload template
TEMPLATE_ROWS = 1000

SALE_TEMPLATE_HEADERS = [
    'DNI PDV', 'Fecha', 'Teléfono', 'Calidad de Cluster', 'Fecha Recarga',
    'Monto Recarga', 'Monto Acumulado', 'Comisionable', 'Acción', 'Producto Web',
]

SHARE_TEMPLATE_HEADERS = ['DNI', 'Año', 'Mes', 'Monto']

SALE_EXPORT_HEADERS = [
    'ID', 'Fecha', 'Teléfono', 'PDV', 'DNI PDV', 'Zonificador', 'Zonal',
    'Producto', 'Web Producto', 'Calidad de Cluster', 'Fecha de Recarga',
    'Monto de Recarga', 'Monto Acumulado', 'Comisionable', 'Acción',
]

SALE_INSTRUCTIONS = [
    'Instrucciones para la carga masiva de ventas',
    '',
    '1. Complete la hoja "Ventas" a partir de la fila 2, sin modificar los encabezados.',
    '2. Campos obligatorios: DNI PDV, Fecha, Teléfono, Comisionable y Producto Web.',
    '3. Las fechas deben tener el formato DD/MM/AAAA.',
    '4. El teléfono debe tener 9 dígitos y empezar con 9. Solo puede registrarse una vez por mes.',
    '5. Calidad de Cluster: A+, A, B o C (opcional).',
    '6. Los montos deben ser números enteros positivos (opcionales).',
    '7. Comisionable: 1 = Sí, 0 = No.',
    '8. Acción: REGULAR o PREMIUM (opcional).',
    '9. Producto Web: nombre exacto o ID de la hoja "Referencias".',
    '10. Si alguna fila tiene errores no se guarda ninguna venta del archivo.',
]

SHARE_INSTRUCTIONS = [
    'Instrucciones para la carga masiva de cuotas',
    '',
    '1. Complete la hoja "Cuotas" a partir de la fila 2, sin modificar los encabezados.',
    '2. DNI: DNI de un PDV registrado (ver hoja "DNIs Válidos").',
    '3. Año: año de la cuota (ej. 2024).',
    '4. Mes: número del mes, de 1 a 12.',
    '5. Monto: número entero mayor o igual a cero. Vacío equivale a 0.',
    '6. Solo puede existir una cuota por PDV, año y mes.',
    '7. Si alguna fila tiene errores no se guarda ninguna cuota del archivo.',
]


def write_instructions(worksheet, lines):
    for row, line in enumerate(lines, start=1):
        worksheet.cell(row=row, column=1, value=line)
    worksheet['A1'].font = TITLE_FONT
    worksheet.column_dimensions['A'].width = 100


def add_list_validation(worksheet, column, options):
    """Dropdown with a closed set of options on a whole template column."""
    validation = DataValidation(
        type="list",
        formula1='"{}"'.format(','.join(options)),
        allow_blank=True,
    )
    validation.error = 'Seleccione un valor de la lista'
    validation.errorTitle = 'Valor no válido'
    worksheet.add_data_validation(validation)
    letter = get_column_letter(column)
    validation.add(f"{letter}2:{letter}{TEMPLATE_ROWS}")


def pdv_users(company):
    return company.users.filter(role=ROLE_PDV, is_active=True) \
        .select_related('circuit__zonal') \
        .order_by('name')


def build_sale_template(company):
    """
    Sheets: Instrucciones, Ventas (empty data sheet with dropdowns) and
    Referencias (valid DNIs and web products).
    """
    workbook = openpyxl.Workbook()

    instructions = workbook.active
    instructions.title = 'Instrucciones'
    write_instructions(instructions, SALE_INSTRUCTIONS)

    sales = workbook.create_sheet('Ventas')
    write_header(sales, SALE_TEMPLATE_HEADERS)
    add_list_validation(sales, 4, [value for value, _label in Sale.CLUSTER_CHOICES])
    add_list_validation(sales, 8, ['0', '1'])
    add_list_validation(sales, 9, [value for value, _label in Sale.ACTION_CHOICES])
    adjust_widths(sales, minimum=14)

    references = workbook.create_sheet('Referencias')
    references.cell(row=1, column=1, value='DNIs Válidos').font = TITLE_FONT
    write_header(references, ['DNI', 'Nombre', 'Zonal'], row=2, freeze=False)
    row = 3
    for user in pdv_users(company):
        references.cell(row=row, column=1, value=user.dni)
        references.cell(row=row, column=2, value=user.name)
        references.cell(row=row, column=3, value=user.zonal.name if user.zonal else '')
        row += 1

    row += 1
    references.cell(row=row, column=1, value='Productos Web Válidos').font = TITLE_FONT
    write_header(references, ['ID', 'Nombre', 'Producto'], row=row + 1, freeze=False)
    row += 2
    webproducts = WebProduct.objects.filter(product__company=company) \
        .select_related('product') \
        .order_by('name')
    for webproduct in webproducts:
        references.cell(row=row, column=1, value=webproduct.id)
        references.cell(row=row, column=2, value=webproduct.name)
        references.cell(row=row, column=3, value=webproduct.product.name)
        row += 1
    adjust_widths(references)

    return workbook


def build_share_template(company):
    """Sheets: Instrucciones, Cuotas and DNIs Válidos."""
    workbook = openpyxl.Workbook()

    instructions = workbook.active
    instructions.title = 'Instrucciones'
    write_instructions(instructions, SHARE_INSTRUCTIONS)

    shares = workbook.create_sheet('Cuotas')
    write_header(shares, SHARE_TEMPLATE_HEADERS)
    add_list_validation(shares, 3, [str(month) for month in range(1, 13)])
    adjust_widths(shares, minimum=14)

    valid_dnis = workbook.create_sheet('DNIs Válidos')
    write_header(valid_dnis, ['DNI', 'Nombre', 'Zonal'])
    for row, user in enumerate(pdv_users(company), start=2):
        valid_dnis.cell(row=row, column=1, value=user.dni)
        valid_dnis.cell(row=row, column=2, value=user.name)
        valid_dnis.cell(row=row, column=3, value=user.zonal.short_name if user.zonal else '')
    adjust_widths(valid_dnis)

    return workbook


def build_sale_export(sales):
    """One row per sale, ``sales`` already filtered by the index filters."""
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = 'Ventas'
    write_header(worksheet, SALE_EXPORT_HEADERS)

    sales = sales.select_related(
        'user__zonificador__circuit__zonal',
        'webproduct__product',
    )
    for row, sale in enumerate(sales.iterator(), start=2):
        zonificador = sale.user.zonificador
        zonal = zonificador.zonal if zonificador else None
        values = [
            sale.id,
            sale.date.strftime('%d/%m/%Y'),
            sale.telefono,
            sale.user.name,
            sale.user.dni,
            zonificador.name if zonificador else '',
            zonal.name if zonal else '',
            sale.webproduct.product.name,
            sale.webproduct.name,
            sale.cluster_quality or '',
            sale.recharge_date.strftime('%d/%m/%Y') if sale.recharge_date else '',
            sale.recharge_amount,
            sale.accumulated_amount,
            'Sí' if sale.commissionable_charge else 'No',
            sale.action or '',
        ]
        for col, value in enumerate(values, start=1):
            worksheet.cell(row=row, column=col, value=value)

    adjust_widths(worksheet)
    return workbook


def export_filename(start_date, end_date):
    return f"ventas_{start_date:%Y-%m-%d}_a_{end_date:%Y-%m-%d}.xlsx"
