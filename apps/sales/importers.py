"""
Spreadsheet bulk import for sales and quotas

Every upload goes through the same three stages:

1. ``read_workbook`` turns the uploaded file into ``(row_number, values)``
   pairs, skipping the header row. Row numbers are the sheet's own, so the
   first data row is row 2.
2. The importer validates every row. A bad row becomes a ``RowError`` in the
   result; processing continues with the next row.
3. The staged rows are written inside the transaction opened before the
   loop. If any row failed, the whole batch is rolled back, valid rows
   included.

Results are plain dicts::

    {'total': 3, 'success': 0, 'valid': 2,
     'errors': [{'row': 3, 'message': 'Los montos deben ser positivos'}]}

``success`` is what was persisted; ``valid`` is what would have been.
"""
import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.accounts.models import User, pad_dni
from apps.catalog.models import WebProduct
from apps.core.utils import month_label
from .models import Sale, Share

logger = logging.getLogger(__name__)


DATE_FORMAT = '%d/%m/%Y'
PHONE_RE = re.compile(r'^9\d{8}$')
# Largest exponent accepted in numeric cells
MAX_DIGITS = 18

CLUSTER_LABELS = [value for value, _label in Sale.CLUSTER_CHOICES]
ACTION_LABELS = [value for value, _label in Sale.ACTION_CHOICES]

SALE_MISSING_DATA = 'Faltan datos requeridos (DNI, Fecha, Teléfono, Producto Web o Comisionable)'
SHARE_MISSING_DATA = 'Faltan datos requeridos (DNI, año o mes)'
UPDATE_MISSING_DATA = 'Faltan campos requeridos (Teléfono o Fecha)'
PHONE_MESSAGE = 'El teléfono debe tener 9 dígitos, ser solo números y empezar con 9'
CLUSTER_MESSAGE = 'La calidad del cluster debe ser A+, A, B o C.'
ACTION_MESSAGE = 'La acción debe ser REGULAR o PREMIUM.'
COMMISSIONABLE_MESSAGE = 'El campo comisionable debe ser 0 o 1'
AMOUNT_NOT_INTEGER = 'Los montos deben ser números enteros'
AMOUNT_NEGATIVE = 'Los montos deben ser positivos'
YEAR_MESSAGE = 'Año no válido'
MONTH_MESSAGE = 'Mes no válido'
SHARE_AMOUNT_MESSAGE = 'Monto no válido (debe ser mayor o igual a cero)'
DUPLICATE_SHARE_MESSAGE = 'Ya existe una cuota para este PDV en el mes y año indicados'


class ImportFileError(Exception):
    """The uploaded file could not be read as a workbook."""


class RowError(Exception):
    """A single row failed validation."""

    def __init__(self, message, row=None, **extra):
        super().__init__(message)
        self.message = message
        self.row = row
        self.extra = extra

    def as_dict(self):
        return {'row': self.row, 'message': self.message, **self.extra}


# CELL HELPERS
def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def clean_text(value):
    if value is None:
        return ''
    return str(value).replace('\xa0', ' ').strip()


def clean_code(value):
    """Text form of a code cell: 987654321.0 -> '987654321'."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = clean_text(value)
    if text.endswith('.0') and text[:-2].isdigit():
        text = text[:-2]
    return text


def to_integer(value):
    """Whole number in the cell, or None when it is not one."""
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(clean_text(value))
    except InvalidOperation:
        return None
    if not number.is_finite() or abs(number.adjusted()) > MAX_DIGITS:
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


def parse_date(value, field):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = clean_text(value)
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        raise RowError(f'Formato de fecha inválido en {field}: {text} (debe ser DD/MM/AAAA)')


def parse_amount(value):
    if is_blank(value):
        return None
    number = to_integer(value)
    if number is None:
        raise RowError(AMOUNT_NOT_INTEGER)
    if number < 0:
        raise RowError(AMOUNT_NEGATIVE)
    return number


def parse_flag(value):
    if isinstance(value, bool):
        return value
    text = clean_code(value)
    if text not in ('0', '1'):
        raise RowError(COMMISSIONABLE_MESSAGE)
    return text == '1'


def parse_choice(value, allowed, message):
    if is_blank(value):
        return None
    text = clean_text(value).upper()
    if text not in allowed:
        raise RowError(message)
    return text


def parse_phone(value):
    phone = clean_code(value)
    if not PHONE_RE.match(phone):
        raise RowError(PHONE_MESSAGE)
    return phone


# READER
def read_workbook(source, sheet_name=None):
    """
    Data rows of the upload as ``[(row_number, [values...]), ...]``.

    Uses ``sheet_name`` when the workbook has it, otherwise the second sheet
    of a multi-sheet template (the first one holds the instructions), otherwise
    the only sheet. Fully empty rows are skipped but keep their numbering.
    """
    try:
        workbook = openpyxl.load_workbook(source, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, ValueError, OSError) as exc:
        logger.warning("Unreadable workbook upload: %s", exc)
        raise ImportFileError(f'El archivo no es un Excel válido: {exc}') from exc

    if sheet_name and sheet_name in workbook.sheetnames:
        worksheet = workbook[sheet_name]
    elif len(workbook.worksheets) > 1:
        worksheet = workbook.worksheets[1]
    else:
        worksheet = workbook.worksheets[0]

    rows = []
    for row_number, values in enumerate(worksheet.iter_rows(min_row=2, values_only=True), start=2):
        if all(is_blank(value) for value in values):
            continue
        rows.append((row_number, list(values)))
    return rows


def serialize_cell(value):
    if isinstance(value, (datetime, date)):
        return value.strftime(DATE_FORMAT)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def rows_to_session(rows):
    """JSON-safe copy of the parsed rows, kept for the retry of clean rows."""
    return [[row_number, [serialize_cell(value) for value in values]] for row_number, values in rows]


def rows_from_session(data):
    return [(row_number, values) for row_number, values in data]


def file_error_result(message, total=0):
    return {
        'total': total,
        'success': 0,
        'valid': 0,
        'errors': [{'row': 0, 'message': message}],
    }


# IMPORTERS
class BaseImporter:
    """
    Validate every row, then write all of them or none

    Subclasses set ``columns`` (cell order of the data sheet) and implement
    ``validate(row)``, returning whatever ``write`` needs for that row or
    raising ``RowError``.
    """

    sheet_name = None
    columns = ()

    def __init__(self, company, today=None):
        self.company = company
        self.today = today or timezone.localdate()
        self.chunk_size = settings.BULK_IMPORT_CHUNK_SIZE
        self.result = None
        self.seen = set()
        self.users_by_dni = {}

    def new_result(self, rows):
        return {'total': len(rows), 'success': 0, 'valid': 0, 'errors': []}

    def prepare(self):
        """Lookups shared by every row of the batch."""
        self.seen = set()
        self.users_by_dni = {user.dni: user for user in User.objects.filter(company=self.company)}

    def row_dict(self, values):
        values = list(values) + [None] * (len(self.columns) - len(values))
        return dict(zip(self.columns, values))

    def find_user(self, value):
        dni = pad_dni(value)
        user = self.users_by_dni.get(dni)
        if user is None:
            raise RowError(f'DNI no encontrado en el sistema: {dni}', dni=dni)
        return user

    def validate(self, row):
        raise NotImplementedError

    def write(self, staged):
        raise NotImplementedError

    def run(self, rows):
        self.result = self.new_result(rows)
        staged = []
        try:
            with transaction.atomic():
                self.prepare()
                for row_number, values in rows:
                    try:
                        staged.append(self.validate(self.row_dict(values)))
                    except RowError as error:
                        error.row = row_number
                        self.result['errors'].append(error.as_dict())

                self.result['valid'] = len(staged)
                if self.result['errors']:
                    transaction.set_rollback(True)
                else:
                    self.result['success'] = self.write(staged)
        except DatabaseError as exc:
            logger.exception("%s aborted while writing %s rows", type(self).__name__, len(staged))
            return file_error_result(f'Error al guardar los datos: {exc}', total=len(rows))

        logger.info(
            "%s for company %s: %s rows, %s saved, %s errors",
            type(self).__name__, self.company.id, self.result['total'],
            self.result['success'], len(self.result['errors']),
        )
        return self.result

    def import_file(self, source):
        try:
            rows = read_workbook(source, self.sheet_name)
        except ImportFileError as exc:
            return file_error_result(str(exc))
        return self.run(rows)


class SaleImporter(BaseImporter):
    """
    Sales upload

    Columns: DNI PDV, Fecha, Teléfono, Calidad de Cluster, Fecha Recarga,
    Monto Recarga, Monto Acumulado, Comisionable, Acción, Producto Web.
    A phone can be sold once per calendar month.
    """

    sheet_name = 'Ventas'
    columns = (
        'dni', 'date', 'telefono', 'cluster_quality', 'recharge_date',
        'recharge_amount', 'accumulated_amount', 'commissionable', 'action', 'webproduct',
    )
    required = ('dni', 'date', 'telefono', 'commissionable', 'webproduct')

    def prepare(self):
        super().prepare()
        webproducts = WebProduct.objects.filter(product__company=self.company).select_related('product')
        self.webproducts_by_id = {webproduct.id: webproduct for webproduct in webproducts}
        self.webproducts_by_name = {webproduct.name: webproduct for webproduct in webproducts}

    def find_webproduct(self, value):
        """Integer cells are primary keys, anything else an exact name."""
        reference = clean_code(value)
        if reference.isdigit():
            webproduct = self.webproducts_by_id.get(int(reference))
        else:
            webproduct = self.webproducts_by_name.get(reference)
        if webproduct is None:
            raise RowError(f'Producto web no encontrado: {reference}')
        return webproduct

    def phone_taken(self, phone, sale_date):
        key = (phone, sale_date.year, sale_date.month)
        if key in self.seen:
            return True
        return Sale.objects.filter(
            user__company=self.company,
            telefono=phone,
            date__year=sale_date.year,
            date__month=sale_date.month,
        ).exists()

    def validate(self, row):
        if any(is_blank(row[key]) for key in self.required):
            raise RowError(SALE_MISSING_DATA)

        sale_date = parse_date(row['date'], 'Fecha')
        recharge_date = None
        if not is_blank(row['recharge_date']):
            recharge_date = parse_date(row['recharge_date'], 'Fecha Recarga')

        phone = parse_phone(row['telefono'])
        user = self.find_user(row['dni'])
        webproduct = self.find_webproduct(row['webproduct'])
        cluster_quality = parse_choice(row['cluster_quality'], CLUSTER_LABELS, CLUSTER_MESSAGE)
        recharge_amount = parse_amount(row['recharge_amount'])
        accumulated_amount = parse_amount(row['accumulated_amount'])
        commissionable = parse_flag(row['commissionable'])
        action = parse_choice(row['action'], ACTION_LABELS, ACTION_MESSAGE)

        if self.phone_taken(phone, sale_date):
            raise RowError(
                f'El teléfono {phone} ya existe en el mes de {month_label(sale_date.year, sale_date.month)}'
            )
        self.seen.add((phone, sale_date.year, sale_date.month))

        return Sale(
            date=sale_date,
            telefono=phone,
            cluster_quality=cluster_quality,
            recharge_date=recharge_date,
            recharge_amount=recharge_amount,
            accumulated_amount=accumulated_amount,
            commissionable_charge=commissionable,
            action=action,
            user=user,
            webproduct=webproduct,
        )

    def write(self, staged):
        Sale.objects.bulk_create(staged, batch_size=self.chunk_size)
        return len(staged)


class ShareImporter(BaseImporter):
    """
    Monthly quota upload

    Columns: DNI, Año, Mes, Monto. An empty amount counts as 0. One quota per
    PDV and period, counting rows accepted earlier in the same file.
    """

    sheet_name = 'Cuotas'
    columns = ('dni', 'year', 'month', 'amount')

    def validate(self, row):
        if is_blank(row['dni']) or is_blank(row['year']) or is_blank(row['month']):
            raise RowError(SHARE_MISSING_DATA)

        user = self.find_user(row['dni'])

        year = to_integer(row['year'])
        if year is None or not 2000 <= year <= self.today.year:
            raise RowError(YEAR_MESSAGE)

        month = to_integer(row['month'])
        if month is None or not 1 <= month <= 12:
            raise RowError(MONTH_MESSAGE)

        amount = 0 if is_blank(row['amount']) else to_integer(row['amount'])
        if amount is None or amount < 0:
            raise RowError(SHARE_AMOUNT_MESSAGE)

        key = (user.id, year, month)
        if key in self.seen or Share.objects.filter(user=user, year=year, month=month).exists():
            raise RowError(DUPLICATE_SHARE_MESSAGE)
        self.seen.add(key)

        return Share(user=user, year=year, month=month, amount=amount)

    def write(self, staged):
        Share.objects.bulk_create(staged, batch_size=self.chunk_size)
        return len(staged)


class SaleUpdater(SaleImporter):
    """
    Bulk update of existing sales

    Each row is matched to a sale by phone and month of ``Fecha``; the
    non-empty columns overwrite that sale. Unmatched rows are errors and are
    also counted in ``not_found``.
    """

    def new_result(self, rows):
        result = super().new_result(rows)
        result['not_found'] = 0
        return result

    def validate(self, row):
        if is_blank(row['telefono']) or is_blank(row['date']):
            raise RowError(UPDATE_MISSING_DATA)

        phone = parse_phone(row['telefono'])
        sale_date = parse_date(row['date'], 'Fecha')

        sale = Sale.objects.filter(
            user__company=self.company,
            telefono=phone,
            date__year=sale_date.year,
            date__month=sale_date.month,
        ).first()
        if sale is None:
            self.result['not_found'] += 1
            raise RowError(
                f'No se encontró venta para el teléfono {phone} en el mes de '
                f'{month_label(sale_date.year, sale_date.month)}'
            )

        changes = {}
        if not is_blank(row['dni']):
            changes['user'] = self.find_user(row['dni'])
        if not is_blank(row['cluster_quality']):
            changes['cluster_quality'] = parse_choice(row['cluster_quality'], CLUSTER_LABELS, CLUSTER_MESSAGE)
        if not is_blank(row['recharge_date']):
            changes['recharge_date'] = parse_date(row['recharge_date'], 'Fecha Recarga')
        for field in ('recharge_amount', 'accumulated_amount'):
            if not is_blank(row[field]):
                changes[field] = parse_amount(row[field])
        if not is_blank(row['commissionable']):
            changes['commissionable_charge'] = parse_flag(row['commissionable'])
        if not is_blank(row['action']):
            changes['action'] = parse_choice(row['action'], ACTION_LABELS, ACTION_MESSAGE)
        if not is_blank(row['webproduct']):
            changes['webproduct'] = self.find_webproduct(row['webproduct'])

        return sale, changes

    def write(self, staged):
        updated = 0
        for sale, changes in staged:
            if not changes:
                continue
            for field, value in changes.items():
                setattr(sale, field, value)
            sale.save(update_fields=[*changes, 'updated_at'])
            updated += 1
        return updated
