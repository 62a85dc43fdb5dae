"""
Sales Views Tests
=================

Tests the sale and quota screens through the test client.

Test Coverage:
1. Access - role and tenant checks
2. Sale CRUD - store, duplicate phone per month, cross-tenant update, bulk delete
3. Sale upload - JSON results, retry with the error-free rows, import activity
4. Export / templates - workbook downloads
5. Share CRUD - duplicate period
6. Sales history and dashboard props

Run tests:
    python manage.py test apps.sales.tests.test_views
"""

from io import BytesIO

import openpyxl
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, Client
from django.urls import reverse
from django.utils import timezone

from apps.accounts.models import User
from apps.activity.models import ActivityLog
from apps.catalog.models import Product, WebProduct
from apps.core.models import Company
from apps.sales.models import Sale, Share
from apps.territories.models import Circuit, Zonal
from .test_importers import SALE_HEADERS, build_workbook

AJAX = {'HTTP_X_REQUESTED_WITH': 'XMLHttpRequest'}


class SalesViewTestCase(TestCase):
    """Tenant with an admin, a zonificado and two PDVs"""

    def setUp(self):
        self.client = Client()
        self.today = timezone.localdate()

        self.company = Company.objects.create(name='Claro Norte')
        zonal = Zonal.objects.create(company=self.company, name='LIMA NORTE', short_name='LN')
        self.circuit = Circuit.objects.create(zonal=zonal, name='COMAS 01')

        self.admin = User.objects.create_user(
            '11111111', password='secret123', name='Admin', company=self.company, role='admin',
        )
        self.zonificado = User.objects.create_user(
            '22222222', password='secret123', name='Zona Norte', company=self.company,
            role='zonificado', circuit=self.circuit,
        )
        self.pdv = User.objects.create_user(
            '01234567', password='secret123', name='Bodega Lucha', company=self.company,
            role='pdv', circuit=self.circuit, zonificador=self.zonificado,
        )
        self.other_pdv = User.objects.create_user(
            '07654321', password='secret123', name='Bodega Rosa', company=self.company,
            role='pdv', circuit=self.circuit,
        )

        product = Product.objects.create(company=self.company, name='PREPAGO')
        self.chip = WebProduct.objects.create(product=product, name='CHIP PREPAGO')

    def login(self, user):
        self.client.force_login(user)

    def sale_data(self, **overrides):
        data = {
            'date': self.today.strftime('%Y-%m-%d'),
            'telefono': '987654321',
            'cluster_quality': 'A',
            'recharge_amount': 10,
            'commissionable_charge': 'on',
            'action': 'REGULAR',
            'user': self.pdv.id,
            'webproduct': self.chip.id,
        }
        data.update(overrides)
        return data


class SaleAccessTest(SalesViewTestCase):
    """Test role and tenant checks on the sale screens"""

    def test_pdv_cannot_open_sales(self):
        """
        Test: PDV opens the sales index
        Expected: Redirect to dashboard
        """
        self.login(self.pdv)

        response = self.client.get(reverse('sales:sale_index'))

        self.assertRedirects(response, reverse('core:dashboard'), fetch_redirect_response=False)

    def test_anonymous_redirected_to_login(self):
        """
        Test: No session
        Expected: Redirect to login
        """
        response = self.client.get(reverse('sales:sale_index'))

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse('accounts:login'), response.url)

    def test_index_page_object(self):
        """
        Test: AJAX request to the sales index
        Expected: Page object with paginated sales and totals
        """
        Sale.objects.create(
            date=self.today, telefono='987654321', user=self.pdv, webproduct=self.chip,
            recharge_amount=10, accumulated_amount=30,
        )
        self.login(self.admin)

        response = self.client.get(reverse('sales:sale_index'), **AJAX)

        page = response.json()
        self.assertEqual(page['component'], 'Sale/Index')
        self.assertEqual(page['props']['sales']['total'], 1)
        self.assertEqual(page['props']['totals'], {'recharge_amount': 10, 'accumulated_amount': 30, 'count': 1})
        self.assertEqual(page['props']['auth']['user']['dni'], '11111111')


class SaleCrudTest(SalesViewTestCase):
    """Test sale store / update / delete"""

    def test_store_sale(self):
        """
        Test: Valid sale posted as JSON client
        Expected: Created
        """
        self.login(self.admin)

        response = self.client.post(reverse('sales:sale_store'), self.sale_data(), **AJAX)

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['success'])
        self.assertEqual(Sale.objects.count(), 1)

    def test_store_duplicate_phone_same_month(self):
        """
        Test: Phone already sold this month
        Expected: 422 with the phone error
        """
        Sale.objects.create(date=self.today, telefono='987654321', user=self.pdv, webproduct=self.chip)
        self.login(self.admin)

        response = self.client.post(reverse('sales:sale_store'), self.sale_data(), **AJAX)

        self.assertEqual(response.status_code, 422)
        self.assertIn('ya existe en el mes de', response.json()['errors']['telefono'][0])

    def test_store_invalid_phone_keeps_errors_in_session(self):
        """
        Test: Browser form post with a bad phone
        Expected: Redirect back, errors exposed to the next page
        """
        self.login(self.admin)

        response = self.client.post(reverse('sales:sale_store'), self.sale_data(telefono='12345'))

        self.assertRedirects(response, reverse('sales:sale_index'), fetch_redirect_response=False)
        self.assertIn('telefono', self.client.session['errors'])

    def test_update_other_company_sale_is_404(self):
        """
        Test: Admin updates a sale of another tenant
        Expected: 404
        """
        other = Company.objects.create(name='Otra Empresa')
        other_pdv = User.objects.create_user('33333333', password='secret123', name='Otro', company=other)
        product = Product.objects.create(company=other, name='PREPAGO')
        webproduct = WebProduct.objects.create(product=product, name='CHIP')
        sale = Sale.objects.create(date=self.today, telefono='987654321', user=other_pdv, webproduct=webproduct)
        self.login(self.admin)

        response = self.client.post(reverse('sales:sale_update', args=[sale.pk]), self.sale_data(), **AJAX)

        self.assertEqual(response.status_code, 404)

    def test_bulk_destroy(self):
        """
        Test: Delete two sales by id
        Expected: Both gone
        """
        first = Sale.objects.create(date=self.today, telefono='987654321', user=self.pdv, webproduct=self.chip)
        second = Sale.objects.create(date=self.today, telefono='987654322', user=self.pdv, webproduct=self.chip)
        self.login(self.admin)

        response = self.client.post(reverse('sales:sale_bulk_destroy'), {'ids': [first.id, second.id]}, **AJAX)

        self.assertEqual(response.json()['deleted'], 2)
        self.assertFalse(Sale.objects.exists())


class SaleUploadTest(SalesViewTestCase):
    """Test the sales upload endpoint"""

    def upload(self, rows):
        buffer = build_workbook('Ventas', SALE_HEADERS, rows)
        return SimpleUploadedFile(
            'ventas.xlsx', buffer.getvalue(),
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        )

    def row(self, phone, amount=10):
        return ['01234567', '15/03/2024', phone, 'A', None, amount, 30, 1, 'REGULAR', 'CHIP PREPAGO']

    def test_upload_with_error_returns_results(self):
        """
        Test: Second row has a negative amount
        Expected: 422 with the row error, nothing saved
        """
        self.login(self.admin)

        response = self.client.post(
            reverse('sales:sale_upload'),
            {'file': self.upload([self.row('987654321'), self.row('987654322', amount=-1)])},
            **AJAX,
        )

        self.assertEqual(response.status_code, 422)
        body = response.json()
        self.assertEqual(body['message'], 'Se encontraron errores en la importación')
        self.assertEqual(body['results']['errors'], [{'row': 3, 'message': 'Los montos deben ser positivos'}])
        self.assertEqual(Sale.objects.count(), 0)

    def test_retry_only_successful_rows(self):
        """
        Test: Failed upload, then retry with only_successful
        Expected: The clean row is imported
        """
        self.login(self.admin)
        self.client.post(
            reverse('sales:sale_upload'),
            {'file': self.upload([self.row('987654321'), self.row('987654322', amount=-1)])},
            **AJAX,
        )

        response = self.client.post(reverse('sales:sale_upload'), {'only_successful': '1'}, **AJAX)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Se importaron 1 ventas correctamente')
        self.assertEqual(list(Sale.objects.values_list('telefono', flat=True)), ['987654321'])
        self.assertTrue(ActivityLog.objects.filter(action=ActivityLog.ACTION_IMPORT_DATA).exists())

    def test_retry_without_previous_upload(self):
        """
        Test: only_successful with nothing stored
        Expected: 400 error
        """
        self.login(self.admin)

        response = self.client.post(reverse('sales:sale_upload'), {'only_successful': '1'}, **AJAX)

        self.assertEqual(response.status_code, 400)

    def test_upload_rejects_other_extensions(self):
        """
        Test: CSV upload
        Expected: 422 on the file field
        """
        self.login(self.admin)
        upload = SimpleUploadedFile('ventas.csv', b'dni,fecha', content_type='text/csv')

        response = self.client.post(reverse('sales:sale_upload'), {'file': upload}, **AJAX)

        self.assertEqual(response.status_code, 422)
        self.assertIn('file', response.json()['errors'])

    def test_browser_upload_flashes_and_redirects(self):
        """
        Test: Browser upload of a clean file
        Expected: Redirect to the bulk page with the results kept
        """
        self.login(self.admin)

        response = self.client.post(reverse('sales:sale_upload'), {'file': self.upload([self.row('987654321')])})

        self.assertRedirects(response, reverse('sales:sale_bulk'), fetch_redirect_response=False)
        self.assertEqual(self.client.session['sale_import_results']['success'], 1)


class DownloadTest(SalesViewTestCase):
    """Test workbook downloads"""

    def test_sale_template_sheets(self):
        """
        Test: Sales template download
        Expected: Instructions, data and reference sheets
        """
        self.login(self.admin)

        response = self.client.get(reverse('sales:sale_template'))

        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment', response['Content-Disposition'])
        workbook = openpyxl.load_workbook(BytesIO(response.content))
        self.assertEqual(workbook.sheetnames, ['Instrucciones', 'Ventas', 'Referencias'])
        self.assertEqual(workbook['Ventas']['A1'].value, 'DNI PDV')

    def test_export_logs_download(self):
        """
        Test: Export of today's sales
        Expected: One data row and a file_download activity entry
        """
        Sale.objects.create(date=self.today, telefono='987654321', user=self.pdv, webproduct=self.chip)
        self.login(self.admin)

        response = self.client.get(reverse('sales:sale_export'))

        workbook = openpyxl.load_workbook(BytesIO(response.content))
        worksheet = workbook.active
        self.assertEqual(worksheet.max_row, 2)
        log = ActivityLog.objects.get(action=ActivityLog.ACTION_FILE_DOWNLOAD)
        self.assertTrue(log.additional_data['filename'].startswith('ventas_'))


class ShareCrudTest(SalesViewTestCase):
    """Test quota store"""

    def test_store_share(self):
        """
        Test: New quota
        Expected: Created
        """
        self.login(self.admin)

        response = self.client.post(
            reverse('sales:share_store'),
            {'user': self.pdv.id, 'year': self.today.year, 'month': 3, 'amount': 100},
            **AJAX,
        )

        self.assertTrue(response.json()['success'])
        self.assertEqual(Share.objects.get().amount, 100)

    def test_store_duplicate_period(self):
        """
        Test: Quota already set for the PDV and period
        Expected: 422 with the quota message on the PDV field
        """
        Share.objects.create(user=self.pdv, year=self.today.year, month=3, amount=50)
        self.login(self.admin)

        response = self.client.post(
            reverse('sales:share_store'),
            {'user': self.pdv.id, 'year': self.today.year, 'month': 3, 'amount': 100},
            **AJAX,
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(
            response.json()['errors']['user'],
            ['Ya existe una cuota para este PDV en el mes y año seleccionados.'],
        )

    def test_store_next_year_rejected(self):
        """
        Test: Quota for the year after the current one
        Expected: 422 on year
        """
        self.login(self.admin)

        response = self.client.post(
            reverse('sales:share_store'),
            {'user': self.pdv.id, 'year': self.today.year + 1, 'month': 1, 'amount': 100},
            **AJAX,
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()['errors']['year'], ['El año no puede ser mayor al año actual.'])
        self.assertFalse(Share.objects.exists())

    def test_index_filters_by_period(self):
        """
        Test: Quotas in two months, index filtered to one
        Expected: Only that month and its total
        """
        Share.objects.create(user=self.pdv, year=2024, month=3, amount=50)
        Share.objects.create(user=self.pdv, year=2024, month=4, amount=70)
        self.login(self.admin)

        response = self.client.get(reverse('sales:share_index'), {'year': '2024', 'month': '4'}, **AJAX)

        props = response.json()['props']
        self.assertEqual(props['shares']['total'], 1)
        self.assertEqual(props['total'], 70)


class DashboardAndHistoryTest(SalesViewTestCase):
    """Test the dashboard and the sales history"""

    def test_pdv_dashboard(self):
        """
        Test: PDV with a quota of 4 and 2 prepaid sales this month, 1 recharged
        Expected: Quota 50% red, ratio 50% green
        """
        Share.objects.create(user=self.pdv, year=self.today.year, month=self.today.month, amount=4)
        Sale.objects.create(
            date=self.today, telefono='987654321', user=self.pdv, webproduct=self.chip,
            commissionable_charge=True,
        )
        Sale.objects.create(date=self.today, telefono='987654322', user=self.pdv, webproduct=self.chip)
        self.login(self.pdv)

        response = self.client.get(reverse('core:dashboard'), **AJAX)

        props = response.json()['props']
        self.assertEqual(props['totalShare'], 4)
        self.assertEqual(props['salesData']['totalSales'], 2)
        self.assertEqual(props['salesData']['totalRecharges'], 1)
        self.assertEqual(props['salesData']['ratioMetrics']['status'], 'green')
        self.assertEqual(props['salesData']['quotaMetrics']['progress'], 50)
        self.assertEqual(props['salesData']['quotaMetrics']['status'], 'red')
        self.assertFalse(props['isZonificado'])

    def test_zonificado_dashboard_sums_its_pdvs(self):
        """
        Test: Zonificado with one PDV that has a quota
        Expected: That quota as total, PDV count 1
        """
        Share.objects.create(user=self.pdv, year=self.today.year, month=self.today.month, amount=7)
        Share.objects.create(user=self.other_pdv, year=self.today.year, month=self.today.month, amount=9)
        self.login(self.zonificado)

        response = self.client.get(reverse('core:dashboard'), **AJAX)

        props = response.json()['props']
        self.assertEqual(props['totalShare'], 7)
        self.assertEqual(props['pdvCount'], 1)
        self.assertTrue(props['isZonificado'])

    def test_history_defaults_to_month_to_date(self):
        """
        Test: History without dates
        Expected: Range from the first of the month to today
        """
        self.login(self.pdv)

        response = self.client.get(reverse('sales:sales_history'), **AJAX)

        props = response.json()['props']
        self.assertEqual(props['startDate'], self.today.replace(day=1).strftime('%Y-%m-%d'))
        self.assertEqual(props['endDate'], self.today.strftime('%Y-%m-%d'))
        self.assertTrue(props['isPdv'])
