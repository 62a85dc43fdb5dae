"""
Accounts Views Tests
====================

Tests login/logout, user management, bulk creation and sellers.

Test Coverage:
1. Login - DNI padding, remember me, activity entry, wrong password
2. Logout - POST only, activity entry
3. Users - store, validation, update without password, delete rules
4. Bulk create - placeholder PDVs, existing DNIs, missing circuit
5. Sellers - nested CRUD, tenant scoping

Run tests:
    python manage.py test apps.accounts.tests.test_views
"""

from django.test import TestCase, Client
from django.urls import reverse

from apps.accounts.models import Seller, User
from apps.activity.models import ActivityLog
from apps.catalog.models import Product, WebProduct
from apps.core.models import Company
from apps.sales.models import Sale
from apps.territories.models import Circuit, Zonal

AJAX = {'HTTP_X_REQUESTED_WITH': 'XMLHttpRequest'}
PASSWORD = 'Ventas#2024Norte'


class AccountsViewTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.company = Company.objects.create(name='Claro Norte')
        self.zonal = Zonal.objects.create(company=self.company, name='LIMA NORTE', short_name='LN')
        self.circuit = Circuit.objects.create(zonal=self.zonal, name='COMAS 01')

        self.admin = User.objects.create_user(
            '11111111', password=PASSWORD, name='Ana Torres', company=self.company, role='admin',
        )
        self.pdv = User.objects.create_user(
            '01234567', password=PASSWORD, name='Bodega Lucha', company=self.company,
            role='pdv', circuit=self.circuit, cel='987000001',
        )

    def user_data(self, **overrides):
        data = {
            'name': 'Bodega Rosa',
            'email': 'Rosa@Example.com',
            'dni': '7654321',
            'cel': '987000002',
            'circuit': self.circuit.id,
            'role': 'pdv',
            'is_active': 'on',
            'password': PASSWORD,
            'password_confirmation': PASSWORD,
        }
        data.update(overrides)
        return data


class LoginTest(AccountsViewTestCase):
    """Test login_view / logout_view"""

    def test_login_with_short_dni(self):
        """
        Test: DNI typed without its leading zero
        Expected: Logged in, redirected to dashboard, login recorded
        """
        response = self.client.post(reverse('accounts:login'), {'dni': '1234567', 'password': PASSWORD})

        self.assertRedirects(response, reverse('core:dashboard'), fetch_redirect_response=False)
        self.assertEqual(int(self.client.session['_auth_user_id']), self.pdv.id)
        entry = ActivityLog.objects.get(action=ActivityLog.ACTION_LOGIN)
        self.assertEqual(entry.user, self.pdv)

    def test_remember_me_keeps_session(self):
        self.client.post(reverse('accounts:login'), {'dni': '01234567', 'password': PASSWORD, 'remember': 'on'})

        self.assertGreater(self.client.session.get_expiry_age(), 29 * 24 * 60 * 60)

    def test_next_url_followed_when_local(self):
        response = self.client.post(
            reverse('accounts:login') + '?next=/sales/history/',
            {'dni': '01234567', 'password': PASSWORD},
        )

        self.assertEqual(response.url, '/sales/history/')

    def test_external_next_url_ignored(self):
        response = self.client.post(
            reverse('accounts:login') + '?next=https://evil.example.com/',
            {'dni': '01234567', 'password': PASSWORD},
        )

        self.assertEqual(response.url, reverse('core:dashboard'))

    def test_wrong_password(self):
        """
        Test: Bad password
        Expected: Login page again, no session, no activity entry
        """
        response = self.client.post(reverse('accounts:login'), {'dni': '01234567', 'password': 'nope'})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'DNI o contraseña incorrectos.')
        self.assertNotIn('_auth_user_id', self.client.session)
        self.assertFalse(ActivityLog.objects.filter(action=ActivityLog.ACTION_LOGIN).exists())

    def test_inactive_user_cannot_login(self):
        self.pdv.is_active = False
        self.pdv.save()

        self.client.post(reverse('accounts:login'), {'dni': '01234567', 'password': PASSWORD})

        self.assertNotIn('_auth_user_id', self.client.session)

    def test_logout_requires_post(self):
        """
        Test: GET then POST to logout
        Expected: GET refused, POST logs out and records it
        """
        self.client.force_login(self.pdv)

        self.assertEqual(self.client.get(reverse('accounts:logout')).status_code, 405)

        response = self.client.post(reverse('accounts:logout'))

        self.assertRedirects(response, reverse('accounts:login'), fetch_redirect_response=False)
        self.assertNotIn('_auth_user_id', self.client.session)
        self.assertTrue(ActivityLog.objects.filter(action=ActivityLog.ACTION_LOGOUT, user=self.pdv).exists())


class UserCrudTest(AccountsViewTestCase):
    """Test the user management screen"""

    def setUp(self):
        super().setUp()
        self.client.force_login(self.admin)

    def test_index_search(self):
        response = self.client.get(reverse('accounts:user_index'), {'search': 'lucha'}, **AJAX)

        props = response.json()['props']
        self.assertEqual(props['users']['total'], 1)
        self.assertEqual(props['users']['data'][0]['circuit']['zonal'], 'LN')
        self.assertEqual(props['circuits'], [{'id': self.circuit.id, 'name': 'COMAS 01', 'zonal': 'LN'}])

    def test_store_user(self):
        """
        Test: New PDV with a 7-digit DNI and mixed-case email
        Expected: DNI padded, email lowercased, password hashed, same company
        """
        response = self.client.post(reverse('accounts:user_store'), self.user_data(), **AJAX)

        self.assertTrue(response.json()['success'])
        user = User.objects.get(dni='07654321')
        self.assertEqual(user.email, 'rosa@example.com')
        self.assertEqual(user.company, self.company)
        self.assertTrue(user.check_password(PASSWORD))

    def test_store_requires_password(self):
        response = self.client.post(
            reverse('accounts:user_store'), self.user_data(password='', password_confirmation=''), **AJAX,
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()['errors']['password'], ['La contraseña es requerida'])

    def test_store_password_mismatch(self):
        response = self.client.post(
            reverse('accounts:user_store'), self.user_data(password_confirmation='Otra#2024Clave'), **AJAX,
        )

        self.assertEqual(response.json()['errors']['password_confirmation'], ['Las contraseñas no coinciden'])

    def test_store_duplicate_cel(self):
        response = self.client.post(reverse('accounts:user_store'), self.user_data(cel='987000001'), **AJAX)

        self.assertEqual(response.json()['errors']['cel'], ['Este número de celular ya está en uso'])

    def test_store_circuit_of_other_company(self):
        """
        Test: Circuit belonging to another tenant
        Expected: Rejected as a missing circuit
        """
        other = Company.objects.create(name='Otra Empresa')
        zonal = Zonal.objects.create(company=other, name='AREQUIPA', short_name='AQP')
        circuit = Circuit.objects.create(zonal=zonal, name='CAYMA 01')

        response = self.client.post(reverse('accounts:user_store'), self.user_data(circuit=circuit.id), **AJAX)

        self.assertEqual(response.json()['errors']['circuit'], ['El circuito seleccionado no existe'])

    def test_update_keeps_password_when_blank(self):
        response = self.client.post(
            reverse('accounts:user_update', args=[self.pdv.id]),
            self.user_data(dni='01234567', cel='987000001', name='Bodega Lucha SAC',
                           password='', password_confirmation=''),
            **AJAX,
        )

        self.assertTrue(response.json()['success'])
        self.pdv.refresh_from_db()
        self.assertEqual(self.pdv.name, 'Bodega Lucha SAC')
        self.assertTrue(self.pdv.check_password(PASSWORD))

    def test_cannot_delete_self(self):
        response = self.client.post(reverse('accounts:user_destroy', args=[self.admin.id]), **AJAX)

        self.assertEqual(response.status_code, 400)
        self.assertTrue(User.objects.filter(pk=self.admin.pk).exists())

    def test_cannot_delete_user_with_sales(self):
        """
        Test: PDV with a registered sale
        Expected: 409, user kept
        """
        product = Product.objects.create(company=self.company, name='PREPAGO')
        webproduct = WebProduct.objects.create(product=product, name='CHIP PREPAGO')
        Sale.objects.create(date='2024-03-15', telefono='987654321', user=self.pdv, webproduct=webproduct)

        response = self.client.post(reverse('accounts:user_destroy', args=[self.pdv.id]), **AJAX)

        self.assertEqual(response.status_code, 409)
        self.assertTrue(User.objects.filter(pk=self.pdv.pk).exists())

    def test_delete_user(self):
        response = self.client.post(reverse('accounts:user_destroy', args=[self.pdv.id]), **AJAX)

        self.assertTrue(response.json()['success'])
        self.assertFalse(User.objects.filter(pk=self.pdv.pk).exists())

    def test_pdv_cannot_manage_users(self):
        self.client.force_login(self.pdv)

        response = self.client.post(reverse('accounts:user_store'), self.user_data(), **AJAX)

        self.assertEqual(response.status_code, 403)


class BulkCreateTest(AccountsViewTestCase):
    """Test placeholder PDV creation from a DNI list"""

    def setUp(self):
        super().setUp()
        self.client.force_login(self.admin)

    def test_creates_placeholder_users(self):
        """
        Test: Two new DNIs and one that exists
        Expected: Two created with DNI as password, one reported
        """
        Circuit.objects.create(zonal=self.zonal, name='SINNOMBRE')

        response = self.client.post(
            reverse('accounts:user_bulk_create'), {'dnis': '7654321, 22223333\n01234567'}, **AJAX,
        )

        body = response.json()
        self.assertFalse(body['success'])
        self.assertEqual(body['results']['total'], 3)
        self.assertEqual(body['results']['success'], 2)
        self.assertEqual(body['results']['errors'], [{'dni': '01234567', 'message': 'El usuario ya existe'}])

        user = User.objects.get(dni='07654321')
        self.assertEqual(user.name, 'sin nombre')
        self.assertEqual(user.circuit.name, 'SINNOMBRE')
        self.assertEqual(user.role, 'pdv')
        self.assertTrue(user.check_password('07654321'))

    def test_missing_placeholder_circuit(self):
        response = self.client.post(reverse('accounts:user_bulk_create'), {'dnis': '22223333'}, **AJAX)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'No se encontró el circuito SINNOMBRE')
        self.assertFalse(User.objects.filter(dni='22223333').exists())

    def test_invalid_dni_in_list(self):
        response = self.client.post(reverse('accounts:user_bulk_create'), {'dnis': '12345678\nABC'}, **AJAX)

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()['errors']['dnis'], ['DNI no válido: ABC'])

    def test_browser_results_shown_on_index(self):
        """
        Test: Form post from the browser
        Expected: Redirect, results handed to the next index render once
        """
        Circuit.objects.create(zonal=self.zonal, name='SINNOMBRE')

        self.client.post(reverse('accounts:user_bulk_create'), {'dnis': '22223333'})

        props = self.client.get(reverse('accounts:user_index'), **AJAX).json()['props']
        self.assertEqual(props['bulkResults']['success'], 1)
        props = self.client.get(reverse('accounts:user_index'), **AJAX).json()['props']
        self.assertIsNone(props['bulkResults'])


class SellerTest(AccountsViewTestCase):
    """Test the sellers of a PDV"""

    def setUp(self):
        super().setUp()
        self.client.force_login(self.admin)

    def test_store_and_list(self):
        response = self.client.post(
            reverse('accounts:seller_store', args=[self.pdv.id]),
            {'name': 'Carla Díaz', 'dni': '44445555', 'cel': ''},
            **AJAX,
        )

        self.assertTrue(response.json()['success'])
        seller = Seller.objects.get(dni='44445555')
        self.assertEqual(seller.pdv, self.pdv)
        self.assertIsNone(seller.cel)

        props = self.client.get(reverse('accounts:seller_index', args=[self.pdv.id]), **AJAX).json()['props']
        self.assertEqual(props['sellers']['total'], 1)
        self.assertEqual(props['pdv']['dni'], '01234567')

    def test_duplicate_dni(self):
        Seller.objects.create(pdv=self.pdv, name='Carla', dni='44445555')

        response = self.client.post(
            reverse('accounts:seller_store', args=[self.pdv.id]), {'name': 'Otra', 'dni': '44445555'}, **AJAX,
        )

        self.assertEqual(response.json()['errors']['dni'], ['Este DNI ya está registrado.'])

    def test_update_and_delete(self):
        seller = Seller.objects.create(pdv=self.pdv, name='Carla', dni='44445555')

        self.client.post(
            reverse('accounts:seller_update', args=[seller.id]),
            {'name': 'Carla Díaz', 'dni': '44445555', 'cel': '987111222'},
            **AJAX,
        )
        seller.refresh_from_db()
        self.assertEqual(seller.cel, '987111222')

        response = self.client.post(reverse('accounts:seller_destroy', args=[seller.id]))

        self.assertRedirects(
            response, reverse('accounts:seller_index', args=[self.pdv.id]), fetch_redirect_response=False,
        )
        self.assertFalse(Seller.objects.exists())

    def test_other_company_seller_is_404(self):
        other = Company.objects.create(name='Otra Empresa')
        outsider = User.objects.create_user('33333333', password=PASSWORD, name='Otro', company=other)
        seller = Seller.objects.create(pdv=outsider, name='Ajeno', dni='55556666')

        response = self.client.post(reverse('accounts:seller_destroy', args=[seller.id]), **AJAX)

        self.assertEqual(response.status_code, 404)
        self.assertTrue(Seller.objects.filter(pk=seller.pk).exists())
