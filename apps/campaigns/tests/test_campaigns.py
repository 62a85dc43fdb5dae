"""
Campaigns and Notifications Tests
=================================

Test Coverage:
1. Campaign store - image required and validated, date order
2. Campaign history - grouped by type, year/month filters
3. expire_campaigns / update_campaign_status command
4. Notification.objects.active() - login modal selection
5. Notification store rules

Run tests:
    python manage.py test apps.campaigns.tests.test_campaigns
"""

import shutil
import tempfile
from datetime import date
from io import BytesIO, StringIO

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, Client, override_settings
from django.urls import reverse
from PIL import Image

from apps.accounts.models import User
from apps.campaigns.models import Campaign, Notification, expire_campaigns
from apps.core.models import Company

AJAX = {'HTTP_X_REQUESTED_WITH': 'XMLHttpRequest'}
MEDIA_ROOT = tempfile.mkdtemp()


def image_upload(name='banner.png', image_format='PNG'):
    buffer = BytesIO()
    Image.new('RGB', (20, 20), color='red').save(buffer, image_format)
    return SimpleUploadedFile(name, buffer.getvalue(), content_type=f'image/{image_format.lower()}')


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class CampaignViewTest(TestCase):
    """Test campaign screens"""

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.client = Client()
        self.company = Company.objects.create(name='Claro Norte')
        self.qa = User.objects.create_user('22222222', password='secret123', name='QA', company=self.company, role='qa')
        self.pdv = User.objects.create_user('01234567', password='secret123', name='Bodega', company=self.company)

    def campaign_data(self, **overrides):
        data = {
            'name': 'Chip Marzo',
            'description': 'Bono por chip activado',
            'type': Campaign.TYPE_SCHEME,
            'date_start': '2024-03-01',
            'date_end': '2024-03-31',
            'status': 'on',
            'image': image_upload(),
        }
        data.update(overrides)
        return data

    def test_store_campaign(self):
        self.client.force_login(self.qa)

        response = self.client.post(reverse('campaigns:campaign_store'), self.campaign_data(), **AJAX)

        self.assertTrue(response.json()['success'])
        campaign = Campaign.objects.get()
        self.assertEqual(campaign.company, self.company)
        self.assertTrue(campaign.image.name.startswith('campaigns/'))

    def test_image_required_on_create(self):
        self.client.force_login(self.qa)
        data = self.campaign_data()
        del data['image']

        response = self.client.post(reverse('campaigns:campaign_store'), data, **AJAX)

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()['errors']['image'], ['La imagen es requerida'])

    def test_end_before_start(self):
        self.client.force_login(self.qa)

        response = self.client.post(
            reverse('campaigns:campaign_store'), self.campaign_data(date_end='2024-02-28'), **AJAX,
        )

        self.assertEqual(
            response.json()['errors']['date_end'],
            ['La fecha de fin debe ser posterior o igual a la fecha de inicio'],
        )

    def test_update_keeps_image_when_none_sent(self):
        self.client.force_login(self.qa)
        self.client.post(reverse('campaigns:campaign_store'), self.campaign_data(), **AJAX)
        campaign = Campaign.objects.get()
        data = self.campaign_data(name='Chip Marzo 2')
        del data['image']

        response = self.client.post(reverse('campaigns:campaign_update', args=[campaign.id]), data, **AJAX)

        self.assertTrue(response.json()['success'])
        campaign.refresh_from_db()
        self.assertEqual(campaign.name, 'Chip Marzo 2')
        self.assertTrue(campaign.image)

    def test_history_grouped_by_type(self):
        """
        Test: Campaigns in March and April, history for March
        Expected: Only March ones, under their type; every type key present
        """
        Campaign.objects.create(company=self.company, name='A', type=Campaign.TYPE_SCHEME,
                                date_start=date(2024, 3, 1), date_end=date(2024, 3, 31))
        Campaign.objects.create(company=self.company, name='B', type=Campaign.TYPE_ACCELERATOR,
                                date_start=date(2024, 3, 10), date_end=date(2024, 3, 20))
        Campaign.objects.create(company=self.company, name='C', type=Campaign.TYPE_SCHEME,
                                date_start=date(2024, 4, 1), date_end=date(2024, 4, 30))
        self.client.force_login(self.pdv)

        response = self.client.get(reverse('campaigns:campaign_history'), {'year': '2024', 'month': '03'}, **AJAX)

        by_type = response.json()['props']['campaignsByType']
        self.assertEqual([campaign['name'] for campaign in by_type['Esquema']], ['A'])
        self.assertEqual([campaign['name'] for campaign in by_type['Acelerador']], ['B'])
        self.assertEqual(by_type['Información'], [])

    def test_pdv_cannot_manage_campaigns(self):
        self.client.force_login(self.pdv)

        response = self.client.get(reverse('campaigns:campaign_index'))

        self.assertRedirects(response, reverse('core:dashboard'), fetch_redirect_response=False)


class ExpireCampaignsTest(TestCase):
    """Test expire_campaigns() and the management command"""

    def setUp(self):
        self.company = Company.objects.create(name='Claro Norte')
        self.ended = Campaign.objects.create(company=self.company, name='Febrero', type=Campaign.TYPE_SCHEME,
                                             date_start=date(2024, 2, 1), date_end=date(2024, 2, 29))
        self.ends_today = Campaign.objects.create(company=self.company, name='Marzo', type=Campaign.TYPE_SCHEME,
                                                  date_start=date(2024, 3, 1), date_end=date(2024, 3, 10))

    def test_only_past_campaigns_deactivated(self):
        updated = expire_campaigns(today=date(2024, 3, 10))

        self.assertEqual(updated, 1)
        self.ended.refresh_from_db()
        self.ends_today.refresh_from_db()
        self.assertFalse(self.ended.status)
        self.assertTrue(self.ends_today.status)

    def test_command_dry_run(self):
        out = StringIO()

        call_command('update_campaign_status', '--date', '2024-03-11', '--dry-run', stdout=out)

        self.assertIn('2 campañas serían desactivadas', out.getvalue())
        self.assertEqual(Campaign.objects.filter(status=True).count(), 2)

    def test_command_updates(self):
        out = StringIO()

        call_command('update_campaign_status', '--date', '2024-03-11', stdout=out)

        self.assertIn('Se actualizaron 2 campañas', out.getvalue())

    def test_command_bad_date(self):
        with self.assertRaises(CommandError):
            call_command('update_campaign_status', '--date', '11/03/2024')


class ActiveNotificationsTest(TestCase):
    """Test Notification.objects.active()"""

    def setUp(self):
        self.company = Company.objects.create(name='Claro Norte')
        self.today = date(2024, 3, 10)

    def notify(self, title, type_, start, end=None, status=True):
        return Notification.objects.create(
            company=self.company, title=title, description='Mensaje de prueba para PDVs',
            type=type_, start_date=start, end_date=end, status=status,
        )

    def test_selection(self):
        """
        Test: Mix of alerts and urgent notices around today
        Expected: Alerts starting today, urgent ones in their window; urgent first
        """
        alert_today = self.notify('Alerta hoy', Notification.TYPE_ALERT, self.today)
        self.notify('Alerta ayer', Notification.TYPE_ALERT, date(2024, 3, 9), date(2024, 3, 20))
        urgent = self.notify('Urgente', Notification.TYPE_URGENT, date(2024, 3, 1), date(2024, 3, 15))
        self.notify('Urgente vencida', Notification.TYPE_URGENT, date(2024, 3, 1), date(2024, 3, 9))
        self.notify('Inactiva', Notification.TYPE_ALERT, self.today, status=False)

        active = list(Notification.objects.active(today=self.today))

        self.assertEqual(active, [urgent, alert_today])

    def test_active_endpoint(self):
        client = Client()
        user = User.objects.create_user('01234567', password='secret123', name='Bodega', company=self.company)
        client.force_login(user)
        self.notify('Urgente', Notification.TYPE_URGENT, date(2000, 1, 1))

        response = client.get(reverse('campaigns:notification_active'))

        self.assertEqual([item['title'] for item in response.json()['notifications']], ['Urgente'])

    def test_store_rules(self):
        """
        Test: Short title and description, end not after start
        Expected: 422 with the three messages
        """
        client = Client()
        qa = User.objects.create_user('22222222', password='secret123', name='QA', company=self.company, role='qa')
        client.force_login(qa)

        response = client.post(reverse('campaigns:notification_store'), {
            'title': 'Ok',
            'description': 'Corta',
            'type': Notification.TYPE_ALERT,
            'start_date': '2024-03-10',
            'end_date': '2024-03-10',
        }, **AJAX)

        errors = response.json()['errors']
        self.assertEqual(errors['title'], ['El título debe tener al menos 3 caracteres'])
        self.assertEqual(errors['description'], ['La descripción debe tener al menos 10 caracteres'])
        self.assertEqual(errors['end_date'], ['La fecha de fin debe ser posterior a la fecha de inicio'])
