"""
Activity Recording Tests
========================

Tests how activity entries get written.

Test Coverage:
1. detect_device_type - phone / tablet / desktop / unknown
2. log_activity - request metadata and the derived fields
3. ActivityLogMiddleware - page views, downloads, skipped requests
4. Model signals - created / updated / deleted entries
5. Client event API - validation and authentication

Run tests:
    python manage.py test apps.activity.tests.test_services
"""

import json

from django.test import TestCase, Client, RequestFactory
from django.urls import reverse

from apps.accounts.models import User
from apps.activity.models import ActivityLog
from apps.activity.services import detect_device_type, log_activity
from apps.core.models import Company
from apps.territories.models import Zonal

IPHONE = 'Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148'
IPAD = 'Mozilla/5.0 (iPad; CPU OS 16_6 like Mac OS X) AppleWebKit/605.1.15'
ANDROID_TABLET = 'Mozilla/5.0 (Linux; Android 13; SM-X200) AppleWebKit/537.36 Safari/537.36'
ANDROID_PHONE = 'Mozilla/5.0 (Linux; Android 13; Pixel 7) AppleWebKit/537.36 Mobile Safari/537.36'
WINDOWS = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36'


class DetectDeviceTypeTest(TestCase):
    """Test the User-Agent heuristic"""

    def test_phones(self):
        self.assertEqual(detect_device_type(IPHONE), ActivityLog.DEVICE_PHONE)
        self.assertEqual(detect_device_type(ANDROID_PHONE), ActivityLog.DEVICE_PHONE)

    def test_tablets(self):
        self.assertEqual(detect_device_type(IPAD), ActivityLog.DEVICE_TABLET)
        self.assertEqual(detect_device_type(ANDROID_TABLET), ActivityLog.DEVICE_TABLET)

    def test_desktop(self):
        self.assertEqual(detect_device_type(WINDOWS), ActivityLog.DEVICE_DESKTOP)

    def test_missing_or_unknown(self):
        self.assertEqual(detect_device_type(''), ActivityLog.DEVICE_UNKNOWN)
        self.assertEqual(detect_device_type(None), ActivityLog.DEVICE_UNKNOWN)
        self.assertEqual(detect_device_type('curl/8.4.0'), ActivityLog.DEVICE_UNKNOWN)


class ActivityTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.company = Company.objects.create(name='Claro Norte')
        self.admin = User.objects.create_user(
            '11111111', password='secret123', name='Admin', company=self.company, role='admin',
        )
        self.pdv = User.objects.create_user(
            '01234567', password='secret123', name='Bodega Lucha', company=self.company, role='pdv',
        )


class LogActivityTest(ActivityTestCase):
    """Test log_activity()"""

    def test_request_metadata_is_stored(self):
        """
        Test: Entry logged from a phone behind a proxy
        Expected: User, device, forwarded IP, route and App-State saved
        """
        request = RequestFactory().get(
            '/dashboard/',
            HTTP_USER_AGENT=IPHONE,
            HTTP_X_FORWARDED_FOR='200.48.1.10, 10.0.0.1',
            HTTP_APP_STATE='background',
        )
        request.user = self.pdv

        entry = log_activity(request, ActivityLog.ACTION_PAGE_VIEW, 'Usuario visitó /dashboard/')

        entry.refresh_from_db()
        self.assertEqual(entry.user, self.pdv)
        self.assertEqual(entry.device_type, ActivityLog.DEVICE_PHONE)
        self.assertEqual(entry.ip_address, '200.48.1.10')
        self.assertEqual(entry.route, '/dashboard/')
        self.assertEqual(entry.app_state, 'background')

    def test_derived_fields_added(self):
        """
        Test: Entry with caller data
        Expected: Caller data kept, time markers added
        """
        request = RequestFactory().get('/sales/')
        request.user = self.admin

        entry = log_activity(request, ActivityLog.ACTION_EXPORT_DATA, '', {'rows': 3})

        for key in ('rows', 'response_time', 'is_weekend', 'hour_of_day', 'day_of_week', 'is_unusual'):
            self.assertIn(key, entry.additional_data)
        self.assertEqual(entry.additional_data['rows'], 3)
        self.assertTrue(0 <= entry.additional_data['day_of_week'] <= 6)

    def test_without_request(self):
        """
        Test: Entry logged outside a request
        Expected: Saved with no user and unknown device
        """
        entry = log_activity(None, ActivityLog.ACTION_MODEL_CREATED, 'Se creó un registro')

        self.assertIsNone(entry.user)
        self.assertEqual(entry.device_type, ActivityLog.DEVICE_UNKNOWN)


class ActivityMiddlewareTest(ActivityTestCase):
    """Test ActivityLogMiddleware"""

    def test_page_view_logged(self):
        """
        Test: Browser opens the dashboard
        Expected: page_view entry for that route
        """
        self.client.force_login(self.pdv)

        self.client.get(reverse('core:dashboard'), HTTP_USER_AGENT=WINDOWS)

        entry = ActivityLog.objects.get(action=ActivityLog.ACTION_PAGE_VIEW)
        self.assertEqual(entry.user, self.pdv)
        self.assertEqual(entry.route, '/dashboard/')
        self.assertEqual(entry.device_type, ActivityLog.DEVICE_DESKTOP)
        self.assertEqual(entry.additional_data['method'], 'GET')

    def test_ajax_not_logged_as_page_view(self):
        """
        Test: XHR page request
        Expected: No page_view entry
        """
        self.client.force_login(self.pdv)

        self.client.get(reverse('core:dashboard'), HTTP_X_REQUESTED_WITH='XMLHttpRequest')

        self.assertFalse(ActivityLog.objects.filter(action=ActivityLog.ACTION_PAGE_VIEW).exists())

    def test_anonymous_not_logged(self):
        """
        Test: Login page without a session
        Expected: Nothing logged
        """
        self.client.get(reverse('accounts:login'))

        self.assertFalse(ActivityLog.objects.exists())

    def test_download_logged(self):
        """
        Test: Admin downloads the quota template
        Expected: file_download with the file name
        """
        self.client.force_login(self.admin)

        self.client.get(reverse('sales:share_template'))

        entry = ActivityLog.objects.get(action=ActivityLog.ACTION_FILE_DOWNLOAD)
        self.assertEqual(entry.additional_data['filename'], 'plantilla_cuotas.xlsx')
        self.assertEqual(entry.description, 'Usuario descargó plantilla_cuotas.xlsx')


class ModelChangeSignalTest(ActivityTestCase):
    """Test model_created / model_updated / model_deleted entries"""

    def test_create_update_delete(self):
        """
        Test: Zonal created, renamed, saved unchanged, deleted
        Expected: One entry per real change
        """
        zonal = Zonal.objects.create(company=self.company, name='LIMA NORTE', short_name='LN')
        created = ActivityLog.objects.get(action=ActivityLog.ACTION_MODEL_CREATED)
        self.assertEqual(created.additional_data['model'], 'Zonal')
        self.assertEqual(created.additional_data['attributes']['name'], 'LIMA NORTE')

        zonal.name = 'LIMA NORTE 2'
        zonal.save()
        zonal.save()
        updated = ActivityLog.objects.get(action=ActivityLog.ACTION_MODEL_UPDATED)
        self.assertEqual(updated.additional_data['changes'], {'name': 'LIMA NORTE 2'})
        self.assertEqual(updated.additional_data['original'], {'name': 'LIMA NORTE'})

        zonal_id = zonal.id
        zonal.delete()
        deleted = ActivityLog.objects.get(action=ActivityLog.ACTION_MODEL_DELETED)
        self.assertEqual(deleted.additional_data['id'], zonal_id)

    def test_change_through_view_is_attributed(self):
        """
        Test: Admin creates a zonal through the screen
        Expected: model_created entry belongs to the admin
        """
        self.client.force_login(self.admin)

        self.client.post(
            reverse('territories:zonal_store'),
            {'name': 'LIMA SUR', 'short_name': 'LS'},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        entry = ActivityLog.objects.get(action=ActivityLog.ACTION_MODEL_CREATED)
        self.assertEqual(entry.user, self.admin)


class ClientEventApiTest(ActivityTestCase):
    """Test POST /api/activity/"""

    def post(self, payload):
        return self.client.post(reverse('api_activity'), json.dumps(payload), content_type='application/json')

    def test_app_start_recorded(self):
        """
        Test: PWA reports an app start
        Expected: 201, launch type kept in additional data
        """
        self.client.force_login(self.pdv)

        response = self.post({'action': 'app_start', 'launch_type': 'pwa', 'additional_data': {'version': '2.1'}})

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['success'])
        entry = ActivityLog.objects.get(action=ActivityLog.ACTION_APP_START)
        self.assertEqual(entry.user, self.pdv)
        self.assertEqual(entry.additional_data['launch_type'], 'pwa')
        self.assertEqual(entry.additional_data['version'], '2.1')

    def test_missing_action(self):
        """
        Test: Event without action
        Expected: 400 with field errors
        """
        self.client.force_login(self.pdv)

        response = self.post({'description': 'sin acción'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('action', response.json()['errors'])

    def test_unknown_launch_type(self):
        self.client.force_login(self.pdv)

        response = self.post({'action': 'app_start', 'launch_type': 'desktop'})

        self.assertEqual(response.status_code, 400)

    def test_anonymous_rejected(self):
        """
        Test: Event without a session
        Expected: Rejected, nothing stored
        """
        response = self.post({'action': 'app_start'})

        self.assertIn(response.status_code, (401, 403))
        self.assertFalse(ActivityLog.objects.exists())
