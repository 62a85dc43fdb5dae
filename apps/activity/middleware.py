import re
import time

from django.conf import settings

from .models import ActivityLog
from .services import log_activity, request_user, reset_current_request, set_current_request

FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


class ActivityLogMiddleware:
    """
    Log what authenticated users do

    - ``file_download`` for attachment responses (exports, templates)
    - ``page_view`` for every other non-AJAX request

    Static/media files, the admin and the API are left out; the API records
    its own events.
    """

    SKIPPED_PREFIXES = ('/admin/', '/api/')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.activity_started = time.monotonic()
        token = set_current_request(request)
        try:
            response = self.get_response(request)
        finally:
            reset_current_request(token)

        if self.should_log(request):
            self.log(request, response)
        return response

    def should_log(self, request):
        if request_user(request) is None:
            return False
        skipped = self.SKIPPED_PREFIXES + (settings.STATIC_URL, settings.MEDIA_URL)
        return not any(prefix and request.path.startswith('/' + prefix.lstrip('/')) for prefix in skipped)

    def log(self, request, response):
        disposition = response.get('Content-Disposition', '')
        if 'attachment' in disposition:
            match = FILENAME_RE.search(disposition)
            log_activity(
                request,
                ActivityLog.ACTION_FILE_DOWNLOAD,
                f'Usuario descargó {match.group(1) if match else "un archivo"}',
                {
                    'filename': match.group(1) if match else None,
                    'content_type': response.get('Content-Type', ''),
                },
            )
            return

        if request.headers.get('X-Requested-With') == 'XMLHttpRequest':
            return

        log_activity(
            request,
            ActivityLog.ACTION_PAGE_VIEW,
            f'Usuario visitó {request.path}',
            {
                'method': request.method,
                'referer': request.headers.get('Referer'),
                'is_pwa': bool(request.headers.get('Service-Worker-Navigation-Preload')),
            },
        )
