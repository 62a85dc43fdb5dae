from datetime import datetime

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.campaigns.models import Campaign, expire_campaigns


class Command(BaseCommand):
    help = 'Deactivate campaigns whose end date has already passed'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Reference date (YYYY-MM-DD) instead of today',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only report how many campaigns would be deactivated',
        )

    def handle(self, *args, **options):
        today = None
        if options.get('date'):
            try:
                today = datetime.strptime(options['date'], '%Y-%m-%d').date()
            except ValueError:
                raise CommandError(f"Invalid date: {options['date']} (expected YYYY-MM-DD)")

        if options['dry_run']:
            reference = today or timezone.localdate()
            pending = Campaign.objects.filter(status=True, date_end__lt=reference).count()
            self.stdout.write(self.style.WARNING(f'DRY RUN - {pending} campañas serían desactivadas.'))
            return

        updated = expire_campaigns(today)
        self.stdout.write(self.style.SUCCESS(f'Se actualizaron {updated} campañas a estado inactivo.'))
