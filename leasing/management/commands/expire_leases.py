# leasing/management/commands/expire_leases.py

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from leasing.services.leases import expire_leases


class Command(BaseCommand):
    help = 'Marks active leases whose end date has passed as expired.'

    def add_arguments(self, parser):
        parser.add_argument('--date', help='Reference date (YYYY-MM-DD); defaults to today.')

    def handle(self, *args, **options):
        today = None
        if options['date']:
            try:
                today = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date: {options['date']}") from None

        count = expire_leases(today=today)
        if not count:
            self.stdout.write(self.style.SUCCESS('No active leases have passed their end date.'))
            return
        self.stdout.write(self.style.SUCCESS(f'{count} leases marked as expired.'))
