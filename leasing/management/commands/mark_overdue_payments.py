# leasing/management/commands/mark_overdue_payments.py

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from leasing.services.payments import mark_overdue_payments


class Command(BaseCommand):
    help = 'Marks pending payments whose due date has passed as overdue.'

    def add_arguments(self, parser):
        parser.add_argument('--date', help='Reference date (YYYY-MM-DD); defaults to today.')

    def handle(self, *args, **options):
        today = None
        if options['date']:
            try:
                today = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date: {options['date']}") from None

        count = mark_overdue_payments(today=today)
        if not count:
            self.stdout.write(self.style.SUCCESS('No pending payments are past due.'))
            return
        self.stdout.write(self.style.SUCCESS(f'{count} payments marked as overdue.'))
