"""
Management command to set up Django-Q2 schedules for notification jobs.

This command creates/updates the scheduled tasks required for:
- Overdue task scan (every OVERDUE_SCAN_INTERVAL_MINUTES, default 15)
- Daily overdue reminders (OVERDUE_REMINDER_CRON, default 06:00 UTC)

Usage:
    python manage.py setup_schedules

The command is idempotent - safe to run multiple times.
Existing schedules will be updated if their configuration changes.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django_q.models import Schedule


OVERDUE_SCAN_NAME = 'Overdue Task Scan'
OVERDUE_REMINDER_NAME = 'Daily Overdue Reminder'


class Command(BaseCommand):
    help = 'Set up Django-Q2 schedules for notification jobs'

    def handle(self, *args, **options):
        self.stdout.write('\nSetting up Django-Q2 schedules...\n')

        interval = settings.OVERDUE_SCAN_INTERVAL_MINUTES
        cron = settings.OVERDUE_REMINDER_CRON

        schedules = [
            (
                OVERDUE_SCAN_NAME,
                f'every {interval} minutes',
                {
                    'func': 'apps.notifications.tasks.check_overdue_tasks',
                    'schedule_type': Schedule.MINUTES,
                    'minutes': interval,
                    'repeats': -1,  # Run forever
                },
            ),
            (
                OVERDUE_REMINDER_NAME,
                f'cron "{cron}" (UTC)',
                {
                    'func': 'apps.notifications.tasks.send_overdue_reminders',
                    'schedule_type': Schedule.CRON,
                    'cron': cron,
                    'repeats': -1,
                },
            ),
        ]

        schedules_created = 0
        schedules_updated = 0

        for name, when, defaults in schedules:
            _, created = Schedule.objects.update_or_create(name=name, defaults=defaults)
            if created:
                schedules_created += 1
                self.stdout.write(self.style.SUCCESS(f'✓ Created schedule: {name} ({when})'))
            else:
                schedules_updated += 1
                self.stdout.write(self.style.WARNING(f'↻ Updated schedule: {name} ({when})'))

        total = schedules_created + schedules_updated
        self.stdout.write('')
        self.stdout.write(
            self.style.SUCCESS(
                f'Done! {schedules_created} schedule(s) created, '
                f'{schedules_updated} schedule(s) updated. '
                f'Total: {total} schedules configured.'
            )
        )
        self.stdout.write('')
        self.stdout.write(
            self.style.NOTICE(
                'Note: Ensure Django-Q cluster is running: python manage.py qcluster'
            )
        )
        self.stdout.write('')
