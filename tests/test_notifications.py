from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from django_q.models import Schedule

from apps.notifications.events import EventBus, user_event
from apps.notifications.management.commands.setup_schedules import (
    OVERDUE_REMINDER_NAME, OVERDUE_SCAN_NAME,
)
from apps.notifications.models import Notification
from apps.notifications.services import NotificationPayload, NotificationService
from apps.notifications.tasks import check_overdue_tasks, send_overdue_reminders
from apps.tasks.models import Task

from .utils import PASSWORD, hours, make_task, make_user


def payload(**overrides):
    fields = dict(
        type=Notification.Type.SYSTEM,
        title='Maintenance',
        title_ar='صيانة',
        body='Tonight',
        body_ar='الليلة',
        entity_type='system',
        entity_id='1',
    )
    fields.update(overrides)
    return NotificationPayload(**fields)


class NotificationServiceTests(TestCase):

    def setUp(self):
        self.alice = make_user('alice@example.com')
        self.bob = make_user('bob@example.com')

    def test_one_row_per_distinct_user(self):
        created = NotificationService().create_for_users(
            [self.alice.pk, self.bob.pk, self.alice.pk], payload(),
        )

        self.assertEqual(len(created), 2)
        self.assertEqual(
            set(Notification.objects.values_list('user_id', flat=True)),
            {self.alice.pk, self.bob.pk},
        )
        self.assertFalse(Notification.objects.filter(is_read=True).exists())

    def test_empty_recipient_set(self):
        self.assertEqual(NotificationService().create_for_users([], payload()), [])
        self.assertEqual(Notification.objects.count(), 0)


class EventBusTests(TestCase):

    def test_delivers_to_receivers(self):
        received = []

        def receiver(sender, user_id, event, payload, **kwargs):
            received.append((user_id, event, payload))

        user_event.connect(receiver)
        self.addCleanup(user_event.disconnect, receiver)

        delivered = EventBus().emit_to_user(7, 'notification.new', {'taskId': 1})

        self.assertEqual(delivered, 1)
        self.assertEqual(received, [(7, 'notification.new', {'taskId': 1})])

    def test_receiver_errors_are_logged(self):
        def broken(sender, **kwargs):
            raise RuntimeError('socket closed')

        user_event.connect(broken)
        self.addCleanup(user_event.disconnect, broken)

        with self.assertLogs('apps.notifications.events', level='WARNING'):
            delivered = EventBus().emit_to_user(7, 'notification.new', {})

        self.assertEqual(delivered, 0)


class OverdueJobTests(TestCase):

    def setUp(self):
        self.assignee = make_user('assignee@example.com')
        self.creator = make_user('creator@example.com')
        self.helper = make_user('helper@example.com')
        self.task = make_task(
            overdue_by=hours(50), assignee_user=self.assignee,
            created_by=self.creator, assigned=[self.assignee, self.helper],
        )
        self.events = []

        def receiver(sender, user_id, event, payload, **kwargs):
            self.events.append((user_id, event, payload))

        user_event.connect(receiver)
        self.addCleanup(user_event.disconnect, receiver)

    def test_check_overdue_tasks(self):
        summary = check_overdue_tasks()

        self.assertEqual(summary['job'], 'overdue_scan')
        self.assertTrue(summary['ok'])
        self.assertEqual(summary['processed'], 1)
        self.assertEqual(
            set(Notification.objects.values_list('user_id', flat=True)),
            {self.assignee.pk, self.creator.pk, self.helper.pk},
        )
        notification = Notification.objects.filter(user=self.helper).get()
        self.assertEqual(notification.type, Notification.Type.TASK_OVERDUE)
        self.assertEqual(notification.entity_id, str(self.task.pk))
        self.assertEqual(len(self.events), 3)

        self.task.refresh_from_db()
        self.assertIsNotNone(self.task.last_overdue_notified_at)

    def test_scan_notifies_only_once(self):
        check_overdue_tasks()
        summary = check_overdue_tasks()

        self.assertEqual(summary['selected'], 0)
        self.assertEqual(Notification.objects.count(), 3)

    def test_reminder_skips_creator_and_events(self):
        Task.objects.filter(pk=self.task.pk).update(
            last_overdue_notified_at=timezone.now() - hours(24),
        )

        summary = send_overdue_reminders()

        self.assertTrue(summary['ok'])
        self.assertEqual(
            set(Notification.objects.values_list('user_id', flat=True)),
            {self.assignee.pk, self.helper.pk},
        )
        self.assertEqual(
            Notification.objects.first().body, f'Task "{self.task.title}" is 3 days overdue'
        )
        self.assertEqual(self.events, [])

    def test_reminder_ignores_never_notified_tasks(self):
        summary = send_overdue_reminders()
        self.assertEqual(summary['selected'], 0)
        self.assertEqual(Notification.objects.count(), 0)

    def test_completed_task_gets_no_reminder(self):
        Task.objects.filter(pk=self.task.pk).update(
            status=Task.Status.COMPLETED,
            last_overdue_notified_at=timezone.now() - hours(24),
        )
        self.assertEqual(send_overdue_reminders()['selected'], 0)


class SetupSchedulesTests(TestCase):

    def test_creates_both_schedules(self):
        call_command('setup_schedules', stdout=StringIO())

        scan = Schedule.objects.get(name=OVERDUE_SCAN_NAME)
        self.assertEqual(scan.func, 'apps.notifications.tasks.check_overdue_tasks')
        self.assertEqual(scan.schedule_type, Schedule.MINUTES)
        self.assertEqual(scan.minutes, 15)

        reminder = Schedule.objects.get(name=OVERDUE_REMINDER_NAME)
        self.assertEqual(reminder.func, 'apps.notifications.tasks.send_overdue_reminders')
        self.assertEqual(reminder.schedule_type, Schedule.CRON)
        self.assertEqual(reminder.cron, '0 6 * * *')

    def test_is_idempotent(self):
        call_command('setup_schedules', stdout=StringIO())
        call_command('setup_schedules', stdout=StringIO())
        self.assertEqual(Schedule.objects.count(), 2)


class NotificationViewTests(TestCase):

    def setUp(self):
        self.user = make_user('user@example.com')
        self.other = make_user('other@example.com')
        service = NotificationService()
        service.create_for_users([self.user.pk], payload(title='First'))
        service.create_for_users([self.user.pk], payload(title='Second'))
        service.create_for_users([self.other.pk], payload(title='Not yours'))
        self.client.login(email=self.user.email, password=PASSWORD)

    def test_login_required(self):
        self.client.logout()
        response = self.client.get(reverse('notifications:notification_list'))
        self.assertEqual(response.status_code, 302)

    def test_list(self):
        response = self.client.get(reverse('notifications:notification_list'))

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['total'], 2)
        self.assertEqual(data['unreadCount'], 2)
        self.assertEqual({n['title'] for n in data['data']}, {'First', 'Second'})

    def test_unread_only(self):
        first = Notification.objects.get(title='First')
        first.mark_read()

        response = self.client.get(
            reverse('notifications:notification_list'), {'unread_only': 'true'}
        )

        self.assertEqual([n['title'] for n in response.json()['data']], ['Second'])

    def test_mark_read(self):
        notification = Notification.objects.get(title='First')

        response = self.client.post(
            reverse('notifications:notification_read', args=[notification.pk])
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['isRead'])
        count = self.client.get(reverse('notifications:unread_count')).json()
        self.assertEqual(count, {'unreadCount': 1})

    def test_cannot_read_someone_elses_notification(self):
        notification = Notification.objects.get(title='Not yours')
        response = self.client.post(
            reverse('notifications:notification_read', args=[notification.pk])
        )
        self.assertEqual(response.status_code, 404)

    def test_mark_all_read(self):
        response = self.client.post(reverse('notifications:read_all'))

        self.assertEqual(response.json(), {'success': True, 'marked': 2})
        self.assertFalse(Notification.objects.filter(user=self.user, is_read=False).exists())
        self.assertTrue(Notification.objects.filter(user=self.other, is_read=False).exists())

    def test_read_requires_post(self):
        response = self.client.get(reverse('notifications:read_all'))
        self.assertEqual(response.status_code, 405)
