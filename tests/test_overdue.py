"""
Overdue detection and daily reminder jobs, run against in-memory
collaborators so every failure path can be forced.
"""

from datetime import datetime, timedelta, timezone as dt_timezone

from django.db import DatabaseError
from django.test import SimpleTestCase, override_settings

from apps.tasks.models import Task
from apps.tasks.overdue import (
    EVENT_NOTIFICATION_NEW, JOB_DAILY_REMINDER, JOB_OVERDUE_SCAN,
    OverdueErrorKind, OverdueRunResult, build_overdue_payload,
    build_reminder_payload, collect_recipients, days_overdue,
    detect_overdue_tasks, send_daily_overdue_reminders,
)
from apps.tasks.repository import OverdueTask

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=dt_timezone.utc)


def overdue_task(task_id, overdue_by=timedelta(hours=2), **fields):
    fields.setdefault('title', f'Task {task_id}')
    fields.setdefault('title_ar', f'مهمة {task_id}')
    fields.setdefault('status', 'in_progress')
    return OverdueTask(id=task_id, due_date=NOW - overdue_by, **fields)


class FakeRepository:

    def __init__(self, tasks=(), notified=None):
        self.tasks = list(tasks)
        self.notified = dict(notified or {})
        self.marks = []
        self.read_error = None
        self.write_errors = set()

    def _overdue(self, now):
        return [
            t for t in self.tasks
            if t.due_date is not None and t.due_date < now
            and t.status not in Task.TERMINAL_STATUSES
        ]

    def query_overdue_unnotified(self, now, limit):
        if self.read_error:
            raise self.read_error
        return [t for t in self._overdue(now) if self.notified.get(t.id) is None][:limit]

    def query_overdue_already_notified(self, now, limit):
        if self.read_error:
            raise self.read_error
        return [t for t in self._overdue(now) if self.notified.get(t.id) is not None][:limit]

    def mark_notified(self, task_id, timestamp):
        if task_id in self.write_errors:
            raise DatabaseError('write failed')
        self.notified[task_id] = timestamp
        self.marks.append((task_id, timestamp))


class FakeNotifier:

    def __init__(self, fail_for=()):
        self.calls = []
        self.fail_for = set(fail_for)

    def create_for_users(self, user_ids, payload):
        if int(payload.entity_id) in self.fail_for:
            raise ConnectionError('sink unavailable')
        self.calls.append((set(user_ids), payload))
        return list(user_ids)


class FakeEvents:

    def __init__(self, fail=False):
        self.emitted = []
        self.fail = fail

    def emit_to_user(self, user_id, event_name, payload):
        if self.fail:
            raise RuntimeError('bus down')
        self.emitted.append((user_id, event_name, payload))
        return 1


class HelperTests(SimpleTestCase):

    def test_recipients_are_deduplicated(self):
        task = overdue_task(1, assignee_user_id=1, created_by_id=2, assignment_user_ids=(1, 3))
        self.assertEqual(collect_recipients(task), {1, 2, 3})

    def test_creator_who_is_also_assignee(self):
        task = overdue_task(1, assignee_user_id=1, created_by_id=1, assignment_user_ids=(2, 3))
        self.assertEqual(collect_recipients(task), {1, 2, 3})

    def test_reminder_recipients_exclude_creator(self):
        task = overdue_task(1, assignee_user_id=1, created_by_id=2, assignment_user_ids=(3,))
        self.assertEqual(collect_recipients(task, include_creator=False), {1, 3})

    def test_creator_who_is_also_assigned_still_gets_reminders(self):
        task = overdue_task(1, created_by_id=2, assignment_user_ids=(2,))
        self.assertEqual(collect_recipients(task, include_creator=False), {2})

    def test_no_recipients(self):
        self.assertEqual(collect_recipients(overdue_task(1)), set())

    def test_days_overdue_rounds_up(self):
        self.assertEqual(days_overdue(NOW - timedelta(hours=50), NOW), 3)
        self.assertEqual(days_overdue(NOW - timedelta(hours=48), NOW), 2)
        self.assertEqual(days_overdue(NOW - timedelta(seconds=1), NOW), 1)

    def test_overdue_payload(self):
        payload = build_overdue_payload(overdue_task(7, title='Budget', title_ar='الميزانية', track_id=4))
        self.assertEqual(payload.type, 'task_overdue')
        self.assertEqual(payload.title, 'Task Overdue')
        self.assertEqual(payload.title_ar, 'مهمة متأخرة')
        self.assertEqual(payload.body, 'Task "Budget" is overdue')
        self.assertEqual(payload.body_ar, 'المهمة "الميزانية" تجاوزت الموعد المحدد')
        self.assertEqual(payload.entity_type, 'task')
        self.assertEqual(payload.entity_id, '7')
        self.assertEqual(payload.track_id, 4)

    def test_reminder_payload(self):
        payload = build_reminder_payload(overdue_task(7, title='Budget', title_ar='الميزانية'), 3)
        self.assertEqual(payload.title, 'Overdue Reminder')
        self.assertEqual(payload.title_ar, 'تذكير بمهمة متأخرة')
        self.assertEqual(payload.body, 'Task "Budget" is 3 days overdue')
        self.assertEqual(payload.body_ar, 'المهمة "الميزانية" متأخرة منذ 3 يوم')
        self.assertIsNone(payload.track_id)

    def test_result_as_dict(self):
        result = OverdueRunResult(job=JOB_OVERDUE_SCAN, selected=2, processed=1, notified=1)
        result.fail(9, OverdueErrorKind.STORE_WRITE, DatabaseError('locked'))
        self.assertEqual(result.as_dict(), {
            'job': 'overdue_scan',
            'ok': False,
            'selected': 2,
            'processed': 1,
            'notified': 1,
            'failedAt': 9,
            'error': 'store_write',
            'message': 'locked',
        })


class DetectOverdueTasksTests(SimpleTestCase):

    def run_scan(self, repository, notifier=None, events=None, **kwargs):
        self.notifier = notifier or FakeNotifier()
        self.events = events or FakeEvents()
        return detect_overdue_tasks(repository, self.notifier, self.events, now=NOW, **kwargs)

    def test_notifies_every_responsible_user_once(self):
        task = overdue_task(1, assignee_user_id=1, created_by_id=2, assignment_user_ids=(1, 3))
        repository = FakeRepository([task])

        result = self.run_scan(repository)

        self.assertTrue(result.ok)
        self.assertEqual((result.selected, result.processed, result.notified), (1, 1, 1))
        self.assertEqual(len(self.notifier.calls), 1)
        self.assertEqual(self.notifier.calls[0][0], {1, 2, 3})
        self.assertEqual(repository.notified, {1: NOW})

    def test_emits_live_event_per_recipient(self):
        task = overdue_task(5, title_ar='الميزانية', assignee_user_id=3, created_by_id=1)
        self.run_scan(FakeRepository([task]))

        payload = {'type': 'task_overdue', 'taskId': 5, 'titleAr': 'الميزانية'}
        self.assertEqual(self.events.emitted, [
            (1, EVENT_NOTIFICATION_NEW, payload),
            (3, EVENT_NOTIFICATION_NEW, payload),
        ])

    def test_task_without_recipients_is_still_stamped(self):
        repository = FakeRepository([overdue_task(1)])

        result = self.run_scan(repository)

        self.assertTrue(result.ok)
        self.assertEqual((result.processed, result.notified), (1, 0))
        self.assertEqual(self.notifier.calls, [])
        self.assertEqual(self.events.emitted, [])
        self.assertEqual(repository.notified, {1: NOW})

    def test_second_run_is_a_no_op(self):
        repository = FakeRepository([overdue_task(1, assignee_user_id=1)])
        self.run_scan(repository)

        result = self.run_scan(repository)

        self.assertEqual(result.selected, 0)
        self.assertEqual(self.notifier.calls, [])
        self.assertEqual(repository.marks, [(1, NOW)])

    def test_ignores_future_and_closed_tasks(self):
        repository = FakeRepository([
            overdue_task(1, overdue_by=timedelta(hours=-1), assignee_user_id=1),
            overdue_task(2, status='completed', assignee_user_id=1),
            overdue_task(3, status='cancelled', assignee_user_id=1),
            overdue_task(4, status='delayed', assignee_user_id=1),
        ])

        result = self.run_scan(repository)

        self.assertEqual(result.selected, 1)
        self.assertEqual(list(repository.notified), [4])

    @override_settings(OVERDUE_SCAN_BATCH_SIZE=100)
    def test_batch_is_capped(self):
        repository = FakeRepository([overdue_task(i, assignee_user_id=1) for i in range(1, 151)])

        first = self.run_scan(repository)
        second = self.run_scan(repository)
        third = self.run_scan(repository)

        self.assertEqual(first.processed, 100)
        self.assertEqual(second.processed, 50)
        self.assertEqual(third.selected, 0)
        self.assertEqual(len(repository.notified), 150)

    def test_explicit_limit(self):
        repository = FakeRepository([overdue_task(i) for i in range(1, 6)])
        result = self.run_scan(repository, limit=2)
        self.assertEqual(result.selected, 2)

    def test_read_failure(self):
        repository = FakeRepository([overdue_task(1)])
        repository.read_error = DatabaseError('connection refused')

        result = self.run_scan(repository)

        self.assertFalse(result.ok)
        self.assertEqual(result.error, OverdueErrorKind.STORE_READ)
        self.assertIsNone(result.failed_at)
        self.assertEqual(result.message, 'connection refused')
        self.assertEqual(repository.marks, [])

    def test_sink_failure_leaves_task_unstamped(self):
        repository = FakeRepository([overdue_task(i, assignee_user_id=1) for i in (1, 2, 3)])

        result = self.run_scan(repository, notifier=FakeNotifier(fail_for={2}))

        self.assertEqual(result.error, OverdueErrorKind.NOTIFICATION_SINK)
        self.assertEqual(result.failed_at, 2)
        self.assertEqual(result.processed, 1)
        self.assertEqual(repository.notified, {1: NOW})

        # the failed task is picked up again by the next run
        retry = self.run_scan(repository)
        self.assertEqual(retry.selected, 2)
        self.assertTrue(retry.ok)

    def test_stamp_first_suppresses_retry_after_sink_failure(self):
        repository = FakeRepository([overdue_task(i, assignee_user_id=1) for i in (1, 2, 3)])

        result = self.run_scan(
            repository, notifier=FakeNotifier(fail_for={2}), stamp_before_notify=True,
        )

        self.assertEqual(result.failed_at, 2)
        self.assertEqual(result.processed, 1)
        self.assertEqual(set(repository.notified), {1, 2})
        self.assertEqual([call[1].entity_id for call in self.notifier.calls], ['1'])

    @override_settings(OVERDUE_STAMP_BEFORE_NOTIFY=True)
    def test_stamp_order_from_settings(self):
        repository = FakeRepository([overdue_task(1, assignee_user_id=1)])
        self.run_scan(repository, notifier=FakeNotifier(fail_for={1}))
        self.assertEqual(repository.notified, {1: NOW})

    def test_write_failure_stops_the_batch(self):
        repository = FakeRepository([overdue_task(i, assignee_user_id=1) for i in (1, 2, 3)])
        repository.write_errors = {2}

        result = self.run_scan(repository)

        self.assertEqual(result.error, OverdueErrorKind.STORE_WRITE)
        self.assertEqual(result.failed_at, 2)
        self.assertEqual(result.processed, 1)
        self.assertEqual(result.notified, 2)
        self.assertEqual(repository.notified, {1: NOW})

    def test_event_bus_failure_does_not_abort(self):
        repository = FakeRepository([overdue_task(i, assignee_user_id=1) for i in (1, 2)])

        with self.assertLogs('apps.tasks.overdue', level='WARNING'):
            result = self.run_scan(repository, events=FakeEvents(fail=True))

        self.assertTrue(result.ok)
        self.assertEqual(result.processed, 2)
        self.assertEqual(len(self.notifier.calls), 2)


class DailyReminderTests(SimpleTestCase):

    def run_reminders(self, repository, notifier=None, **kwargs):
        self.notifier = notifier or FakeNotifier()
        return send_daily_overdue_reminders(repository, self.notifier, now=NOW, **kwargs)

    def test_reminds_assignees_but_not_creator(self):
        task = overdue_task(
            1, overdue_by=timedelta(hours=50),
            assignee_user_id=1, created_by_id=2, assignment_user_ids=(3,),
        )
        repository = FakeRepository([task], notified={1: NOW - timedelta(days=1)})

        result = self.run_reminders(repository)

        self.assertEqual(result.job, JOB_DAILY_REMINDER)
        self.assertTrue(result.ok)
        recipients, payload = self.notifier.calls[0]
        self.assertEqual(recipients, {1, 3})
        self.assertEqual(payload.body, 'Task "Task 1" is 3 days overdue')
        self.assertEqual(repository.notified[1], NOW)

    def test_only_previously_notified_tasks(self):
        repository = FakeRepository(
            [overdue_task(1, assignee_user_id=1), overdue_task(2, assignee_user_id=1)],
            notified={2: NOW - timedelta(days=1)},
        )

        result = self.run_reminders(repository)

        self.assertEqual(result.selected, 1)
        self.assertEqual([call[1].entity_id for call in self.notifier.calls], ['2'])
        self.assertNotIn(1, repository.notified)

    def test_runs_again_on_the_next_day(self):
        repository = FakeRepository(
            [overdue_task(1, assignee_user_id=1)], notified={1: NOW - timedelta(days=1)},
        )
        self.run_reminders(repository)
        result = self.run_reminders(repository)
        self.assertEqual(result.notified, 1)

    def test_creator_only_task_is_stamped_without_notification(self):
        repository = FakeRepository(
            [overdue_task(1, created_by_id=2)], notified={1: NOW - timedelta(days=1)},
        )

        result = self.run_reminders(repository)

        self.assertEqual((result.processed, result.notified), (1, 0))
        self.assertEqual(self.notifier.calls, [])
        self.assertEqual(repository.notified[1], NOW)

    @override_settings(OVERDUE_REMINDER_BATCH_SIZE=200)
    def test_batch_is_capped(self):
        tasks = [overdue_task(i, assignee_user_id=1) for i in range(1, 251)]
        repository = FakeRepository(tasks, notified={t.id: NOW - timedelta(days=1) for t in tasks})

        result = self.run_reminders(repository)

        self.assertEqual(result.selected, 200)

    def test_sink_failure(self):
        repository = FakeRepository(
            [overdue_task(1, assignee_user_id=1)], notified={1: NOW - timedelta(days=1)},
        )

        result = self.run_reminders(repository, notifier=FakeNotifier(fail_for={1}))

        self.assertEqual(result.error, OverdueErrorKind.NOTIFICATION_SINK)
        self.assertEqual(result.failed_at, 1)
        self.assertEqual(repository.marks, [])
