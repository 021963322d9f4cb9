"""
Overdue task detection and reminders.

Two batch jobs, both run by django-q2 schedules (see
apps.notifications.tasks and the setup_schedules command):

- detect_overdue_tasks: every 15 minutes. Notifies assignee, creator and
  assigned users once per task, the first time it is seen overdue.
- send_daily_overdue_reminders: daily at 06:00 UTC. Reminds assignee and
  assigned users (not the creator) of every task that is still overdue.

Both take their collaborators as arguments:
    repository: query_overdue_unnotified, query_overdue_already_notified,
                mark_notified (apps.tasks.repository.TaskRepository)
    notifier:   create_for_users (apps.notifications.services.NotificationService)
    events:     emit_to_user (apps.notifications.events.EventBus)

Neither job raises. Failures stop the batch and are reported on the
returned OverdueRunResult; tasks stamped before the failure stay stamped.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.utils import timezone

from apps.notifications.services import NotificationPayload

logger = logging.getLogger(__name__)

JOB_OVERDUE_SCAN = 'overdue_scan'
JOB_DAILY_REMINDER = 'daily_reminder'

EVENT_NOTIFICATION_NEW = 'notification.new'
NOTIFICATION_TYPE_OVERDUE = 'task_overdue'

ONE_DAY = timedelta(days=1)


class OverdueErrorKind(str, enum.Enum):
    STORE_READ = 'store_read'
    STORE_WRITE = 'store_write'
    NOTIFICATION_SINK = 'notification_sink'


@dataclass
class OverdueRunResult:
    """Outcome of one batch run."""

    job: str
    selected: int = 0
    processed: int = 0
    notified: int = 0
    failed_at: Optional[int] = None
    error: Optional[OverdueErrorKind] = None
    message: str = ''
    exception: Optional[BaseException] = field(default=None, repr=False, compare=False)

    @property
    def ok(self):
        return self.error is None

    def fail(self, task_id, kind, exc):
        self.failed_at = task_id
        self.error = kind
        self.message = str(exc)
        self.exception = exc
        return self

    def as_dict(self):
        return {
            'job': self.job,
            'ok': self.ok,
            'selected': self.selected,
            'processed': self.processed,
            'notified': self.notified,
            'failedAt': self.failed_at,
            'error': self.error.value if self.error else None,
            'message': self.message,
        }


# =============================================================================
# Helpers
# =============================================================================

def collect_recipients(task, include_creator=True):
    """
    Users to notify about an overdue task.

    Assignee, creator (first notification only) and every assigned user,
    as a set of user ids.
    """
    recipients = set()
    if task.assignee_user_id:
        recipients.add(task.assignee_user_id)
    if include_creator and task.created_by_id:
        recipients.add(task.created_by_id)
    recipients.update(task.assignment_user_ids)
    return recipients


def days_overdue(due_date, now):
    """Whole days between due_date and now, rounded up."""
    return -(-(now - due_date) // ONE_DAY)


def build_overdue_payload(task):
    return NotificationPayload(
        type=NOTIFICATION_TYPE_OVERDUE,
        title='Task Overdue',
        title_ar='مهمة متأخرة',
        body=f'Task "{task.title}" is overdue',
        body_ar=f'المهمة "{task.title_ar}" تجاوزت الموعد المحدد',
        entity_type='task',
        entity_id=str(task.id),
        track_id=task.track_id or None,
    )


def build_reminder_payload(task, days):
    return NotificationPayload(
        type=NOTIFICATION_TYPE_OVERDUE,
        title='Overdue Reminder',
        title_ar='تذكير بمهمة متأخرة',
        body=f'Task "{task.title}" is {days} days overdue',
        body_ar=f'المهمة "{task.title_ar}" متأخرة منذ {days} يوم',
        entity_type='task',
        entity_id=str(task.id),
        track_id=task.track_id or None,
    )


def _stamp_before_notify(value):
    if value is None:
        return getattr(settings, 'OVERDUE_STAMP_BEFORE_NOTIFY', False)
    return value


def _stamp(result, repository, task, now):
    try:
        repository.mark_notified(task.id, now)
    except Exception as exc:
        result.fail(task.id, OverdueErrorKind.STORE_WRITE, exc)
        return False
    return True


def _process_task(result, repository, task, now, send, stamp_before_notify):
    """
    Send and stamp one task in the configured order.

    Returns False when the batch has to stop.
    """
    if stamp_before_notify and not _stamp(result, repository, task, now):
        return False

    try:
        sent = send()
    except Exception as exc:
        result.fail(task.id, OverdueErrorKind.NOTIFICATION_SINK, exc)
        return False
    if sent:
        result.notified += 1

    if not stamp_before_notify and not _stamp(result, repository, task, now):
        return False

    result.processed += 1
    return True


def _emit(events, user_id, payload):
    try:
        events.emit_to_user(user_id, EVENT_NOTIFICATION_NEW, payload)
    except Exception:
        logger.warning('Live event to user %s failed', user_id, exc_info=True)


# =============================================================================
# Jobs
# =============================================================================

def detect_overdue_tasks(repository, notifier, events, now=None, limit=None,
                         stamp_before_notify=None):
    """
    Notify about tasks that became overdue since the last run.

    Selects up to ``limit`` open, non-deleted tasks with due_date < now and
    no last_overdue_notified_at. Each gets one notification addressed to
    its recipients plus a live event per recipient, and is stamped with
    ``now`` even when it has no recipients.
    """
    now = now or timezone.now()
    if limit is None:
        limit = getattr(settings, 'OVERDUE_SCAN_BATCH_SIZE', 100)
    stamp_first = _stamp_before_notify(stamp_before_notify)
    result = OverdueRunResult(job=JOB_OVERDUE_SCAN)

    try:
        tasks = repository.query_overdue_unnotified(now, limit)
    except Exception as exc:
        return result.fail(None, OverdueErrorKind.STORE_READ, exc)

    result.selected = len(tasks)
    if not tasks:
        return result

    logger.info('Found %d newly overdue tasks', len(tasks))

    for task in tasks:
        recipients = collect_recipients(task, include_creator=True)

        def send(task=task, recipients=recipients):
            if not recipients:
                return False
            notifier.create_for_users(recipients, build_overdue_payload(task))
            event = {
                'type': NOTIFICATION_TYPE_OVERDUE,
                'taskId': task.id,
                'titleAr': task.title_ar,
            }
            for user_id in sorted(recipients):
                _emit(events, user_id, event)
            return True

        if not _process_task(result, repository, task, now, send, stamp_first):
            break

    return result


def send_daily_overdue_reminders(repository, notifier, now=None, limit=None,
                                 stamp_before_notify=None):
    """
    Remind responsible users about tasks that are still overdue.

    Only tasks that already got their first overdue notification are
    selected. The creator is not included and no live event is sent.
    Each processed task is re-stamped with ``now``.
    """
    now = now or timezone.now()
    if limit is None:
        limit = getattr(settings, 'OVERDUE_REMINDER_BATCH_SIZE', 200)
    stamp_first = _stamp_before_notify(stamp_before_notify)
    result = OverdueRunResult(job=JOB_DAILY_REMINDER)

    try:
        tasks = repository.query_overdue_already_notified(now, limit)
    except Exception as exc:
        return result.fail(None, OverdueErrorKind.STORE_READ, exc)

    result.selected = len(tasks)
    if not tasks:
        return result

    logger.info('Sending daily reminders for %d overdue tasks', len(tasks))

    for task in tasks:
        recipients = collect_recipients(task, include_creator=False)

        def send(task=task, recipients=recipients):
            if not recipients:
                return False
            days = days_overdue(task.due_date, now)
            notifier.create_for_users(recipients, build_reminder_payload(task, days))
            return True

        if not _process_task(result, repository, task, now, send, stamp_first):
            break

    return result
