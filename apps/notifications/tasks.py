"""
Scheduled tasks for notifications app.

Background jobs run by the Django-Q2 cluster:
- Overdue task scan (every 15 minutes)
- Daily overdue reminders (daily at 06:00 UTC = 09:00 Riyadh)

Schedules are created by ``python manage.py setup_schedules``.
These functions never raise: a failed run is logged and the next tick
tries again.
"""

import logging

from apps.tasks.overdue import detect_overdue_tasks, send_daily_overdue_reminders
from apps.tasks.repository import TaskRepository

from .events import EventBus
from .services import NotificationService

logger = logging.getLogger(__name__)


def _log_result(result, description):
    if result.ok:
        if result.selected:
            logger.info(
                '%s: processed %d of %d tasks, %d notified',
                description, result.processed, result.selected, result.notified,
            )
        return

    exc = result.exception
    logger.error(
        '%s failed (%s) at task %s after %d of %d tasks: %s',
        description, result.error.value, result.failed_at,
        result.processed, result.selected, result.message,
        exc_info=(type(exc), exc, exc.__traceback__) if exc else None,
    )


def check_overdue_tasks():
    """
    Scheduled job to run every 15 minutes.

    Notifies assignee, creator and assigned users of newly overdue tasks.
    """
    result = detect_overdue_tasks(
        repository=TaskRepository(),
        notifier=NotificationService(),
        events=EventBus(),
    )
    _log_result(result, 'Overdue task detection')
    return result.as_dict()


def send_overdue_reminders():
    """
    Scheduled job to run daily at 06:00 UTC.

    Reminds assignee and assigned users of tasks that are still overdue.
    """
    result = send_daily_overdue_reminders(
        repository=TaskRepository(),
        notifier=NotificationService(),
    )
    _log_result(result, 'Daily overdue reminders')
    return result.as_dict()
