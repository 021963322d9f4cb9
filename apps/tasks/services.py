"""
Service layer for tasks app.

Task edits made outside the overdue jobs live here.

Services:
- update_due_date: Move the due date; rearms overdue detection when moved forward
- change_status: Change task status with workflow validation
"""

import logging

from django.utils import timezone
from django.db import transaction
from django.core.exceptions import PermissionDenied, ValidationError

from apps.activity_log.models import AuditLog, log_activity
from .models import Task
from .permissions import can_edit_task

logger = logging.getLogger(__name__)

ENTITY_TYPE = 'task'


def update_due_date(task, user, due_date, ip_address=None):
    """
    Change a task's due date.

    Moving the due date into the future clears last_overdue_notified_at,
    so the task is picked up again by the overdue scan once the new date
    passes. Moving it earlier, or clearing it, leaves the marker alone.

    Args:
        task: Task instance
        user: User making the change
        due_date: New aware datetime, or None to clear

    Returns:
        Updated Task instance

    Raises:
        PermissionDenied: If user cannot edit the task
    """
    if not can_edit_task(user, task):
        raise PermissionDenied("You don't have permission to edit this task.")

    old_due_date = task.due_date
    if old_due_date == due_date:
        return task

    update_fields = ['due_date', 'updated_at']

    with transaction.atomic():
        task.due_date = due_date

        if due_date and due_date > timezone.now() and task.last_overdue_notified_at:
            task.last_overdue_notified_at = None
            update_fields.append('last_overdue_notified_at')
            logger.info('Task %s rescheduled; overdue notification rearmed', task.pk)

        task.save(update_fields=update_fields)

        log_activity(
            actor=user,
            action_type=AuditLog.ActionType.UPDATE,
            entity_type=ENTITY_TYPE,
            entity_id=task.pk,
            track=task.track_id,
            before_data={'dueDate': old_due_date},
            after_data={'dueDate': due_date},
            ip_address=ip_address,
        )

    return task


def change_status(task, user, new_status, ip_address=None):
    """
    Change task status with workflow validation.

    Workflow Rules:
    - pending → in_progress → under_review → completed
    - in_progress / under_review ⇄ delayed
    - Any open status can go to cancelled

    Raises:
        PermissionDenied: If user cannot edit the task
        ValidationError: If transition is invalid
    """
    if not can_edit_task(user, task):
        raise PermissionDenied("You don't have permission to change this task's status.")

    if new_status not in Task.Status.values:
        raise ValidationError(f"Invalid status: {new_status}")

    if not task.can_transition_to(new_status):
        raise ValidationError(
            f"Cannot change status from '{task.get_status_display()}' to "
            f"'{Task.Status(new_status).label}'."
        )

    old_status = task.status
    update_fields = ['status', 'updated_at']

    with transaction.atomic():
        task.status = new_status

        # Set completion timestamp
        if new_status == Task.Status.COMPLETED:
            task.completed_at = timezone.now()
            update_fields.append('completed_at')

        task.save(update_fields=update_fields)

        log_activity(
            actor=user,
            action_type=AuditLog.ActionType.UPDATE,
            entity_type=ENTITY_TYPE,
            entity_id=task.pk,
            track=task.track_id,
            before_data={'status': old_status},
            after_data={'status': new_status},
            ip_address=ip_address,
        )

    return task
