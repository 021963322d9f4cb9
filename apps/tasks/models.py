"""
Task management models.

Models:
- Task: Bilingual task with status workflow, soft delete and overdue tracking
- TaskAssignment: Additional responsible users for a task
"""

import math

from django.db import models
from django.conf import settings
from django.utils import timezone


class TaskQuerySet(models.QuerySet):

    def active(self):
        """Exclude soft-deleted tasks."""
        return self.filter(is_deleted=False)

    def overdue(self, now=None):
        """
        Tasks past their due date that are still open.

        A task with no due date is never overdue.
        """
        now = now or timezone.now()
        return self.active().filter(
            due_date__isnull=False,
            due_date__lt=now,
        ).exclude(status__in=Task.TERMINAL_STATUSES)


class Task(models.Model):
    """
    Main Task model.

    Status workflow:
    pending → in_progress → under_review → completed
    in_progress / under_review may move to delayed and back.
    Any status can transition to cancelled.

    Overdue tracking:
    last_overdue_notified_at is NULL until the first overdue notification
    and is refreshed by each daily reminder. Only the overdue jobs write it.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_PROGRESS = 'in_progress', 'In Progress'
        UNDER_REVIEW = 'under_review', 'Under Review'
        DELAYED = 'delayed', 'Delayed'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    TERMINAL_STATUSES = [Status.COMPLETED, Status.CANCELLED]

    # Core fields
    title = models.CharField(max_length=255)
    title_ar = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    # Relationships
    assignee_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks',
        help_text='Primary user responsible for this task'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_tasks',
    )
    track = models.ForeignKey(
        'tracks.Track',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks',
    )

    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
        db_index=True,
    )

    due_date = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
    )
    is_deleted = models.BooleanField(default=False, db_index=True)

    # Overdue notification tracking
    last_overdue_notified_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='Last overdue notification or reminder; NULL means never notified'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    objects = TaskQuerySet.as_manager()

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['due_date', 'status'], name='task_due_status_idx'),
            models.Index(fields=['is_deleted', 'last_overdue_notified_at'], name='task_overdue_notified_idx'),
        ]

    def __str__(self):
        return self.title

    @property
    def is_overdue(self):
        """Check if task is past due date and still open."""
        if not self.due_date or self.is_deleted:
            return False
        if self.status in self.TERMINAL_STATUSES:
            return False
        return timezone.now() > self.due_date

    @property
    def days_overdue(self):
        """Whole days overdue, rounded up. Returns 0 if not overdue."""
        if not self.is_overdue:
            return 0
        delta = timezone.now() - self.due_date
        return math.ceil(delta.total_seconds() / 86400)

    # ==========================================================================
    # Status Workflow Methods
    # ==========================================================================

    def can_transition_to(self, new_status):
        """Check if status transition is valid."""
        # Completed and Cancelled are terminal states
        if self.status in self.TERMINAL_STATUSES:
            return False

        # Any open status can go to cancelled
        if new_status == self.Status.CANCELLED:
            return True

        valid_transitions = {
            self.Status.PENDING: [self.Status.IN_PROGRESS],
            self.Status.IN_PROGRESS: [self.Status.UNDER_REVIEW, self.Status.DELAYED],
            self.Status.UNDER_REVIEW: [self.Status.COMPLETED, self.Status.IN_PROGRESS, self.Status.DELAYED],
            self.Status.DELAYED: [self.Status.IN_PROGRESS, self.Status.UNDER_REVIEW],
        }
        return new_status in valid_transitions.get(self.status, [])


class TaskAssignment(models.Model):
    """
    Additional user responsible for a task.

    A task has at most one primary assignee (Task.assignee_user) and any
    number of assignments. Overdue notifications go to both.
    """

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='assignments',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='task_assignments',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'task assignment'
        verbose_name_plural = 'task assignments'
        constraints = [
            models.UniqueConstraint(fields=['task', 'user'], name='unique_task_assignment'),
        ]

    def __str__(self):
        return f"{self.user} on {self.task}"
