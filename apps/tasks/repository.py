"""
Task repository used by the overdue jobs.

Wraps the ORM queries the overdue pipeline needs and returns plain
OverdueTask snapshots, so apps.tasks.overdue never touches a QuerySet.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from .models import Task


@dataclass(frozen=True)
class OverdueTask:
    """Read-only view of a task as seen by the overdue jobs."""

    id: int
    title: str
    title_ar: str
    due_date: datetime
    status: str
    track_id: Optional[int] = None
    assignee_user_id: Optional[int] = None
    created_by_id: Optional[int] = None
    assignment_user_ids: Tuple[int, ...] = ()

    @classmethod
    def from_model(cls, task):
        return cls(
            id=task.pk,
            title=task.title,
            title_ar=task.title_ar,
            due_date=task.due_date,
            status=task.status,
            track_id=task.track_id,
            assignee_user_id=task.assignee_user_id,
            created_by_id=task.created_by_id,
            assignment_user_ids=tuple(a.user_id for a in task.assignments.all()),
        )


class TaskRepository:
    """Django ORM implementation of the overdue task store."""

    def _overdue(self, now):
        return Task.objects.overdue(now).prefetch_related('assignments')

    def query_overdue_unnotified(self, now, limit) -> List[OverdueTask]:
        """Overdue tasks that have never been notified."""
        tasks = self._overdue(now).filter(last_overdue_notified_at__isnull=True)[:limit]
        return [OverdueTask.from_model(task) for task in tasks]

    def query_overdue_already_notified(self, now, limit) -> List[OverdueTask]:
        """Overdue tasks that got at least one overdue notification."""
        tasks = self._overdue(now).filter(last_overdue_notified_at__isnull=False)[:limit]
        return [OverdueTask.from_model(task) for task in tasks]

    def mark_notified(self, task_id, timestamp):
        # update() skips auto_now so updated_at keeps reflecting user edits
        Task.objects.filter(pk=task_id).update(last_overdue_notified_at=timestamp)
