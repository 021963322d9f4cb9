"""
Shared fixtures for the test suite.
"""

from datetime import timedelta

from django.utils import timezone

from apps.accounts.models import User
from apps.tasks.models import Task, TaskAssignment
from apps.tracks.models import Track

PASSWORD = 'Test@12345'


def make_user(email, role=User.Role.MEMBER, **extra):
    extra.setdefault('first_name', email.split('@')[0].title())
    extra.setdefault('last_name', 'User')
    return User.objects.create_user(email=email, password=PASSWORD, role=role, **extra)


def make_track(name='Infrastructure', name_ar='البنية التحتية'):
    return Track.objects.create(name=name, name_ar=name_ar)


def make_task(title='Prepare report', title_ar='إعداد التقرير', overdue_by=None,
              assigned=(), **fields):
    """Create a task; ``overdue_by`` is a timedelta before now."""
    if overdue_by is not None:
        fields['due_date'] = timezone.now() - overdue_by
    task = Task.objects.create(title=title, title_ar=title_ar, **fields)
    for user in assigned:
        TaskAssignment.objects.create(task=task, user=user)
    return task


def hours(n):
    return timedelta(hours=n)
