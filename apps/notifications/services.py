"""
Service layer for notifications app.

Services:
- NotificationPayload: bilingual message plus entity link
- NotificationService.create_for_users: durable notification for a set of users
- get_notifications_for_user / get_unread_count: inbox queries
- mark_as_read / mark_all_as_read: read tracking
"""

import logging
from dataclasses import dataclass, asdict
from typing import Iterable, Optional

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationPayload:
    type: str
    title: str
    title_ar: str
    body: str
    body_ar: str
    entity_type: str = ''
    entity_id: str = ''
    track_id: Optional[int] = None

    def as_dict(self):
        return asdict(self)


class NotificationService:
    """Durable notification sink backed by the Notification table."""

    def create_for_users(self, user_ids: Iterable[int], payload: NotificationPayload):
        """
        Create one Notification row per user.

        Duplicate ids collapse; an empty set creates nothing.
        All rows are written in one transaction.
        """
        user_ids = sorted(set(user_ids))
        if not user_ids:
            return []

        rows = [
            Notification(
                user_id=user_id,
                type=payload.type,
                title=payload.title,
                title_ar=payload.title_ar,
                body=payload.body,
                body_ar=payload.body_ar,
                entity_type=payload.entity_type,
                entity_id=str(payload.entity_id),
                track_id=payload.track_id,
            )
            for user_id in user_ids
        ]
        with transaction.atomic():
            created = Notification.objects.bulk_create(rows)

        logger.debug(
            'Created %d %s notification(s) for %s %s',
            len(created), payload.type, payload.entity_type, payload.entity_id,
        )
        return created


def get_notifications_for_user(user, unread_only=False):
    """Notifications for the given user, newest first."""
    qs = Notification.objects.filter(user=user)
    if unread_only:
        qs = qs.filter(is_read=False)
    return qs.order_by('-created_at')


def get_unread_count(user):
    return Notification.objects.filter(user=user, is_read=False).count()


def mark_as_read(notification_id, user):
    """
    Mark a single notification as read.

    Raises:
        Http404: If the notification does not exist or belongs to someone else
    """
    notification = get_object_or_404(Notification, pk=notification_id, user=user)
    notification.mark_read()
    return notification


def mark_all_as_read(user):
    """Mark every unread notification of the user as read. Returns the count."""
    return Notification.objects.filter(user=user, is_read=False).update(
        is_read=True,
        read_at=timezone.now(),
    )
