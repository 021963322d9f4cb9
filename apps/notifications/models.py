"""
Durable in-app notifications.

One row per recipient, so read state is tracked per user.
"""

from django.db import models
from django.conf import settings
from django.utils import timezone


class Notification(models.Model):

    class Type(models.TextChoices):
        TASK_OVERDUE = 'task_overdue', 'Task Overdue'
        TASK_ASSIGNED = 'task_assigned', 'Task Assigned'
        DAILY_UPDATE = 'daily_update', 'Daily Update'
        SYSTEM = 'system', 'System'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
    )
    type = models.CharField(
        max_length=20,
        choices=Type.choices,
        db_index=True,
    )
    title = models.CharField(max_length=255)
    title_ar = models.CharField(max_length=255)
    body = models.TextField(blank=True)
    body_ar = models.TextField(blank=True)

    # Link back to the entity that triggered the notification
    entity_type = models.CharField(max_length=50, blank=True)
    entity_id = models.CharField(max_length=64, blank=True)
    track = models.ForeignKey(
        'tracks.Track',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
    )

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'notification'
        verbose_name_plural = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read', '-created_at'], name='notification_user_read_idx'),
            models.Index(fields=['entity_type', 'entity_id'], name='notification_entity_idx'),
        ]

    def __str__(self):
        return f"{self.get_type_display()} for {self.user}"

    def mark_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at'])

    def as_dict(self):
        return {
            'id': self.pk,
            'type': self.type,
            'title': self.title,
            'titleAr': self.title_ar,
            'body': self.body,
            'bodyAr': self.body_ar,
            'entityType': self.entity_type,
            'entityId': self.entity_id,
            'trackId': self.track_id,
            'isRead': self.is_read,
            'readAt': self.read_at.isoformat() if self.read_at else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
