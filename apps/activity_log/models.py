"""
Audit log model.

Records create/update/delete actions on API entities (currently daily
updates) with before/after snapshots and the request IP.
"""

from django.db import models
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder


class AuditLog(models.Model):
    """
    Append-only audit trail.

    Access: Admin only
    """

    class ActionType(models.TextChoices):
        CREATE = 'create', 'Create'
        UPDATE = 'update', 'Update'
        DELETE = 'delete', 'Delete'
        PIN = 'pin', 'Pin'
        UNPIN = 'unpin', 'Unpin'
        ATTACHMENT_ADDED = 'attachment_added', 'Attachment Added'
        ATTACHMENT_REMOVED = 'attachment_removed', 'Attachment Removed'

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries',
        help_text='User who performed the action; empty for system actions'
    )
    action_type = models.CharField(
        max_length=20,
        choices=ActionType.choices,
        db_index=True,
    )
    entity_type = models.CharField(max_length=50, db_index=True)
    entity_id = models.CharField(max_length=64)
    track = models.ForeignKey(
        'tracks.Track',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries',
    )

    before_data = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    after_data = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'audit entry'
        verbose_name_plural = 'audit log'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
            models.Index(fields=['actor', '-created_at'], name='audit_actor_created_idx'),
        ]

    def __str__(self):
        return f"{self.entity_type}:{self.entity_id} - {self.get_action_type_display()} by {self.actor or 'system'}"


def log_activity(actor, action_type, entity_type, entity_id,
                 track=None, before_data=None, after_data=None, ip_address=None):
    """
    Helper function to create audit log entries.

    Args:
        actor: User who performed the action (None for system)
        action_type: One of AuditLog.ActionType choices
        entity_type: e.g. 'daily_update'
        entity_id: Primary key of the entity
        track: Optional Track (or track id) for filtering
        before_data: Snapshot before the change
        after_data: Snapshot after the change
        ip_address: Request IP

    Returns:
        Created AuditLog instance
    """
    track_id = getattr(track, 'pk', track)
    return AuditLog.objects.create(
        actor=actor,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=str(entity_id),
        track_id=track_id,
        before_data=before_data,
        after_data=after_data,
        ip_address=ip_address,
    )
