"""
Daily update models.

Models:
- DailyUpdate: Bilingual status update published by admins/PMs
- DailyUpdateAttachment: Uploaded file stored through apps.daily_updates.storage
- DailyUpdateRead: Per-user read marker
"""

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator


class DailyUpdateQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_deleted=False)


class DailyUpdate(models.Model):
    """
    A daily status update.

    Pinned updates are listed first, then newest first. Deleting is a
    soft delete; attachments stay on disk but become unreachable.
    Every edit appends the previous title/content to edit_history.
    """

    class Type(models.TextChoices):
        GLOBAL = 'global', 'Global'
        TRACK = 'track', 'Track'
        DEPARTMENT = 'department', 'Department'

    class Status(models.TextChoices):
        COMPLETED = 'completed', 'Completed'
        IN_PROGRESS = 'in_progress', 'In Progress'
        DELAYED = 'delayed', 'Delayed'
        REJECTED = 'rejected', 'Rejected'

    class Priority(models.TextChoices):
        NORMAL = 'normal', 'Normal'
        IMPORTANT = 'important', 'Important'
        URGENT = 'urgent', 'Urgent'

    title = models.CharField(max_length=255)
    title_ar = models.CharField(max_length=255)
    content = models.TextField()
    content_ar = models.TextField(blank=True)

    type = models.CharField(
        max_length=15,
        choices=Type.choices,
        default=Type.GLOBAL,
        db_index=True,
    )
    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        blank=True,
    )
    progress = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.NORMAL,
        db_index=True,
    )
    pinned = models.BooleanField(default=False)

    track = models.ForeignKey(
        'tracks.Track',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='daily_updates',
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='daily_updates',
    )

    is_deleted = models.BooleanField(default=False, db_index=True)
    edit_history = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DailyUpdateQuerySet.as_manager()

    class Meta:
        verbose_name = 'daily update'
        verbose_name_plural = 'daily updates'
        ordering = ['-pinned', '-created_at']

    def __str__(self):
        return self.title


class DailyUpdateAttachment(models.Model):

    class Provider(models.TextChoices):
        LOCAL = 'LOCAL', 'Local'
        S3 = 'S3', 'S3'

    update = models.ForeignKey(
        DailyUpdate,
        on_delete=models.CASCADE,
        related_name='attachments',
    )
    original_name = models.CharField(max_length=255)
    stored_name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=150, blank=True)
    size_bytes = models.PositiveBigIntegerField()
    storage_provider = models.CharField(
        max_length=10,
        choices=Provider.choices,
        default=Provider.LOCAL,
    )
    storage_path = models.CharField(max_length=500)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='daily_update_attachments',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'attachment'
        verbose_name_plural = 'attachments'
        ordering = ['created_at']

    def __str__(self):
        return self.original_name

    @property
    def size_display(self):
        """Return human-readable file size."""
        if self.size_bytes < 1024:
            return f"{self.size_bytes} B"
        elif self.size_bytes < 1024 * 1024:
            return f"{self.size_bytes / 1024:.1f} KB"
        else:
            return f"{self.size_bytes / (1024 * 1024):.1f} MB"


class DailyUpdateRead(models.Model):

    update = models.ForeignKey(
        DailyUpdate,
        on_delete=models.CASCADE,
        related_name='reads',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='daily_update_reads',
    )
    read_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['update', 'user'], name='unique_daily_update_read'),
        ]

    def __str__(self):
        return f"{self.user} read {self.update}"
