"""
Track model for grouping work.

Tracks are flat (no hierarchy/nesting). Tasks, daily updates and
notifications carry an optional track for filtering and display.
"""

from django.db import models


class Track(models.Model):
    """
    A work stream within the project (e.g. "Infrastructure", "HR").

    Names are stored in both English and Arabic; the color is a hex
    code used by the front end for badges.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text='Track name (English)'
    )
    name_ar = models.CharField(
        max_length=100,
        help_text='Track name (Arabic)'
    )
    color = models.CharField(
        max_length=7,
        default='#3498db',
        help_text='Hex color, e.g. #3498db'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'track'
        verbose_name_plural = 'tracks'
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.color:
            self.color = self.color.lower()
        super().save(*args, **kwargs)

    @property
    def member_count(self):
        """Return the number of active users in this track."""
        return self.members.filter(is_active=True).count()
