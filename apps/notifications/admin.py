"""
Admin configuration for notifications app.
"""

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):

    list_display = ('user', 'type', 'title', 'entity_type', 'entity_id', 'is_read', 'created_at')
    list_filter = ('type', 'is_read', 'track', 'created_at')
    search_fields = ('title', 'title_ar', 'body', 'user__email', 'entity_id')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = ('created_at', 'read_at')

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('user', 'track')
