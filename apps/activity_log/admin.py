"""
Admin configuration for activity_log app.
"""

from django.contrib import admin
from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only admin for the audit log."""

    list_display = (
        'entity_type', 'entity_id', 'action_type', 'actor',
        'track', 'ip_address', 'created_at'
    )
    list_filter = ('action_type', 'entity_type', 'track', 'created_at')
    search_fields = (
        'entity_id', 'actor__email', 'actor__first_name', 'actor__last_name'
    )
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = (
        'actor', 'action_type', 'entity_type', 'entity_id', 'track',
        'before_data', 'after_data', 'ip_address', 'created_at'
    )

    def has_add_permission(self, request):
        """Prevent manual creation of audit entries."""
        return False

    def has_change_permission(self, request, obj=None):
        """Prevent editing of audit entries."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Prevent deletion of audit entries."""
        return False

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('actor', 'track')
