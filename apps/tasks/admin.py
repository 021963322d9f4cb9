"""
Admin configuration for tasks app.
"""

from django.contrib import admin
from django.utils.html import format_html
from .models import Task, TaskAssignment


class TaskAssignmentInline(admin.TabularInline):
    """Inline admin for additional assignees on task detail."""
    model = TaskAssignment
    extra = 0
    autocomplete_fields = ('user',)
    readonly_fields = ('created_at',)


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'title', 'title_ar', 'assignee_user', 'track',
        'status_display', 'priority_display', 'due_date',
        'is_overdue_display', 'last_overdue_notified_at', 'created_at'
    )
    list_filter = ('status', 'priority', 'track', 'is_deleted', 'due_date')
    search_fields = ('title', 'title_ar', 'description')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = ('created_at', 'updated_at', 'completed_at', 'last_overdue_notified_at')

    fieldsets = (
        (None, {
            'fields': ('title', 'title_ar', 'description')
        }),
        ('Assignment', {
            'fields': ('assignee_user', 'created_by', 'track')
        }),
        ('Status & Priority', {
            'fields': ('status', 'priority', 'due_date', 'is_deleted')
        }),
        ('Overdue Tracking', {
            'fields': ('last_overdue_notified_at',),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'completed_at'),
            'classes': ('collapse',),
        }),
    )

    inlines = [TaskAssignmentInline]

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related(
            'assignee_user', 'created_by', 'track'
        )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'pending': '#FFA500',       # Orange
            'in_progress': '#3498db',   # Blue
            'under_review': '#9b59b6',  # Purple
            'delayed': '#e67e22',       # Dark orange
            'completed': '#27ae60',     # Green
            'cancelled': '#95a5a6',     # Gray
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def priority_display(self, obj):
        """Display priority with color coding."""
        colors = {
            'low': '#95a5a6',
            'medium': '#3498db',
            'high': '#e67e22',
            'urgent': '#e74c3c',
        }
        color = colors.get(obj.priority, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_priority_display()
        )
    priority_display.short_description = 'Priority'
    priority_display.admin_order_field = 'priority'

    def is_overdue_display(self, obj):
        if obj.is_overdue:
            return format_html(
                '<span style="color: red;">OVERDUE ({} d)</span>', obj.days_overdue
            )
        return ''
    is_overdue_display.short_description = 'Overdue'
