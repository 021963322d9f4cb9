"""
Admin configuration for daily_updates app.
"""

from django.contrib import admin

from .models import DailyUpdate, DailyUpdateAttachment


class AttachmentInline(admin.TabularInline):
    """Inline admin for attachments on update detail."""
    model = DailyUpdateAttachment
    extra = 0
    readonly_fields = (
        'original_name', 'mime_type', 'size_bytes', 'storage_provider',
        'storage_path', 'uploaded_by', 'created_at'
    )
    fields = readonly_fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(DailyUpdate)
class DailyUpdateAdmin(admin.ModelAdmin):

    list_display = ('title', 'title_ar', 'type', 'priority', 'pinned', 'track', 'author', 'is_deleted', 'created_at')
    list_filter = ('type', 'priority', 'status', 'pinned', 'is_deleted', 'track')
    search_fields = ('title', 'title_ar', 'content', 'content_ar', 'author__email')
    ordering = ('-pinned', '-created_at')
    date_hierarchy = 'created_at'

    readonly_fields = ('edit_history', 'created_at', 'updated_at')

    inlines = [AttachmentInline]

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('author', 'track')
