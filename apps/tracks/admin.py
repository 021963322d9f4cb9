"""
Admin configuration for tracks app.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Track


@admin.register(Track)
class TrackAdmin(admin.ModelAdmin):
    list_display = ('name', 'name_ar', 'color_display', 'member_count', 'created_at')
    search_fields = ('name', 'name_ar')
    ordering = ('name',)

    def color_display(self, obj):
        return format_html(
            '<span style="background: {}; padding: 0 12px;">&nbsp;</span> {}',
            obj.color, obj.color
        )
    color_display.short_description = 'Color'

    def member_count(self, obj):
        return obj.member_count
    member_count.short_description = 'Members'
