"""
Admin configuration for accounts app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Custom User admin with email authentication and role management."""

    list_display = (
        'email', 'full_name_display', 'name_ar', 'role',
        'track', 'is_active', 'created_at'
    )
    list_filter = ('role', 'track', 'is_active', 'is_staff')
    search_fields = ('email', 'first_name', 'last_name', 'name_ar')
    ordering = ('first_name', 'last_name')
    list_per_page = 25

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Personal Info'), {'fields': ('first_name', 'last_name', 'name_ar')}),
        (_('Organization'), {'fields': ('role', 'track')}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Important dates'), {
            'fields': ('last_login', 'created_at', 'updated_at'),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email', 'first_name', 'last_name', 'name_ar',
                'password1', 'password2', 'role', 'track'
            ),
        }),
    )

    readonly_fields = ('last_login', 'created_at', 'updated_at')

    def full_name_display(self, obj):
        return obj.get_full_name()
    full_name_display.short_description = 'Name'
    full_name_display.admin_order_field = 'first_name'
