"""
User Admin Configuration for the Campus API
"""

import logging

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from courses.models import Enrollment

from .models import User, UserRole

logger = logging.getLogger(__name__)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the UUID, email-login User model."""

    list_display = ['email', 'username', 'full_name', 'role_badge', 'is_active', 'date_joined']
    list_filter = ['role', 'is_active', 'is_staff']
    search_fields = ['email', 'username', 'first_name', 'last_name']
    ordering = ['-date_joined']
    readonly_fields = ['id', 'date_joined', 'last_login', 'updated_at']

    fieldsets = (
        (None, {
            'fields': ('id', 'email', 'username', 'password')
        }),
        ('Personal info', {
            'fields': ('first_name', 'last_name', 'profile_image')
        }),
        ('Role', {
            'fields': ('role', 'is_active')
        }),
        ('Django permissions', {
            'fields': ('is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        ('Dates', {
            'fields': ('date_joined', 'last_login', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'username', 'password1', 'password2', 'first_name', 'last_name', 'role'),
        }),
    )

    def role_badge(self, obj):
        """Display role with colored badge."""
        colors = {
            UserRole.ADMIN: '#ea580c',  # orange
            UserRole.INSTRUCTOR: '#2563eb',  # blue
            UserRole.STUDENT: '#6b7280',  # gray
        }
        color = colors.get(obj.role, '#6b7280')
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 4px; font-size: 11px;">{}</span>',
            color, obj.get_role_display()
        )
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'

    # ─── Deletes follow the same rule as DELETE /api/users/{id}/ ───

    def get_deleted_objects(self, objs, request):
        kept = [obj for obj in objs if obj.has_active_relationships()]
        removable = [obj for obj in objs if obj not in kept]
        to_delete, model_count, perms_needed, protected = super().get_deleted_objects(
            removable, request
        )
        # Cascaded rows hold no seats once the user has no enrolled courses.
        perms_needed.discard(Enrollment._meta.verbose_name)
        to_delete += [f'{obj} (deactivated, not deleted)' for obj in kept]
        return to_delete, model_count, perms_needed, protected

    def delete_model(self, request, obj):
        if obj.has_active_relationships():
            obj.deactivate()
            logger.info(f"User {obj.pk} deactivated from admin by {request.user.pk}")
            return
        super().delete_model(request, obj)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            self.delete_model(request, obj)
