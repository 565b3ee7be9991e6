"""
User Permissions — DRF adapters over ``users.policy``.
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS

from users import policy


class IsAdmin(BasePermission):
    message = 'Access denied. Required roles: admin'

    def has_permission(self, request, view):
        return policy.is_admin(request.user)


class UserAccessPermission(BasePermission):
    """
    Users see and edit themselves; admins see and edit everyone. Deleting
    is admin-only (the view refuses self-deletion with a 400).
    """
    message = 'Access denied'

    def has_permission(self, request, view):
        if view.action == 'list':
            return policy.can_list_users(request.user)
        return policy.is_authenticated(request.user)

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return policy.can_read_user(request.user, obj)
        if request.method == 'DELETE':
            return policy.is_admin(request.user)
        return policy.can_update_user(request.user, obj)
