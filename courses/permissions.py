"""
Course Permissions — DRF adapters over ``users.policy``.
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS

from users import policy


class CoursePermission(BasePermission):
    """
    Catalog reads are public. Creating needs the instructor or admin role;
    changing or deactivating needs ownership or admin.
    """
    message = 'Access denied. Required roles: instructor, admin'

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        if view.action == 'create':
            return policy.can_create_course(request.user)
        return policy.is_authenticated(request.user)

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return policy.can_read_course(request.user, obj)
        self.message = 'Not authorized to modify this course'
        return policy.can_write_course(request.user, obj)


class CanViewRoster(BasePermission):
    message = 'Not authorized to view enrollments for this course'

    def has_permission(self, request, view):
        return policy.can_create_course(request.user)

    def has_object_permission(self, request, view, obj):
        return policy.can_view_roster(request.user, obj)


class IsInstructor(BasePermission):
    message = 'Access denied. Required roles: instructor'

    def has_permission(self, request, view):
        return policy.is_instructor(request.user)


class EnrollmentPermission(BasePermission):
    """
    Only students enroll. Anyone allowed to read an enrollment may send an
    update: the enrollment service decides which changes they may make.
    """

    def has_permission(self, request, view):
        if view.action == 'create':
            self.message = 'Access denied. Required roles: student'
            return policy.can_enroll(request.user)
        return policy.is_authenticated(request.user)

    def has_object_permission(self, request, view, obj):
        if request.method == 'DELETE':
            return policy.can_withdraw_enrollment(request.user, obj)
        return policy.can_read(request.user, obj)
