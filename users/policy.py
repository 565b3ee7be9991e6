"""
Access Policy — role-based read/write rules for users, courses and enrollments.

Every rule is a pure predicate over an actor (the authenticated user, an
AnonymousUser, or None) and a resource. Views and services ask these
predicates before touching the database; a False answer means the caller
must refuse with 403 and not attempt the mutation.

- ADMIN: everything, except deleting their own account
- INSTRUCTOR: own courses, and enrollments / grades in those courses
- STUDENT: own profile, own enrollments (enroll, read, withdraw)
- Anonymous: course catalog only
"""

from users.models import UserRole


# =============================================================================
# ACTOR HELPERS
# =============================================================================

def is_authenticated(actor):
    return bool(actor is not None and getattr(actor, 'is_authenticated', False)
                and getattr(actor, 'is_active', False))


def is_admin(actor):
    return is_authenticated(actor) and actor.role == UserRole.ADMIN


def is_instructor(actor):
    return is_authenticated(actor) and actor.role == UserRole.INSTRUCTOR


def is_student(actor):
    return is_authenticated(actor) and actor.role == UserRole.STUDENT


def _same_user(actor, user_id):
    return is_authenticated(actor) and str(actor.pk) == str(user_id)


# =============================================================================
# USERS
# =============================================================================

def can_read_user(actor, user):
    return is_admin(actor) or _same_user(actor, user.pk)


def can_update_user(actor, user):
    return is_admin(actor) or _same_user(actor, user.pk)


def can_manage_account(actor, user):
    """Changing ``role`` or ``is_active`` is reserved to admins."""
    return is_admin(actor)


def can_list_users(actor):
    return is_admin(actor)


def can_delete_user(actor, user):
    return is_admin(actor) and not _same_user(actor, user.pk)


# =============================================================================
# COURSES
# =============================================================================

def can_read_course(actor, course):
    return True


def can_create_course(actor):
    return is_admin(actor) or is_instructor(actor)


def can_write_course(actor, course):
    if is_admin(actor):
        return True
    return is_instructor(actor) and _same_user(actor, course.instructor_id)


def can_view_roster(actor, course):
    return can_write_course(actor, course)


# =============================================================================
# ENROLLMENTS
# =============================================================================

def can_enroll(actor):
    return is_student(actor)


def can_read_enrollment(actor, enrollment):
    if is_admin(actor) or _same_user(actor, enrollment.student_id):
        return True
    return is_instructor(actor) and _same_user(actor, enrollment.course.instructor_id)


def can_grade_enrollment(actor, enrollment):
    """Grades and arbitrary status changes: the course's instructor or an admin."""
    if is_admin(actor):
        return True
    return is_instructor(actor) and _same_user(actor, enrollment.course.instructor_id)


def can_withdraw_enrollment(actor, enrollment):
    return is_admin(actor) or _same_user(actor, enrollment.student_id)


# =============================================================================
# DISPATCH
# =============================================================================

_READ_RULES = {
    'user': can_read_user,
    'course': can_read_course,
    'enrollment': can_read_enrollment,
}

_WRITE_RULES = {
    'user': can_update_user,
    'course': can_write_course,
    'enrollment': can_grade_enrollment,
}


def _rule_for(rules, resource):
    model_name = resource._meta.model_name
    try:
        return rules[model_name]
    except KeyError:
        raise TypeError(f'No access rule for {model_name!r} resources') from None


def can_read(actor, resource):
    """Read access to any User, Course or Enrollment instance."""
    return _rule_for(_READ_RULES, resource)(actor, resource)


def can_write(actor, resource):
    """Write access to any User, Course or Enrollment instance."""
    return _rule_for(_WRITE_RULES, resource)(actor, resource)
