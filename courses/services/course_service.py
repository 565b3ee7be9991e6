"""
Course Service — course creation, updates and deactivation.

Field-level validation happens in the serializers; this module applies the
business rules that need the database: unique codes, instructor ownership
and the soft-delete policy.
"""

import logging

from django.db import IntegrityError, transaction

from courses.exceptions import Conflict, DuplicateCourseCode, Forbidden
from courses.models import Course
from users.models import UserRole
from users.policy import can_create_course, can_write_course, is_instructor

logger = logging.getLogger(__name__)


class InvalidInstructor(ValueError):
    pass


def _check_code_free(code, exclude_pk=None):
    qs = Course.objects.filter(code=code)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise DuplicateCourseCode()


def _check_instructor(instructor):
    if instructor is None or instructor.role != UserRole.INSTRUCTOR:
        raise InvalidInstructor('Invalid instructor')


def create_course(actor, data: dict) -> Course:
    """
    Create a course.

    Instructors always own the courses they create; admins must name an
    instructor.

    Raises:
        Forbidden, DuplicateCourseCode, InvalidInstructor.
    """
    if not can_create_course(actor):
        raise Forbidden('Access denied. Required roles: instructor, admin')

    data = dict(data)
    if is_instructor(actor):
        data['instructor'] = actor
    _check_instructor(data.get('instructor'))
    _check_code_free(data['code'])

    data.pop('current_enrollment', None)
    try:
        with transaction.atomic():
            course = Course.objects.create(**data)
    except IntegrityError:
        raise DuplicateCourseCode()

    logger.info(f"Course {course.code} created by user {actor.pk}")
    return course


def update_course(course: Course, actor, data: dict) -> Course:
    """
    Apply ``data`` to ``course``. ``current_enrollment`` is never taken
    from the caller.

    Raises:
        Forbidden, DuplicateCourseCode, InvalidInstructor.
    """
    if not can_write_course(actor, course):
        raise Forbidden('Not authorized to update this course')

    data = dict(data)
    data.pop('current_enrollment', None)
    if 'code' in data and data['code'] != course.code:
        _check_code_free(data['code'], exclude_pk=course.pk)
    if 'instructor' in data:
        if is_instructor(actor):
            data.pop('instructor')
        else:
            _check_instructor(data['instructor'])

    for field, value in data.items():
        setattr(course, field, value)
    try:
        with transaction.atomic():
            # The counter is never part of update_fields.
            course.save(update_fields=[*data.keys(), 'updated_at'])
    except IntegrityError:
        if 'code' in data and Course.objects.filter(code=course.code).exclude(pk=course.pk).exists():
            raise DuplicateCourseCode()
        raise Conflict('Capacity cannot be lower than the current enrollment.')

    course.refresh_from_db()
    return course


def deactivate_course(course: Course, actor) -> Course:
    """Soft delete: courses are never removed, only marked inactive."""
    if not can_write_course(actor, course):
        raise Forbidden('Not authorized to delete this course')

    course.is_active = False
    course.save(update_fields=['is_active', 'updated_at'])
    logger.info(
        f"Course {course.code} deactivated by user {actor.pk} "
        f"({course.current_enrollment} students still enrolled)"
    )
    return course
