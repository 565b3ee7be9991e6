"""
Enrollment Service — enrolment lifecycle and capacity accounting.

This module is the only writer of ``Course.current_enrollment``. Every
operation that changes how many ``enrolled`` rows a course has updates
the counter inside the same transaction as the row mutation:

- seats are claimed with a conditional UPDATE
  (``current_enrollment < max_students``), so two concurrent requests
  can never both take the last seat;
- seats are released with a conditional UPDATE
  (``current_enrollment > 0``), so the counter never goes negative.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, F
from django.utils import timezone

from courses.exceptions import (
    AlreadyEnrolled, CourseFull, CourseNotFound, EnrollmentNotFound, Forbidden,
)
from courses.models import Course, Enrollment, EnrollmentStatus
from users.policy import can_grade_enrollment, can_withdraw_enrollment

logger = logging.getLogger(__name__)

STUDENT_EXIT_STATUSES = (EnrollmentStatus.DROPPED, EnrollmentStatus.WITHDRAWN)


# ─── Seat accounting ─────────────────────────────────────────────────────────

def _claim_seat(course_id) -> bool:
    """Take one seat if the course is active and not full."""
    updated = Course.objects.filter(
        pk=course_id,
        is_active=True,
        current_enrollment__lt=F('max_students'),
    ).update(current_enrollment=F('current_enrollment') + 1)
    return updated == 1


def _release_seat(course_id) -> None:
    updated = Course.objects.filter(
        pk=course_id, current_enrollment__gt=0,
    ).update(current_enrollment=F('current_enrollment') - 1)
    if not updated:
        logger.warning(f"Seat release on course {course_id} found counter already at 0")


def _refuse_seat(course_id):
    """Raise the error explaining why ``_claim_seat`` failed."""
    if Course.objects.filter(pk=course_id, is_active=True).exists():
        logger.warning(f"Enrollment refused: course {course_id} is full")
        raise CourseFull()
    raise CourseNotFound()


def _apply_status(enrollment: Enrollment, new_status: str) -> None:
    """Move ``enrollment`` to ``new_status`` and keep the course counter in step."""
    previous = enrollment.status
    if new_status == previous:
        return

    if previous == EnrollmentStatus.ENROLLED:
        _release_seat(enrollment.course_id)
    elif new_status == EnrollmentStatus.ENROLLED:
        if not _claim_seat(enrollment.course_id):
            _refuse_seat(enrollment.course_id)

    enrollment.status = new_status


def _get_locked(enrollment_id) -> Enrollment:
    try:
        return Enrollment.objects.select_for_update().select_related(
            'course', 'student',
        ).get(pk=enrollment_id)
    except Enrollment.DoesNotExist:
        raise EnrollmentNotFound()


# ─── Operations ──────────────────────────────────────────────────────────────

def enroll_student(student, course_id) -> Enrollment:
    """
    Enrol a student in a course.

    Raises:
        CourseNotFound: course does not exist or is inactive.
        AlreadyEnrolled: the student already has an enrollment row for it.
        CourseFull: no seat left.
    """
    with transaction.atomic():
        if not Course.objects.filter(pk=course_id, is_active=True).exists():
            raise CourseNotFound()

        if Enrollment.objects.filter(student=student, course_id=course_id).exists():
            raise AlreadyEnrolled()

        if not _claim_seat(course_id):
            _refuse_seat(course_id)

        try:
            # Savepoint: a concurrent duplicate insert rolls the seat back too.
            with transaction.atomic():
                enrollment = Enrollment.objects.create(
                    student=student,
                    course_id=course_id,
                    status=EnrollmentStatus.ENROLLED,
                    enrollment_date=timezone.now(),
                )
        except IntegrityError:
            raise AlreadyEnrolled()

    logger.info(f"Student {student.pk} enrolled in course {course_id}")
    return Enrollment.objects.select_related('course', 'student').get(pk=enrollment.pk)


def update_enrollment(enrollment_id, actor, **changes) -> Enrollment:
    """
    Change the status and/or grade fields of an enrollment.

    Accepted keys: ``status``, ``grade``, ``grade_points``, ``notes``,
    ``completion_date``. The course's instructor and admins may change
    anything; the enrolled student may only move their own enrollment to
    ``dropped`` or ``withdrawn``.

    Raises:
        EnrollmentNotFound, Forbidden, CourseFull (re-enrolling into a
        full course), CourseNotFound (re-enrolling into an inactive one),
        ValueError for an unknown status.
    """
    new_status = changes.pop('status', None)
    if new_status is not None and new_status not in EnrollmentStatus.values:
        raise ValueError(f'Unknown enrollment status: {new_status}')

    with transaction.atomic():
        enrollment = _get_locked(enrollment_id)

        if not can_grade_enrollment(actor, enrollment):
            student_exit = (
                new_status in STUDENT_EXIT_STATUSES
                and not changes
                and can_withdraw_enrollment(actor, enrollment)
            )
            if not student_exit:
                raise Forbidden(
                    'Access denied. Only course instructor or admin can update grades.'
                )

        previous = enrollment.status
        if new_status is not None:
            _apply_status(enrollment, new_status)
            if new_status in (EnrollmentStatus.COMPLETED, EnrollmentStatus.WITHDRAWN) \
                    and not changes.get('completion_date'):
                changes['completion_date'] = timezone.now()

        for field, value in changes.items():
            setattr(enrollment, field, value)
        enrollment.save()

    enrollment.course.refresh_from_db(fields=['current_enrollment'])
    if new_status is not None and new_status != previous:
        logger.info(
            f"Enrollment {enrollment.pk} status {previous} -> {new_status} "
            f"by user {actor.pk}"
        )
    return enrollment


def change_status(enrollment_id, new_status, actor, **changes) -> Enrollment:
    """Shorthand for :func:`update_enrollment` with a status change."""
    return update_enrollment(enrollment_id, actor, status=new_status, **changes)


def withdraw(enrollment_id, actor):
    """
    Drop or withdraw a student from a course.

    Before the course starts the enrollment row is deleted outright
    (outcome ``dropped``). Once it has started the row is kept with status
    ``withdrawn`` and a completion date (outcome ``withdrawn``).

    Returns:
        (outcome, enrollment) — ``enrollment`` is the deleted or updated row.

    Raises:
        EnrollmentNotFound, Forbidden.
    """
    with transaction.atomic():
        enrollment = _get_locked(enrollment_id)

        if not can_withdraw_enrollment(actor, enrollment):
            raise Forbidden()

        now = timezone.now()
        if enrollment.course.start_date > now:
            enrollment_pk = enrollment.pk
            if enrollment.is_enrolled:
                _release_seat(enrollment.course_id)
            enrollment.delete()
            logger.info(f"Enrollment {enrollment_pk} dropped before course start")
            return EnrollmentStatus.DROPPED, enrollment

        _apply_status(enrollment, EnrollmentStatus.WITHDRAWN)
        enrollment.completion_date = now
        enrollment.save(update_fields=['status', 'completion_date', 'updated_at'])

    enrollment.course.refresh_from_db(fields=['current_enrollment'])
    logger.info(f"Enrollment {enrollment.pk} withdrawn after course start")
    return EnrollmentStatus.WITHDRAWN, enrollment


def recount_enrollments(course_ids=None) -> int:
    """
    Recompute ``current_enrollment`` from the enrolled rows.

    Args:
        course_ids: restrict to these courses; all courses when None.

    Returns:
        Number of courses whose counter was corrected.
    """
    corrected = 0
    with transaction.atomic():
        courses = Course.objects.select_for_update().order_by('pk')
        if course_ids is not None:
            courses = courses.filter(pk__in=course_ids)
        courses = list(courses)

        counts = dict(
            Enrollment.objects.filter(
                course__in=[c.pk for c in courses],
                status=EnrollmentStatus.ENROLLED,
            ).values('course').annotate(n=Count('id')).values_list('course', 'n')
        )

        for course in courses:
            actual = counts.get(course.pk, 0)
            if actual > course.max_students:
                logger.error(
                    f"Course {course.code} has {actual} enrolled students "
                    f"for {course.max_students} seats; counter capped"
                )
                actual = course.max_students
            if actual != course.current_enrollment:
                logger.info(
                    f"Course {course.code} counter {course.current_enrollment} -> {actual}"
                )
                Course.objects.filter(pk=course.pk).update(current_enrollment=actual)
                corrected += 1

    return corrected
