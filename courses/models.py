"""
Course Module Models

Covers: Courses and Enrollments.

``Course.current_enrollment`` is a cached count of the course's
``enrolled`` enrollments. It is written only by
``courses.services.enrollment_service``; there are no save hooks or
signals touching it.
"""

import uuid
from django.conf import settings
from django.core.validators import (
    MaxValueValidator, MinLengthValidator, MinValueValidator, RegexValidator,
)
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


COURSE_CODE_REGEX = r'^[A-Z]{2,4}[0-9]{3,4}$'


# =============================================================================
# COURSE
# =============================================================================

class Semester(models.TextChoices):
    SPRING = 'Spring', 'Spring'
    SUMMER = 'Summer', 'Summer'
    FALL = 'Fall', 'Fall'
    WINTER = 'Winter', 'Winter'


class Course(models.Model):
    """A scheduled course offering taught by one instructor."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(
        'Code', max_length=10, unique=True, db_index=True,
        validators=[RegexValidator(
            regex=COURSE_CODE_REGEX,
            message='Course code must be in format like CS101, MATH2001',
        )],
    )
    title = models.CharField(
        'Title', max_length=100, validators=[MinLengthValidator(3)],
    )
    description = models.TextField('Description', blank=True)
    credits = models.PositiveSmallIntegerField(
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(6)],
    )
    department = models.CharField(
        max_length=50, validators=[MinLengthValidator(2)],
    )
    semester = models.CharField(max_length=10, choices=Semester.choices)
    year = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(2020), MaxValueValidator(2030)],
    )

    # --- Capacity ---
    max_students = models.PositiveIntegerField(
        'Capacity', default=30,
        validators=[MinValueValidator(1), MaxValueValidator(200)],
    )
    current_enrollment = models.PositiveIntegerField(
        default=0,
        help_text='Number of enrollments with status "enrolled"',
    )

    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT,
        related_name='courses_taught',
    )
    schedule = models.JSONField(
        default=list, blank=True,
        help_text='[{"day": "Mon", "start": "09:00", "end": "10:30"}, ...]',
    )
    location = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Course'
        verbose_name_plural = 'Courses'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['department', 'semester', 'year'], name='course_dept_term_idx'),
            models.Index(fields=['instructor', 'is_active'], name='course_instructor_active_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(current_enrollment__gte=0),
                name='course_enrollment_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(current_enrollment__lte=F('max_students')),
                name='course_enrollment_within_capacity',
            ),
            models.CheckConstraint(
                condition=Q(end_date__gt=F('start_date')),
                name='course_end_after_start',
            ),
        ]

    def __str__(self):
        return f'{self.code} — {self.title}'

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    @property
    def available_seats(self):
        return max(self.max_students - self.current_enrollment, 0)

    @property
    def is_full(self):
        return self.current_enrollment >= self.max_students

    @property
    def has_started(self):
        return self.start_date <= timezone.now()


# =============================================================================
# ENROLLMENT
# =============================================================================

class EnrollmentStatus(models.TextChoices):
    ENROLLED = 'enrolled', 'Enrolled'
    COMPLETED = 'completed', 'Completed'
    DROPPED = 'dropped', 'Dropped'
    WITHDRAWN = 'withdrawn', 'Withdrawn'


class Grade(models.TextChoices):
    A_PLUS = 'A+', 'A+'
    A = 'A', 'A'
    A_MINUS = 'A-', 'A-'
    B_PLUS = 'B+', 'B+'
    B = 'B', 'B'
    B_MINUS = 'B-', 'B-'
    C_PLUS = 'C+', 'C+'
    C = 'C', 'C'
    C_MINUS = 'C-', 'C-'
    D_PLUS = 'D+', 'D+'
    D = 'D', 'D'
    D_MINUS = 'D-', 'D-'
    F = 'F', 'F'
    INCOMPLETE = 'I', 'Incomplete'
    WITHDRAWN = 'W', 'Withdrawn'


class Enrollment(models.Model):
    """A student's seat in a course."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
        related_name='enrollments',
    )
    course = models.ForeignKey(
        Course, on_delete=models.CASCADE, related_name='enrollments',
    )
    status = models.CharField(
        max_length=20, choices=EnrollmentStatus.choices,
        default=EnrollmentStatus.ENROLLED, db_index=True,
    )
    grade = models.CharField(
        max_length=2, choices=Grade.choices, null=True, blank=True,
    )
    grade_points = models.DecimalField(
        max_digits=3, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(4)],
    )
    enrollment_date = models.DateTimeField(default=timezone.now)
    completion_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Enrollment'
        verbose_name_plural = 'Enrollments'
        unique_together = [['student', 'course']]
        ordering = ['-enrollment_date', '-id']
        indexes = [
            models.Index(fields=['student', 'status'], name='enrollment_student_status_idx'),
            models.Index(fields=['course', 'status'], name='enrollment_course_status_idx'),
        ]

    def __str__(self):
        return f'{self.student} — {self.course}'

    @property
    def is_enrolled(self):
        return self.status == EnrollmentStatus.ENROLLED
