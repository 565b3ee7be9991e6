"""
Domain errors raised by the course and enrollment services.

Each error carries the HTTP status the API answers with and a message
that is safe to show to the client.
"""

from rest_framework import status


class CourseError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request could not be completed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ─── Not found ───────────────────────────────────────────────────────────────

class NotFound(CourseError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found.'


class CourseNotFound(NotFound):
    default_message = 'Course not found or inactive.'


class EnrollmentNotFound(NotFound):
    default_message = 'Enrollment not found.'


# ─── Forbidden ───────────────────────────────────────────────────────────────

class Forbidden(CourseError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Access denied.'


# ─── Conflicts (reported as 400 business-rule failures) ──────────────────────

class Conflict(CourseError):
    default_message = 'Conflicting request.'


class CourseFull(Conflict):
    default_message = 'Course is full.'


class AlreadyEnrolled(Conflict):
    default_message = 'Already enrolled in this course.'


class DuplicateCourseCode(Conflict):
    default_message = 'Course code already exists.'
