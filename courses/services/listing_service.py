"""
Listing Service — filtered, paginated, deterministically ordered listings.

Every listing returns the same page shape:

    {
        "items": [...model instances...],
        "page": 2, "pageSize": 10,
        "totalCount": 25, "totalPages": 3,
        "hasNextPage": true, "hasPreviousPage": true,
    }

Orderings always end with the primary key so rows sharing a timestamp
keep a stable position across pages.
"""

import math

from django.core.paginator import Paginator
from django_filters.utils import translate_validation
from rest_framework import serializers

from courses.filters import CourseFilter, EnrollmentFilter, InstructorCourseFilter
from courses.models import Course, Enrollment
from users.filters import UserFilter
from users.models import User

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

COURSE_ORDERING = ('-created_at', '-id')
ENROLLMENT_ORDERING = ('-enrollment_date', '-id')
USER_ORDERING = ('-date_joined', '-id')


class PagingSerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(
        min_value=1, max_value=MAX_PAGE_SIZE, default=DEFAULT_PAGE_SIZE,
    )


def _paging_params(params):
    data = {}
    if params.get('page') not in (None, ''):
        data['page'] = params.get('page')
    limit = params.get('limit') or params.get('pageSize')
    if limit not in (None, ''):
        data['limit'] = limit

    ser = PagingSerializer(data=data)
    ser.is_valid(raise_exception=True)
    return ser.validated_data['page'], ser.validated_data['limit']


def paginate(queryset, page=1, page_size=DEFAULT_PAGE_SIZE) -> dict:
    """Slice an ordered queryset into one page. A page past the end is empty."""
    paginator = Paginator(queryset, page_size)
    total_count = paginator.count
    total_pages = math.ceil(total_count / page_size)

    if page <= total_pages:
        items = list(paginator.page(page).object_list)
    else:
        items = []

    return {
        'items': items,
        'page': page,
        'pageSize': page_size,
        'totalCount': total_count,
        'totalPages': total_pages,
        'hasNextPage': page < total_pages,
        'hasPreviousPage': page > 1,
    }


def _filtered_page(filterset_class, params, queryset, ordering):
    page, page_size = _paging_params(params)
    filterset = filterset_class(params, queryset=queryset)
    if not filterset.is_valid():
        raise translate_validation(filterset.errors)
    return paginate(filterset.qs.order_by(*ordering), page, page_size)


# ─── Listings ────────────────────────────────────────────────────────────────

def list_courses(params) -> dict:
    """Public catalog: active courses only."""
    qs = Course.objects.filter(is_active=True).select_related('instructor')
    return _filtered_page(CourseFilter, params, qs, COURSE_ORDERING)


def list_instructor_courses(instructor, params) -> dict:
    """Courses taught by ``instructor``; ``status`` defaults to active."""
    params = params.copy()
    params.setdefault('status', 'active')
    qs = Course.objects.filter(instructor=instructor).select_related('instructor')
    return _filtered_page(InstructorCourseFilter, params, qs, COURSE_ORDERING)


def list_student_enrollments(student, params) -> dict:
    qs = Enrollment.objects.filter(student=student).select_related(
        'course', 'course__instructor',
    )
    return _filtered_page(EnrollmentFilter, params, qs, ENROLLMENT_ORDERING)


def list_course_roster(course):
    """All enrollments of one course, newest first (not paginated)."""
    return list(
        Enrollment.objects.filter(course=course)
        .select_related('student')
        .order_by(*ENROLLMENT_ORDERING)
    )


def list_users(params) -> dict:
    return _filtered_page(UserFilter, params, User.objects.all(), USER_ORDERING)
