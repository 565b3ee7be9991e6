"""
Course Filters — django-filter filtersets for courses and enrollments.
"""

import django_filters
from django.db.models import F, Q

from courses.models import Course, Enrollment, EnrollmentStatus, Semester


class CourseFilter(django_filters.FilterSet):
    department = django_filters.CharFilter()
    semester = django_filters.ChoiceFilter(choices=Semester.choices)
    year = django_filters.NumberFilter()
    instructor = django_filters.UUIDFilter(field_name='instructor_id')
    available = django_filters.BooleanFilter(method='filter_available')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Course
        fields = ['department', 'semester', 'year', 'instructor']

    def filter_available(self, queryset, name, value):
        """Only courses with at least one free seat."""
        if value:
            return queryset.filter(current_enrollment__lt=F('max_students'))
        return queryset

    def filter_search(self, queryset, name, value):
        """Search title, code and description fields."""
        return queryset.filter(
            Q(title__icontains=value)
            | Q(code__icontains=value)
            | Q(description__icontains=value)
        )


class InstructorCourseFilter(django_filters.FilterSet):
    STATUS_CHOICES = [('active', 'Active'), ('inactive', 'Inactive'), ('all', 'All')]

    semester = django_filters.ChoiceFilter(choices=Semester.choices)
    year = django_filters.NumberFilter()
    status = django_filters.ChoiceFilter(choices=STATUS_CHOICES, method='filter_status')

    class Meta:
        model = Course
        fields = ['semester', 'year']

    def filter_status(self, queryset, name, value):
        if value == 'active':
            return queryset.filter(is_active=True)
        if value == 'inactive':
            return queryset.filter(is_active=False)
        return queryset


class EnrollmentFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=EnrollmentStatus.choices)
    semester = django_filters.ChoiceFilter(
        field_name='course__semester', choices=Semester.choices,
    )
    year = django_filters.NumberFilter(field_name='course__year')

    class Meta:
        model = Enrollment
        fields = ['status']
