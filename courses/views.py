"""
Course Views — DRF ViewSets for courses and enrollments.

Service errors (``courses.exceptions``) are translated into envelope
responses here; validation errors are raised and wrapped by the project
exception handler.
"""

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action

from campus.responses import failure, paginated, success
from courses.exceptions import CourseError, CourseNotFound
from courses.filters import CourseFilter
from courses.models import Course, Enrollment, EnrollmentStatus
from courses.permissions import CanViewRoster, CoursePermission, EnrollmentPermission, IsInstructor
from courses.serializers import (
    CourseSerializer, CourseWriteSerializer,
    EnrollmentCreateSerializer, EnrollmentSerializer, EnrollmentUpdateSerializer,
    RosterEntrySerializer,
)
from courses.services.course_service import (
    InvalidInstructor, create_course, deactivate_course, update_course,
)
from courses.services.enrollment_service import enroll_student, update_enrollment, withdraw
from courses.services.listing_service import (
    list_course_roster, list_courses, list_instructor_courses, list_student_enrollments,
)
from users.policy import can_write_course, is_student

UUID_REGEX = '[0-9a-fA-F-]{36}'


# ─── Course ──────────────────────────────────────────────────────────────────

@extend_schema_view(
    list=extend_schema(summary='List active courses (catalog)'),
    retrieve=extend_schema(summary='Retrieve a course'),
    create=extend_schema(summary='Create a course (instructor/admin)',
                         request=CourseWriteSerializer, responses=CourseSerializer),
    update=extend_schema(summary='Update a course (owner/admin)',
                         request=CourseWriteSerializer, responses=CourseSerializer),
    partial_update=extend_schema(summary='Partially update a course (owner/admin)',
                                 request=CourseWriteSerializer, responses=CourseSerializer),
    destroy=extend_schema(summary='Deactivate a course (owner/admin)'),
)
class CourseViewSet(viewsets.GenericViewSet):
    permission_classes = [CoursePermission]
    serializer_class = CourseSerializer
    filterset_class = CourseFilter
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        return Course.objects.select_related('instructor')

    def get_object(self):
        course = super().get_object()
        # Inactive courses stay visible to their owner and admins only.
        if not course.is_active and not can_write_course(self.request.user, course):
            raise CourseNotFound('Course not found')
        return course

    def list(self, request):
        page = list_courses(request.query_params)
        return paginated(page, CourseSerializer)

    def retrieve(self, request, pk=None):
        return success(CourseSerializer(self.get_object()).data)

    def create(self, request):
        ser = CourseWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            course = create_course(request.user, ser.validated_data)
        except InvalidInstructor as e:
            return failure(str(e))
        except CourseError as e:
            return failure(e.message, status=e.status_code)

        return success(
            CourseSerializer(course).data,
            message='Course created successfully',
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None, partial=False):
        course = self.get_object()
        ser = CourseWriteSerializer(course, data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        try:
            course = update_course(course, request.user, ser.validated_data)
        except InvalidInstructor as e:
            return failure(str(e))
        except CourseError as e:
            return failure(e.message, status=e.status_code)

        return success(CourseSerializer(course).data, message='Course updated successfully')

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request, pk=None):
        course = self.get_object()
        try:
            deactivate_course(course, request.user)
        except CourseError as e:
            return failure(e.message, status=e.status_code)
        return success(message='Course deactivated successfully')

    @extend_schema(summary='Course roster (owner/admin)', responses=RosterEntrySerializer(many=True))
    @action(detail=True, methods=['get'], url_path='enrollments',
            permission_classes=[CanViewRoster])
    def enrollments(self, request, pk=None):
        course = self.get_object()
        roster = list_course_roster(course)
        return success({
            'course': {'id': str(course.id), 'code': course.code, 'title': course.title},
            'enrollments': RosterEntrySerializer(roster, many=True).data,
        })

    @extend_schema(summary="Courses taught by the current instructor")
    @action(detail=False, methods=['get'], url_path='my-courses',
            permission_classes=[IsInstructor])
    def my_courses(self, request):
        page = list_instructor_courses(request.user, request.query_params)
        return paginated(page, CourseSerializer)


# ─── Enrollment ──────────────────────────────────────────────────────────────

@extend_schema_view(
    create=extend_schema(summary='Enroll in a course (students)',
                         request=EnrollmentCreateSerializer, responses=EnrollmentSerializer),
    retrieve=extend_schema(summary='Retrieve an enrollment'),
    update=extend_schema(summary='Update status / grade',
                         request=EnrollmentUpdateSerializer, responses=EnrollmentSerializer),
    partial_update=extend_schema(summary='Update status / grade',
                                 request=EnrollmentUpdateSerializer, responses=EnrollmentSerializer),
    destroy=extend_schema(summary='Drop (before start) or withdraw (after start)'),
)
class EnrollmentViewSet(viewsets.GenericViewSet):
    permission_classes = [EnrollmentPermission]
    serializer_class = EnrollmentSerializer
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        return Enrollment.objects.select_related('student', 'course', 'course__instructor')

    def create(self, request):
        ser = EnrollmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            enrollment = enroll_student(request.user, ser.validated_data['courseId'])
        except CourseError as e:
            return failure(e.message, status=e.status_code)

        return success(
            EnrollmentSerializer(enrollment).data,
            message='Successfully enrolled in course',
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):
        return success(EnrollmentSerializer(self.get_object()).data)

    def update(self, request, pk=None):
        enrollment = self.get_object()
        ser = EnrollmentUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            enrollment = update_enrollment(enrollment.pk, request.user, **ser.validated_data)
        except CourseError as e:
            return failure(e.message, status=e.status_code)
        except ValueError as e:
            return failure(str(e))

        return success(EnrollmentSerializer(enrollment).data, message='Enrollment updated successfully')

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        enrollment = self.get_object()
        try:
            outcome, enrollment = withdraw(enrollment.pk, request.user)
        except CourseError as e:
            return failure(e.message, status=e.status_code)

        if outcome == EnrollmentStatus.DROPPED:
            return success(message='Successfully dropped from course')
        return success(
            EnrollmentSerializer(enrollment).data,
            message='Successfully withdrawn from course',
        )

    @extend_schema(summary="Current student's enrollments")
    @action(detail=False, methods=['get'], url_path='my')
    def my(self, request):
        if not is_student(request.user):
            return failure('Access denied. Required roles: student', status=status.HTTP_403_FORBIDDEN)
        page = list_student_enrollments(request.user, request.query_params)
        return paginated(page, EnrollmentSerializer)
