"""
Course Serializers — request validation and response shapes for courses
and enrollments.

``current_enrollment`` is read-only everywhere: only the enrollment
service writes it.
"""

from django.core.validators import RegexValidator
from rest_framework import serializers

from courses.models import COURSE_CODE_REGEX, Course, Enrollment, EnrollmentStatus, Grade
from users.models import User
from users.serializers import UserCompactSerializer


# ─── Course ──────────────────────────────────────────────────────────────────

class CourseSerializer(serializers.ModelSerializer):
    instructor = UserCompactSerializer(read_only=True)
    available_seats = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)

    class Meta:
        model = Course
        fields = [
            'id', 'code', 'title', 'description', 'credits', 'department',
            'semester', 'year', 'max_students', 'current_enrollment',
            'available_seats', 'is_full', 'instructor', 'schedule',
            'location', 'is_active', 'start_date', 'end_date',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CourseCompactSerializer(serializers.ModelSerializer):
    """Course summary nested inside enrollments."""
    instructor = UserCompactSerializer(read_only=True)

    class Meta:
        model = Course
        fields = [
            'id', 'code', 'title', 'credits', 'department', 'semester',
            'year', 'start_date', 'end_date', 'instructor',
        ]


class CourseWriteSerializer(serializers.ModelSerializer):
    """
    Create/update payload. Codes are upper-cased before validation; code
    uniqueness and instructor role are checked by the course service.
    """
    instructor = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False,
    )

    class Meta:
        model = Course
        fields = [
            'code', 'title', 'description', 'credits', 'department',
            'semester', 'year', 'max_students', 'instructor', 'schedule',
            'location', 'is_active', 'start_date', 'end_date',
        ]
        extra_kwargs = {
            'code': {'validators': [RegexValidator(
                regex=COURSE_CODE_REGEX,
                message='Course code must be in format like CS101, MATH2001',
            )]},
        }

    def to_internal_value(self, data):
        if isinstance(data.get('code'), str):
            data = data.copy()
            data['code'] = data['code'].strip().upper()
        return super().to_internal_value(data)

    def validate_schedule(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Schedule must be a list.')
        return value

    def validate(self, attrs):
        instance = self.instance
        start = attrs.get('start_date', getattr(instance, 'start_date', None))
        end = attrs.get('end_date', getattr(instance, 'end_date', None))
        if start and end and end <= start:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date.'
            })

        if instance is not None and 'max_students' in attrs:
            if attrs['max_students'] < instance.current_enrollment:
                raise serializers.ValidationError({
                    'max_students': (
                        'Cannot set max students below current enrollment '
                        f'({instance.current_enrollment}).'
                    )
                })
        return attrs


# ─── Enrollment ──────────────────────────────────────────────────────────────

class EnrollmentSerializer(serializers.ModelSerializer):
    student = UserCompactSerializer(read_only=True)
    course = CourseCompactSerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = [
            'id', 'student', 'course', 'status', 'grade', 'grade_points',
            'enrollment_date', 'completion_date', 'notes', 'updated_at',
        ]
        read_only_fields = fields


class RosterEntrySerializer(serializers.ModelSerializer):
    """One line of a course roster: the student, without the course."""
    student = UserCompactSerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = [
            'id', 'student', 'status', 'grade', 'grade_points',
            'enrollment_date', 'completion_date',
        ]


class EnrollmentCreateSerializer(serializers.Serializer):
    courseId = serializers.UUIDField()


class EnrollmentUpdateSerializer(serializers.Serializer):
    """Status and grade changes. Every field is optional."""
    status = serializers.ChoiceField(choices=EnrollmentStatus.choices, required=False)
    grade = serializers.ChoiceField(choices=Grade.choices, required=False, allow_null=True)
    grade_points = serializers.DecimalField(
        max_digits=3, decimal_places=2, min_value=0, max_value=4,
        required=False, allow_null=True,
    )
    notes = serializers.CharField(required=False, allow_blank=True)
    completion_date = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No changes supplied.')
        return attrs
