"""
User Serializers for the Campus API

Provides serializers for:
- Registration and login (JWT)
- User profile (read/update) and password change
- Admin user management
"""

import re

from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User, UserRole

PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)')
USERNAME_PATTERN = re.compile(r'^[A-Za-z0-9]+$')


def validate_password_strength(value):
    if not PASSWORD_PATTERN.match(value):
        raise serializers.ValidationError(
            'Password must contain at least one lowercase letter, '
            'one uppercase letter, and one number.'
        )
    return value


# =============================================================================
# AUTHENTICATION SERIALIZERS
# =============================================================================

class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT serializer that logs in with email + password and returns the
    token pair together with the user.
    """
    username_field = 'email'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['email'] = serializers.EmailField(required=True)
        self.fields['password'] = serializers.CharField(
            write_only=True,
            required=True,
            style={'input_type': 'password'}
        )
        if 'username' in self.fields:
            del self.fields['username']

    def validate(self, attrs):
        email = attrs.get('email')
        password = attrs.get('password')

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise AuthenticationFailed('Invalid email or password.')

        if not user.is_active:
            raise AuthenticationFailed('Account is deactivated.')

        authenticated_user = authenticate(
            request=self.context.get('request'),
            email=user.email,
            password=password
        )
        if authenticated_user is None:
            raise AuthenticationFailed('Invalid email or password.')

        refresh = self.get_token(authenticated_user)
        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserProfileSerializer(authenticated_user).data,
        }


class UserRegistrationSerializer(serializers.ModelSerializer):
    """Public sign-up. Admin accounts cannot be self-registered."""

    password = serializers.CharField(
        write_only=True,
        required=True,
        min_length=6,
        validators=[validate_password, validate_password_strength],
        style={'input_type': 'password'}
    )
    role = serializers.ChoiceField(
        choices=[UserRole.STUDENT, UserRole.INSTRUCTOR],
        default=UserRole.STUDENT,
    )

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'first_name', 'last_name', 'role']
        extra_kwargs = {
            'first_name': {'required': True, 'allow_blank': False},
            'last_name': {'required': True, 'allow_blank': False},
        }

    def validate_username(self, value):
        if not USERNAME_PATTERN.match(value):
            raise serializers.ValidationError(
                'Username may only contain letters and numbers.'
            )
        return value

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('User with this email already exists.')
        return value

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


# =============================================================================
# PROFILE SERIALIZERS
# =============================================================================

class UserCompactSerializer(serializers.ModelSerializer):
    """Nested representation (course instructor, enrollment student)."""
    full_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'full_name']


class UserProfileSerializer(serializers.ModelSerializer):
    full_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'full_name',
            'profile_image', 'role', 'is_active',
            'date_joined', 'last_login', 'updated_at',
        ]
        read_only_fields = fields


class UserProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may change on their own account."""

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'profile_image']
        extra_kwargs = {
            'first_name': {'allow_blank': False},
            'last_name': {'allow_blank': False},
        }


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(required=True, style={'input_type': 'password'})
    new_password = serializers.CharField(
        required=True,
        min_length=6,
        validators=[validate_password, validate_password_strength],
        style={'input_type': 'password'}
    )

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect.')
        return value


# =============================================================================
# ADMIN SERIALIZERS
# =============================================================================

class AdminUserUpdateSerializer(UserProfileUpdateSerializer):
    """Admins may additionally change role and activation."""

    class Meta(UserProfileUpdateSerializer.Meta):
        fields = ['first_name', 'last_name', 'profile_image', 'role', 'is_active']


class UserDetailSerializer(UserProfileSerializer):
    """Profile plus the courses taught and the enrollments held."""
    courses_taught = serializers.SerializerMethodField()
    enrollments = serializers.SerializerMethodField()

    class Meta(UserProfileSerializer.Meta):
        fields = UserProfileSerializer.Meta.fields + ['courses_taught', 'enrollments']
        read_only_fields = fields

    def get_courses_taught(self, obj):
        if not obj.is_instructor:
            return []
        return [
            {'id': str(c.id), 'code': c.code, 'title': c.title,
             'semester': c.semester, 'year': c.year, 'is_active': c.is_active}
            for c in obj.courses_taught.order_by('-created_at', '-id')
        ]

    def get_enrollments(self, obj):
        if not obj.is_student:
            return []
        return [
            {'id': str(e.id), 'status': e.status, 'grade': e.grade,
             'course': {'id': str(e.course.id), 'code': e.course.code,
                        'title': e.course.title}}
            for e in obj.enrollments.select_related('course').order_by('-enrollment_date', '-id')
        ]
