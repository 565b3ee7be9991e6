"""
User Model for the Campus course-management API

Roles (UserRole): ADMIN, INSTRUCTOR, STUDENT
Fields: id, username, email, first_name, last_name, role, is_active,
        profile_image, last_login, date_joined
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.validators import MinLengthValidator
from django.db import models
from django.utils import timezone


# =============================================================================
# ENUMERATIONS
# =============================================================================

class UserRole(models.TextChoices):
    """User roles."""
    ADMIN = 'admin', 'Administrator'
    INSTRUCTOR = 'instructor', 'Instructor'
    STUDENT = 'student', 'Student'


# =============================================================================
# USER MANAGER
# =============================================================================

class UserManager(BaseUserManager):
    """
    Custom user manager: email is the login field, username stays unique.
    """

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular user."""
        if not email:
            raise ValueError('An email address is required')

        email = self.normalize_email(email)
        extra_fields.setdefault('role', UserRole.STUDENT)
        extra_fields.setdefault('username', email.split('@')[0])

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create and save a superuser."""
        extra_fields.setdefault('role', UserRole.ADMIN)
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


# =============================================================================
# USER MODEL
# =============================================================================

class User(AbstractBaseUser, PermissionsMixin):
    """
    Account for admins, instructors and students.

    Instructors own courses (``courses_taught``); students hold
    enrollments (``enrollments``).
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    username = models.CharField(
        'Username',
        max_length=50,
        unique=True,
        validators=[MinLengthValidator(3)]
    )
    email = models.EmailField(
        'Email address',
        max_length=100,
        unique=True,
        db_index=True
    )

    first_name = models.CharField('First name', max_length=50, blank=True)
    last_name = models.CharField('Last name', max_length=50, blank=True)

    profile_image = models.URLField(
        'Profile image',
        max_length=255,
        blank=True
    )

    role = models.CharField(
        'Role',
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.STUDENT,
        db_index=True
    )

    # Django admin permissions
    is_staff = models.BooleanField(
        'Staff access',
        default=False,
        help_text="Allows access to the Django admin site."
    )
    is_active = models.BooleanField(
        'Active',
        default=True,
        help_text="Inactive accounts cannot authenticate."
    )

    # Timestamps
    date_joined = models.DateTimeField('Date joined', default=timezone.now)
    last_login = models.DateTimeField('Last login', null=True, blank=True)
    updated_at = models.DateTimeField('Last modified', auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []  # email is already required by USERNAME_FIELD

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-date_joined', '-id']
        indexes = [
            models.Index(fields=['role', 'is_active'], name='user_role_active_idx'),
        ]

    def __str__(self):
        return self.email

    # ==========================================================================
    # PROPERTIES
    # ==========================================================================

    @property
    def full_name(self):
        """Return full name or username if name not set."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name if full_name else self.username

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def is_instructor(self):
        return self.role == UserRole.INSTRUCTOR

    @property
    def is_student(self):
        return self.role == UserRole.STUDENT

    # ==========================================================================
    # METHODS
    # ==========================================================================

    def get_short_name(self):
        return self.first_name or self.username

    def has_active_relationships(self):
        """True while the user is enrolled somewhere or owns any course."""
        from courses.models import EnrollmentStatus

        return (
            self.enrollments.filter(status=EnrollmentStatus.ENROLLED).exists()
            or self.courses_taught.exists()
        )

    def deactivate(self):
        """Soft delete: keep the row, block authentication."""
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])
