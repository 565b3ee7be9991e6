"""
User Views for the Campus API

Provides endpoints for:
- Authentication (register, login, token refresh)
- Current user profile and password change
- Admin user management and statistics
"""

import logging
from datetime import timedelta

from django.db.models import Count, Q
from django.db.models.functions import TruncMonth
from django.utils import timezone
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from campus.responses import failure, paginated, success
from courses.services.listing_service import list_users

from .models import User, UserRole
from .permissions import IsAdmin, UserAccessPermission
from .policy import can_delete_user, can_manage_account
from .serializers import (
    AdminUserUpdateSerializer,
    ChangePasswordSerializer,
    CustomTokenObtainPairSerializer,
    UserDetailSerializer,
    UserProfileSerializer,
    UserProfileUpdateSerializer,
    UserRegistrationSerializer,
)

logger = logging.getLogger(__name__)


# =============================================================================
# AUTHENTICATION VIEWS
# =============================================================================

class RegisterView(generics.CreateAPIView):
    """
    POST /api/auth/register/

    Register a student or instructor account and return a JWT pair.
    """
    queryset = User.objects.all()
    permission_classes = [AllowAny]
    authentication_classes = []  # Skip all auth for this public endpoint
    serializer_class = UserRegistrationSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"User {user.pk} registered as {user.role}")

        refresh = RefreshToken.for_user(user)
        return success({
            'user': UserProfileSerializer(user).data,
            'tokens': {
                'refresh': str(refresh),
                'access': str(refresh.access_token),
            },
        }, message='User registered successfully', status=status.HTTP_201_CREATED)


class LoginView(TokenObtainPairView):
    """
    POST /api/auth/login/

    Login with email and password.
    Returns JWT tokens and user info.
    """
    permission_classes = [AllowAny]
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        User.objects.filter(pk=serializer.validated_data['user']['id']).update(
            last_login=timezone.now()
        )
        return success(serializer.validated_data, message='Login successful')


class RefreshView(TokenRefreshView):
    """POST /api/auth/token/refresh/"""

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        return success(response.data)


class ProfileView(generics.RetrieveUpdateAPIView):
    """
    GET /api/auth/me/
    PUT/PATCH /api/auth/profile/

    Get or update the current user's profile.
    """
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return UserProfileUpdateSerializer
        return UserProfileSerializer

    def get_object(self):
        return self.request.user

    def retrieve(self, request, *args, **kwargs):
        return success(UserDetailSerializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success(UserProfileSerializer(instance).data, message='Profile updated successfully')


class ChangePasswordView(generics.UpdateAPIView):
    """
    PUT /api/auth/change-password/

    Change the current user's password.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = ChangePasswordSerializer

    def get_object(self):
        return self.request.user

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = self.get_object()
        user.set_password(serializer.validated_data['new_password'])
        user.save(update_fields=['password', 'updated_at'])
        logger.info(f"User {user.pk} changed password")

        return success(message='Password changed successfully')


# =============================================================================
# USER MANAGEMENT VIEWS
# =============================================================================

@extend_schema_view(
    list=extend_schema(summary='List users (admin)'),
    retrieve=extend_schema(summary='Retrieve a user (self/admin)'),
    update=extend_schema(summary='Update a user (self/admin)', request=AdminUserUpdateSerializer),
    partial_update=extend_schema(summary='Update a user (self/admin)', request=AdminUserUpdateSerializer),
    destroy=extend_schema(summary='Delete or deactivate a user (admin)'),
)
class UserViewSet(viewsets.GenericViewSet):
    """
    GET /api/users/ - List users (admin)
    GET /api/users/stats/ - User statistics (admin)
    GET /api/users/{id}/ - Get user (self/admin)
    PUT/PATCH /api/users/{id}/ - Update user (self/admin)
    DELETE /api/users/{id}/ - Delete user (admin; soft delete if still linked)
    """
    queryset = User.objects.all()
    permission_classes = [UserAccessPermission]
    serializer_class = UserProfileSerializer
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def list(self, request):
        page = list_users(request.query_params)
        return paginated(page, UserProfileSerializer)

    def retrieve(self, request, pk=None):
        return success(UserDetailSerializer(self.get_object()).data)

    def update(self, request, pk=None):
        user = self.get_object()
        if not can_manage_account(request.user, user) and (
            'role' in request.data or 'is_active' in request.data
        ):
            return failure(
                'Only admins can change role or account status',
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer_class = (
            AdminUserUpdateSerializer if can_manage_account(request.user, user)
            else UserProfileUpdateSerializer
        )
        serializer = serializer_class(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success(UserProfileSerializer(user).data, message='User updated successfully')

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        """Hard delete when the user has no enrollments or courses, else deactivate."""
        user = self.get_object()
        if not can_delete_user(request.user, user):
            return failure('Cannot delete your own account')

        if user.has_active_relationships():
            user.deactivate()
            logger.info(f"User {user.pk} deactivated by admin {request.user.pk}")
            return success(message='User deactivated (has active enrollments or courses)')

        user_pk = user.pk
        user.delete()
        logger.info(f"User {user_pk} deleted by admin {request.user.pk}")
        return success(message='User deleted successfully')

    @extend_schema(summary='User statistics (admin)')
    @action(detail=False, methods=['get'], permission_classes=[IsAdmin])
    def stats(self, request):
        totals = User.objects.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(is_active=True)),
            inactive=Count('id', filter=Q(is_active=False)),
        )
        by_role = {
            row['role']: row['count']
            for row in User.objects.values('role').annotate(count=Count('id'))
        }
        since = timezone.now() - timedelta(days=183)
        recent = (
            User.objects.filter(date_joined__gte=since)
            .annotate(month=TruncMonth('date_joined'))
            .values('month')
            .annotate(count=Count('id'))
            .order_by('month')
        )

        return success({
            'total_users': totals['total'],
            'active_users': totals['active'],
            'inactive_users': totals['inactive'],
            'by_role': {role: by_role.get(role, 0) for role in UserRole.values},
            'recent_registrations': [
                {'month': row['month'].strftime('%Y-%m'), 'count': row['count']}
                for row in recent
            ],
        })
