"""
User URL Configuration for the Campus API

Authentication endpoints (prefix /api/auth/):
    register/          - User registration
    login/             - JWT login
    token/refresh/     - Refresh JWT token
    me/                - Current user
    profile/           - Update current user's profile
    change-password/   - Change password

User endpoints (mounted under /api/):
    users/             - List users (admin)
    users/stats/       - User statistics (admin)
    users/{id}/        - Read / update / delete a user
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import (
    RegisterView,
    LoginView,
    RefreshView,
    ProfileView,
    ChangePasswordView,
    UserViewSet,
)


router = SimpleRouter(trailing_slash='/?')
router.register(r'users', UserViewSet, basename='user')

auth_urlpatterns = [
    path('register/', RegisterView.as_view(), name='register'),
    path('login/', LoginView.as_view(), name='login'),
    path('token/refresh/', RefreshView.as_view(), name='token-refresh'),
    path('me/', ProfileView.as_view(), name='me'),
    path('profile/', ProfileView.as_view(), name='profile'),
    path('change-password/', ChangePasswordView.as_view(), name='change-password'),
]

user_urlpatterns = [
    path('', include(router.urls)),
]
