"""
Course URL configuration.

Mounted under /api/ in campus/urls.py:
    /api/courses/       - CourseViewSet
    /api/enrollments/   - EnrollmentViewSet
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from courses import views

router = DefaultRouter(trailing_slash='/?')
router.register(r'courses', views.CourseViewSet, basename='course')
router.register(r'enrollments', views.EnrollmentViewSet, basename='enrollment')

urlpatterns = [
    path('', include(router.urls)),
]
