"""
Root URL configuration.

    /api/auth/          - users.urls.auth_urlpatterns
    /api/users/         - users.urls.user_urlpatterns
    /api/courses/       - courses.urls
    /api/enrollments/   - courses.urls
    /api/schema/        - OpenAPI schema
    /api/docs/          - Swagger UI
    /health             - database probe
    /admin/             - Django admin
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from campus.views import health
from users.urls import auth_urlpatterns, user_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health', health, name='health'),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/auth/', include(auth_urlpatterns)),
    path('api/', include(user_urlpatterns)),
    path('api/', include('courses.urls')),
]
