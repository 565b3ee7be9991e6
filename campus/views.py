"""
Health check.
"""

import logging

from django.db import DatabaseError, connection
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny

from campus.responses import failure, success

logger = logging.getLogger(__name__)


@extend_schema(summary='Database connectivity probe')
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError as e:
        logger.error(f"Health check failed: {e}")
        return failure('Database unavailable', status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return success({'status': 'ok', 'timestamp': timezone.now().isoformat()})
