"""
Response envelope shared by every endpoint:

    {"success": true, "data": ..., "message"?: ..., "pagination"?: {...}}
    {"success": false, "message": "...", "errors"?: {...}}
"""

from rest_framework import status as http_status
from rest_framework.response import Response

PAGINATION_KEYS = (
    'page', 'pageSize', 'totalCount', 'totalPages', 'hasNextPage', 'hasPreviousPage',
)


def success(data=None, message=None, status=http_status.HTTP_200_OK, pagination=None):
    body = {'success': True}
    if message is not None:
        body['message'] = message
    if data is not None:
        body['data'] = data
    if pagination is not None:
        body['pagination'] = pagination
    return Response(body, status=status)


def failure(message, status=http_status.HTTP_400_BAD_REQUEST, errors=None):
    body = {'success': False, 'message': message}
    if errors is not None:
        body['errors'] = errors
    return Response(body, status=status)


def paginated(page, serializer_class, context=None):
    """Envelope for a page built by ``courses.services.listing_service``."""
    data = serializer_class(page['items'], many=True, context=context or {}).data
    return success(data, pagination={key: page[key] for key in PAGINATION_KEYS})
