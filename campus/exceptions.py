"""
Project-wide DRF exception handler.

Wraps DRF errors, Django 404s/permission errors and the course domain
errors in the response envelope. Anything else is logged with its stack
trace and answered with a generic 500.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

from campus.responses import failure
from courses.exceptions import CourseError

logger = logging.getLogger(__name__)


def _message_for(exc, detail):
    if isinstance(exc, exceptions.ValidationError):
        return 'Validation failed'
    if isinstance(detail, dict) and 'detail' in detail:
        return str(detail['detail'])
    if isinstance(detail, list) and detail:
        return str(detail[0])
    return str(detail)


def envelope_exception_handler(exc, context):
    if isinstance(exc, CourseError):
        return failure(exc.message, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.exception(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}"
        )
        return failure(
            'Internal server error', status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, Http404):
        message = 'Not found.'
    elif isinstance(exc, PermissionDenied):
        message = 'Access denied.'
    else:
        message = _message_for(exc, response.data)

    errors = response.data if isinstance(exc, exceptions.ValidationError) else None
    wrapped = failure(message, status=response.status_code, errors=errors)
    for header, value in response.headers.items():
        if header.lower() in ('www-authenticate', 'retry-after'):
            wrapped[header] = value
    return wrapped
