# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
from django.core.exceptions import ValidationError
from django.db import IntegrityError
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


STATUS_MESSAGES = {
    400: 'Validation error',
    401: 'Authentication required',
    403: 'Permission denied',
    404: 'Resource not found',
    405: 'Method not allowed',
    409: 'Conflict',
    500: 'Internal server error',
    502: 'Upstream service error',
}


def custom_exception_handler(exc, context):
    """
    Custom exception handler for the storefront API
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        details = response.data
        message = STATUS_MESSAGES.get(response.status_code, 'An error occurred')
        # Single-message errors (401/403/404/409/502) surface their own text
        if isinstance(details, dict) and set(details) <= {'detail', 'upstream_status'} and 'detail' in details:
            message = str(details['detail'])
        elif isinstance(details, list) and len(details) == 1:
            message = str(details[0])

        response.data = {
            'error': True,
            'message': message,
            'details': details,
            'status_code': response.status_code
        }

    # Handle Django ValidationError
    elif isinstance(exc, ValidationError):
        logger.warning("Validation Error: %s", exc)
        response = Response({
            'error': True,
            'message': 'Validation error',
            'details': exc.message_dict if hasattr(exc, 'error_dict') else {'non_field_errors': exc.messages},
            'status_code': 400
        }, status=status.HTTP_400_BAD_REQUEST)

    # Handle Django IntegrityError
    elif isinstance(exc, IntegrityError):
        logger.warning("Integrity Error: %s", exc)
        response = Response({
            'error': True,
            'message': 'Resource already exists',
            'details': {'error': 'This operation violates database constraints'},
            'status_code': 409
        }, status=status.HTTP_409_CONFLICT)

    # Handle unexpected errors
    else:
        logger.exception("Unexpected Error: %s", exc)
        response = Response({
            'error': True,
            'message': 'An unexpected error occurred',
            'details': {'error': str(exc)} if settings.DEBUG else {},
            'status_code': 500
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return response
