"""
Domain errors and the DRF exception handler.

Services raise the exceptions below; views let them propagate and the
handler renders every failure in the same envelope:

    {"success": false, "message": "...", "error": "<code>"}
"""
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import exceptions, status
from django.db import IntegrityError
import logging

logger = logging.getLogger(__name__)


class SocialError(exceptions.APIException):
    """Base class for recoverable domain errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be completed.'
    default_code = 'error'


class ValidationError(SocialError):
    """Malformed input: bad id, text length, pagination parameters."""
    default_detail = 'Validation failed.'
    default_code = 'validation_error'


class InvalidOperation(SocialError):
    default_detail = 'Operation not allowed.'
    default_code = 'invalid_operation'


class NotFound(SocialError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class Forbidden(SocialError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Not authorized to perform this action.'
    default_code = 'forbidden'


class Conflict(SocialError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflicting state.'
    default_code = 'conflict'


class AlreadyLiked(Conflict):
    default_detail = 'Post already liked'
    default_code = 'already_liked'


class NotLiked(Conflict):
    default_detail = 'Post not liked'
    default_code = 'not_liked'


def _first_message(data):
    """Dig the first human-readable message out of DRF error data."""
    if isinstance(data, dict):
        for value in data.values():
            return _first_message(value)
    if isinstance(data, list) and data:
        return _first_message(data[0])
    return str(data)


def _field_errors(data, prefix=''):
    errors = []
    if isinstance(data, dict):
        for field, value in data.items():
            name = f"{prefix}.{field}" if prefix else str(field)
            errors.extend(_field_errors(value, name))
    elif isinstance(data, list):
        for item in data:
            errors.extend(_field_errors(item, prefix))
    else:
        errors.append({'field': prefix or 'non_field_errors', 'message': str(data)})
    return errors


def custom_exception_handler(exc, context):
    """
    Custom exception handler that:
    1. Logs all exceptions
    2. Converts Django exceptions to DRF responses
    3. Provides consistent error format
    """

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, exceptions.ValidationError):
            response.data = {
                'success': False,
                'message': _first_message(exc.detail),
                'error': 'validation_error',
                'errors': _field_errors(exc.detail),
            }
        else:
            detail = getattr(exc, 'detail', None)
            codes = exc.get_codes() if isinstance(exc, exceptions.APIException) else None
            response.data = {
                'success': False,
                'message': _first_message(detail) if detail is not None else str(exc),
                'error': codes if isinstance(codes, str) else 'error',
            }
        return response

    # Handle exceptions that DRF doesn't handle
    if isinstance(exc, IntegrityError):
        logger.warning(f"IntegrityError: {exc}")
        return Response(
            {
                'success': False,
                'message': 'Data integrity error. This may be a duplicate entry.',
                'error': 'conflict',
            },
            status=status.HTTP_409_CONFLICT
        )

    # Log unexpected exceptions
    logger.exception(f"Unhandled exception: {exc}")

    # Return generic error for unexpected exceptions
    return Response(
        {
            'success': False,
            'message': 'An unexpected error occurred.',
            'error': 'internal_error',
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
