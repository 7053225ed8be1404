"""
Platform error taxonomy and the DRF exception handler that renders it.

Every user-visible failure is rendered as:

    {"success": false, "error": {"code": "INVALID_SENDER_ID", "message": "..."}}

Unexpected exceptions are logged with their traceback and rendered as a
generic 500 INTERNAL_ERROR so nothing internal leaks to the client.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class PlatformError(exceptions.APIException):
    """Base for errors that carry a stable machine-readable code."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = 'INTERNAL_ERROR'
    default_detail = 'An internal error occurred'

    def __init__(self, detail=None, code=None, extra=None):
        self.code = code or self.default_code
        self.extra = extra or {}
        super().__init__(detail=detail or self.default_detail, code=self.code)


class ValidationError(PlatformError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'VALIDATION_ERROR'
    default_detail = 'Invalid request'


class AuthError(PlatformError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = 'UNAUTHORIZED'
    default_detail = 'Authentication required'


class ForbiddenError(PlatformError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = 'FORBIDDEN'
    default_detail = 'You do not have permission to perform this action'


class NotFoundError(PlatformError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = 'NOT_FOUND'
    default_detail = 'Resource not found'


class ConflictError(PlatformError):
    status_code = status.HTTP_409_CONFLICT
    default_code = 'CONFLICT'
    default_detail = 'Request conflicts with the current state of the resource'


class UpstreamError(PlatformError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = 'UPSTREAM_ERROR'
    default_detail = 'SMS provider rejected the request'


class UpstreamTimeout(UpstreamError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_code = 'UPSTREAM_TIMEOUT'
    default_detail = 'SMS provider did not respond in time'


class InternalError(PlatformError):
    pass


# DRF's own exceptions, mapped onto stable codes
_DRF_CODES = {
    exceptions.NotAuthenticated: 'UNAUTHORIZED',
    exceptions.AuthenticationFailed: 'UNAUTHORIZED',
    exceptions.PermissionDenied: 'FORBIDDEN',
    exceptions.NotFound: 'NOT_FOUND',
    exceptions.MethodNotAllowed: 'METHOD_NOT_ALLOWED',
    exceptions.Throttled: 'RATE_LIMIT_EXCEEDED',
    exceptions.ParseError: 'MALFORMED_REQUEST',
    exceptions.UnsupportedMediaType: 'UNSUPPORTED_MEDIA_TYPE',
    exceptions.ValidationError: 'VALIDATION_ERROR',
}


def error_body(code, message, **extra):
    body = {'success': False, 'error': {'code': code, 'message': message}}
    if extra:
        body['error']['details'] = extra
    return body


def _drf_code(exc):
    for exc_class, code in _DRF_CODES.items():
        if isinstance(exc, exc_class):
            return code
    return 'API_ERROR'


def _drf_message(exc):
    detail = exc.detail
    if isinstance(exc, exceptions.ValidationError):
        return 'Invalid request parameters'
    if isinstance(detail, (list, tuple)) and detail:
        return str(detail[0])
    return str(detail)


def platform_exception_handler(exc, context):
    """REST_FRAMEWORK['EXCEPTION_HANDLER'] entry point."""
    # Imported here: rest_framework.views loads DEFAULT_AUTHENTICATION_CLASSES,
    # which import this module.
    from rest_framework.views import exception_handler

    if isinstance(exc, PlatformError):
        if isinstance(exc, InternalError):
            logger.error(f'Internal error in {context.get("view")}: {exc.detail}')
        return Response(
            error_body(exc.code, str(exc.detail), **exc.extra),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is not None:
        extra = {}
        if isinstance(exc, exceptions.ValidationError):
            extra['fields'] = response.data
        response.data = error_body(_drf_code(exc), _drf_message(exc), **extra)
        return response

    logger.exception(f'Unhandled error in {context.get("view")}: {exc}')
    return Response(
        error_body('INTERNAL_ERROR', 'An internal error occurred'),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
