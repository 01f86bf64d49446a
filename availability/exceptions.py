"""
Error taxonomy and the project-wide DRF exception handler.

Services raise subclasses of :class:`ServiceError`; the handler turns every
exception reaching DRF into the body ``{code, message, details?, hint?}``.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler, set_rollback

logger = logging.getLogger(__name__)

VALIDATION_ERROR = 'VALIDATION_ERROR'
UNAUTHORIZED = 'UNAUTHORIZED'
FORBIDDEN = 'FORBIDDEN'
NOT_FOUND = 'NOT_FOUND'
CONFLICT = 'CONFLICT'
THROTTLED = 'THROTTLED'
DATABASE_ERROR = 'DATABASE_ERROR'
INTERNAL_ERROR = 'INTERNAL_ERROR'


class ServiceError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = INTERNAL_ERROR
    default_detail = 'An unexpected error occurred'

    def __init__(self, message: Optional[str] = None, *, details: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(message or self.default_detail)
        self.message = str(self.detail)
        self.details = details
        self.hint = hint


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = VALIDATION_ERROR
    default_detail = 'Validation failed'


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = NOT_FOUND
    default_detail = 'Resource not found'


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = CONFLICT
    default_detail = 'Resource already exists'


class DatabaseFailure(ServiceError):
    code = DATABASE_ERROR
    default_detail = 'Database query failed'


class InternalError(ServiceError):
    code = INTERNAL_ERROR


_STATUS_CODES = {
    400: VALIDATION_ERROR,
    401: UNAUTHORIZED,
    403: FORBIDDEN,
    404: NOT_FOUND,
    405: 'METHOD_NOT_ALLOWED',
    409: CONFLICT,
    415: 'UNSUPPORTED_MEDIA_TYPE',
    429: THROTTLED,
}


def error_body(code: str, message: str, details: Optional[str] = None, hint: Optional[str] = None) -> dict[str, Any]:
    body: dict[str, Any] = {'code': code, 'message': message}
    if details:
        body['details'] = details
    if hint:
        body['hint'] = hint
    return body


def first_validation_error(detail: Any, field: str = '') -> tuple[str, str]:
    """Return ``(field, message)`` of the first violated constraint."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            return first_validation_error(value, field if key == 'non_field_errors' else key)
        return field, 'Validation failed'
    if isinstance(detail, (list, tuple)):
        if not detail:
            return field, 'Validation failed'
        return first_validation_error(detail[0], field)
    return field, str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, ServiceError):
        set_rollback()
        return Response(error_body(exc.code, exc.message, exc.details, exc.hint), status=exc.status_code)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.error("Unhandled error in %s", context.get('view'), exc_info=exc)
        return Response(error_body(INTERNAL_ERROR, 'An unexpected error occurred'), status=500)

    code = _STATUS_CODES.get(resp.status_code, 'API_ERROR')
    # WWW-Authenticate and Retry-After set by DRF must survive the rewrite
    headers = {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
    if isinstance(exc, exceptions.ValidationError):
        field, message = first_validation_error(exc.detail)
        details = f"field: {field}" if field else None
        return Response(error_body(code, message, details), status=resp.status_code, headers=headers)

    detail = resp.data.get('detail') if isinstance(resp.data, dict) else resp.data
    return Response(error_body(code, str(detail)), status=resp.status_code, headers=headers)
