"""
API error types and the unified DRF exception handler.

Every error leaves the API as ``{"ok": false, "error": {"code", "message"}}``
with optional extra keys (field ``errors`` for validation failures,
``required_roles``/``user_role`` for role checks).
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class APIError(exceptions.APIException):
    """Base for domain errors that carry a stable code and extra payload."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'api_error'
    default_detail = 'Request failed.'

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail, code)
        self.code = code or self.default_code
        self.extra = extra


class BusinessRuleError(APIError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = 'business_rule'
    default_detail = 'The request violates a business rule.'


class ConflictError(APIError):
    status_code = status.HTTP_409_CONFLICT
    default_code = 'conflict'
    default_detail = 'The resource already exists.'


class InvalidCredentials(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = 'INVALID_CREDENTIALS'
    default_detail = 'Invalid credentials.'


class AccountDeactivated(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = 'ACCOUNT_DEACTIVATED'
    default_detail = 'Account is deactivated.'


class InsufficientRole(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = 'INSUFFICIENT_ROLE'
    default_detail = 'Insufficient permissions.'


def _error(code: str, message, status_code: int, **extra) -> Response:
    body = {'code': code, 'message': message}
    body.update(extra)
    return Response({'ok': False, 'error': body}, status=status_code)


def api_exception_handler(exc, context):
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled API error in %s', context.get('view'))
        message = str(exc) if settings.DEBUG else 'Internal server error'
        return _error('server_error', message, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, exceptions.ValidationError):
        errors = resp.data if isinstance(resp.data, dict) else {'non_field_errors': resp.data}
        return _error('validation_failed', 'Validation failed', status.HTTP_422_UNPROCESSABLE_ENTITY, errors=errors)

    if isinstance(exc, APIError):
        return _error(exc.code, str(exc.detail), resp.status_code, **exc.extra)

    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        code = 'UNAUTHENTICATED' if isinstance(exc, exceptions.NotAuthenticated) else 'AUTHENTICATION_FAILED'
        resp.data = {'ok': False, 'error': {'code': code, 'message': str(exc.detail)}}
        return resp

    if isinstance(exc, exceptions.NotFound):
        return _error('not_found', str(exc.detail), resp.status_code)

    detail = resp.data.get('detail', resp.data) if isinstance(resp.data, dict) else str(resp.data)
    codes = exc.get_codes() if isinstance(exc, exceptions.APIException) else None
    code = codes if isinstance(codes, str) else 'api_error'
    return _error(code, detail, resp.status_code)
