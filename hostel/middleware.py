"""
Request middleware that selects the hostel a request operates on.

The hostel id is read from the ``X-Hostel-ID`` header (name configurable
through ``HOSTEL_HEADER``) and kept in a context variable so that models
can fill their hostel foreign key on save without access to the request.
"""
from __future__ import annotations

from contextvars import ContextVar

from django.conf import settings
from django.http import JsonResponse

_current_hostel: ContextVar[int | None] = ContextVar('current_hostel', default=None)


def get_current_hostel_id() -> int | None:
    return _current_hostel.get() or getattr(settings, 'HOSTEL_DEFAULT_ID', None)


def set_current_hostel_id(hostel_id: int | None):
    """Set the current hostel and return a token for ``reset_current_hostel``."""
    return _current_hostel.set(hostel_id)


def reset_current_hostel(token) -> None:
    _current_hostel.reset(token)


class CurrentHostelMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response
        header = getattr(settings, 'HOSTEL_HEADER', 'X-Hostel-ID')
        self.meta_key = 'HTTP_' + header.upper().replace('-', '_')

    def __call__(self, request):
        raw = (request.META.get(self.meta_key) or '').strip()
        hostel_id = None
        if raw:
            if not raw.isdigit():
                return JsonResponse(
                    {'ok': False, 'error': {'code': 'invalid_hostel', 'message': 'Hostel header must be a numeric id'}},
                    status=400,
                )
            hostel_id = int(raw)
        request.hostel_id = hostel_id or get_current_hostel_id()
        token = set_current_hostel_id(hostel_id)
        try:
            return self.get_response(request)
        finally:
            reset_current_hostel(token)
