"""
Response helpers shared by the API views.

Successful responses are wrapped as ``{"ok": true, "data": ...}``; list
endpoints add ``pagination`` with ``total``, ``page`` and ``pageSize``.
``?all=true`` disables paging.
"""
from __future__ import annotations

from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework import status as http
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from hostel.serializers.fields import IMAGE_OR_PDF, IdFilterSerializer, validate_upload

MAX_PAGE_SIZE = 100


def ok(data=None, *, status: int = http.HTTP_200_OK, message: str | None = None, **extra) -> Response:
    body = {'ok': True, 'data': data}
    if message:
        body['message'] = message
    body.update(extra)
    return Response(body, status=status)


def created(data=None, **extra) -> Response:
    return ok(data, status=http.HTTP_201_CREATED, **extra)


def _int(value, default: int) -> int:
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return default


def wants_all(request) -> bool:
    return str(request.query_params.get('all', '')).lower() in ('1', 'true', 'yes')


def paginate(request, qs, serializer_class=None, *, transform=None, **extra) -> Response:
    """Page ``qs`` and serialize it with ``serializer_class`` or ``transform``."""
    total = qs.count() if hasattr(qs, 'count') and not isinstance(qs, list) else len(qs)
    page_size = min(_int(request.query_params.get('pageSize') or request.query_params.get('per_page'), settings.API_PAGE_SIZE), MAX_PAGE_SIZE)
    page = _int(request.query_params.get('page'), 1)
    if wants_all(request):
        items = qs
        page, page_size = 1, total
    else:
        start = (page - 1) * page_size
        items = qs[start:start + page_size]
    if serializer_class is not None:
        data = serializer_class(items, many=True, context={'request': request}).data
    elif transform is not None:
        data = [transform(obj) for obj in items]
    else:
        data = list(items)
    return ok(data, pagination={'total': total, 'page': page, 'pageSize': page_size}, **extra)


def upload_from(request, key: str, extensions=IMAGE_OR_PDF):
    """Validated single upload under ``key`` or None."""
    files = getattr(request, 'FILES', None)
    upload = files.get(key) if files else None
    if upload is not None:
        validate_upload(upload, field=key, extensions=extensions)
    return upload


def scoped(model, request):
    """Rows of a hostel-scoped ``model`` for the request's current hostel."""
    return model.objects.for_hostel(getattr(request, 'hostel_id', None))


def get_scoped(model, request, pk, qs=None):
    return get_object_or_404(qs if qs is not None else scoped(model, request), pk=pk)


def current_student(request):
    student = request.user.student_record
    if student is None:
        raise NotFound('Student record not found for this account')
    return student


def current_staff(request):
    staff = request.user.staff_record
    if staff is None:
        raise NotFound('Staff record not found for this account')
    return staff


def id_filters(request, *names) -> dict:
    """Validated integer query parameters among ``names``; absent ones are left out."""
    q = IdFilterSerializer(data=request.query_params, names=names)
    q.is_valid(raise_exception=True)
    return dict(q.validated_data)
