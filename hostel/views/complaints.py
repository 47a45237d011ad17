"""
Complaints: admin CRUD plus the owner-scoped helpers used by the student
and staff portals.  Owners may edit a complaint only while it is pending.
"""
from __future__ import annotations

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied

from hostel.models import Complain
from hostel.permissions import IsAdminRole
from hostel.serializers.complaints import ComplainSerializer, OwnComplainSerializer
from hostel.services.images import delete_file, save_upload
from hostel.views.common import created, get_scoped, id_filters, ok, paginate, scoped, upload_from

COMPLAIN_DIR = 'complains'


def _save(serializer, request, **kwargs) -> Complain:
    upload = upload_from(request, 'complain_attachment')
    with transaction.atomic():
        complain = serializer.save(**kwargs)
        if upload is not None:
            save_upload(upload, COMPLAIN_DIR, instance=complain, field='complain_attachment')
    return complain


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def complains(request):
    if request.method == 'GET':
        qs = scoped(Complain, request).select_related('student', 'staff')
        params = request.query_params
        if params.get('status'):
            qs = qs.filter(status=params['status'])
        qs = qs.filter(**id_filters(request, 'student_id', 'staff_id'))
        return paginate(request, qs, ComplainSerializer)

    s = ComplainSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    complain = _save(s, request)
    return created(ComplainSerializer(complain).data, message='Complaint created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def complain_detail(request, pk: int):
    complain = get_scoped(Complain, request, pk)
    if request.method == 'GET':
        return ok(ComplainSerializer(complain).data)

    if request.method == 'DELETE':
        path = complain.complain_attachment
        complain.delete()
        delete_file(path)
        return ok(None, message='Complaint deleted successfully')

    s = ComplainSerializer(complain, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    complain = _save(s, request)
    return ok(ComplainSerializer(complain).data, message='Complaint updated successfully')


# ---------------------------------------------------------------------
# Owner helpers for the portals
# ---------------------------------------------------------------------
def own_complaints(request, owner_field: str, owner):
    qs = Complain.objects.filter(**{owner_field: owner}).select_related('student', 'staff')
    if request.query_params.get('status'):
        qs = qs.filter(status=request.query_params['status'])
    return paginate(request, qs, OwnComplainSerializer)


def create_own_complaint(request, owner_field: str, owner):
    s = OwnComplainSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    complain = _save(s, request, **{owner_field: owner})
    return created(OwnComplainSerializer(complain).data, message='Complaint submitted successfully')


def get_own_complaint(owner_field: str, owner, pk: int) -> Complain:
    return get_object_or_404(Complain.objects.filter(**{owner_field: owner}), pk=pk)


def update_own_complaint(request, complain: Complain):
    if complain.status != Complain.STATUS_PENDING:
        raise PermissionDenied('Only pending complaints can be edited.')
    s = OwnComplainSerializer(complain, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    complain = _save(s, request)
    return ok(OwnComplainSerializer(complain).data, message='Complaint updated successfully')
