"""
Admission inquiries and the seats reserved for them.

Admins see every inquiry of the current hostel; staff members see and
manage only the inquiries they recorded.
"""
from __future__ import annotations

from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes

from hostel.models import Inquiry, InquirySeater, User
from hostel.permissions import IsAdminOrStaffRole, IsAdminRole
from hostel.serializers.fields import IMAGE_OR_PDF, file_list, validate_upload
from hostel.serializers.inquiries import InquirySeaterSerializer, InquirySerializer
from hostel.services import attachments
from hostel.views.common import created, current_staff, get_scoped, id_filters, ok, paginate, scoped

INQUIRY_DIR = 'inquiries'


def _visible(request):
    qs = scoped(Inquiry, request).prefetch_related('attachments')
    if request.user.role == User.ROLE_STAFF:
        qs = qs.filter(staff=current_staff(request))
    return qs


def _save(serializer, request, **kwargs) -> Inquiry:
    files = file_list(request, 'attachments')
    for f in files:
        validate_upload(f, field='attachments', extensions=IMAGE_OR_PDF)
    with transaction.atomic():
        inquiry = serializer.save(**kwargs)
        if files:
            attachments.add_attachments(inquiry, files, INQUIRY_DIR)
    return inquiry


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrStaffRole])
def inquiries(request):
    if request.method == 'GET':
        qs = _visible(request)
        params = request.query_params
        if params.get('search'):
            term = params['search']
            qs = qs.filter(Q(name__icontains=term) | Q(phone__icontains=term) | Q(email__icontains=term))
        qs = qs.filter(**id_filters(request, 'seater_type'))
        return paginate(request, qs, InquirySerializer)

    s = InquirySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    extra = {'staff': current_staff(request)} if request.user.role == User.ROLE_STAFF else {}
    inquiry = _save(s, request, **extra)
    return created(InquirySerializer(inquiry).data, message='Inquiry created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminOrStaffRole])
def inquiry_detail(request, pk: int):
    inquiry = get_object_or_404(_visible(request), pk=pk)
    if request.method == 'GET':
        return ok(InquirySerializer(inquiry).data)

    if request.method == 'DELETE':
        with transaction.atomic():
            attachments.delete_all(inquiry)
            inquiry.delete()
        return ok(None, message='Inquiry deleted successfully')

    s = InquirySerializer(inquiry, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    inquiry = _save(s, request)
    return ok(InquirySerializer(Inquiry.objects.get(pk=inquiry.pk)).data, message='Inquiry updated successfully')


@api_view(['GET'])
@permission_classes([IsAdminOrStaffRole])
def inquiries_by_block(request, block_id: int):
    return paginate(request, _visible(request).filter(block_id=block_id), InquirySerializer)


@api_view(['DELETE'])
@permission_classes([IsAdminOrStaffRole])
def inquiry_attachment_delete(request, pk: int, attachment_id: int):
    inquiry = get_object_or_404(_visible(request), pk=pk)
    attachments.remove_attachment(get_object_or_404(inquiry.attachments.all(), pk=attachment_id))
    return ok(InquirySerializer(Inquiry.objects.get(pk=inquiry.pk)).data, message='Attachment deleted successfully')


# ---------------------------------------------------------------------
# Inquiry seaters
# ---------------------------------------------------------------------
def _seaters(request):
    return scoped(InquirySeater, request).select_related('room', 'inquiry')


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def inquiry_seaters(request):
    if request.method == 'GET':
        qs = _seaters(request)
        if request.query_params.get('status'):
            qs = qs.filter(status=request.query_params['status'])
        return paginate(request, qs, InquirySeaterSerializer)

    s = InquirySeaterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    seater = s.save()
    return created(InquirySeaterSerializer(seater).data, message='Inquiry seater created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def inquiry_seater_detail(request, pk: int):
    seater = get_scoped(InquirySeater, request, pk, qs=_seaters(request))
    if request.method == 'GET':
        return ok(InquirySeaterSerializer(seater).data)

    if request.method == 'DELETE':
        seater.delete()
        return ok(None, message='Inquiry seater deleted successfully')

    s = InquirySeaterSerializer(seater, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    seater = s.save()
    return ok(InquirySeaterSerializer(seater).data, message='Inquiry seater updated successfully')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def seaters_by_inquiry(request, inquiry_id: int):
    return ok(InquirySeaterSerializer(_seaters(request).filter(inquiry_id=inquiry_id), many=True).data)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def seaters_by_room(request, room_id: int):
    return ok(InquirySeaterSerializer(_seaters(request).filter(room_id=room_id), many=True).data)
