"""
Notice board: admin management, audience lookups and the notice feed
for the signed-in user.
"""
from __future__ import annotations

from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound

from hostel.models import Block, Notice, Staff, Student
from hostel.permissions import IsActiveUser, IsAdminRole
from hostel.serializers.fields import IMAGE_OR_PDF, file_list, validate_upload
from hostel.serializers.notices import NoticeSerializer
from hostel.services import notices as notice_service
from hostel.services.images import delete_file
from hostel.views.common import created, get_scoped, ok, paginate, scoped

SELECTION_KINDS = ('students', 'staff', 'blocks')


def _uploads(request) -> list:
    files = file_list(request, 'attachments')
    for f in files:
        validate_upload(f, field='attachments', extensions=IMAGE_OR_PDF)
    return files


def _save(serializer, request) -> Notice:
    files = _uploads(request)
    with transaction.atomic():
        notice = serializer.save()
        if files:
            notice_service.add_attachments(notice, files)
        transaction.on_commit(lambda: notice_service.broadcast_notice(notice))
    return notice


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def notices(request):
    if request.method == 'GET':
        qs = scoped(Notice, request).prefetch_related('attachments')
        params = request.query_params
        for key in ('target_type', 'status', 'notice_type'):
            if params.get(key):
                qs = qs.filter(**{key: params[key]})
        if params.get('search'):
            qs = qs.filter(Q(title__icontains=params['search']) | Q(description__icontains=params['search']))
        return paginate(request, qs, NoticeSerializer)

    s = NoticeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    notice = _save(s, request)
    return created(NoticeSerializer(notice).data, message='Notice created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def notice_detail(request, pk: int):
    notice = get_scoped(Notice, request, pk)
    if request.method == 'GET':
        return ok(NoticeSerializer(notice).data)

    if request.method == 'DELETE':
        paths = [a.path for a in notice.attachments.all()]
        notice.delete()
        for path in paths:
            delete_file(path)
        return ok(None, message='Notice deleted successfully')

    s = NoticeSerializer(notice, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    notice = _save(s, request)
    return ok(NoticeSerializer(notice).data, message='Notice updated successfully')


@api_view(['DELETE'])
@permission_classes([IsAdminRole])
def notice_attachment_delete(request, pk: int, attachment_id: int):
    notice = get_scoped(Notice, request, pk)
    attachment = get_object_or_404(notice.attachments.all(), pk=attachment_id)
    notice_service.delete_attachment(notice, attachment)
    notice.refresh_from_db()
    return ok(NoticeSerializer(notice).data, message='Attachment deleted successfully')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def notices_by_target(request, target_type: str):
    if target_type not in dict(Notice.TARGET_CHOICES):
        raise NotFound('Unknown target type')
    qs = scoped(Notice, request).filter(target_type=target_type)
    return paginate(request, qs, NoticeSerializer)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def notices_for_student(request, student_id: int):
    student = get_scoped(Student, request, student_id, qs=scoped(Student, request).select_related('room'))
    return paginate(request, notice_service.notices_for_student(student), NoticeSerializer)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def notices_for_staff(request, staff_id: int):
    staff = get_scoped(Staff, request, staff_id)
    return paginate(request, notice_service.notices_for_staff(staff), NoticeSerializer)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def notices_for_block(request, block_id: int):
    block = get_scoped(Block, request, block_id)
    return paginate(request, notice_service.notices_for_block(block.id), NoticeSerializer)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def notice_selection(request, kind: str):
    if kind not in SELECTION_KINDS:
        raise NotFound('Unknown selection list')
    return ok(notice_service.selection_list(kind, request.hostel_id))


@api_view(['GET'])
@permission_classes([IsActiveUser])
def user_notices(request):
    return notice_feed(request, notice_service.notices_for_user(request.user))


# also used by the student and staff portals
def notice_feed(request, qs):
    if request.query_params.get('notice_type'):
        qs = qs.filter(notice_type=request.query_params['notice_type'])
    return paginate(request, qs.prefetch_related('attachments'), NoticeSerializer)


def notice_in_feed(qs, pk: int):
    notice = qs.filter(pk=pk).first()
    if notice is None:
        raise NotFound('Notice not found')
    return ok(NoticeSerializer(notice).data)
