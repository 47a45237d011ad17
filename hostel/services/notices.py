"""
Notice audience rules, attachments and publication broadcast.
"""
from __future__ import annotations

import logging
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.db.models import Q

from hostel.models import Attachment, Block, Notice, Staff, Student, User
from hostel.services import attachments

logger = logging.getLogger(__name__)

NOTICE_DIR = 'notices'


def active_notices():
    return Notice.objects.filter(status='active').select_related('student', 'staff', 'block')


def notices_for_student(student: Student):
    q = Q(target_type__in=[Notice.TARGET_ALL, Notice.TARGET_STUDENT])
    q |= Q(target_type=Notice.TARGET_SPECIFIC_STUDENT, student=student)
    block_id = student.room.block_id if student.room_id else None
    if block_id:
        q |= Q(target_type=Notice.TARGET_BLOCK, block_id=block_id)
    return active_notices().filter(q)


def notices_for_staff(staff: Staff):
    q = Q(target_type__in=[Notice.TARGET_ALL, Notice.TARGET_STAFF])
    q |= Q(target_type=Notice.TARGET_SPECIFIC_STAFF, staff=staff)
    return active_notices().filter(q)


def notices_for_block(block_id: int):
    return active_notices().filter(
        Q(target_type=Notice.TARGET_ALL) | Q(target_type=Notice.TARGET_BLOCK, block_id=block_id)
    )


def notices_for_user(user: User):
    """Active notices visible to ``user`` according to its role."""
    if user.role == User.ROLE_STUDENT:
        student = user.student_record
        if student:
            return notices_for_student(student)
    elif user.role == User.ROLE_STAFF:
        staff = user.staff_record
        if staff:
            return notices_for_staff(staff)
    return active_notices().filter(target_type=Notice.TARGET_ALL)


def add_attachments(notice: Notice, files) -> list[Attachment]:
    created = attachments.add_attachments(notice, files, NOTICE_DIR)
    if created and not notice.notice_attachment:
        notice.notice_attachment = created[0].path
        notice.save(update_fields=['notice_attachment', 'updated_at'])
    return created


@transaction.atomic
def delete_attachment(notice: Notice, attachment: Attachment) -> None:
    was_main = notice.notice_attachment == attachment.path
    attachments.remove_attachment(attachment)
    if was_main:
        nxt = notice.attachments.order_by('id').first()
        notice.notice_attachment = nxt.path if nxt else ''
        notice.save(update_fields=['notice_attachment', 'updated_at'])


def broadcast_notice(notice: Notice) -> None:
    if notice.status != 'active':
        return
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    payload = {
        'type': 'notice.published',
        'id': notice.id,
        'title': notice.title,
        'notice_type': notice.notice_type,
        'target_type': notice.target_type,
        'student_id': notice.student_id,
        'staff_id': notice.staff_id,
        'block_id': notice.block_id,
        'schedule_time': notice.schedule_time.isoformat(),
    }
    async_to_sync(channel_layer.group_send)('notices', payload)
    logger.info('Notice %s published to %s', notice.id, notice.target_type)


def selection_list(kind: str, hostel_id: Optional[int] = None) -> list[dict]:
    if kind == 'students':
        qs = Student.objects.for_hostel(hostel_id).filter(is_active=True).order_by('student_name')
        return [{'id': s.id, 'name': s.student_name, 'student_id': s.student_id} for s in qs]
    if kind == 'staff':
        qs = Staff.objects.for_hostel(hostel_id).filter(is_active=True).order_by('staff_name')
        return [{'id': s.id, 'name': s.staff_name, 'staff_id': s.staff_id} for s in qs]
    qs = Block.objects.for_hostel(hostel_id).order_by('block_name')
    return [{'id': b.id, 'name': b.block_name} for b in qs]
