"""
Check-in / check-out workflow shared by students and staff.

A checkout is requested (``pending``), approved or declined by an admin,
and closed by the next check-in, which fills ``checkin_time`` on the
approved record and sends it back to ``pending`` for review.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from hostel.exceptions import BusinessRuleError
from hostel.models import (
    CheckInCheckOutBase,
    StaffCheckInCheckOut,
    StudentCheckInCheckOut,
)
from hostel.services.audit import log_action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceKind:
    model: type
    person_field: str

    def records_for(self, person):
        return self.model.objects.filter(**{self.person_field: person})


STUDENT = AttendanceKind(StudentCheckInCheckOut, 'student')
STAFF = AttendanceKind(StaffCheckInCheckOut, 'staff')


def default_block_for(person):
    room = getattr(person, 'room', None)
    return room.block if room is not None else None


def has_open_checkin(kind: AttendanceKind, person, date) -> bool:
    return kind.records_for(person).filter(date=date, checkin_time__isnull=False, checkout_time__isnull=True).exists()


def has_incomplete_record(kind: AttendanceKind, person, date) -> bool:
    """Whether ``person`` has a record on ``date`` still missing its check-in or its checkout."""
    return kind.records_for(person).filter(
        Q(checkin_time__isnull=True) | Q(checkout_time__isnull=True), date=date,
    ).exists()


@transaction.atomic
def admin_create(kind: AttendanceKind, data: dict) -> CheckInCheckOutBase:
    person = data[kind.person_field]
    date = data.get('date') or timezone.localdate()
    if has_incomplete_record(kind, person, date):
        raise BusinessRuleError('An incomplete check-in record already exists for this date.')
    checkin, checkout = data.get('checkin_time'), data.get('checkout_time')
    status = CheckInCheckOutBase.STATUS_APPROVED if checkin and checkout else CheckInCheckOutBase.STATUS_CHECKED_IN
    fields = dict(data, date=date, status=data.get('status') or status)
    if not fields.get('block') and kind is STUDENT:
        fields['block'] = default_block_for(person)
    return kind.model.objects.create(**fields)


@transaction.atomic
def admin_update(record: CheckInCheckOutBase, data: dict) -> CheckInCheckOutBase:
    for key, value in data.items():
        setattr(record, key, value)
    if 'status' not in data:
        if record.checkin_time and record.checkout_time and ('checkin_time' in data or 'checkout_time' in data):
            record.status = CheckInCheckOutBase.STATUS_PENDING
        elif 'checkin_time' in data and record.checkin_time and not record.checkout_time:
            record.status = CheckInCheckOutBase.STATUS_CHECKED_IN
    record.save()
    return record


@transaction.atomic
def approve_checkout(record: CheckInCheckOutBase, *, user) -> CheckInCheckOutBase:
    record.status = CheckInCheckOutBase.STATUS_APPROVED
    if not record.checkout_time:
        record.checkout_time = timezone.now()
    record.save()
    log_action(user=user, action='checkout_approve', object_type=record._meta.model_name, object_id=record.id)
    return record


@transaction.atomic
def decline_checkout(record: CheckInCheckOutBase, *, user, remarks: str = '') -> CheckInCheckOutBase:
    record.status = CheckInCheckOutBase.STATUS_DECLINED
    if remarks:
        record.remarks = remarks
    record.save()
    log_action(user=user, action='checkout_decline', object_type=record._meta.model_name, object_id=record.id,
               detail={'remarks': remarks})
    return record


@transaction.atomic
def self_checkin(kind: AttendanceKind, person, *, block=None, remarks: str = '') -> tuple[CheckInCheckOutBase, bool]:
    """Check ``person`` in; return the record and whether it was newly created."""
    now = timezone.now()
    block = block or default_block_for(person)
    returning = (
        kind.records_for(person)
        .select_for_update()
        .filter(status=CheckInCheckOutBase.STATUS_APPROVED, checkout_time__isnull=False, checkin_time__isnull=True)
        .order_by('-created_at', '-id')
        .first()
    )
    if returning is not None:
        returning.checkin_time = now
        if block is not None:
            returning.block = block
        if remarks:
            returning.remarks = f"{returning.remarks}. Check-in: {remarks}" if returning.remarks else f"Check-in: {remarks}"
        returning.status = CheckInCheckOutBase.STATUS_PENDING
        returning.save()
        logger.info('%s %s returned, record %s closed', kind.person_field, person.pk, returning.pk)
        return returning, False

    today = timezone.localdate()
    if has_open_checkin(kind, person, today):
        raise BusinessRuleError('You are already checked in for today.')
    record = kind.model.objects.create(**{
        kind.person_field: person,
        'block': block,
        'date': today,
        'checkin_time': now,
        'status': CheckInCheckOutBase.STATUS_CHECKED_IN,
        'remarks': remarks,
    })
    return record, True


@transaction.atomic
def self_checkout(kind: AttendanceKind, person, *, block=None, checkout_time=None,
                  estimated_checkin_date=None, remarks: str = '') -> CheckInCheckOutBase:
    today = timezone.localdate()
    existing = kind.records_for(person).filter(
        date=today, status__in=[CheckInCheckOutBase.STATUS_PENDING, CheckInCheckOutBase.STATUS_APPROVED]
    ).first()
    if existing is not None:
        raise BusinessRuleError(
            f'You already have a checkout request for today. Status: {existing.get_status_display()}'
        )
    return kind.model.objects.create(**{
        kind.person_field: person,
        'block': block or default_block_for(person),
        'date': today,
        'requested_checkout_time': checkout_time or timezone.now(),
        'checkout_time': checkout_time or timezone.now(),
        'estimated_checkin_date': estimated_checkin_date,
        'remarks': remarks or f'{kind.person_field.capitalize()} checkout request',
        'status': CheckInCheckOutBase.STATUS_PENDING,
    })


def today_records(kind: AttendanceKind, *, hostel_id: Optional[int] = None, block_id: Optional[int] = None):
    qs = kind.model.objects.for_hostel(hostel_id).filter(date=timezone.localdate())
    if block_id:
        qs = qs.filter(block_id=block_id)
    return qs.select_related(kind.person_field, 'block').order_by('-created_at', '-id')
