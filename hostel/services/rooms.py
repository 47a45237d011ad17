from decimal import Decimal
from typing import Optional

from django.db.models import F, Sum, Value, DecimalField
from django.db.models.functions import Coalesce

from hostel.exceptions import BusinessRuleError
from hostel.models import Room, Student


def room_queryset(hostel_id: Optional[int] = None):
    return Room.objects.for_hostel(hostel_id).select_related('block').with_occupancy()


def check_capacity_change(room: Room, new_capacity: int) -> None:
    occupied = room.students.filter(is_active=True).count()
    if new_capacity < occupied:
        raise BusinessRuleError(
            f'Cannot reduce capacity to {new_capacity}. Room currently has {occupied} students.',
            current_occupancy=occupied,
        )


def check_room_has_space(room: Room, *, exclude: Optional[Student] = None) -> None:
    """Raise unless ``room`` has a free bed; the room row stays locked until the transaction ends."""
    room = Room.objects.select_for_update().get(pk=room.pk)
    qs = room.students.filter(is_active=True)
    if exclude is not None and exclude.pk:
        qs = qs.exclude(pk=exclude.pk)
    if qs.count() >= room.capacity:
        raise BusinessRuleError(f'Room {room.room_name} is already full.')


def delete_room(room: Room) -> None:
    if room.students.exists():
        raise BusinessRuleError('Cannot delete room with assigned students.')
    room.delete()


def available_rooms(hostel_id: Optional[int] = None):
    return (
        room_queryset(hostel_id)
        .exclude(status=Room.STATUS_MAINTENANCE)
        .filter(occupancy__lt=F('capacity'))
        .order_by('room_name')
    )


def room_students(room: Room) -> list[dict]:
    students = (
        room.students.filter(is_active=True)
        .annotate(due_amount=Coalesce(Sum('incomes__due_amount'), Value(Decimal('0')), output_field=DecimalField(max_digits=12, decimal_places=2)))
        .order_by('student_name')
    )
    return [
        {
            'id': s.id,
            'student_id': s.student_id,
            'student_name': s.student_name,
            'email': s.email,
            'contact_number': s.contact_number,
            'due_amount': s.due_amount,
        }
        for s in students
    ]
