"""
Check-in/check-out records managed by admins, for students and staff.

The same views serve both tables; the URL table binds each one to an
:class:`~hostel.services.attendance.AttendanceKind`.
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes

from hostel.permissions import IsAdminRole
from hostel.serializers.attendance import (
    AttendanceQuerySerializer,
    DeclineSerializer,
    StaffCheckInCheckOutSerializer,
    StudentCheckInCheckOutSerializer,
)
from hostel.services import attendance as attendance_service
from hostel.views.common import created, get_scoped, id_filters, ok, paginate, scoped

SERIALIZERS = {
    attendance_service.STUDENT: StudentCheckInCheckOutSerializer,
    attendance_service.STAFF: StaffCheckInCheckOutSerializer,
}


def serializer_for(kind):
    return SERIALIZERS[kind]


def _records(request, kind):
    return scoped(kind.model, request).select_related(kind.person_field, 'block')


def _record_views(kind):
    serializer_class = serializer_for(kind)

    @api_view(['GET', 'POST'])
    @permission_classes([IsAdminRole])
    def records(request):
        if request.method == 'GET':
            q = AttendanceQuerySerializer(data=request.query_params)
            q.is_valid(raise_exception=True)
            filters = dict(q.validated_data)
            # ?student_id= on the student table, ?staff_id= on the staff one
            ids = {key: filters.pop(key, None) for key in ('person_id', 'student_id', 'staff_id')}
            person_id = ids[f'{kind.person_field}_id'] or ids['person_id']
            if person_id:
                filters[f'{kind.person_field}_id'] = person_id
            qs = _records(request, kind).filter(**filters).order_by('-created_at', '-id')
            return paginate(request, qs, serializer_class)

        s = serializer_class(data=request.data)
        s.is_valid(raise_exception=True)
        record = attendance_service.admin_create(kind, dict(s.validated_data))
        return created(serializer_class(record).data, message='Record created successfully')

    @api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
    @permission_classes([IsAdminRole])
    def record_detail(request, pk: int):
        record = get_scoped(kind.model, request, pk, qs=_records(request, kind))
        if request.method == 'GET':
            return ok(serializer_class(record).data)
        if request.method == 'DELETE':
            record.delete()
            return ok(None, message='Record deleted successfully')
        s = serializer_class(record, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        record = attendance_service.admin_update(record, dict(s.validated_data))
        return ok(serializer_class(record).data, message='Record updated successfully')

    @api_view(['POST'])
    @permission_classes([IsAdminRole])
    def approve(request, pk: int):
        record = get_scoped(kind.model, request, pk, qs=_records(request, kind))
        record = attendance_service.approve_checkout(record, user=request.user)
        return ok(serializer_class(record).data, message='Checkout approved successfully')

    @api_view(['POST'])
    @permission_classes([IsAdminRole])
    def decline(request, pk: int):
        record = get_scoped(kind.model, request, pk, qs=_records(request, kind))
        s = DeclineSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        record = attendance_service.decline_checkout(record, user=request.user, remarks=s.validated_data.get('remarks', ''))
        return ok(serializer_class(record).data, message='Checkout declined successfully')

    @api_view(['GET'])
    @permission_classes([IsAdminRole])
    def today(request):
        qs = attendance_service.today_records(
            kind, hostel_id=request.hostel_id, block_id=id_filters(request, 'block_id').get('block_id'),
        )
        return ok(serializer_class(qs, many=True).data, date=timezone.localdate().isoformat())

    return records, record_detail, approve, decline, today


(
    student_records,
    student_record_detail,
    student_approve_checkout,
    student_decline_checkout,
    student_today_attendance,
) = _record_views(attendance_service.STUDENT)

(
    staff_records,
    staff_record_detail,
    staff_approve_checkout,
    staff_decline_checkout,
    staff_today_attendance,
) = _record_views(attendance_service.STAFF)
