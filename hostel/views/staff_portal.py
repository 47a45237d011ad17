"""
Self-service endpoints for signed-in staff members (``/api/my-staff/...``).
"""
from __future__ import annotations

from django.db import transaction
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes

from hostel.permissions import IsStaffRole
from hostel.serializers.attendance import SelfCheckinSerializer, SelfCheckoutSerializer
from hostel.serializers.fields import IMAGES
from hostel.serializers.finance import SalarySerializer
from hostel.serializers.people import StaffProfileSerializer, StaffSerializer
from hostel.services import attendance as attendance_service
from hostel.services import finance as finance_service
from hostel.services import notices as notice_service
from hostel.services.images import save_upload
from hostel.views import complaints as complaint_views
from hostel.views.attendance import serializer_for
from hostel.views.common import created, current_staff, id_filters, ok, paginate, upload_from
from hostel.views.notices import notice_feed, notice_in_feed
from hostel.views.people import STAFF_DIR

KIND = attendance_service.STAFF
RecordSerializer = serializer_for(KIND)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsStaffRole])
def profile(request):
    staff = current_staff(request)
    if request.method == 'GET':
        return ok(StaffSerializer(staff).data)
    s = StaffProfileSerializer(staff, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'staff_image', IMAGES)
    with transaction.atomic():
        staff = s.save()
        if upload is not None:
            save_upload(upload, STAFF_DIR, instance=staff, field='staff_image')
    return ok(StaffSerializer(staff).data, message='Profile updated successfully')


@api_view(['GET'])
@permission_classes([IsStaffRole])
def complaints_list(request):
    return complaint_views.own_complaints(request, 'staff', current_staff(request))


@api_view(['POST'])
@permission_classes([IsStaffRole])
def complaints_create(request):
    return complaint_views.create_own_complaint(request, 'staff', current_staff(request))


@api_view(['GET'])
@permission_classes([IsStaffRole])
def complaints_view(request, pk: int):
    complain = complaint_views.get_own_complaint('staff', current_staff(request), pk)
    return ok(complaint_views.OwnComplainSerializer(complain).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsStaffRole])
def complaints_update(request, pk: int):
    complain = complaint_views.get_own_complaint('staff', current_staff(request), pk)
    return complaint_views.update_own_complaint(request, complain)


@api_view(['GET'])
@permission_classes([IsStaffRole])
def notices(request):
    return notice_feed(request, notice_service.notices_for_staff(current_staff(request)))


@api_view(['GET'])
@permission_classes([IsStaffRole])
def notice_detail(request, pk: int):
    return notice_in_feed(notice_service.notices_for_staff(current_staff(request)), pk)


@api_view(['GET'])
@permission_classes([IsStaffRole])
def financials(request):
    result = finance_service.staff_financials(current_staff(request))
    return paginate(request, result['salaries'], SalarySerializer, summary=result['summary'])


@api_view(['GET'])
@permission_classes([IsStaffRole])
def salary_history(request):
    qs = finance_service.staff_financials(current_staff(request))['salaries']
    qs = qs.filter(**id_filters(request, 'year'))
    return paginate(request, qs, SalarySerializer)


@api_view(['POST'])
@permission_classes([IsStaffRole])
def checkin(request):
    s = SelfCheckinSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    record, is_new = attendance_service.self_checkin(
        KIND, current_staff(request),
        block=s.validated_data.get('block'), remarks=s.validated_data.get('remarks', ''),
    )
    data = RecordSerializer(record).data
    if is_new:
        return created(data, message='Checked in successfully')
    return ok(data, message='Welcome back, check-in recorded')


@api_view(['POST'])
@permission_classes([IsStaffRole])
def checkout(request):
    s = SelfCheckoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    record = attendance_service.self_checkout(
        KIND, current_staff(request),
        block=vd.get('block'), checkout_time=vd.get('checkout_time'),
        estimated_checkin_date=vd.get('estimated_checkin_date'), remarks=vd.get('remarks', ''),
    )
    return created(RecordSerializer(record).data, message='Checkout request submitted successfully')


@api_view(['GET'])
@permission_classes([IsStaffRole])
def my_checkincheckouts(request):
    qs = KIND.records_for(current_staff(request)).select_related('block').order_by('-created_at', '-id')
    if request.query_params.get('status'):
        qs = qs.filter(status=request.query_params['status'])
    return paginate(request, qs, RecordSerializer)


@api_view(['GET'])
@permission_classes([IsStaffRole])
def today_attendance(request):
    qs = KIND.records_for(current_staff(request)).filter(date=timezone.localdate()).order_by('-created_at', '-id')
    return ok(RecordSerializer(qs, many=True).data, date=timezone.localdate().isoformat())
