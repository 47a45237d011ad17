"""
Self-service endpoints for signed-in students (``/api/student/...``).
"""
from __future__ import annotations

from django.db import transaction
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes

from hostel.permissions import IsStudentRole
from hostel.serializers.attendance import SelfCheckinSerializer, SelfCheckoutSerializer
from hostel.serializers.fields import IMAGES
from hostel.serializers.finance import IncomeSerializer
from hostel.serializers.people import StudentProfileSerializer, StudentSerializer
from hostel.services import attendance as attendance_service
from hostel.services import finance as finance_service
from hostel.services import notices as notice_service
from hostel.services.images import save_upload
from hostel.views import complaints as complaint_views
from hostel.views.attendance import serializer_for
from hostel.views.common import created, current_student, ok, paginate, upload_from
from hostel.views.notices import notice_feed, notice_in_feed
from hostel.views.people import STUDENT_DIR

KIND = attendance_service.STUDENT
RecordSerializer = serializer_for(KIND)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsStudentRole])
def profile(request):
    student = current_student(request)
    if request.method == 'GET':
        return ok(StudentSerializer(student).data)
    s = StudentProfileSerializer(student, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'student_image', IMAGES)
    with transaction.atomic():
        student = s.save()
        if upload is not None:
            save_upload(upload, STUDENT_DIR, instance=student, field='student_image')
    return ok(StudentSerializer(student).data, message='Profile updated successfully')


@api_view(['GET', 'POST'])
@permission_classes([IsStudentRole])
def complains(request):
    student = current_student(request)
    if request.method == 'GET':
        return complaint_views.own_complaints(request, 'student', student)
    return complaint_views.create_own_complaint(request, 'student', student)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsStudentRole])
def complain_detail(request, pk: int):
    complain = complaint_views.get_own_complaint('student', current_student(request), pk)
    if request.method == 'GET':
        return ok(complaint_views.OwnComplainSerializer(complain).data)
    return complaint_views.update_own_complaint(request, complain)


@api_view(['GET'])
@permission_classes([IsStudentRole])
def notices(request):
    return notice_feed(request, notice_service.notices_for_student(current_student(request)))


@api_view(['GET'])
@permission_classes([IsStudentRole])
def notice_detail(request, pk: int):
    return notice_in_feed(notice_service.notices_for_student(current_student(request)), pk)


@api_view(['GET'])
@permission_classes([IsStudentRole])
def financials(request):
    result = finance_service.student_financials(current_student(request))
    return paginate(request, result['incomes'], IncomeSerializer, summary=result['summary'])


@api_view(['GET'])
@permission_classes([IsStudentRole])
def payment_history(request):
    qs = finance_service.student_financials(current_student(request))['incomes'].filter(received_amount__gt=0)
    return paginate(request, qs, IncomeSerializer)


@api_view(['GET'])
@permission_classes([IsStudentRole])
def outstanding_dues(request):
    qs = finance_service.student_financials(current_student(request))['incomes'].filter(due_amount__gt=0)
    return paginate(request, qs, IncomeSerializer, summary=finance_service.income_totals(qs))


@api_view(['POST'])
@permission_classes([IsStudentRole])
def checkin(request):
    s = SelfCheckinSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    record, is_new = attendance_service.self_checkin(
        KIND, current_student(request),
        block=s.validated_data.get('block'), remarks=s.validated_data.get('remarks', ''),
    )
    data = RecordSerializer(record).data
    if is_new:
        return created(data, message='Checked in successfully')
    return ok(data, message='Welcome back, check-in recorded')


@api_view(['POST'])
@permission_classes([IsStudentRole])
def checkout(request):
    s = SelfCheckoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    record = attendance_service.self_checkout(
        KIND, current_student(request),
        block=vd.get('block'), checkout_time=vd.get('checkout_time'),
        estimated_checkin_date=vd.get('estimated_checkin_date'), remarks=vd.get('remarks', ''),
    )
    return created(RecordSerializer(record).data, message='Checkout request submitted successfully')


@api_view(['GET'])
@permission_classes([IsStudentRole])
def checkincheckouts(request):
    qs = KIND.records_for(current_student(request)).select_related('block').order_by('-created_at', '-id')
    if request.query_params.get('status'):
        qs = qs.filter(status=request.query_params['status'])
    return paginate(request, qs, RecordSerializer)


@api_view(['GET'])
@permission_classes([IsStudentRole])
def today_attendance(request):
    qs = KIND.records_for(current_student(request)).filter(date=timezone.localdate()).order_by('-created_at', '-id')
    return ok(RecordSerializer(qs, many=True).data, date=timezone.localdate().isoformat())
