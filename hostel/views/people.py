"""
Student and staff records (admin) plus field metadata for form builders.
"""
from __future__ import annotations

from django.db import transaction
from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes

from hostel.models import Staff, Student
from hostel.permissions import IsAdminRole
from hostel.serializers.fields import IMAGES
from hostel.serializers.people import StaffSerializer, StudentSerializer, field_metadata
from hostel.services.images import delete_file, save_upload
from hostel.services.rooms import check_room_has_space
from hostel.views.common import created, get_scoped, id_filters, ok, paginate, scoped, upload_from

STUDENT_DIR = 'students'
STAFF_DIR = 'staff'


def _flag(value) -> bool:
    return str(value).lower() in ('1', 'true', 'yes')


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def students(request):
    if request.method == 'GET':
        qs = scoped(Student, request).select_related('room__block')
        params = request.query_params
        if params.get('search'):
            term = params['search']
            qs = qs.filter(
                Q(student_name__icontains=term) | Q(email__icontains=term)
                | Q(student_id__icontains=term) | Q(contact_number__icontains=term)
            )
        ids = id_filters(request, 'room_id', 'block_id')
        if 'room_id' in ids:
            qs = qs.filter(room_id=ids['room_id'])
        if 'block_id' in ids:
            qs = qs.filter(room__block_id=ids['block_id'])
        if params.get('is_active') not in (None, ''):
            qs = qs.filter(is_active=_flag(params['is_active']))
        return paginate(request, qs, StudentSerializer)

    s = StudentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'student_image', IMAGES)
    with transaction.atomic():
        if s.validated_data.get('is_active', True):
            check_room_has_space(s.validated_data['room'])
        student = s.save()
        if upload is not None:
            save_upload(upload, STUDENT_DIR, instance=student, field='student_image')
    return created(StudentSerializer(student).data, message='Student created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def student_detail(request, pk: int):
    student = get_scoped(Student, request, pk, qs=scoped(Student, request).select_related('room__block'))
    if request.method == 'GET':
        return ok(StudentSerializer(student).data)

    if request.method == 'DELETE':
        path = student.student_image
        student.delete()
        delete_file(path)
        return ok(None, message='Student deleted successfully')

    s = StudentSerializer(student, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'student_image', IMAGES)
    with transaction.atomic():
        room = s.validated_data.get('room', student.room)
        active = s.validated_data.get('is_active', student.is_active)
        # moving rooms or reactivating takes a bed
        if room is not None and active and (room.pk != student.room_id or not student.is_active):
            check_room_has_space(room, exclude=student)
        student = s.save()
        if upload is not None:
            save_upload(upload, STUDENT_DIR, instance=student, field='student_image')
    return ok(StudentSerializer(student).data, message='Student updated successfully')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def student_fields(request):
    return ok(field_metadata(StudentSerializer))


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def staff_list(request):
    if request.method == 'GET':
        qs = scoped(Staff, request)
        params = request.query_params
        if params.get('search'):
            term = params['search']
            qs = qs.filter(
                Q(staff_name__icontains=term) | Q(email__icontains=term)
                | Q(staff_id__icontains=term) | Q(position__icontains=term)
            )
        if params.get('department'):
            qs = qs.filter(department=params['department'])
        if params.get('is_active') not in (None, ''):
            qs = qs.filter(is_active=_flag(params['is_active']))
        return paginate(request, qs, StaffSerializer)

    s = StaffSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'staff_image', IMAGES)
    with transaction.atomic():
        staff = s.save()
        if upload is not None:
            save_upload(upload, STAFF_DIR, instance=staff, field='staff_image')
    return created(StaffSerializer(staff).data, message='Staff created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def staff_detail(request, pk: int):
    staff = get_scoped(Staff, request, pk)
    if request.method == 'GET':
        return ok(StaffSerializer(staff).data)

    if request.method == 'DELETE':
        path = staff.staff_image
        staff.delete()
        delete_file(path)
        return ok(None, message='Staff deleted successfully')

    s = StaffSerializer(staff, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'staff_image', IMAGES)
    with transaction.atomic():
        staff = s.save()
        if upload is not None:
            save_upload(upload, STAFF_DIR, instance=staff, field='staff_image')
    return ok(StaffSerializer(staff).data, message='Staff updated successfully')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def staff_fields(request):
    return ok(field_metadata(StaffSerializer))
