"""
Room management (admin) with bed occupancy.
"""
from __future__ import annotations

from django.db import transaction
from django.db.models import F
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes

from hostel.permissions import IsAdminRole
from hostel.serializers.property import RoomSerializer
from hostel.services import rooms as room_service
from hostel.services.images import delete_file, save_upload
from hostel.views.common import created, id_filters, ok, paginate, upload_from

ROOM_DIR = 'rooms'


def _room(request, pk):
    return get_object_or_404(room_service.room_queryset(request.hostel_id), pk=pk)


def _fresh(request, room_id):
    return room_service.room_queryset(request.hostel_id).get(pk=room_id)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def rooms(request):
    if request.method == 'GET':
        qs = room_service.room_queryset(request.hostel_id)
        params = request.query_params
        qs = qs.filter(**id_filters(request, 'block_id'))
        if params.get('status'):
            qs = qs.filter(status=params['status'])
        if params.get('room_type'):
            qs = qs.filter(room_type=params['room_type'])
        if str(params.get('has_vacancy', '')).lower() in ('1', 'true'):
            qs = qs.filter(occupancy__lt=F('capacity'))
        return paginate(request, qs.order_by('room_name'), RoomSerializer)

    s = RoomSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'room_attachment')
    with transaction.atomic():
        room = s.save()
        if upload is not None:
            save_upload(upload, ROOM_DIR, instance=room, field='room_attachment')
    return created(RoomSerializer(_fresh(request, room.pk)).data, message='Room created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def room_detail(request, pk: int):
    room = _room(request, pk)
    if request.method == 'GET':
        data = RoomSerializer(room).data
        data['students'] = room_service.room_students(room)
        return ok(data)

    if request.method == 'DELETE':
        path = room.room_attachment
        room_service.delete_room(room)
        delete_file(path)
        return ok(None, message='Room deleted successfully')

    s = RoomSerializer(room, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    if 'capacity' in s.validated_data:
        room_service.check_capacity_change(room, s.validated_data['capacity'])
    upload = upload_from(request, 'room_attachment')
    with transaction.atomic():
        room = s.save()
        if upload is not None:
            save_upload(upload, ROOM_DIR, instance=room, field='room_attachment')
    return ok(RoomSerializer(_fresh(request, room.pk)).data, message='Room updated successfully')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def available_rooms(request):
    qs = room_service.available_rooms(request.hostel_id).filter(**id_filters(request, 'block_id'))
    return ok(RoomSerializer(qs, many=True).data)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def room_students(request, pk: int):
    room = _room(request, pk)
    return ok(room_service.room_students(room))
