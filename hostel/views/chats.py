"""
Complaint chat endpoints shared by admins, students and staff.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied

from hostel.models import Chat
from hostel.permissions import IsActiveUser
from hostel.serializers.complaints import (
    ChatEditSerializer,
    ChatSendSerializer,
    ComplainRefSerializer,
    UnreadCountQuerySerializer,
)
from hostel.services import chat as chat_service
from hostel.views.common import created, ok


def _chat_for(request, pk: int) -> Chat:
    chat = get_object_or_404(Chat.objects.select_related('complain__student', 'complain__staff'), pk=pk)
    if not chat_service.can_access_complaint(request.user, chat.complain):
        raise PermissionDenied('You do not have access to this complaint')
    return chat


@api_view(['GET'])
@permission_classes([IsActiveUser])
def complaint_chats(request, complain_id: int):
    complain = chat_service.get_complaint_for(request.user, complain_id)
    return ok(chat_service.complaint_chats(complain))


@api_view(['POST'])
@permission_classes([IsActiveUser])
def send_chat(request):
    s = ChatSendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    complain = chat_service.get_complaint_for(request.user, vd['complain_id'])
    chat = chat_service.send_message(
        complain, request.user, vd['message'],
        attachments=vd.get('attachments'), message_type=vd.get('message_type') or 'text',
    )
    return created(chat_service.serialize_chat(chat), message='Message sent successfully')


send_chat.cls.throttle_scope = 'chat'


@api_view(['PUT', 'PATCH'])
@permission_classes([IsActiveUser])
def edit_chat(request, pk: int):
    chat = _chat_for(request, pk)
    s = ChatEditSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    chat = chat_service.edit_message(chat, request.user, s.validated_data['message'])
    return ok(chat_service.serialize_chat(chat), message='Message updated successfully')


@api_view(['DELETE'])
@permission_classes([IsActiveUser])
def delete_chat(request, pk: int):
    chat = _chat_for(request, pk)
    chat_service.delete_message(chat, request.user)
    return ok(None, message='Message deleted successfully')


@api_view(['POST'])
@permission_classes([IsActiveUser])
def mark_read(request):
    s = ComplainRefSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    complain = chat_service.get_complaint_for(request.user, s.validated_data['complain_id'])
    marked = chat_service.mark_read(complain, request.user)
    return ok({'marked_count': marked}, message='Messages marked as read')


@api_view(['GET'])
@permission_classes([IsActiveUser])
def unread_count(request):
    s = UnreadCountQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    complain_id = s.validated_data.get('complain_id')
    if complain_id:
        chat_service.get_complaint_for(request.user, complain_id)
    return ok({'unread_count': chat_service.unread_count(request.user, complain_id)})
