"""
Complaint conversations between the resident (student or staff) and admins.

Every write recomputes the counters cached on the complaint and, once the
transaction commits, pushes the change to the ``complaint.{id}`` group.
"""
import logging
from typing import Optional

import bleach
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from hostel.models import Chat, Complain, User
from hostel.services.audit import log_action

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000


def sender_type_for(user: User) -> str:
    return user.role if user.role in (User.ROLE_STUDENT, User.ROLE_STAFF) else User.ROLE_ADMIN


def visible_complaints(user: User):
    qs = Complain.objects.all()
    if user.role == User.ROLE_ADMIN:
        return qs
    if user.role == User.ROLE_STUDENT:
        return qs.filter(student__user=user)
    if user.role == User.ROLE_STAFF:
        return qs.filter(staff__user=user)
    return qs.none()


def can_access_complaint(user: User, complain: Complain) -> bool:
    if getattr(user, 'role', '') == User.ROLE_ADMIN:
        return True
    return complain.is_owned_by(user)


def get_complaint_for(user: User, complain_id: int) -> Complain:
    complain = Complain.objects.select_related('student', 'staff').filter(pk=complain_id).first()
    if complain is None:
        raise NotFound('Complaint not found')
    if not can_access_complaint(user, complain):
        raise PermissionDenied('You do not have access to this complaint')
    return complain


def clean_message(message: str) -> str:
    message = bleach.clean((message or '').strip(), strip=True)
    if not message:
        raise ValidationError({'message': ['The message field is required.']})
    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError({'message': [f'The message may not be greater than {MAX_MESSAGE_LENGTH} characters.']})
    return message


def refresh_chat_statistics(complain: Complain) -> Complain:
    chats = Chat.objects.filter(complain=complain, is_deleted=False)
    unread = chats.filter(is_read=False)
    last = chats.order_by('-created_at', '-id').first()
    complain.total_messages = chats.count()
    complain.unread_admin_messages = unread.exclude(sender_type='admin').count()
    complain.unread_student_messages = unread.exclude(sender_type='student').count() if complain.student_id else 0
    complain.unread_staff_messages = unread.exclude(sender_type='staff').count() if complain.staff_id else 0
    complain.last_message_at = last.created_at if last else None
    complain.last_message_by = last.sender_type if last else ''
    complain.save(update_fields=[
        'total_messages', 'unread_admin_messages', 'unread_student_messages',
        'unread_staff_messages', 'last_message_at', 'last_message_by', 'updated_at',
    ])
    return complain


def chat_summary(complain: Complain) -> dict:
    return {
        'total_messages': complain.total_messages,
        'unread_admin_messages': complain.unread_admin_messages,
        'unread_student_messages': complain.unread_student_messages,
        'unread_staff_messages': complain.unread_staff_messages,
        'last_message_at': complain.last_message_at.isoformat() if complain.last_message_at else None,
        'last_message_by': complain.last_message_by or None,
    }


def serialize_chat(chat: Chat) -> dict:
    return {
        'id': chat.id,
        'complain_id': chat.complain_id,
        'sender_id': chat.sender_id,
        'sender_type': chat.sender_type,
        'message': chat.message,
        'message_type': chat.message_type,
        'attachments': chat.attachments,
        'is_edited': chat.is_edited,
        'edited_at': chat.edited_at.isoformat() if chat.edited_at else None,
        'is_read': chat.is_read,
        'read_at': chat.read_at.isoformat() if chat.read_at else None,
        'created_at': chat.created_at.isoformat(),
        'updated_at': chat.updated_at.isoformat(),
        'message_preview': chat.message_preview,
    }


def _broadcast(complain: Complain, action: str, chat: Optional[Chat] = None) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning('No channel layer configured; complaint %s %s not broadcast', complain.id, action)
        return
    payload = {
        'type': 'complaint.message',
        'action': action,
        'complain_id': complain.id,
        'chat': serialize_chat(chat) if chat is not None else None,
        'summary': chat_summary(complain),
    }
    async_to_sync(channel_layer.group_send)(f'complaint.{complain.id}', payload)


@transaction.atomic
def send_message(complain: Complain, sender: User, message: str, *, attachments: Optional[list] = None, message_type: str = 'text') -> Chat:
    if not can_access_complaint(sender, complain):
        raise PermissionDenied('You do not have access to this complaint')
    chat = Chat.objects.create(
        complain=complain,
        sender=sender,
        sender_type=sender_type_for(sender),
        message=clean_message(message),
        attachments=attachments or [],
        message_type=message_type,
    )
    refresh_chat_statistics(complain)
    log_action(user=sender, action='chat_send', object_type='complain', object_id=complain.id, detail={'chatId': chat.id})
    transaction.on_commit(lambda: _broadcast(complain, 'created', chat))
    return chat


@transaction.atomic
def edit_message(chat: Chat, user: User, message: str) -> Chat:
    if chat.is_deleted:
        raise NotFound('Message not found')
    if chat.sender_id != user.id:
        raise PermissionDenied('Only the sender can edit this message')
    if not chat.is_edited:
        chat.original_message = chat.message
    chat.message = clean_message(message)
    chat.is_edited = True
    chat.edited_at = timezone.now()
    chat.save()
    complain = refresh_chat_statistics(chat.complain)
    transaction.on_commit(lambda: _broadcast(complain, 'edited', chat))
    return chat


@transaction.atomic
def delete_message(chat: Chat, user: User) -> None:
    if chat.is_deleted:
        raise NotFound('Message not found')
    if chat.sender_id != user.id and user.role != User.ROLE_ADMIN:
        raise PermissionDenied('You cannot delete this message')
    chat.is_deleted = True
    chat.deleted_at = timezone.now()
    chat.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])
    complain = refresh_chat_statistics(chat.complain)
    transaction.on_commit(lambda: _broadcast(complain, 'deleted', chat))


@transaction.atomic
def mark_read(complain: Complain, user: User) -> int:
    """Mark messages from the other side of the conversation as read."""
    marked = (
        Chat.objects.filter(complain=complain, is_read=False, is_deleted=False)
        .exclude(sender_type=sender_type_for(user))
        .update(is_read=True, read_at=timezone.now())
    )
    refresh_chat_statistics(complain)
    if marked:
        transaction.on_commit(lambda: _broadcast(complain, 'read'))
    return marked


def unread_count(user: User, complain_id: Optional[int] = None) -> int:
    qs = Chat.objects.filter(
        is_read=False, is_deleted=False, complain__in=visible_complaints(user)
    ).exclude(sender_type=sender_type_for(user))
    if complain_id:
        qs = qs.filter(complain_id=complain_id)
    return qs.count()


def complaint_chats(complain: Complain) -> dict:
    chats = list(Chat.objects.filter(complain=complain, is_deleted=False).order_by('created_at', 'id'))
    return {
        'complain': {
            'id': complain.id,
            'title': complain.title,
            'status': complain.status,
            'chat_summary': chat_summary(complain),
        },
        'chats': [serialize_chat(c) for c in chats],
        'total_messages': len(chats),
        'unread_count': sum(1 for c in chats if not c.is_read),
    }