import json

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from hostel.models import Notice, User


def _audience(user) -> dict:
    """Ids the notice audience rules compare against for ``user``."""
    if user.role == User.ROLE_STUDENT:
        student = user.student_record
        return {
            'student_id': student.id if student else None,
            'block_id': student.room.block_id if student and student.room_id else None,
        }
    if user.role == User.ROLE_STAFF:
        staff = user.staff_record
        return {'staff_id': staff.id if staff else None}
    return {}


class NoticeFeedConsumer(AsyncWebsocketConsumer):
    GROUP = "notices"

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated and user.is_active):
            await self.close(code=4001)
            return
        self.role = user.role
        self.audience = await sync_to_async(_audience)(user)
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    def is_recipient(self, event: dict) -> bool:
        target = event.get("target_type")
        if self.role == User.ROLE_ADMIN or target == Notice.TARGET_ALL:
            return True
        if self.role == User.ROLE_STUDENT:
            return (
                target == Notice.TARGET_STUDENT
                or (target == Notice.TARGET_SPECIFIC_STUDENT and event.get("student_id") == self.audience.get("student_id"))
                or (target == Notice.TARGET_BLOCK and event.get("block_id") == self.audience.get("block_id"))
            )
        if self.role == User.ROLE_STAFF:
            return (
                target == Notice.TARGET_STAFF
                or (target == Notice.TARGET_SPECIFIC_STAFF and event.get("staff_id") == self.audience.get("staff_id"))
            )
        return False

    async def notice_published(self, event):
        # event: {"type": "notice.published", "id": int, "title": str, "target_type": str, ...}
        if self.is_recipient(event):
            await self.send(json.dumps(event))
