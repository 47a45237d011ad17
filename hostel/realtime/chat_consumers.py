import json

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from rest_framework.exceptions import PermissionDenied, ValidationError

from hostel.models import Complain
from hostel.services.chat import MAX_MESSAGE_LENGTH, can_access_complaint, send_message


async def _ws_error(ws, code: int, message: str, *, close: bool = False):
    """Send an error frame; 4xxx are client errors, 5xxx server errors."""
    payload = {"type": "error", "code": code, "message": message}
    try:
        await ws.send(json.dumps(payload))
    finally:
        if close:
            await ws.close(code=code)


def _load_complaint(complain_id: int):
    return Complain.objects.select_related("student", "staff").filter(id=complain_id).first()


class ComplaintChatConsumer(AsyncWebsocketConsumer):
    async def connect(self):
        self.complain_id = self.scope["url_route"]["kwargs"]["complain_id"]
        user = self.scope.get("user")
        if not (user and user.is_authenticated and user.is_active):
            await self.close(code=4001)
            return

        complain = await sync_to_async(_load_complaint)(self.complain_id)
        if complain is None:
            await self.close(code=4004)
            return
        if not await sync_to_async(can_access_complaint)(user, complain):
            await self.close(code=4003)
            return

        self.group_name = f"complaint.{self.complain_id}"
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await _ws_error(self, 4000, "invalid_json")
            return
        if not isinstance(data, dict) or data.get("type") != "send":
            await _ws_error(self, 4002, "unsupported_type")
            return

        message = data.get("message", "")
        if not isinstance(message, str) or not message.strip():
            await _ws_error(self, 4004, "empty_message")
            return
        if len(message) > MAX_MESSAGE_LENGTH:
            await _ws_error(self, 4005, "message_too_long")
            return

        complain = await sync_to_async(_load_complaint)(self.complain_id)
        if complain is None:
            await _ws_error(self, 4006, "complaint_not_found", close=True)
            return
        try:
            # the service broadcasts the stored message to the group
            await sync_to_async(send_message)(complain, self.scope["user"], message)
        except PermissionDenied:
            await _ws_error(self, 4007, "forbidden", close=True)
            return
        except ValidationError:
            await _ws_error(self, 4008, "invalid_message")
            return
        await self.send(json.dumps({"type": "ack", "ok": True}))

    async def complaint_message(self, event):
        # event: {"type": "complaint.message", "action": str, "chat": {...}, "summary": {...}}
        await self.send(json.dumps({**event, "type": "message"}))
