"""
ASGI config for the hms project.

Serves HTTP through Django and WebSockets through Channels. Settings must
be configured and Django set up before the consumers are imported.
"""
import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hms.settings")

import django  # noqa: E402
django.setup()  # noqa: E402

from django.core.asgi import get_asgi_application  # noqa: E402
from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.auth import AuthMiddlewareStack  # noqa: E402
from django.urls import path  # noqa: E402

from hostel.realtime.consumers import NoticeFeedConsumer  # noqa: E402
from hostel.realtime.chat_consumers import ComplaintChatConsumer  # noqa: E402

django_asgi_app = get_asgi_application()

websocket_urlpatterns = [
    path("ws/notices/", NoticeFeedConsumer.as_asgi()),
    path("ws/complaints/<int:complain_id>/", ComplaintChatConsumer.as_asgi()),
]

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": AuthMiddlewareStack(URLRouter(websocket_urlpatterns)),
})
