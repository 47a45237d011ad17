import pytest

from hostel.models import Complain, Notice
from hostel.realtime.consumers import NoticeFeedConsumer, _audience
from hostel.services import chat as chat_service
from hostel.services import notices as notice_service

pytestmark = pytest.mark.django_db


class RecordingLayer:
    def __init__(self):
        self.sent = []

    async def group_send(self, group, message):
        self.sent.append((group, message))


@pytest.fixture
def layer(monkeypatch):
    recording = RecordingLayer()
    monkeypatch.setattr(chat_service, 'get_channel_layer', lambda: recording)
    monkeypatch.setattr(notice_service, 'get_channel_layer', lambda: recording)
    return recording


def consumer_for(user):
    consumer = NoticeFeedConsumer()
    consumer.role = user.role
    consumer.audience = _audience(user)
    return consumer


def test_chat_message_is_broadcast_to_complaint_group(student_client, student, layer,
                                                      django_capture_on_commit_callbacks):
    complain = Complain.objects.create(student=student, title='Light', description='Bulb fused')
    with django_capture_on_commit_callbacks(execute=True):
        student_client.post('/api/chats/send', {'complain_id': complain.id, 'message': 'Please fix'}, format='json')
    group, event = layer.sent[0]
    assert group == f'complaint.{complain.id}'
    assert event['type'] == 'complaint.message'
    assert event['action'] == 'created'
    assert event['chat']['message'] == 'Please fix'
    assert event['summary']['unread_admin_messages'] == 1


def test_published_notice_is_broadcast(admin_client, layer, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        admin_client.post('/api/notices', {'title': 'Party', 'description': 'Friday'}, format='json')
    group, event = layer.sent[0]
    assert group == 'notices'
    assert event['type'] == 'notice.published'
    assert event['target_type'] == Notice.TARGET_ALL


def test_inactive_notice_is_not_broadcast(admin_client, layer, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        admin_client.post('/api/notices', {'title': 'Draft', 'description': '-', 'status': 'inactive'}, format='json')
    assert layer.sent == []


def test_notice_feed_consumer_filters_by_audience(student, staff, block, admin_user):
    as_student = consumer_for(student.user)
    as_staff = consumer_for(staff.user)
    as_admin = consumer_for(admin_user)

    block_event = {'target_type': Notice.TARGET_BLOCK, 'block_id': block.id}
    assert as_student.is_recipient(block_event)
    assert not as_staff.is_recipient(block_event)
    assert as_admin.is_recipient(block_event)

    own = {'target_type': Notice.TARGET_SPECIFIC_STAFF, 'staff_id': staff.id}
    assert as_staff.is_recipient(own)
    assert not as_staff.is_recipient(dict(own, staff_id=staff.id + 1))
    assert not as_student.is_recipient(own)

    assert as_student.is_recipient({'target_type': Notice.TARGET_ALL})
