import pytest

from hostel.models import Chat, Complain, User

from .conftest import client_for, make_student, make_user

pytestmark = pytest.mark.django_db


@pytest.fixture
def complain(student):
    return Complain.objects.create(student=student, title='Leaking tap', description='Bathroom tap leaks')


def send(client, complain, message):
    return client.post('/api/chats/send', {'complain_id': complain.id, 'message': message}, format='json')


def test_student_files_and_edits_pending_complaint(student_client, student):
    r = student_client.post('/api/student/complains', {
        'title': 'Noisy fan', 'description': 'Fan rattles', 'status': 'resolved', 'student_id': 999,
    }, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['status'] == 'pending'
    assert data['student_id'] == student.id
    assert data['hostel'] == student.hostel_id

    r = student_client.patch(f"/api/student/complains/{data['id']}", {'title': 'Very noisy fan'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['title'] == 'Very noisy fan'

    Complain.objects.filter(pk=data['id']).update(status='in_progress')
    r = student_client.patch(f"/api/student/complains/{data['id']}", {'title': 'Changed'}, format='json')
    assert r.status_code == 403


def test_students_only_see_their_complaints(student_client, complain, room):
    other = make_student(room, 2)
    Complain.objects.create(student=other, title='Other', description='-')
    r = student_client.get('/api/student/complains')
    assert [c['title'] for c in r.data['data']] == ['Leaking tap']


def test_staff_complaint_endpoints(staff_client, staff):
    r = staff_client.post('/api/my-staff/complaints-create', {'title': 'Broken desk', 'description': 'Leg snapped'}, format='json')
    assert r.status_code == 201
    pk = r.data['data']['id']
    assert r.data['data']['staff_id'] == staff.id
    assert staff_client.get(f'/api/my-staff/complaints-view/{pk}').status_code == 200
    assert staff_client.get('/api/my-staff/complaints-list').data['pagination']['total'] == 1
    r = staff_client.put(f'/api/my-staff/complaints-update/{pk}', {'description': 'Two legs snapped'}, format='json')
    assert r.status_code == 200


def test_admin_updates_complaint_status(admin_client, complain):
    r = admin_client.patch(f'/api/complains/{complain.id}', {'status': 'resolved'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'resolved'
    r = admin_client.get('/api/complains', {'status': 'resolved'})
    assert r.data['pagination']['total'] == 1


def test_chat_send_updates_counters(student_client, complain):
    r = send(student_client, complain, '<b>Still</b> leaking')
    assert r.status_code == 201
    assert r.data['data']['sender_type'] == 'student'
    assert r.data['data']['message'] == 'Still leaking'
    complain.refresh_from_db()
    assert complain.total_messages == 1
    assert complain.unread_admin_messages == 1
    assert complain.unread_student_messages == 0
    assert complain.last_message_by == 'student'


def test_unread_count_and_mark_read(student_client, admin_client, complain):
    send(student_client, complain, 'Hello')
    send(student_client, complain, 'Anyone?')
    assert admin_client.get('/api/chats/unread-count').data['data']['unread_count'] == 2
    assert student_client.get('/api/chats/unread-count').data['data']['unread_count'] == 0

    r = admin_client.post('/api/chats/mark-read', {'complain_id': complain.id}, format='json')
    assert r.data['data']['marked_count'] == 2
    assert admin_client.get('/api/chats/unread-count', {'complain_id': complain.id}).data['data']['unread_count'] == 0

    send(admin_client, complain, 'On it')
    assert student_client.get('/api/chats/unread-count').data['data']['unread_count'] == 1


def test_only_sender_may_edit(student_client, admin_client, complain):
    chat_id = send(student_client, complain, 'Frist').data['data']['id']
    r = admin_client.put(f'/api/chats/{chat_id}/edit', {'message': 'First'}, format='json')
    assert r.status_code == 403

    r = student_client.put(f'/api/chats/{chat_id}/edit', {'message': 'First'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['is_edited'] is True
    chat = Chat.objects.get(pk=chat_id)
    assert chat.original_message == 'Frist'
    assert chat.message == 'First'


def test_editing_a_message_recomputes_counters(student_client, complain):
    chat_id = send(student_client, complain, 'Tap leaks').data['data']['id']
    Complain.objects.filter(pk=complain.pk).update(total_messages=0, unread_admin_messages=0)
    r = student_client.put(f'/api/chats/{chat_id}/edit', {'message': 'Tap leaks a lot'}, format='json')
    assert r.status_code == 200
    complain.refresh_from_db()
    assert complain.total_messages == 1
    assert complain.unread_admin_messages == 1
    assert complain.last_message_by == 'student'


def test_deleted_message_drops_from_conversation(student_client, admin_client, complain):
    chat_id = send(student_client, complain, 'Oops').data['data']['id']
    assert admin_client.delete(f'/api/chats/{chat_id}').status_code == 200
    r = student_client.get(f'/api/chats/complaint/{complain.id}')
    assert r.data['data']['chats'] == []
    assert r.data['data']['complain']['chat_summary']['total_messages'] == 0
    assert student_client.delete(f'/api/chats/{chat_id}').status_code == 404


def test_outsiders_cannot_join_conversation(complain, room, staff_client):
    intruder = make_user('intruder@hostel.test', User.ROLE_STUDENT)
    make_student(room, 2, user=intruder)
    client = client_for(intruder)
    assert send(client, complain, 'Hi').status_code == 403
    assert client.get(f'/api/chats/complaint/{complain.id}').status_code == 403
    assert send(staff_client, complain, 'Hi').status_code == 403


def test_blank_message_is_rejected(student_client, complain):
    r = send(student_client, complain, '<i></i>')
    assert r.status_code == 422
    assert 'message' in r.data['error']['errors']


def test_unknown_complaint_is_not_found(student_client, student):
    r = student_client.post('/api/chats/send', {'complain_id': 4242, 'message': 'Hi'}, format='json')
    assert r.status_code == 404
