import datetime

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone

from hostel.models import Notice

pytestmark = pytest.mark.django_db


def pdf(name='rules.pdf'):
    return SimpleUploadedFile(name, b'%PDF-1.4 hostel rules', content_type='application/pdf')


def test_targeted_notice_requires_its_target(admin_client):
    r = admin_client.post('/api/notices', {
        'title': 'Fee reminder', 'description': 'Pay by Friday', 'target_type': 'specific_student',
    }, format='json')
    assert r.status_code == 422
    assert r.data['error']['code'] == 'validation_failed'
    assert 'student_id' in r.data['error']['errors']


def test_schedule_time_must_be_in_future(admin_client):
    past = (timezone.now() - datetime.timedelta(days=1)).isoformat()
    r = admin_client.post('/api/notices', {
        'title': 'Old', 'description': 'Too late', 'schedule_time': past,
    }, format='json')
    assert r.status_code == 422
    assert 'schedule_time' in r.data['error']['errors']


def test_block_notice_with_attachments(admin_client, block):
    r = admin_client.post('/api/notices', {
        'title': 'Water cut',
        'description': 'No water on Sunday',
        'target_type': 'block',
        'block_id': block.id,
        'attachments': [pdf('schedule.pdf'), pdf('map.pdf')],
    }, format='multipart')
    assert r.status_code == 201
    data = r.data['data']
    assert data['hostel'] == block.hostel_id
    assert len(data['attachments']) == 2
    first, second = data['attachments']
    assert data['notice_attachment'] == first['path']
    assert default_storage.exists(first['path'])

    r = admin_client.delete(f"/api/notices/{data['id']}/attachments/{first['id']}")
    assert r.status_code == 200
    assert r.data['data']['notice_attachment'] == second['path']
    assert not default_storage.exists(first['path'])


def test_attachment_type_is_validated(admin_client):
    bad = SimpleUploadedFile('run.exe', b'MZ', content_type='application/octet-stream')
    r = admin_client.post('/api/notices', {
        'title': 'Bad', 'description': 'Bad file', 'attachments': [bad],
    }, format='multipart')
    assert r.status_code == 422
    assert 'attachments' in r.data['error']['errors']
    assert not Notice.objects.exists()


def test_student_feed_follows_audience(student_client, student, staff, block):
    Notice.objects.create(title='Everyone', description='-', target_type=Notice.TARGET_ALL)
    Notice.objects.create(title='Students', description='-', target_type=Notice.TARGET_STUDENT)
    Notice.objects.create(title='Mine', description='-', target_type=Notice.TARGET_SPECIFIC_STUDENT, student=student)
    Notice.objects.create(title='My block', description='-', target_type=Notice.TARGET_BLOCK, block=block)
    Notice.objects.create(title='Staff only', description='-', target_type=Notice.TARGET_STAFF)
    Notice.objects.create(title='One staff', description='-', target_type=Notice.TARGET_SPECIFIC_STAFF, staff=staff)
    Notice.objects.create(title='Hidden', description='-', target_type=Notice.TARGET_ALL, status='inactive')

    r = student_client.get('/api/student/notices', {'all': 'true'})
    assert r.status_code == 200
    assert {n['title'] for n in r.data['data']} == {'Everyone', 'Students', 'Mine', 'My block'}

    r = student_client.get('/api/notices/user', {'all': 'true'})
    assert {n['title'] for n in r.data['data']} == {'Everyone', 'Students', 'Mine', 'My block'}


def test_staff_feed_and_detail(staff_client, staff, student):
    visible = Notice.objects.create(
        title='One staff', description='-', target_type=Notice.TARGET_SPECIFIC_STAFF, staff=staff
    )
    hidden = Notice.objects.create(
        title='Mine', description='-', target_type=Notice.TARGET_SPECIFIC_STUDENT, student=student
    )
    r = staff_client.get('/api/my-staff/notices')
    assert [n['title'] for n in r.data['data']] == ['One staff']
    assert staff_client.get(f'/api/my-staff/notices/{visible.id}').status_code == 200
    r = staff_client.get(f'/api/my-staff/notices/{hidden.id}')
    assert r.status_code == 404
    assert r.data['error']['code'] == 'not_found'


def test_admin_lookup_by_target_and_selection(admin_client, student, block):
    Notice.objects.create(title='Block', description='-', target_type=Notice.TARGET_BLOCK, block=block)
    Notice.objects.create(title='All', description='-')
    r = admin_client.get('/api/notices/target/block')
    assert [n['title'] for n in r.data['data']] == ['Block']
    assert admin_client.get('/api/notices/target/nobody').status_code == 404

    r = admin_client.get(f'/api/notices/block/{block.id}', {'all': 'true'})
    assert {n['title'] for n in r.data['data']} == {'Block', 'All'}

    r = admin_client.get('/api/notices-create/students')
    assert r.data['data'] == [{'id': student.id, 'name': student.student_name, 'student_id': 'STU-0001'}]
    assert admin_client.get('/api/notices-create/rooms').status_code == 404
