import datetime

import pytest
from django.utils import timezone

from hostel.models import CheckInCheckOutBase, StaffCheckInCheckOut, StudentCheckInCheckOut

pytestmark = pytest.mark.django_db


def test_student_checkin_defaults_to_room_block(student_client, student, block):
    r = student_client.post('/api/student/checkin', {}, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['status'] == 'checked_in'
    assert data['block_id'] == block.id
    assert data['checkin_time']


def test_second_open_checkin_same_day_is_rejected(student_client):
    assert student_client.post('/api/student/checkin', {}, format='json').status_code == 201
    r = student_client.post('/api/student/checkin', {}, format='json')
    assert r.status_code == 422
    assert r.data['error']['code'] == 'business_rule'


def test_checkout_request_then_duplicate(student_client):
    r = student_client.post('/api/student/checkout', {'remarks': 'Going home'}, format='json')
    assert r.status_code == 201
    assert r.data['data']['status'] == 'pending'
    assert r.data['data']['checkout_time']

    r = student_client.post('/api/student/checkout', {}, format='json')
    assert r.status_code == 422
    assert 'Pending' in r.data['error']['message']


def test_checkout_approval_and_return_closes_record(student_client, admin_client, student):
    record_id = student_client.post('/api/student/checkout', {}, format='json').data['data']['id']

    r = admin_client.post(f'/api/student-checkincheckouts/{record_id}/approve-checkout')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'approved'

    two_hours_ago = timezone.now() - datetime.timedelta(hours=2)
    StudentCheckInCheckOut.objects.filter(pk=record_id).update(checkout_time=two_hours_ago)

    r = student_client.post('/api/student/checkin', {'remarks': 'back'}, format='json')
    assert r.status_code == 200
    data = r.data['data']
    assert data['id'] == record_id
    assert data['status'] == 'pending'
    assert data['checkin_time']
    assert 119 <= data['checkout_duration'] <= 121
    assert 'Check-in: back' in data['remarks']


def test_decline_checkout_keeps_remarks(student_client, admin_client):
    record_id = student_client.post('/api/student/checkout', {}, format='json').data['data']['id']
    r = admin_client.post(
        f'/api/student-checkincheckouts/{record_id}/decline-checkout', {'remarks': 'Exams tomorrow'}, format='json'
    )
    assert r.status_code == 200
    assert r.data['data']['status'] == 'declined'
    assert r.data['data']['remarks'] == 'Exams tomorrow'


def test_admin_create_requires_a_time(admin_client, student):
    r = admin_client.post('/api/student-checkincheckouts', {'student_id': student.id}, format='json')
    assert r.status_code == 422
    assert 'checkin_time' in r.data['error']['errors']


def test_admin_create_with_both_times_is_approved(admin_client, student):
    now = timezone.now()
    r = admin_client.post('/api/student-checkincheckouts', {
        'student_id': student.id,
        'checkout_time': (now - datetime.timedelta(hours=5)).isoformat(),
        'checkin_time': (now - datetime.timedelta(hours=1)).isoformat(),
    }, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['status'] == CheckInCheckOutBase.STATUS_APPROVED
    assert data['checkout_duration'] == 240
    assert data['block_id'] == student.room.block_id


def test_admin_create_blocked_by_pending_checkout_request(admin_client, student_client, student):
    student_client.post('/api/student/checkout', {}, format='json')
    r = admin_client.post('/api/student-checkincheckouts', {
        'student_id': student.id, 'checkin_time': timezone.now().isoformat(),
    }, format='json')
    assert r.status_code == 422
    assert r.data['error']['code'] == 'business_rule'
    assert StudentCheckInCheckOut.objects.filter(student=student).count() == 1


def test_admin_create_allowed_after_completed_record(admin_client, student):
    now = timezone.now()
    StudentCheckInCheckOut.objects.create(
        student=student, date=timezone.localdate(), status=CheckInCheckOutBase.STATUS_APPROVED,
        checkout_time=now - datetime.timedelta(hours=6), checkin_time=now - datetime.timedelta(hours=3),
    )
    r = admin_client.post('/api/student-checkincheckouts', {
        'student_id': student.id, 'checkin_time': now.isoformat(),
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['status'] == CheckInCheckOutBase.STATUS_CHECKED_IN


def test_admin_update_with_both_times_goes_back_to_pending(admin_client, student):
    now = timezone.now()
    record = StudentCheckInCheckOut.objects.create(
        student=student, date=timezone.localdate(), status=CheckInCheckOutBase.STATUS_APPROVED,
        checkout_time=now - datetime.timedelta(hours=4),
    )
    r = admin_client.patch(f'/api/student-checkincheckouts/{record.id}', {
        'checkin_time': now.isoformat(),
        'checkout_time': (now - datetime.timedelta(hours=3)).isoformat(),
    }, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == CheckInCheckOutBase.STATUS_PENDING
    assert r.data['data']['checkout_duration'] == 180


def test_admin_update_with_only_checkin_is_checked_in(admin_client, student):
    record = StudentCheckInCheckOut.objects.create(
        student=student, date=timezone.localdate(), status=CheckInCheckOutBase.STATUS_DECLINED,
    )
    r = admin_client.patch(f'/api/student-checkincheckouts/{record.id}', {
        'checkin_time': timezone.now().isoformat(),
    }, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == CheckInCheckOutBase.STATUS_CHECKED_IN


def test_admin_update_keeps_explicit_status(admin_client, student):
    record = StudentCheckInCheckOut.objects.create(
        student=student, date=timezone.localdate(), status=CheckInCheckOutBase.STATUS_PENDING,
    )
    r = admin_client.patch(f'/api/student-checkincheckouts/{record.id}', {
        'checkin_time': timezone.now().isoformat(), 'status': 'approved',
    }, format='json')
    assert r.data['data']['status'] == CheckInCheckOutBase.STATUS_APPROVED


def test_non_numeric_person_filter_is_rejected(admin_client):
    r = admin_client.get('/api/student-checkincheckouts', {'student_id': 'abc'})
    assert r.status_code == 422
    assert r.data['error']['code'] == 'validation_failed'
    assert 'student_id' in r.data['error']['errors']

    r = admin_client.get('/api/student-checkincheckouts/today/attendance', {'block_id': 'abc'})
    assert r.status_code == 422


def test_admin_list_filters_by_person_and_status(admin_client, student_client, student):
    student_client.post('/api/student/checkout', {}, format='json')
    r = admin_client.get('/api/student-checkincheckouts', {'student_id': student.id, 'status': 'pending'})
    assert r.status_code == 200
    assert r.data['pagination']['total'] == 1
    assert r.data['data'][0]['student_name'] == student.student_name

    r = admin_client.get('/api/student-checkincheckouts', {'status': 'approved'})
    assert r.data['pagination']['total'] == 0


def test_today_attendance(admin_client, student_client):
    student_client.post('/api/student/checkin', {}, format='json')
    r = admin_client.get('/api/student-checkincheckouts/today/attendance')
    assert r.status_code == 200
    assert r.data['date'] == timezone.localdate().isoformat()
    assert len(r.data['data']) == 1

    r = student_client.get('/api/student/today-attendance')
    assert len(r.data['data']) == 1


def test_staff_checkin_with_block(staff_client, staff, block):
    r = staff_client.post('/api/my-staff/checkin', {'block_id': block.id}, format='json')
    assert r.status_code == 201
    assert r.data['data']['staff_id'] == staff.id
    assert r.data['data']['block_name'] == 'Block A'
    assert StaffCheckInCheckOut.objects.filter(staff=staff).count() == 1

    r = staff_client.get('/api/my-staff/my-checkincheckouts')
    assert r.data['pagination']['total'] == 1


def test_staff_records_are_separate_from_students(admin_client, staff_client, student_client):
    staff_client.post('/api/my-staff/checkout', {}, format='json')
    student_client.post('/api/student/checkout', {}, format='json')
    r = admin_client.get('/api/staff-checkincheckouts')
    assert r.data['pagination']['total'] == 1
    assert 'staff_name' in r.data['data'][0]


def test_portal_is_role_restricted(staff_client):
    r = staff_client.post('/api/student/checkin', {}, format='json')
    assert r.status_code == 403
    assert r.data['error']['code'] == 'INSUFFICIENT_ROLE'
