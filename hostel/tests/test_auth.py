import pytest
from django.urls import reverse
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken

from hostel.models import AuditEvent, User

from .conftest import PASSWORD, make_student, make_user

pytestmark = pytest.mark.django_db


def login(client, identifier, password=PASSWORD):
    return client.post(reverse('login_view'), {'email': identifier, 'password': password}, format='json')


def test_login_by_email_returns_legacy_token_and_jwt(student):
    r = login(APIClient(), 'student1@hostel.test')
    assert r.status_code == 200
    data = r.data['data']
    assert data['token'] and data['jwt_access'] and data['jwt_refresh']
    assert data['token_type'] == 'Bearer'
    assert data['abilities'] == ['student:*']
    assert data['user']['role'] == 'student'
    assert data['user']['user_type_id'] == student.id


def test_login_accepts_student_and_staff_ids(student, staff):
    assert login(APIClient(), 'STU-0001').data['data']['user']['email'] == 'student1@hostel.test'
    assert login(APIClient(), 'STF-0001').data['data']['user']['role'] == 'staff'


def test_login_with_wrong_password_is_rejected_and_audited(student):
    r = login(APIClient(), 'student1@hostel.test', 'nope')
    assert r.status_code == 401
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'INVALID_CREDENTIALS'
    assert AuditEvent.objects.filter(action='login', detail__result='INVALID_CREDENTIALS').exists()


def test_login_unknown_identifier_is_rejected(db):
    r = login(APIClient(), 'ghost@hostel.test')
    assert r.status_code == 401


def test_deactivated_account_cannot_login(student_user):
    student_user.is_active = False
    student_user.save()
    r = login(APIClient(), 'student1@hostel.test')
    assert r.status_code == 403
    assert r.data['error']['code'] == 'ACCOUNT_DEACTIVATED'


def test_anonymous_request_is_unauthenticated(anon_client):
    r = anon_client.get('/api/blocks')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'UNAUTHENTICATED'


def test_wrong_role_gets_insufficient_role(student_client):
    r = student_client.get('/api/blocks')
    assert r.status_code == 403
    err = r.data['error']
    assert err['code'] == 'INSUFFICIENT_ROLE'
    assert err['required_roles'] == ['admin']
    assert err['user_role'] == 'student'


def test_me_includes_profile_and_permissions(student_client, student):
    r = student_client.get('/api/auth/me')
    assert r.status_code == 200
    data = r.data['data']
    assert data['profile']['student_id'] == 'STU-0001'
    assert data['profile']['room']['room_name'] == 'A-101'
    assert data['permissions']['can_checkin_checkout'] is True


def test_logout_blacklists_refresh_and_drops_legacy_token(student):
    client = APIClient()
    tokens = login(client, 'student1@hostel.test').data['data']
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['jwt_access']}")
    r = client.post('/api/auth/logout', {'refresh': tokens['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert BlacklistedToken.objects.filter(token__user=student.user).count() == 1
    assert not Token.objects.filter(user=student.user).exists()

    legacy = APIClient()
    legacy.credentials(HTTP_AUTHORIZATION=f"Token {tokens['token']}")
    r = legacy.get('/api/auth/me')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'AUTHENTICATION_FAILED'


def test_logout_all_revokes_every_session(student):
    client = APIClient()
    first = login(client, 'student1@hostel.test').data['data']
    login(APIClient(), 'student1@hostel.test')
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {first['jwt_access']}")
    sessions = client.get('/api/auth/active-sessions').data['data']
    assert sessions['total'] == 2
    r = client.post('/api/auth/logout-all', {}, format='json')
    assert r.data['data']['revoked_sessions'] == 2


def test_change_password(student_client, student_user):
    r = student_client.post('/api/auth/change-password', {
        'current_password': PASSWORD,
        'new_password': 'Another@Pass2',
        'new_password_confirmation': 'Another@Pass2',
    }, format='json')
    assert r.status_code == 200
    assert r.data['data']['token']
    student_user.refresh_from_db()
    assert student_user.check_password('Another@Pass2')


def test_change_password_rejects_wrong_current_and_weak_new(student_client):
    r = student_client.post('/api/auth/change-password', {
        'current_password': 'wrong',
        'new_password': 'Another@Pass2',
        'new_password_confirmation': 'Another@Pass2',
    }, format='json')
    assert r.status_code == 422
    assert 'current_password' in r.data['error']['errors']

    r = student_client.post('/api/auth/change-password', {
        'current_password': PASSWORD,
        'new_password': 'alllowercase',
        'new_password_confirmation': 'alllowercase',
    }, format='json')
    assert r.status_code == 422
    assert 'new_password' in r.data['error']['errors']


def test_register_links_student_record(admin_client, room):
    record = make_student(room, 7)
    r = admin_client.post('/api/auth/register', {
        'name': 'Seven Student',
        'email': 'seven@hostel.test',
        'password': 'Seven@Pass77',
        'password_confirmation': 'Seven@Pass77',
        'role': 'student',
        'user_type_id': record.id,
    }, format='json')
    assert r.status_code == 201
    record.refresh_from_db()
    assert record.user.email == 'seven@hostel.test'
    assert r.data['data']['user']['user_type_id'] == record.id


def test_register_requires_record_for_students(admin_client):
    r = admin_client.post('/api/auth/register', {
        'name': 'No Record',
        'email': 'norecord@hostel.test',
        'password': 'Seven@Pass77',
        'password_confirmation': 'Seven@Pass77',
        'role': 'student',
    }, format='json')
    assert r.status_code == 422
    assert 'user_type_id' in r.data['error']['errors']


def test_register_is_admin_only(student_client):
    r = student_client.post('/api/auth/register', {
        'name': 'Sneaky', 'email': 'sneaky@hostel.test', 'password': 'Seven@Pass77',
        'password_confirmation': 'Seven@Pass77', 'role': 'admin',
    }, format='json')
    assert r.status_code == 403
    assert not User.objects.filter(email='sneaky@hostel.test').exists()


def test_check_permission(student_client):
    r = student_client.post('/api/auth/check-permission', {'permission': 'can_checkin_checkout'}, format='json')
    assert r.data['data']['has_permission'] is True
    r = student_client.post('/api/auth/check-permission', {'permission': 'can_manage_users'}, format='json')
    assert r.data['data']['has_permission'] is False


def test_staff_may_create_complaints_but_not_view_student_ones(staff_client):
    r = staff_client.post('/api/auth/check-permission', {'permission': 'can_create_complaints'}, format='json')
    assert r.data['data']['has_permission'] is True
    r = staff_client.post('/api/auth/check-permission', {'permission': 'can_view_complaints'}, format='json')
    assert r.data['data']['has_permission'] is False


def test_admin_login_reports_admin_abilities(db):
    make_user('boss@hostel.test', User.ROLE_ADMIN)
    data = login(APIClient(), 'boss@hostel.test').data['data']
    assert 'admin:*' in data['abilities']
    assert data['user']['user_type_id'] is None
