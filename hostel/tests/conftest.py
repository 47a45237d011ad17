import datetime

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from hostel.models import Block, Hostel, Room, Staff, Student, User

PASSWORD = 'Hostel@Pass1'


@pytest.fixture(autouse=True)
def _isolated_env(settings, tmp_path):
    # throttle counters live in the cache
    cache.clear()
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    settings.PASSWORD_PWNED_CHECK = False
    settings.HOSTEL_DEFAULT_ID = None
    yield
    cache.clear()


@pytest.fixture
def hostel(db):
    return Hostel.objects.create(name='Main Hostel', code='MAIN')


@pytest.fixture
def block(hostel):
    return Block.objects.create(hostel=hostel, block_name='Block A', location='North wing')


@pytest.fixture
def room(block):
    return Room.objects.create(block=block, room_name='A-101', capacity=2, room_type='double')


def make_user(email, role, password=PASSWORD, **extra):
    return User.objects.create_user(username=email, email=email, password=password, role=role, **extra)


def make_student(room, n=1, **extra):
    fields = dict(
        student_id=f'STU-{n:04d}',
        student_name=f'Student {n}',
        email=f'student{n}@hostel.test',
        contact_number='9800000000',
        date_of_birth=datetime.date(2002, 1, 1),
        room=room,
    )
    fields.update(extra)
    return Student.objects.create(**fields)


@pytest.fixture
def admin_user(db):
    return make_user('admin@hostel.test', User.ROLE_ADMIN, name='Admin')


@pytest.fixture
def student_user(db):
    return make_user('student1@hostel.test', User.ROLE_STUDENT, name='Student One')


@pytest.fixture
def student(room, student_user):
    return make_student(room, 1, user=student_user)


@pytest.fixture
def staff_user(db):
    return make_user('staff1@hostel.test', User.ROLE_STAFF, name='Staff One')


@pytest.fixture
def staff(hostel, staff_user):
    return Staff.objects.create(
        hostel=hostel,
        user=staff_user,
        staff_id='STF-0001',
        staff_name='Staff One',
        email='staff1@hostel.test',
        contact_number='9811111111',
        date_of_birth=datetime.date(1990, 5, 5),
        position='Warden',
    )


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def student_client(student):
    return client_for(student.user)


@pytest.fixture
def staff_client(staff):
    return client_for(staff.user)
