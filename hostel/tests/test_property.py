from decimal import Decimal

import pytest

from hostel.models import Block, Hostel, Income, Room, Student

from .conftest import make_student

pytestmark = pytest.mark.django_db


def student_payload(room, **extra):
    payload = {
        'student_name': 'New Student',
        'email': 'new.student@hostel.test',
        'contact_number': '9800000009',
        'date_of_birth': '2003-04-05',
        'room_id': room.id,
    }
    payload.update(extra)
    return payload


def test_blocks_are_paginated(admin_client, hostel):
    for n in range(3):
        Block.objects.create(hostel=hostel, block_name=f'Block {n}')
    r = admin_client.get('/api/blocks', {'pageSize': 2})
    assert r.status_code == 200
    assert len(r.data['data']) == 2
    assert r.data['pagination'] == {'total': 3, 'page': 1, 'pageSize': 2}

    r = admin_client.get('/api/blocks', {'all': 'true'})
    assert len(r.data['data']) == 3


def test_block_markup_is_stripped(admin_client):
    r = admin_client.post('/api/blocks', {'block_name': '<script>x</script>Block Z'}, format='json')
    assert r.status_code == 201
    assert '<' not in r.data['data']['block_name']


def test_hostel_header_scopes_lists_and_new_rows(admin_client, hostel, block):
    other = Hostel.objects.create(name='Second', code='SEC')
    Block.objects.create(hostel=other, block_name='Other block')

    r = admin_client.get('/api/blocks', HTTP_X_HOSTEL_ID=str(hostel.id))
    assert [b['block_name'] for b in r.data['data']] == ['Block A']

    r = admin_client.post('/api/blocks', {'block_name': 'Fresh'}, format='json', HTTP_X_HOSTEL_ID=str(other.id))
    assert r.status_code == 201
    assert Block.objects.get(pk=r.data['data']['id']).hostel_id == other.id


def test_non_numeric_hostel_header_is_rejected(admin_client):
    r = admin_client.get('/api/blocks', HTTP_X_HOSTEL_ID='main')
    assert r.status_code == 400
    assert r.json()['error']['code'] == 'invalid_hostel'


def test_room_hostel_follows_its_block(admin_client, block):
    other = Hostel.objects.create(name='Second', code='SEC')
    other_block = Block.objects.create(hostel=other, block_name='Other block')

    r = admin_client.post('/api/rooms', {'room_name': 'A-102', 'block_id': block.id, 'capacity': 3}, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['hostel'] == block.hostel_id
    assert data['occupied_beds'] == 0
    assert data['vacant_beds'] == 3

    r = admin_client.patch(f"/api/rooms/{data['id']}", {'block_id': other_block.id}, format='json')
    assert r.status_code == 200
    assert Room.objects.get(pk=data['id']).hostel_id == other.id


def test_room_capacity_cannot_drop_below_occupancy(admin_client, room):
    make_student(room, 1)
    make_student(room, 2)
    r = admin_client.patch(f'/api/rooms/{room.id}', {'capacity': 1}, format='json')
    assert r.status_code == 422
    assert r.data['error']['code'] == 'business_rule'
    assert r.data['error']['current_occupancy'] == 2
    room.refresh_from_db()
    assert room.capacity == 2


def test_room_with_students_cannot_be_deleted(admin_client, room):
    make_student(room, 1)
    r = admin_client.delete(f'/api/rooms/{room.id}')
    assert r.status_code == 422
    assert Room.objects.filter(pk=room.id).exists()


def test_room_detail_lists_residents_with_dues(admin_client, room):
    resident = make_student(room, 1)
    Income.objects.create(student=resident, amount=Decimal('100'), received_amount=Decimal('40'))
    r = admin_client.get(f'/api/rooms/{room.id}')
    assert r.status_code == 200
    data = r.data['data']
    assert data['occupied_beds'] == 1
    assert data['vacant_beds'] == 1
    assert data['students'][0]['student_id'] == 'STU-0001'
    assert Decimal(str(data['students'][0]['due_amount'])) == Decimal('60')


def test_available_rooms_skip_full_and_maintenance(admin_client, block, room):
    make_student(room, 1)
    make_student(room, 2)
    Room.objects.create(block=block, room_name='A-103', capacity=1, status=Room.STATUS_MAINTENANCE)
    Room.objects.create(block=block, room_name='A-104', capacity=1)
    r = admin_client.get('/api/available-rooms')
    assert [x['room_name'] for x in r.data['data']] == ['A-104']


def test_student_cannot_join_full_room(admin_client, room):
    make_student(room, 1)
    make_student(room, 2)
    r = admin_client.post('/api/students', student_payload(room), format='json')
    assert r.status_code == 422
    assert r.data['error']['code'] == 'business_rule'
    assert not Student.objects.filter(email='new.student@hostel.test').exists()


def test_student_created_in_room_hostel(admin_client, room):
    r = admin_client.post('/api/students', student_payload(room), format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['room_name'] == 'A-101'
    assert data['block_id'] == room.block_id
    assert data['hostel'] == room.hostel_id


def test_student_birth_date_cannot_be_in_future(admin_client, room):
    r = admin_client.post('/api/students', student_payload(room, date_of_birth='2999-01-01'), format='json')
    assert r.status_code == 422
    assert 'date_of_birth' in r.data['error']['errors']


def test_moving_student_into_full_room_is_rejected(admin_client, block, room):
    make_student(room, 1)
    make_student(room, 2)
    other_room = Room.objects.create(block=block, room_name='A-105', capacity=2)
    mover = make_student(other_room, 3)
    r = admin_client.patch(f'/api/students/{mover.id}', {'room_id': room.id}, format='json')
    assert r.status_code == 422


def test_reactivating_student_in_full_room_is_rejected(admin_client, room):
    make_student(room, 1)
    make_student(room, 2)
    away = make_student(room, 3, is_active=False)
    r = admin_client.patch(f'/api/students/{away.id}', {'is_active': True}, format='json')
    assert r.status_code == 422
    assert r.data['error']['code'] == 'business_rule'
    assert room.students.filter(is_active=True).count() == 2


def test_inactive_student_can_be_edited_in_full_room(admin_client, room):
    make_student(room, 1)
    make_student(room, 2)
    away = make_student(room, 3, is_active=False)
    r = admin_client.patch(f'/api/students/{away.id}', {'student_name': 'Still Away'}, format='json')
    assert r.status_code == 200


def test_student_created_from_form_data_is_active(admin_client, room):
    r = admin_client.post('/api/students', student_payload(room), format='multipart')
    assert r.status_code == 201
    assert r.data['data']['is_active'] is True


def test_non_numeric_id_filters_are_rejected(admin_client, room):
    r = admin_client.get('/api/students', {'room_id': 'abc'})
    assert r.status_code == 422
    assert r.data['error']['code'] == 'validation_failed'
    assert 'room_id' in r.data['error']['errors']

    assert admin_client.get('/api/rooms', {'block_id': 'abc'}).status_code == 422
    assert admin_client.get('/api/available-rooms', {'block_id': 'x'}).status_code == 422
    assert admin_client.get('/api/complains', {'student_id': 'abc'}).status_code == 422
    assert admin_client.get('/api/inquiries', {'seater_type': 'two'}).status_code == 422


def test_student_field_metadata(admin_client):
    r = admin_client.get('/api/students/fields/metadata')
    names = [f['name'] for f in r.data['data']]
    assert 'student_name' in names and 'room_id' in names
    assert 'id' not in names and 'student_image' not in names
    food = next(f for f in r.data['data'] if f['name'] == 'food')
    assert 'vegetarian' in food['choices']


def test_student_filters(admin_client, block, room):
    make_student(room, 1, student_name='Asha Rai')
    other_room = Room.objects.create(block=block, room_name='A-106', capacity=2)
    make_student(other_room, 2, student_name='Bikash Thapa')
    r = admin_client.get('/api/students', {'search': 'asha'})
    assert [s['student_name'] for s in r.data['data']] == ['Asha Rai']
    r = admin_client.get('/api/students', {'room_id': other_room.id})
    assert [s['student_name'] for s in r.data['data']] == ['Bikash Thapa']


def test_healthz(client, db):
    r = client.get('/healthz')
    assert r.status_code == 200
    assert r.json()['db'] is True
