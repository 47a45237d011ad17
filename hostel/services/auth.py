"""
Account services: login lookup, token issuing and revocation, user
formatting and the per-role ability/permission maps.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import ValidationError, PermissionDenied
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from hostel.exceptions import AccountDeactivated, InvalidCredentials
from hostel.models import Staff, Student

logger = logging.getLogger(__name__)
User = get_user_model()

ABILITIES = {
    'admin': ['admin:*', 'users', 'students', 'staff', 'finances', 'notices', 'complaints', 'reports:read'],
    'student': ['student:*'],
    'staff': ['staff:*'],
}

PERMISSIONS = {
    'admin': {
        'can_manage_users': True,
        'can_manage_students': True,
        'can_manage_staff': True,
        'can_manage_finances': True,
        'can_manage_rooms': True,
        'can_manage_blocks': True,
        'can_view_reports': True,
        'can_manage_notices': True,
        'can_manage_complaints': True,
        'can_manage_inquiries': True,
        'can_manage_expenses': True,
        'can_manage_income': True,
        'can_manage_salaries': True,
        'can_manage_attendance': True,
    },
    'student': {
        'can_view_profile': True,
        'can_update_profile': True,
        'can_view_finances': True,
        'can_checkin_checkout': True,
        'can_view_notices': True,
        'can_create_complaints': True,
        'can_view_complaints': True,
        'can_chat': True,
    },
    'staff': {
        'can_view_profile': True,
        'can_update_profile': True,
        'can_view_finances': True,
        'can_checkin_checkout': True,
        'can_view_notices': True,
        'can_create_complaints': True,
        'can_chat': True,
    },
}


def get_user_permissions(user) -> dict:
    return dict(PERMISSIONS.get(getattr(user, 'role', ''), {}))


def has_permission(user, permission: str) -> bool:
    return bool(get_user_permissions(user).get(permission, False))


def find_login_user(identifier: str) -> Optional[User]:
    """Resolve a login identifier: email first, then student id, then staff id."""
    identifier = (identifier or '').strip()
    if not identifier:
        return None
    user = User.objects.filter(email__iexact=identifier).first()
    if user:
        return user
    student = Student.objects.select_related('user').filter(student_id=identifier, user__isnull=False).first()
    if student:
        return student.user
    staff = Staff.objects.select_related('user').filter(staff_id=identifier, user__isnull=False).first()
    if staff:
        return staff.user
    return None


def authenticate_login(identifier: str, password: str) -> User:
    user = find_login_user(identifier)
    if user is None or not user.check_password(password):
        raise InvalidCredentials('Invalid credentials')
    if not user.is_active:
        raise AccountDeactivated('Your account has been deactivated. Please contact administrator.')
    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user


def issue_tokens(user) -> dict:
    """Issue a legacy DRF token plus a JWT pair."""
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'token_type': 'Bearer',
        'abilities': ABILITIES.get(user.role, []),
    }


def _blacklist(refresh: str, user) -> int:
    try:
        token = RefreshToken(refresh)
    except TokenError as exc:
        raise ValidationError({'refresh': [str(exc)]})
    if str(token.get('user_id')) != str(user.pk):
        raise PermissionDenied('Token does not belong to the current user')
    try:
        token.blacklist()
    except TokenError as exc:
        raise ValidationError({'refresh': [str(exc)]})
    return 1


def revoke_tokens(user, *, refresh: Optional[str] = None, everything: bool = False) -> int:
    """Blacklist refresh tokens and drop the legacy token.

    With ``refresh`` only that token is blacklisted; with ``everything``
    every outstanding token of the user is.  Otherwise the most recent
    outstanding token is blacklisted.
    """
    count = 0
    if refresh and not everything:
        count = _blacklist(refresh, user)
    else:
        outstanding = OutstandingToken.objects.filter(user=user, blacklistedtoken__isnull=True).order_by('-created_at')
        if not everything:
            outstanding = outstanding[:1]
        for token in outstanding:
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=user).delete()
    return count


def rotate_tokens(user) -> dict:
    Token.objects.filter(user=user).delete()
    return issue_tokens(user)


def active_sessions(user) -> list[dict]:
    qs = OutstandingToken.objects.filter(
        user=user, blacklistedtoken__isnull=True, expires_at__gt=timezone.now()
    ).order_by('-created_at')
    return [
        {'id': t.id, 'jti': t.jti, 'created_at': t.created_at, 'expires_at': t.expires_at}
        for t in qs
    ]


def format_user(user) -> dict:
    return {
        'id': user.id,
        'name': user.display_name,
        'email': user.email,
        'role': user.role,
        'user_type_id': user.user_type_id,
        'is_active': user.is_active,
        'created_at': user.date_joined,
        'updated_at': user.updated_at,
    }


def user_profile(user) -> dict:
    if user.role == User.ROLE_STUDENT:
        student = user.student_record
        if not student:
            return {}
        room = student.room
        return {
            'student_id': student.student_id,
            'student_name': student.student_name,
            'contact_number': student.contact_number,
            'room': {'id': room.id, 'room_name': room.room_name} if room else None,
            'block': {'id': room.block_id, 'block_name': room.block.block_name} if room else None,
            'student_image': student.student_image,
        }
    if user.role == User.ROLE_STAFF:
        staff = user.staff_record
        if not staff:
            return {}
        return {
            'staff_id': staff.staff_id,
            'staff_name': staff.staff_name,
            'position': staff.position,
            'department': staff.department,
            'staff_image': staff.staff_image,
        }
    return {
        'admin_level': user.admin_level or ('super' if user.is_superuser else 'standard'),
        'permissions': get_user_permissions(user),
    }


@transaction.atomic
def register_user(*, name: str, email: str, password: str, role: str, user_type_id: Optional[int] = None) -> User:
    user = User.objects.create_user(username=email, email=email, password=password, name=name, role=role)
    if role == User.ROLE_STUDENT:
        updated = Student.objects.filter(pk=user_type_id, user__isnull=True).update(user=user)
    elif role == User.ROLE_STAFF:
        updated = Staff.objects.filter(pk=user_type_id, user__isnull=True).update(user=user)
    else:
        updated = 1
    if not updated:
        raise ValidationError({'user_type_id': ['The selected record is already linked to an account.']})
    logger.info('Registered %s account %s', role, email)
    return user


def change_password(user, *, current_password: str, new_password: str) -> None:
    if not user.check_password(current_password):
        raise ValidationError({'current_password': ['The current password is incorrect.']})
    if current_password == new_password:
        raise ValidationError({'new_password': ['The new password must be different from the current password.']})
    try:
        validate_password(new_password, user)
    except DjangoValidationError as exc:
        raise ValidationError({'new_password': exc.messages})
    user.set_password(new_password)
    user.save(update_fields=['password'])
