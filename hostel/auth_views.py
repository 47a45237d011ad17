"""
Authentication endpoints under ``/api/auth/``.

Login accepts an email, a student id or a staff id and returns both a
legacy DRF token and a JWT pair.  Kept apart from
``hostel.authentication`` so that DRF can import the authentication class
without pulling in views.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny

from hostel.exceptions import APIError
from hostel.permissions import IsActiveUser, IsAdminRole
from hostel.serializers.auth import (
    ChangePasswordSerializer,
    CheckPermissionSerializer,
    LoginSerializer,
    LogoutSerializer,
    RegisterSerializer,
)
from hostel.services import auth as auth_service
from hostel.services.audit import log_action
from hostel.views.common import created, ok


def _ip(request):
    return request.META.get('REMOTE_ADDR')


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    identifier = s.validated_data['email']
    try:
        user = auth_service.authenticate_login(identifier, s.validated_data['password'])
    except APIError as exc:
        log_action(user=None, action='login', object_type='user', object_id=None,
                   detail={'result': exc.code, 'identifier': identifier, 'ip': _ip(request)})
        raise
    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': _ip(request)})
    payload = auth_service.issue_tokens(user)
    payload['user'] = auth_service.format_user(user)
    return ok(payload, message='Login successful')


# ScopedRateThrottle reads the scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([IsAdminRole])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user = auth_service.register_user(
        name=vd['name'], email=vd['email'], password=vd['password'],
        role=vd['role'], user_type_id=vd.get('user_type_id'),
    )
    log_action(user=request.user, action='register', object_type='user', object_id=user.id,
               detail={'role': user.role})
    payload = auth_service.issue_tokens(user)
    payload['user'] = auth_service.format_user(user)
    return created(payload, message='User registered successfully')


@api_view(['POST'])
@permission_classes([IsActiveUser])
def logout_view(request):
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    auth_service.revoke_tokens(request.user, refresh=s.validated_data.get('refresh') or None)
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id)
    return ok(None, message='Logged out successfully')


@api_view(['POST'])
@permission_classes([IsActiveUser])
def logout_all_view(request):
    count = auth_service.revoke_tokens(request.user, everything=True)
    log_action(user=request.user, action='logout_all', object_type='user', object_id=request.user.id,
               detail={'revoked': count})
    return ok({'revoked_sessions': count}, message='Logged out from all devices successfully')


@api_view(['GET'])
@permission_classes([IsActiveUser])
def me_view(request):
    user = request.user
    data = auth_service.format_user(user)
    data['profile'] = auth_service.user_profile(user)
    data['permissions'] = auth_service.get_user_permissions(user)
    return ok(data)


@api_view(['POST'])
@permission_classes([IsActiveUser])
def change_password_view(request):
    s = ChangePasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    auth_service.change_password(
        request.user,
        current_password=s.validated_data['current_password'],
        new_password=s.validated_data['new_password'],
    )
    auth_service.revoke_tokens(request.user, everything=True)
    log_action(user=request.user, action='password_change', object_type='user', object_id=request.user.id)
    return ok(auth_service.issue_tokens(request.user), message='Password changed successfully')


@api_view(['POST'])
@permission_classes([IsActiveUser])
def refresh_token_view(request):
    payload = auth_service.rotate_tokens(request.user)
    payload['user'] = auth_service.format_user(request.user)
    return ok(payload, message='Token refreshed successfully')


@api_view(['POST'])
@permission_classes([IsActiveUser])
def check_permission_view(request):
    s = CheckPermissionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    permission = s.validated_data['permission']
    return ok({
        'permission': permission,
        'has_permission': auth_service.has_permission(request.user, permission),
    })


@api_view(['GET'])
@permission_classes([IsActiveUser])
def active_sessions_view(request):
    sessions = auth_service.active_sessions(request.user)
    return ok({'sessions': sessions, 'total': len(sessions)})
