import re

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from hostel.models import Staff, Student

User = get_user_model()

NAME_RE = re.compile(r'^[A-Za-z\s]+$')


def _check_password(value, user=None):
    try:
        validate_password(value, user)
    except DjangoValidationError as exc:
        raise serializers.ValidationError(exc.messages)
    return value


class LoginSerializer(serializers.Serializer):
    # email, or a student/staff id for accounts linked to one
    email = serializers.CharField(max_length=255)
    password = serializers.CharField(trim_whitespace=False)

    def validate_email(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('The email field is required.')
        return v


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(trim_whitespace=False, write_only=True)
    password_confirmation = serializers.CharField(trim_whitespace=False, write_only=True)
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES])
    user_type_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_name(self, v):
        v = v.strip()
        if not NAME_RE.match(v):
            raise serializers.ValidationError('Name can only contain letters and spaces.')
        return v

    def validate_email(self, v):
        v = v.strip().lower()
        if User.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError('This email is already registered.')
        return v

    def validate_password(self, v):
        return _check_password(v)

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirmation']:
            raise serializers.ValidationError({'password': ['Password confirmation does not match.']})
        role = attrs['role']
        type_id = attrs.get('user_type_id')
        if role in (User.ROLE_STUDENT, User.ROLE_STAFF):
            if not type_id:
                raise serializers.ValidationError({'user_type_id': ['User type ID is required for students and staff.']})
            model = Student if role == User.ROLE_STUDENT else Staff
            if not model.objects.filter(pk=type_id).exists():
                raise serializers.ValidationError({'user_type_id': ['The selected record does not exist.']})
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(trim_whitespace=False)
    new_password = serializers.CharField(trim_whitespace=False)
    new_password_confirmation = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        if attrs['new_password'] != attrs['new_password_confirmation']:
            raise serializers.ValidationError({'new_password': ['Password confirmation does not match.']})
        return attrs


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)


class CheckPermissionSerializer(serializers.Serializer):
    permission = serializers.CharField(max_length=100)
