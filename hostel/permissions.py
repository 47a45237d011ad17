"""
Role based permission classes.

Each class rejects anonymous callers with 401 ``UNAUTHENTICATED``,
inactive accounts with 403 ``ACCOUNT_DEACTIVATED`` and callers holding
another role with 403 ``INSUFFICIENT_ROLE``.
"""
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import BasePermission

from .exceptions import AccountDeactivated, InsufficientRole


class HasRole(BasePermission):
    """Allow access only to active users holding one of ``roles``."""
    roles: tuple[str, ...] = ()

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            raise NotAuthenticated('Unauthenticated')
        if not user.is_active:
            raise AccountDeactivated('Your account has been deactivated. Please contact administrator.')
        role = getattr(user, "role", None)
        if self.roles and role not in self.roles:
            raise InsufficientRole(
                'Insufficient permissions. Required role(s): ' + ', '.join(self.roles),
                required_roles=list(self.roles),
                user_role=role,
            )
        return True


class IsAdminRole(HasRole):
    roles = ("admin",)


class IsStudentRole(HasRole):
    roles = ("student",)


class IsStaffRole(HasRole):
    roles = ("staff",)


class IsActiveUser(HasRole):
    """Any role, as long as the account is active."""
    roles = ()


class IsAdminOrStaffRole(HasRole):
    roles = ("admin", "staff")
