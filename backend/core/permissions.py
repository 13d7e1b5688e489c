"""
Role based permission classes.

Anonymous callers fail authentication (401); authenticated callers whose
profile role is not allowed fail authorization (403).
"""
from rest_framework.permissions import BasePermission

from user.models import ADMIN_ROLES, Role, role_of


class HasRole(BasePermission):
    allowed_roles = ()
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return role_of(request.user) in self.allowed_roles


class IsAdmin(HasRole):
    allowed_roles = ADMIN_ROLES
    message = 'Only administrators can access this endpoint.'


class IsImam(HasRole):
    allowed_roles = (Role.IMAM, *ADMIN_ROLES)
    message = 'Only imams and administrators can access this endpoint.'


class IsBusinessOwner(HasRole):
    allowed_roles = (Role.BUSINESS, *ADMIN_ROLES)
    message = 'Only business accounts can access this endpoint.'


class IsVolunteer(HasRole):
    allowed_roles = (Role.VOLUNTEER, *ADMIN_ROLES)
    message = 'Only volunteers can access this endpoint.'
