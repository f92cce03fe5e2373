"""
Role-based permissions.

Identity itself comes from DRF authentication; these only read the role
on the authenticated account.
"""
from rest_framework import permissions


class IsAdminRole(permissions.BasePermission):
    """Allows access only to accounts with role=admin."""
    message = 'Not authorized to access this route'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)
