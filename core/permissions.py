"""
Role-based permissions shared by every billing app.
"""

from rest_framework import permissions

from .models import UserRole


class IsAdminRole(permissions.BasePermission):
    """Permission for admin users only."""

    message = 'Forbidden'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin_role)


class IsBillingOperator(permissions.BasePermission):
    """Admins and billing operators."""

    message = 'Forbidden'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_superuser or user.role in (UserRole.ADMIN, UserRole.BILLING_OPERATOR)
