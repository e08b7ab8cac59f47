"""
Role based permissions for the InstallDesk API.
"""
from rest_framework.permissions import BasePermission


class IsStaffOrAdmin(BasePermission):
    """Authenticated user with the STAFF or ADMIN role."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_active and user.is_panel_user)


class IsAdmin(BasePermission):
    """Authenticated user with the ADMIN role."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_active and user.is_admin)


class IsAdminForDelete(IsAdmin):
    """DELETE requires the ADMIN role; other methods pass through."""

    def has_permission(self, request, view):
        if request.method != 'DELETE':
            return True
        return super().has_permission(request, view)
