from rest_framework.permissions import BasePermission


class IsPlatformAdmin(BasePermission):
    """Allow access only to active ADMIN users or superusers."""
    message = 'Only admins can perform this action'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return bool(getattr(request.user, 'is_admin', False))


class IsClient(BasePermission):
    """Allow access only to CLIENT users."""
    message = 'Only client users can perform this action'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return bool(getattr(request.user, 'is_client', False))
