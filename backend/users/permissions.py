from rest_framework.permissions import BasePermission


class IsActiveAccount(BasePermission):
    """
    Allows access only to authenticated users that are not banned.
    """

    message = "Your account has been suspended."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and not getattr(user, "is_banned", False))


class IsAdminRole(IsActiveAccount):
    """
    Allows access only to active users holding the admin role.
    """

    message = "Admin access required."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return getattr(request.user, "is_admin", False)
