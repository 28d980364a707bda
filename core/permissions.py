from rest_framework.permissions import BasePermission, SAFE_METHODS


def _role(user):
    profile = getattr(user, "profile", None)
    return getattr(profile, "role", None)


class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        u = request.user
        if not u or not u.is_authenticated: return False
        if u.is_staff or u.is_superuser: return True
        return _role(u) == "ADMIN"


class IsManagerOrAdmin(BasePermission):
    """
    Staff, admins and property managers may operate on leases and payments.
    Tenants only get read access.
    """
    def has_permission(self, request, view):
        u = request.user
        if not u or not u.is_authenticated: return False
        if u.is_staff or u.is_superuser: return True
        if request.method in SAFE_METHODS:
            return True
        return _role(u) in ("ADMIN", "MANAGER")
