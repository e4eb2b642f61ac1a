from rest_framework import permissions

from .models import User


class IsManagerOrHigher(permissions.BasePermission):
    message = 'Manager role required'

    def has_permission(self, request, view):
        return request.user.role in [
            User.Role.OWNER,
            User.Role.ADMIN,
            User.Role.MANAGER,
        ]


class ManagerWritesOnly(permissions.BasePermission):
    """
    Any staff member may read; creating, editing or cancelling ledger
    records (promotions, gift cards, loyalty bonuses, stock) needs a manager.
    """

    message = 'Manager role required'

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return IsManagerOrHigher().has_permission(request, view)
