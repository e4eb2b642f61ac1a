"""
Permissions for staff-facing endpoints.
"""

import logging

from rest_framework.permissions import BasePermission

security_logger = logging.getLogger('security')


class IsTenantStaff(BasePermission):
    """
    Authenticated staff user bound to an active tenant.

    If the tenant resolved by TenantMiddleware (JWT claim or X-Tenant header)
    disagrees with the user's own tenant, the request is refused and logged
    as a cross-tenant access attempt.
    """

    message = 'Staff access required'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if not getattr(user, 'tenant_id', None) or not user.is_pos_staff:
            return False

        if not user.tenant.is_active:
            return False

        resolved = getattr(request, 'tenant', None)
        if resolved is not None and resolved.id != user.tenant_id:
            security_logger.warning(
                f"Cross-tenant access attempt: user {user.id} (tenant {user.tenant_id}) "
                f"requested {request.path} for tenant {resolved.id}"
            )
            return False

        return True
