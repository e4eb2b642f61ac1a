import logging

import jwt
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from jwt.exceptions import InvalidTokenError

from .models import Tenant
from .managers import set_current_tenant

logger = logging.getLogger(__name__)


class TenantNotFoundError(Exception):
    """Raised when tenant cannot be resolved from request."""
    pass


class TenantMiddleware:
    """
    Resolves tenant from request and attaches to request.tenant.

    Resolution precedence (highest to lowest):
    1. JWT access token tenant claim - staff devices (cookie or Bearer header)
    2. X-Tenant header - customer sites calling the shared API
    3. None - public endpoints that carry restaurant_id in the payload

    Staff views re-bind the context to the authenticated user's tenant after
    DRF authentication, so the claim here only has to be good enough to
    route the request; it is never trusted for authorization.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Admin operates without tenant context
        if request.path.startswith('/admin/'):
            request.tenant = None
            set_current_tenant(None)
            return self.get_response(request)

        try:
            tenant = self.get_tenant_from_request(request)
            request.tenant = tenant

            # CRITICAL: Set thread-local context for TenantManager
            set_current_tenant(tenant)

            if tenant and not tenant.is_active:
                return JsonResponse({
                    'error': 'Tenant account is inactive',
                    'code': 'TENANT_INACTIVE'
                }, status=403)

            return self.get_response(request)

        except TenantNotFoundError as e:
            return JsonResponse({
                'error': str(e),
                'code': 'TENANT_NOT_FOUND'
            }, status=400)

        finally:
            # CRITICAL: Always clean up thread-local context
            # Even if view raises exception, prevent tenant leakage to next request
            set_current_tenant(None)

    def get_tenant_from_request(self, request):
        tenant_from_jwt = self.get_tenant_from_jwt(request)
        if tenant_from_jwt:
            return tenant_from_jwt

        tenant_header = request.META.get('HTTP_X_TENANT')
        if tenant_header:
            try:
                return Tenant.objects.get(slug=tenant_header)
            except Tenant.DoesNotExist:
                logger.info(f"X-Tenant header '{tenant_header}' did not match any tenant")
                raise TenantNotFoundError(
                    f"Tenant '{tenant_header}' not found. Check X-Tenant header value."
                )

        return None

    def get_access_token(self, request):
        access_token = request.COOKIES.get(settings.SIMPLE_JWT.get('AUTH_COOKIE'))
        if access_token:
            return access_token

        header = request.META.get('HTTP_AUTHORIZATION', '')
        parts = header.split()
        if len(parts) == 2 and parts[0] in settings.SIMPLE_JWT.get('AUTH_HEADER_TYPES', ('Bearer',)):
            return parts[1]
        return None

    def get_tenant_from_jwt(self, request):
        """
        Extract tenant from JWT token claims.

        This is a lightweight decode for tenant extraction only.
        Full JWT validation happens later in DRF authentication.
        """
        access_token = self.get_access_token(request)
        if not access_token:
            return None

        try:
            payload = jwt.decode(
                access_token,
                options={'verify_signature': False, 'verify_exp': False}
            )
        except InvalidTokenError:
            # Fall through to other tenant resolution methods
            return None

        tenant_id = payload.get('tenant_id')
        if not tenant_id:
            raise TenantNotFoundError(
                "JWT missing tenant_id claim. Token format is invalid."
            )

        try:
            return Tenant.objects.get(id=tenant_id)
        except (Tenant.DoesNotExist, ValidationError, ValueError):
            raise TenantNotFoundError(
                f"JWT tenant_id '{tenant_id}' not found. Token may be stale."
            )
