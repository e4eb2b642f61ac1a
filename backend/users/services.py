from django.conf import settings
from django.contrib.auth import authenticate
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


class UserService:
    """Staff authentication and token issuing."""

    @staticmethod
    def authenticate_staff(email: str, password: str):
        """
        Return the active staff user for these credentials, or None.

        Users without a tenant (platform superusers) cannot use the staff
        endpoints and are rejected here as well.
        """
        user = authenticate(username=email, password=password)
        if user is None or not user.is_pos_staff or not user.tenant_id:
            return None
        if not user.tenant.is_active:
            return None
        return user

    @staticmethod
    def generate_tokens_for_user(user: User) -> dict:
        """
        Issue a token pair carrying the tenant claims that TenantMiddleware
        and TenantWebSocketMiddleware resolve the tenant from.
        """
        refresh = RefreshToken.for_user(user)
        refresh['tenant_id'] = str(user.tenant_id)
        refresh['tenant_slug'] = user.tenant.slug
        refresh['role'] = user.role
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
        }

    @staticmethod
    def set_auth_cookies(response, access_token, refresh_token, cookie_path="/"):
        is_secure = getattr(settings, 'SESSION_COOKIE_SECURE', not settings.DEBUG)
        samesite_policy = getattr(settings, 'SESSION_COOKIE_SAMESITE', 'Lax')

        response.set_cookie(
            key=settings.SIMPLE_JWT["AUTH_COOKIE"],
            value=access_token,
            max_age=settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"].total_seconds(),
            path=cookie_path,
            httponly=True,
            secure=is_secure,
            samesite=samesite_policy,
        )
        response.set_cookie(
            key=settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"],
            value=refresh_token,
            max_age=settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"].total_seconds(),
            path=cookie_path,
            httponly=True,
            secure=is_secure,
            samesite=samesite_policy,
        )

    @staticmethod
    def clear_auth_cookies(response, cookie_path="/"):
        response.delete_cookie(settings.SIMPLE_JWT["AUTH_COOKIE"], path=cookie_path)
        response.delete_cookie(settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"], path=cookie_path)
