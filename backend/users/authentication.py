from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken
from django.conf import settings
from django.contrib.auth import get_user_model

User = get_user_model()


class CookieJWTAuthentication(JWTAuthentication):
    """
    Reads the access token from the staff cookie, falling back to the
    standard Authorization: Bearer header used by kitchen display devices.
    """

    def authenticate(self, request):
        access_token = request.COOKIES.get(settings.SIMPLE_JWT["AUTH_COOKIE"])
        if not access_token:
            return super().authenticate(request)

        validated_token = self.get_validated_token(access_token)
        return self.get_user(validated_token), validated_token

    def get_user(self, validated_token):
        """
        Override to use all_objects manager to bypass tenant filtering.

        CRITICAL: JWT authentication happens BEFORE the view binds tenant
        context. The token's user_id maps to exactly one user row, and that
        row's tenant is what the view then binds.
        """
        try:
            user_id = validated_token[settings.SIMPLE_JWT.get('USER_ID_CLAIM', 'user_id')]
        except KeyError:
            raise InvalidToken('Token contained no recognizable user identification')

        try:
            # IMPORTANT: select_related('tenant') so views can bind it without another query
            user = User.all_objects.select_related('tenant').get(
                **{settings.SIMPLE_JWT.get('USER_ID_FIELD', 'id'): user_id}
            )
        except User.DoesNotExist:
            raise AuthenticationFailed('User not found', code='user_not_found')

        if not user.is_active:
            raise AuthenticationFailed('User is inactive', code='user_inactive')

        return user
