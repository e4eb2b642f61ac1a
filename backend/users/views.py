from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import LoginSerializer, UserSerializer
from .services import UserService


@method_decorator(
    ratelimit(key="ip", rate="5/m", method="POST", block=True), name="post"
)
class StaffLoginView(APIView):
    """
    Email/password login for staff devices.

    Sets the access/refresh cookies and also returns the access token in the
    body for devices that send it as a Bearer header instead.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = UserService.authenticate_staff(
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
        )
        if user is None:
            return Response(
                {"error": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED
            )

        tokens = UserService.generate_tokens_for_user(user)
        response = Response({
            "user": UserSerializer(user).data,
            "tenant": {
                "id": str(user.tenant.id),
                "name": user.tenant.name,
                "slug": user.tenant.slug,
            },
            "access": tokens["access"],
        })
        UserService.set_auth_cookies(response, tokens["access"], tokens["refresh"])
        return response


class StaffLogoutView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        response = Response(status=status.HTTP_204_NO_CONTENT)
        UserService.clear_auth_cookies(response)
        return response
