from django.contrib.auth import get_user_model
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from lifecycle.errors import LifecycleError
from lifecycle.responses import lifecycle_error_response
from lifecycle.transitions import Actor

from . import services
from .permissions import IsActiveAccount, IsAdminRole
from .serializers import (
    AdminUserSerializer,
    BanRequestSerializer,
    FlexibleTokenObtainPairSerializer,
    ProfileSerializer,
    RoleChangeSerializer,
    SignupSerializer,
    VersionSerializer,
)

User = get_user_model()


class SignupView(generics.CreateAPIView):
    """Public signup endpoint."""

    queryset = User.objects.all()
    serializer_class = SignupSerializer
    permission_classes = [permissions.AllowAny]


class MeView(generics.RetrieveUpdateAPIView):
    """Authenticated profile view for the current user."""

    serializer_class = ProfileSerializer
    permission_classes = [IsActiveAccount]

    def get_object(self):
        user = self.request.user
        self.check_object_permissions(self.request, user)
        return user


class FlexibleTokenObtainPairView(TokenObtainPairView):
    """Login endpoint that accepts email or username as the identifier."""

    permission_classes = [permissions.AllowAny]
    serializer_class = FlexibleTokenObtainPairSerializer


class AdminUserActionView(APIView):
    """Base view for admin account moderation; subclasses call one service."""

    permission_classes = [IsAdminRole]
    request_serializer_class = VersionSerializer

    def perform(self, user_id, actor: Actor, data: dict):
        raise NotImplementedError

    def post(self, request, user_id: int):
        serializer = self.request_serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            user = self.perform(user_id, Actor.from_user(request.user), serializer.validated_data)
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(AdminUserSerializer(user).data)


class AdminBanUserView(AdminUserActionView):
    request_serializer_class = BanRequestSerializer

    def perform(self, user_id, actor, data):
        return services.ban_user(
            user_id, actor, reason=data["reason"], expected_version=data.get("version")
        )


class AdminUnbanUserView(AdminUserActionView):
    def perform(self, user_id, actor, data):
        return services.unban_user(user_id, actor, expected_version=data.get("version"))


class AdminChangeRoleView(AdminUserActionView):
    request_serializer_class = RoleChangeSerializer

    def perform(self, user_id, actor, data):
        return services.change_role(
            user_id, actor, data["role"], expected_version=data.get("version")
        )


class AdminDeleteUserView(APIView):
    permission_classes = [IsAdminRole]

    def delete(self, request, user_id: int):
        try:
            summary = services.delete_account(user_id, Actor.from_user(request.user))
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(
            {"detail": "User and their content deleted.", **summary},
            status=status.HTTP_200_OK,
        )
