from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.response import Response

from lifecycle.errors import LifecycleError
from lifecycle.responses import lifecycle_error_response
from lifecycle.transitions import Actor
from listings.api import ListingPagination
from listings.serializers import TransitionRequestSerializer
from users.permissions import IsActiveAccount

from .models import Post
from .moderation import ModerationWorkflow
from .serializers import ModerationRequestSerializer, PostSerializer
from .services import create_post, soft_delete_post

PUBLIC_ACTIONS = {"list", "retrieve"}


class PostViewSet(viewsets.GenericViewSet):
    serializer_class = PostSerializer
    pagination_class = ListingPagination
    permission_classes = [IsActiveAccount]
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        if getattr(self, "action", None) in PUBLIC_ACTIONS:
            return [permissions.AllowAny()]
        return [permission() for permission in self.permission_classes]

    def perform_authentication(self, request):
        try:
            return super().perform_authentication(request)
        except AuthenticationFailed:
            if getattr(self, "action", None) in PUBLIC_ACTIONS:
                request._not_authenticated()
                return
            raise

    def get_queryset(self):
        qs = Post.objects.public().select_related("owner")
        post_type = self.request.query_params.get("type") or None
        if post_type and post_type != "all":
            qs = qs.filter(post_type=post_type)
        return qs.order_by("-created_at")

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            post = create_post(Actor.from_user(request.user), **serializer.validated_data)
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(self.get_serializer(post).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        post = Post.objects.select_related("owner").filter(pk=pk).first()
        if post is None:
            return Response({"detail": "Post not found."}, status=status.HTTP_404_NOT_FOUND)
        if post.status == Post.Status.DELETED:
            return Response(
                {"detail": "This post has been deleted.", "deleted_at": post.deleted_at},
                status=status.HTTP_410_GONE,
            )
        user = request.user
        if post.status != Post.Status.ACTIVE and not (
            user.is_authenticated and (post.owner_id == user.id or getattr(user, "is_admin", False))
        ):
            return Response({"detail": "Post not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(self.get_serializer(post).data)

    def destroy(self, request, pk=None):
        version = TransitionRequestSerializer(data=request.data)
        version.is_valid(raise_exception=True)
        try:
            result = soft_delete_post(
                pk,
                Actor.from_user(request.user),
                expected_version=version.validated_data.get("version"),
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(
            {
                "detail": "Post deleted.",
                "deleted_at": result["deleted_at"],
                "purge_at": result["purge_at"],
            }
        )

    def _moderate(self, request, pk, decide):
        serializer = ModerationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            post = decide(
                pk,
                Actor.from_user(request.user),
                note=serializer.validated_data["note"],
                expected_version=serializer.validated_data.get("version"),
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(self.get_serializer(post).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        return self._moderate(request, pk, ModerationWorkflow().approve)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._moderate(request, pk, ModerationWorkflow().reject)
