from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from lifecycle.errors import LifecycleError
from lifecycle.responses import lifecycle_error_response
from lifecycle.transitions import Action, Actor
from users.permissions import IsActiveAccount

from .models import Listing
from .serializers import ListingSerializer, TransitionRequestSerializer
from .services import create_listing, restore_listing, soft_delete_listing, transition_listing

PUBLIC_ACTIONS = {"list", "retrieve"}


class ListingPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


def _expected_version(request):
    serializer = TransitionRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data.get("version")


def _can_see_unpublished(user, listing: Listing) -> bool:
    if not (user and user.is_authenticated):
        return False
    return listing.owner_id == user.id or getattr(user, "is_admin", False)


class ListingViewSet(viewsets.GenericViewSet):
    serializer_class = ListingSerializer
    pagination_class = ListingPagination
    permission_classes = [IsActiveAccount]
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        current = getattr(self, "action", None)
        if current in PUBLIC_ACTIONS:
            return [permissions.AllowAny()]
        return [permission() for permission in self.permission_classes]

    def perform_authentication(self, request):
        """Downgrade to anonymous user when public actions receive invalid tokens."""
        try:
            return super().perform_authentication(request)
        except AuthenticationFailed:
            if getattr(self, "action", None) in PUBLIC_ACTIONS:
                request._not_authenticated()
                return
            raise

    def get_queryset(self):
        qs = Listing.objects.public().select_related("owner")
        params = self.request.query_params
        city = params.get("city") or None
        listing_type = params.get("listing_type") or None
        if city:
            qs = qs.filter(city__iexact=city)
        if listing_type:
            qs = qs.filter(listing_type=listing_type)
        return qs.order_by("-featured", "-created_at")

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            listing = create_listing(Actor.from_user(request.user), **serializer.validated_data)
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(self.get_serializer(listing).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        listing = Listing.objects.select_related("owner").filter(pk=pk).first()
        if listing is None:
            return Response({"detail": "Listing not found."}, status=status.HTTP_404_NOT_FOUND)
        if listing.is_deleted:
            return Response(
                {"detail": "This listing has been deleted.", "deleted_at": listing.deleted_at},
                status=status.HTTP_410_GONE,
            )
        if listing.status != Listing.Status.ACTIVE and not _can_see_unpublished(
            request.user, listing
        ):
            return Response({"detail": "Listing not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(self.get_serializer(listing).data)

    def destroy(self, request, pk=None):
        try:
            result = soft_delete_listing(
                pk, Actor.from_user(request.user), expected_version=_expected_version(request)
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(
            {
                "detail": "Listing deleted. It can be restored until it is purged.",
                "deleted_at": result["deleted_at"],
                "purge_at": result["purge_at"],
            }
        )

    @action(detail=True, methods=["post"], url_path="restore")
    def restore(self, request, pk=None):
        try:
            listing = restore_listing(
                pk, Actor.from_user(request.user), expected_version=_expected_version(request)
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(self.get_serializer(listing).data)

    @action(detail=False, methods=["get"], url_path="deleted")
    def deleted(self, request):
        """Soft-deleted listings of the caller; admins may pass ``owner_id``."""
        owner_id = request.user.id
        requested = request.query_params.get("owner_id")
        if requested not in (None, "") and getattr(request.user, "is_admin", False):
            try:
                owner_id = int(requested)
            except (TypeError, ValueError):
                return Response(
                    {"detail": "owner_id must be an integer."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
        qs = Listing.objects.soft_deleted().filter(owner_id=owner_id).order_by("-deleted_at")
        page = self.paginate_queryset(qs)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def _admin_transition(self, request, pk, lifecycle_action):
        try:
            listing = transition_listing(
                pk,
                Actor.from_user(request.user),
                lifecycle_action,
                expected_version=_expected_version(request),
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(self.get_serializer(listing).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        return self._admin_transition(request, pk, Action.APPROVE)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._admin_transition(request, pk, Action.REJECT)

    @action(detail=True, methods=["post"])
    def feature(self, request, pk=None):
        return self._admin_transition(request, pk, Action.FEATURE)

    @action(detail=True, methods=["post"])
    def verify(self, request, pk=None):
        return self._admin_transition(request, pk, Action.VERIFY)
