from rest_framework import status
from rest_framework.response import Response

from .errors import ConflictError, InvalidTransition, LifecycleError, NotFound, Unauthorized

_STATUS_BY_ERROR = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidTransition, status.HTTP_400_BAD_REQUEST),
    (Unauthorized, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def lifecycle_error_response(exc: LifecycleError) -> Response:
    for error_cls, http_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return Response({"detail": exc.detail}, status=http_status)
    return Response({"detail": exc.detail}, status=status.HTTP_400_BAD_REQUEST)
