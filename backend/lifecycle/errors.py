"""Error taxonomy for entity status transitions."""

from __future__ import annotations


class LifecycleError(Exception):
    """Base class for failures of a requested transition."""

    default_detail = "Request failed."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFound(LifecycleError):
    default_detail = "Not found."


class InvalidTransition(LifecycleError):
    default_detail = "This action is not allowed in the current state."


class Unauthorized(LifecycleError):
    # Kept generic so callers cannot probe for other users' entities.
    default_detail = "You do not have permission to perform this action."


class ConflictError(LifecycleError):
    default_detail = "The entity was modified concurrently; reload and retry."


class NotificationDeliveryFailure(LifecycleError):
    default_detail = "Notification could not be delivered."


class SchedulerPartialFailure(LifecycleError):
    """One or more entities could not be purged during a sweep."""

    default_detail = "Purge sweep finished with failures."

    def __init__(self, failures: list[dict]):
        self.failures = failures
        super().__init__(f"{len(failures)} entities failed to purge")
