"""
Soft delete, restore and purge eligibility.

Entities handled here expose ``status``, ``deleted_at`` and ``purge_at`` plus
two class attributes:

- ``HIDDEN_STATUS``: status forced while soft-deleted.
- ``RESTORED_STATUS``: status set on restore, or None when restore is not
  supported for the kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Union

from django.conf import settings

from .errors import InvalidTransition

SOFT_DELETE_FIELDS = ("status", "deleted_at", "purge_at")


@dataclass(frozen=True)
class Present:
    status: str


@dataclass(frozen=True)
class SoftDeleted:
    status: str
    deleted_at: datetime
    purge_at: datetime


DeletionState = Union[Present, SoftDeleted]


def default_retention_window() -> timedelta:
    return getattr(settings, "LISTING_RETENTION_WINDOW", timedelta(days=2))


class SoftDeleteLifecycle:
    def __init__(self, retention_window: timedelta | None = None):
        self.retention_window = (
            retention_window if retention_window is not None else default_retention_window()
        )

    def deletion_state(self, entity) -> DeletionState:
        if entity.deleted_at is None:
            return Present(status=entity.status)
        return SoftDeleted(
            status=entity.status,
            deleted_at=entity.deleted_at,
            purge_at=entity.purge_at,
        )

    def is_deleted(self, entity) -> bool:
        return entity.deleted_at is not None

    def soft_delete(self, entity, now: datetime):
        if self.is_deleted(entity):
            raise InvalidTransition("already deleted")
        entity.deleted_at = now
        entity.purge_at = now + self.retention_window
        entity.status = entity.HIDDEN_STATUS
        return entity

    def restore(self, entity):
        if not self.is_deleted(entity):
            raise InvalidTransition("not deleted")
        if entity.RESTORED_STATUS is None:
            raise InvalidTransition("deleted is terminal for this entity")
        entity.deleted_at = None
        entity.purge_at = None
        entity.status = entity.RESTORED_STATUS
        return entity

    def is_purge_eligible(self, entity, now: datetime) -> bool:
        return (
            entity.deleted_at is not None
            and entity.purge_at is not None
            and entity.purge_at <= now
        )
