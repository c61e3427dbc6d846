"""Persisted-store access for lifecycle-managed models.

Every write is a compare-and-swap on the integer ``version`` column: the row
is only touched when its version still matches the one that was read.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from django.db.models import F, Model, QuerySet
from django.utils import timezone

from .errors import ConflictError, NotFound

logger = logging.getLogger(__name__)


class EntityStore:
    def __init__(self, model: type[Model]):
        self.model = model

    @property
    def kind(self) -> str:
        return self.model.LIFECYCLE_KIND

    def _has_field(self, name: str) -> bool:
        return any(field.name == name for field in self.model._meta.concrete_fields)

    def get(self, pk) -> Model:
        try:
            return self.model.objects.get(pk=pk)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise NotFound()

    def conditional_update(self, entity: Model, expected_version: int, fields: Iterable[str]):
        values = {name: getattr(entity, name) for name in fields}
        if self._has_field("updated_at"):
            values["updated_at"] = timezone.now()
        updated = self.model.objects.filter(pk=entity.pk, version=expected_version).update(
            version=F("version") + 1, **values
        )
        if updated != 1:
            logger.info(
                "lifecycle: conditional update lost race",
                extra={"kind": self.kind, "entity_id": entity.pk, "version": expected_version},
            )
            raise ConflictError()
        for name, value in values.items():
            setattr(entity, name, value)
        entity.version = expected_version + 1
        return entity

    def find_where(self, **filters) -> QuerySet:
        return self.model.objects.filter(**filters)

    def find_purge_eligible(self, now: datetime) -> QuerySet:
        return self.find_where(deleted_at__isnull=False, purge_at__lte=now).order_by(
            "purge_at", "pk"
        )

    def hard_delete(self, pk, expected_version: int) -> None:
        deleted, _ = self.model.objects.filter(pk=pk, version=expected_version).delete()
        if not deleted:
            raise ConflictError()
