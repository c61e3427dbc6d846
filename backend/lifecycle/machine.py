from __future__ import annotations

import logging
from typing import Any

from core.clock import Clock, system_clock

from .errors import ConflictError
from .guard import Allow, can_transition
from .soft_delete import SOFT_DELETE_FIELDS, SoftDeleteLifecycle
from .store import EntityStore
from .transitions import REMOVED, Action, Actor

logger = logging.getLogger(__name__)

FLAG_ACTIONS = {
    Action.FEATURE: "featured",
    Action.VERIFY: "verified",
}


class EntityStatusMachine:
    """
    Apply guarded transitions to persisted entities.

    The entity is always re-read from the store, the guard runs against that
    persisted state, and the write is conditional on the version that was
    read. A caller holding a stale ``expected_version`` gets ConflictError.
    Notifications are not sent from here.
    """

    def __init__(
        self,
        store: EntityStore,
        *,
        lifecycle: SoftDeleteLifecycle | None = None,
        clock: Clock = system_clock,
    ):
        self.store = store
        self.lifecycle = lifecycle or SoftDeleteLifecycle()
        self.clock = clock

    def authorize(self, entity, actor: Actor, action: str) -> Allow:
        decision = can_transition(actor, entity.lifecycle_state(), action)
        if not decision.allowed:
            logger.info(
                "lifecycle: %s denied on %s %s: %s",
                action,
                self.store.kind,
                entity.pk,
                decision.reason,
                extra={"actor_id": actor.identity, "actor_role": actor.role},
            )
            raise decision.as_error()
        return decision

    def apply(
        self,
        entity_id,
        actor: Actor,
        action: str,
        *,
        expected_version: int | None = None,
        changes: dict[str, Any] | None = None,
    ):
        """
        Returns the updated entity, or None when the action removed it.

        ``changes`` are extra field values written in the same conditional
        update (e.g. moderation audit stamps).
        """
        entity = self.store.get(entity_id)
        if expected_version is not None and entity.version != expected_version:
            raise ConflictError()
        read_version = entity.version
        decision = self.authorize(entity, actor, action)

        if decision.next_state == REMOVED:
            self.store.hard_delete(entity.pk, read_version)
            logger.info(
                "lifecycle: %s %s removed by %s",
                self.store.kind,
                entity_id,
                action,
                extra={"actor_id": actor.identity, "actor_role": actor.role},
            )
            return None

        fields = self._apply_effect(entity, action, decision.next_state)
        for name, value in (changes or {}).items():
            setattr(entity, name, value)
            fields.append(name)

        self.store.conditional_update(entity, read_version, fields)
        logger.info(
            "lifecycle: %s %s %s -> %s",
            self.store.kind,
            entity_id,
            action,
            decision.next_state,
            extra={"actor_id": actor.identity, "actor_role": actor.role},
        )
        return entity

    def _apply_effect(self, entity, action: str, target: str) -> list[str]:
        if action == Action.SOFT_DELETE:
            self.lifecycle.soft_delete(entity, self.clock.now())
            return list(SOFT_DELETE_FIELDS)
        if action == Action.RESTORE:
            self.lifecycle.restore(entity)
            return list(SOFT_DELETE_FIELDS)
        if action in FLAG_ACTIONS:
            flag = FLAG_ACTIONS[action]
            setattr(entity, flag, not getattr(entity, flag))
            return [flag]
        return entity.set_lifecycle_status(target)
