"""
Admin approve/reject of posts.

The decision and its audit stamps are written in one conditional update.
The owner is notified only after the transaction commits, and a notification
failure never undoes or fails the decision.
"""

from __future__ import annotations

import logging
from functools import partial

from django.db import transaction

from core.clock import Clock, system_clock
from lifecycle.machine import EntityStatusMachine
from lifecycle.store import EntityStore
from lifecycle.transitions import Action, Actor
from notifications.dispatcher import POST_APPROVED, POST_REJECTED, NotificationDispatcher
from notifications.dispatcher import dispatcher as default_dispatcher

from .models import Post

logger = logging.getLogger(__name__)

TEMPLATE_FOR_ACTION = {
    Action.APPROVE: POST_APPROVED,
    Action.REJECT: POST_REJECTED,
}


class ModerationWorkflow:
    def __init__(
        self,
        machine: EntityStatusMachine | None = None,
        dispatcher: NotificationDispatcher | None = None,
        clock: Clock = system_clock,
    ):
        self.clock = clock
        self.machine = machine or EntityStatusMachine(EntityStore(Post), clock=clock)
        self.dispatcher = dispatcher or default_dispatcher

    def approve(
        self, post_id, admin: Actor, note: str = "", expected_version: int | None = None
    ) -> Post:
        return self._decide(post_id, admin, Action.APPROVE, note, expected_version)

    def reject(
        self, post_id, admin: Actor, note: str = "", expected_version: int | None = None
    ) -> Post:
        return self._decide(post_id, admin, Action.REJECT, note, expected_version)

    def _decide(self, post_id, admin: Actor, action: str, note: str, expected_version):
        with transaction.atomic():
            post = self.machine.apply(
                post_id,
                admin,
                action,
                expected_version=expected_version,
                changes={
                    "approved_by_id": admin.identity,
                    "approved_at": self.clock.now(),
                    "admin_note": note or "",
                },
            )
            transaction.on_commit(partial(self._notify_owner, post, action))
        return post

    def _notify_owner(self, post: Post, action: str) -> None:
        try:
            owner = post.owner
            if owner is None:
                logger.info("moderation: post %s has no owner to notify", post.pk)
                return
            self.dispatcher.notify(
                owner.email,
                TEMPLATE_FOR_ACTION[action],
                {
                    "user_id": owner.pk,
                    "user_name": owner.display_name(),
                    "post_id": post.pk,
                    "post_title": post.title,
                    "admin_note": post.admin_note,
                },
            )
        except Exception:
            logger.exception(
                "moderation: failed to notify owner of post %s",
                post.pk,
                extra={"action": action},
            )
