"""
Account moderation: ban, unban, role change and account deletion.

All of these are admin-only and refuse to target the acting admin or any
other admin account.
"""

from __future__ import annotations

import logging

from django.db import transaction

from core.clock import Clock, system_clock
from lifecycle.errors import InvalidTransition
from lifecycle.machine import EntityStatusMachine
from lifecycle.store import EntityStore
from lifecycle.transitions import Action, Actor
from listings.models import Listing
from listings.services import listing_machine
from posts.models import Post
from posts.services import post_machine

from .models import User

logger = logging.getLogger(__name__)


def user_machine(clock: Clock = system_clock) -> EntityStatusMachine:
    return EntityStatusMachine(EntityStore(User), clock=clock)


def ban_user(
    user_id, actor: Actor, reason: str = "", expected_version: int | None = None
) -> User:
    with transaction.atomic():
        return user_machine().apply(
            user_id,
            actor,
            Action.BAN,
            expected_version=expected_version,
            changes={"ban_reason": reason or ""},
        )


def unban_user(user_id, actor: Actor, expected_version: int | None = None) -> User:
    with transaction.atomic():
        return user_machine().apply(
            user_id,
            actor,
            Action.UNBAN,
            expected_version=expected_version,
            changes={"ban_reason": ""},
        )


def change_role(
    user_id, actor: Actor, role: str, expected_version: int | None = None
) -> User:
    if role not in User.Role.values:
        raise InvalidTransition(f"unknown role {role!r}")
    with transaction.atomic():
        return user_machine().apply(
            user_id,
            actor,
            Action.CHANGE_ROLE,
            expected_version=expected_version,
            changes={"role": role},
        )


def delete_account(user_id, actor: Actor, clock: Clock = system_clock) -> dict:
    """
    Soft-delete every live listing and post of the user, then remove the user.

    The whole cascade runs in one transaction: if any step fails nothing is
    deleted. Soft-deleted content keeps its retention window and is purged by
    the sweep like any other deletion.
    """
    accounts = user_machine(clock)
    with transaction.atomic():
        target = accounts.store.get(user_id)
        accounts.authorize(target, actor, Action.DELETE_ACCOUNT)

        listings = listing_machine(clock)
        listing_ids = list(
            Listing.objects.live().filter(owner_id=target.pk).values_list("pk", "version")
        )
        for pk, version in listing_ids:
            listings.apply(pk, actor, Action.SOFT_DELETE, expected_version=version)

        posts = post_machine(clock)
        post_ids = list(Post.objects.live().filter(owner_id=target.pk).values_list("pk", "version"))
        for pk, version in post_ids:
            posts.apply(pk, actor, Action.SOFT_DELETE, expected_version=version)

        accounts.apply(target.pk, actor, Action.DELETE_ACCOUNT, expected_version=target.version)

    logger.info(
        "users: account %s deleted",
        user_id,
        extra={
            "actor_id": actor.identity,
            "listings_deleted": len(listing_ids),
            "posts_deleted": len(post_ids),
        },
    )
    return {"listings_deleted": len(listing_ids), "posts_deleted": len(post_ids)}
