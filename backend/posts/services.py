import logging

from django.db import transaction

from core.clock import Clock, system_clock
from lifecycle.errors import Unauthorized
from lifecycle.machine import EntityStatusMachine
from lifecycle.store import EntityStore
from lifecycle.transitions import Action, Actor, initial_status

from .models import Post

logger = logging.getLogger(__name__)

CREATE_FIELDS = (
    "title",
    "description",
    "post_type",
    "price",
    "city",
    "area_name",
    "whatsapp_number",
)


def post_machine(clock: Clock = system_clock) -> EntityStatusMachine:
    return EntityStatusMachine(EntityStore(Post), clock=clock)


def create_post(actor: Actor, **fields) -> Post:
    if actor.identity is None:
        raise Unauthorized()
    values = {name: fields[name] for name in CREATE_FIELDS if name in fields}
    post = Post.objects.create(
        owner_id=actor.identity,
        owner_role=actor.role,
        status=initial_status(actor.role),
        **values,
    )
    logger.info(
        "posts: created %s with status %s",
        post.pk,
        post.status,
        extra={"owner_id": actor.identity, "owner_role": actor.role},
    )
    return post


def soft_delete_post(
    post_id,
    actor: Actor,
    expected_version: int | None = None,
    clock: Clock = system_clock,
) -> dict:
    """Mark a post deleted; it stays until the purge sweep removes it."""
    with transaction.atomic():
        post = post_machine(clock).apply(
            post_id, actor, Action.SOFT_DELETE, expected_version=expected_version
        )
    return {"deleted_at": post.deleted_at, "purge_at": post.purge_at}
