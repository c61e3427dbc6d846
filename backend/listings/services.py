import logging

from django.db import transaction

from core.clock import Clock, system_clock
from lifecycle.errors import Unauthorized
from lifecycle.machine import EntityStatusMachine
from lifecycle.store import EntityStore
from lifecycle.transitions import Action, Actor, initial_status

from .models import Listing

logger = logging.getLogger(__name__)

# Fields a caller may set on creation; lifecycle fields are never accepted.
CREATE_FIELDS = (
    "title",
    "description",
    "listing_type",
    "price",
    "city",
    "area_name",
    "address",
    "property_type",
    "bedrooms",
    "bathrooms",
    "furnished",
    "amenities",
    "target_audience",
    "whatsapp_number",
    "contact_phone",
    "contact_email",
)


def listing_machine(clock: Clock = system_clock) -> EntityStatusMachine:
    return EntityStatusMachine(EntityStore(Listing), clock=clock)


def create_listing(actor: Actor, **fields) -> Listing:
    """
    Create a listing owned by ``actor``.

    The starting status follows the trust tier of the actor's role: students
    and service providers wait for review, everyone else goes live at once.
    """
    if actor.identity is None:
        raise Unauthorized()
    values = {name: fields[name] for name in CREATE_FIELDS if name in fields}
    listing = Listing.objects.create(
        owner_id=actor.identity,
        owner_role=actor.role,
        status=initial_status(actor.role),
        **values,
    )
    logger.info(
        "listings: created %s with status %s",
        listing.pk,
        listing.status,
        extra={"owner_id": actor.identity, "owner_role": actor.role},
    )
    return listing


def transition_listing(
    listing_id,
    actor: Actor,
    action: str,
    expected_version: int | None = None,
    clock: Clock = system_clock,
) -> Listing | None:
    with transaction.atomic():
        return listing_machine(clock).apply(
            listing_id, actor, action, expected_version=expected_version
        )


def soft_delete_listing(
    listing_id,
    actor: Actor,
    expected_version: int | None = None,
    clock: Clock = system_clock,
) -> dict:
    listing = transition_listing(
        listing_id, actor, Action.SOFT_DELETE, expected_version=expected_version, clock=clock
    )
    return {"deleted_at": listing.deleted_at, "purge_at": listing.purge_at}


def restore_listing(
    listing_id,
    actor: Actor,
    expected_version: int | None = None,
    clock: Clock = system_clock,
) -> Listing:
    return transition_listing(
        listing_id, actor, Action.RESTORE, expected_version=expected_version, clock=clock
    )
