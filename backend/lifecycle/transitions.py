"""
Transition tables for the entity kinds governed by the status machine.

Listings carry two independent axes: a lifecycle status (content review) and a
deletion state (present / soft-deleted). Posts fold deletion into their status
as a terminal value. Accounts only carry the ban flag.
"""

from __future__ import annotations

from dataclasses import dataclass


class Kind:
    LISTING = "listing"
    POST = "post"
    ACCOUNT = "account"


class Action:
    APPROVE = "approve"
    REJECT = "reject"
    SOFT_DELETE = "soft_delete"
    RESTORE = "restore"
    PURGE = "purge"
    FEATURE = "feature"
    VERIFY = "verify"
    BAN = "ban"
    UNBAN = "unban"
    CHANGE_ROLE = "change_role"
    DELETE_ACCOUNT = "delete_account"


# Roles as stored on users.User.role, plus the internal scheduler role.
STUDENT = "student"
AGENT = "agent"
OWNER = "owner"
SERVICE_PROVIDER = "service-provider"
ADMIN = "admin"
SYSTEM = "system"

# Status values shared by listings and posts.
ACTIVE = "active"
INACTIVE = "inactive"
PENDING = "pending"
REJECTED = "rejected"
DELETED = "deleted"

# Deletion axis of a listing / terminal marker after a hard delete.
PRESENT = "present"
REMOVED = "removed"

# Account states.
BANNED = "banned"

LISTING_STATUSES = (ACTIVE, INACTIVE, PENDING, REJECTED)
POST_STATUSES = (PENDING, ACTIVE, REJECTED, DELETED)

LISTING_LIFECYCLE_TRANSITIONS: dict[str, dict[str, str]] = {
    Action.APPROVE: {PENDING: ACTIVE},
    Action.REJECT: {PENDING: REJECTED},
    Action.FEATURE: {status: status for status in LISTING_STATUSES},
    Action.VERIFY: {status: status for status in LISTING_STATUSES},
}

LISTING_DELETION_TRANSITIONS: dict[str, dict[str, str]] = {
    Action.SOFT_DELETE: {PRESENT: DELETED},
    Action.RESTORE: {DELETED: PRESENT},
    Action.PURGE: {DELETED: REMOVED},
}

POST_TRANSITIONS: dict[str, dict[str, str]] = {
    Action.APPROVE: {PENDING: ACTIVE, REJECTED: ACTIVE},
    Action.REJECT: {PENDING: REJECTED, ACTIVE: REJECTED},
    Action.SOFT_DELETE: {PENDING: DELETED, ACTIVE: DELETED, REJECTED: DELETED},
    Action.PURGE: {DELETED: REMOVED},
}

ACCOUNT_TRANSITIONS: dict[str, dict[str, str]] = {
    Action.BAN: {ACTIVE: BANNED},
    Action.UNBAN: {BANNED: ACTIVE},
    Action.CHANGE_ROLE: {ACTIVE: ACTIVE, BANNED: BANNED},
    Action.DELETE_ACCOUNT: {ACTIVE: REMOVED, BANNED: REMOVED},
}

# Trust tiers: content from these roles waits for an admin before going live.
REVIEW_REQUIRED_ROLES = frozenset({STUDENT, SERVICE_PROVIDER})


@dataclass(frozen=True)
class Actor:
    identity: int | None
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(identity=getattr(user, "pk", None), role=getattr(user, "role", "") or "")


SYSTEM_ACTOR = Actor(identity=None, role=SYSTEM)


@dataclass(frozen=True)
class EntityState:
    """Snapshot of the persisted fields the guard needs to decide."""

    kind: str
    identity: int | None
    status: str
    owner_id: int | None = None
    deleted: bool = False
    role: str | None = None


def initial_status(role: str) -> str:
    return PENDING if role in REVIEW_REQUIRED_ROLES else ACTIVE


def next_state(state: EntityState, action: str) -> str | None:
    """Return the state reached by ``action`` or None when it is illegal."""
    if state.kind == Kind.LISTING:
        if action in LISTING_DELETION_TRANSITIONS:
            axis = DELETED if state.deleted else PRESENT
            return LISTING_DELETION_TRANSITIONS[action].get(axis)
        if action in LISTING_LIFECYCLE_TRANSITIONS:
            if state.deleted:
                return None
            return LISTING_LIFECYCLE_TRANSITIONS[action].get(state.status)
        return None
    if state.kind == Kind.POST:
        return POST_TRANSITIONS.get(action, {}).get(state.status)
    if state.kind == Kind.ACCOUNT:
        return ACCOUNT_TRANSITIONS.get(action, {}).get(state.status)
    return None
