"""Authorization and validity checks for status transitions. No I/O."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .errors import InvalidTransition, LifecycleError, Unauthorized
from .transitions import ADMIN, SYSTEM, Action, Actor, EntityState, Kind, next_state

INVALID = "invalid"
UNAUTHORIZED = "unauthorized"

SELF_DESTRUCTIVE_ACTIONS = frozenset({Action.BAN, Action.CHANGE_ROLE, Action.DELETE_ACCOUNT})
ADMIN_PROTECTED_ACTIONS = SELF_DESTRUCTIVE_ACTIONS
OWNER_OR_ADMIN_ACTIONS = frozenset({Action.SOFT_DELETE, Action.RESTORE})


@dataclass(frozen=True)
class Allow:
    next_state: str

    allowed = True


@dataclass(frozen=True)
class Deny:
    reason: str
    code: str = UNAUTHORIZED

    allowed = False

    def as_error(self) -> LifecycleError:
        if self.code == INVALID:
            return InvalidTransition(self.reason)
        return Unauthorized()


Decision = Union[Allow, Deny]


def _is_owner(actor: Actor, state: EntityState) -> bool:
    return actor.identity is not None and actor.identity == state.owner_id


def _authorize(actor: Actor, state: EntityState, action: str) -> Deny | None:
    if action == Action.PURGE:
        if actor.role != SYSTEM:
            return Deny("purge is reserved for the scheduler")
        return None

    if state.kind == Kind.ACCOUNT:
        if not actor.is_admin:
            return Deny("account moderation requires an admin")
        if action in ADMIN_PROTECTED_ACTIONS and state.role == ADMIN:
            return Deny(f"cannot {action} another admin")
        return None

    if action in OWNER_OR_ADMIN_ACTIONS:
        if _is_owner(actor, state) or actor.is_admin:
            return None
        return Deny(f"only the owner or an admin may {action}")

    if not actor.is_admin:
        return Deny(f"{action} requires an admin")
    return None


def can_transition(actor: Actor, state: EntityState, action: str) -> Decision:
    """
    Decide whether ``actor`` may apply ``action`` to an entity in ``state``.

    Self-targeting destructive account actions are refused first, then role
    and ownership rules apply, then the transition table is consulted
    (illegal transitions are refused even for admins). Callers that fail
    authorization learn nothing about the entity's current state.
    """
    if (
        state.kind == Kind.ACCOUNT
        and action in SELF_DESTRUCTIVE_ACTIONS
        and actor.identity is not None
        and actor.identity == state.identity
    ):
        return Deny(f"cannot {action} your own account")

    denial = _authorize(actor, state, action)
    if denial is not None:
        return denial

    target = next_state(state, action)
    if target is None:
        return Deny(f"cannot {action} a {state.kind} in state {_describe(state)}", INVALID)
    return Allow(target)


def _describe(state: EntityState) -> str:
    if state.kind == Kind.LISTING and state.deleted:
        return "deleted"
    return state.status
