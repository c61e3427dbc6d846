from datetime import timedelta

import pytest

from lifecycle.errors import ConflictError, InvalidTransition, NotFound, Unauthorized
from lifecycle.machine import EntityStatusMachine
from lifecycle.soft_delete import SoftDeleteLifecycle
from lifecycle.store import EntityStore
from lifecycle.transitions import SYSTEM_ACTOR, Action, Actor
from listings.models import Listing
from posts.models import Post

pytestmark = pytest.mark.django_db


@pytest.fixture
def listing_machine(clock):
    return EntityStatusMachine(
        EntityStore(Listing), lifecycle=SoftDeleteLifecycle(timedelta(hours=48)), clock=clock
    )


@pytest.fixture
def post_machine(clock):
    return EntityStatusMachine(
        EntityStore(Post), lifecycle=SoftDeleteLifecycle(timedelta(hours=48)), clock=clock
    )


def test_approve_persists_and_bumps_version(post_machine, post, admin_user):
    result = post_machine.apply(post.pk, Actor.from_user(admin_user), Action.APPROVE)

    post.refresh_from_db()
    assert result.status == Post.Status.ACTIVE
    assert post.status == Post.Status.ACTIVE
    assert post.version == 1


def test_stale_expected_version_conflicts(post_machine, post, admin_user):
    admin = Actor.from_user(admin_user)
    post_machine.apply(post.pk, admin, Action.APPROVE, expected_version=0)

    with pytest.raises(ConflictError):
        post_machine.apply(post.pk, admin, Action.REJECT, expected_version=0)

    post.refresh_from_db()
    assert post.status == Post.Status.ACTIVE
    assert post.version == 1


def test_lost_race_between_read_and_write_conflicts(
    post_machine, post, admin_user, monkeypatch
):
    """A concurrent writer bumps the version after our read; our write must fail."""
    store = post_machine.store
    original_get = store.get

    def get_then_race(pk):
        entity = original_get(pk)
        Post.objects.filter(pk=pk).update(status=Post.Status.REJECTED, version=entity.version + 1)
        return entity

    monkeypatch.setattr(store, "get", get_then_race)

    with pytest.raises(ConflictError):
        post_machine.apply(post.pk, Actor.from_user(admin_user), Action.APPROVE)

    post.refresh_from_db()
    assert post.status == Post.Status.REJECTED


def test_unauthorized_transition_leaves_entity_untouched(post_machine, post, other_user):
    with pytest.raises(Unauthorized):
        post_machine.apply(post.pk, Actor.from_user(other_user), Action.APPROVE)

    post.refresh_from_db()
    assert post.status == Post.Status.PENDING
    assert post.version == 0


def test_illegal_transition_raises_invalid(post_machine, post_factory, admin_user):
    post = post_factory(status=Post.Status.ACTIVE)
    with pytest.raises(InvalidTransition):
        post_machine.apply(post.pk, Actor.from_user(admin_user), Action.APPROVE)


def test_missing_entity_raises_not_found(post_machine, admin_user):
    with pytest.raises(NotFound):
        post_machine.apply(999999, Actor.from_user(admin_user), Action.APPROVE)


def test_changes_written_in_same_update(post_machine, post, admin_user, clock):
    post_machine.apply(
        post.pk,
        Actor.from_user(admin_user),
        Action.REJECT,
        changes={"admin_note": "Missing photos", "approved_by_id": admin_user.pk},
    )

    post.refresh_from_db()
    assert post.status == Post.Status.REJECTED
    assert post.admin_note == "Missing photos"
    assert post.approved_by_id == admin_user.pk
    assert post.version == 1


def test_soft_delete_uses_clock_and_window(listing_machine, listing, owner_user, clock):
    listing_machine.apply(listing.pk, Actor.from_user(owner_user), Action.SOFT_DELETE)

    listing.refresh_from_db()
    assert listing.deleted_at == clock.now()
    assert listing.purge_at == clock.now() + timedelta(hours=48)
    assert listing.status == Listing.Status.INACTIVE


def test_restore_after_soft_delete(listing_machine, listing, owner_user):
    owner = Actor.from_user(owner_user)
    listing_machine.apply(listing.pk, owner, Action.SOFT_DELETE)
    listing_machine.apply(listing.pk, owner, Action.RESTORE)

    listing.refresh_from_db()
    assert listing.deleted_at is None
    assert listing.purge_at is None
    assert listing.status == Listing.Status.ACTIVE
    assert listing.version == 2


def test_feature_toggles_flag(listing_machine, listing, admin_user):
    admin = Actor.from_user(admin_user)

    listing_machine.apply(listing.pk, admin, Action.FEATURE)
    listing.refresh_from_db()
    assert listing.featured is True
    assert listing.status == Listing.Status.ACTIVE

    listing_machine.apply(listing.pk, admin, Action.FEATURE)
    listing.refresh_from_db()
    assert listing.featured is False


def test_purge_hard_deletes(listing_machine, listing, owner_user):
    listing_machine.apply(listing.pk, Actor.from_user(owner_user), Action.SOFT_DELETE)
    listing.refresh_from_db()

    result = listing_machine.apply(
        listing.pk, SYSTEM_ACTOR, Action.PURGE, expected_version=listing.version
    )

    assert result is None
    assert not Listing.objects.filter(pk=listing.pk).exists()


def test_denied_transition_is_logged(post_machine, post, other_user, caplog):
    caplog.set_level("INFO", logger="lifecycle.machine")
    with pytest.raises(Unauthorized):
        post_machine.apply(post.pk, Actor.from_user(other_user), Action.APPROVE)
    assert any("denied" in record.getMessage() for record in caplog.records)
